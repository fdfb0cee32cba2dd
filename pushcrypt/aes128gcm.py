"""
RFC 8291 message encryption using the RFC 8188 "aes128gcm" content-coding.

The encrypted body is self-describing:

    salt (16) || record size (4, big-endian) || key id length (1) || server public key (65) || ciphertext
"""
from __future__ import annotations

from pushcrypt.encryption import PRK_LENGTH, EncryptionHelper
from pushcrypt.request import ContentCoding
from pushcrypt.subscription import Subscription

# Maximum record size
RECORD_SIZE = 4096

HEADER_LENGTH = 16 + 4 + 1 + 65

KEY_INFO_LABEL = b"WebPush: info\x00"
CEK_INFO = b"Content-Encoding: aes128gcm\x00"
NONCE_INFO = b"Content-Encoding: nonce\x00"

# Last (and only) record delimiter
RECORD_DELIMITER = b'\x02'


class Aes128GcmEncryption(EncryptionHelper):
    content_coding = ContentCoding.AES128GCM
    # FCM implements the current VAPID draft only on its /wp/ endpoints
    rewrites_endpoint = True

    def _generate_prk(self, subscription: Subscription, shared_secret: bytes, server_public: bytes) -> bytes:
        key_info = KEY_INFO_LABEL + subscription.p256dh + server_public
        return self.kdf.derive(shared_secret, subscription.auth, key_info, PRK_LENGTH)

    def _generate_cek_info(self, subscription: Subscription, server_public: bytes) -> bytes:
        return CEK_INFO

    def _generate_nonce_info(self, subscription: Subscription, server_public: bytes) -> bytes:
        return NONCE_INFO

    def _pad(self, payload: bytes) -> bytes:
        return payload + RECORD_DELIMITER

    def _frame(self, sealed: bytes, salt: bytes, server_public: bytes) -> bytes:
        header = (
            salt
            + RECORD_SIZE.to_bytes(4, 'big')
            + len(server_public).to_bytes(1, 'big')
            + server_public
        )
        return header + sealed
