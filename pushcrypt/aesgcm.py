"""
Legacy Web Push encryption using the draft "aesgcm" content-coding.

The ciphertext carries no header; the salt and server public key travel in
the Encryption and Crypto-Key request headers instead.
"""
from __future__ import annotations

from typing import Any

from pushcrypt.encryption import PRK_LENGTH, EncryptedPayload, EncryptionHelper
from pushcrypt.request import ContentCoding
from pushcrypt.subscription import Subscription

AUTH_INFO = b"Content-Encoding: auth\x00"
CEK_INFO_LABEL = b"Content-Encoding: aesgcm\x00"
NONCE_INFO_LABEL = b"Content-Encoding: nonce\x00"
CONTEXT_LABEL = b"P-256\x00"

PADDING_LENGTH = 2


class AesGcmEncryption(EncryptionHelper):
    content_coding = ContentCoding.AESGCM

    def _generate_context(self, subscription: Subscription, server_public: bytes) -> bytes:
        client_public = subscription.p256dh
        return (
            CONTEXT_LABEL
            + len(client_public).to_bytes(2, 'big')
            + client_public
            + len(server_public).to_bytes(2, 'big')
            + server_public
        )

    def _generate_prk(self, subscription: Subscription, shared_secret: bytes, server_public: bytes) -> bytes:
        return self.kdf.derive(shared_secret, subscription.auth, AUTH_INFO, PRK_LENGTH)

    def _generate_cek_info(self, subscription: Subscription, server_public: bytes) -> bytes:
        return CEK_INFO_LABEL + self._generate_context(subscription, server_public)

    def _generate_nonce_info(self, subscription: Subscription, server_public: bytes) -> bytes:
        return NONCE_INFO_LABEL + self._generate_context(subscription, server_public)

    def _pad(self, payload: bytes) -> bytes:
        # Two-byte big-endian padding length (zero) followed by the payload
        return bytes(PADDING_LENGTH) + payload

    def _content_headers(self, encrypted: EncryptedPayload) -> dict[str, Any]:
        return {
            'Encryption': f'salt={encrypted.salt}',
            'Crypto-Key': f'dh={encrypted.public_server_key}',
            'Content-Encoding': self.content_coding.value,
        }
