"""
Shared machinery for the Web Push content-codings.

`EncryptionHelper` holds the per-sender state (VAPID keys, subject, optional
pinned server keys and salt) and runs the steps both codings have in common:
ECDH with the subscriber's key, HKDF key schedule, AES-GCM sealing and request
assembly. Subclasses supply the context strings, padding and framing.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional, Union

from pushcrypt import base64url
from pushcrypt.errors import InvalidKeyFormat, InvalidKeyLength
from pushcrypt.keys import (
    SALT_BYTES,
    KeyPair,
    b64_to_key_pair,
    generate_b64_key_pair,
    generate_key_pair,
    generate_salt,
    point_to_key_pair,
    public_key_bytes,
)
from pushcrypt.primitives import (
    Aead,
    AesGcm128,
    EcdhP256,
    EcdsaP256Sha256,
    HkdfSha256,
    Kdf,
    KeyAgreement,
    Signer,
)
from pushcrypt.request import ContentCoding, RequestDescriptor, rewrite_endpoint
from pushcrypt.subscription import Subscription
from pushcrypt.vapid import VapidKeys, create_auth_header

logger = logging.getLogger(__name__)

DEFAULT_TTL = 60

CEK_LENGTH = 16
NONCE_LENGTH = 12
PRK_LENGTH = 32


@dataclass(frozen=True)
class EncryptionKeys:
    content_encryption_key: bytes
    nonce: bytes


@dataclass(frozen=True)
class EncryptedPayload:
    cipher_text: bytes
    salt: str               # base64url
    public_server_key: str  # base64url


class EncryptionHelper:
    """Base class for the aes128gcm and aesgcm engines."""

    content_coding: ContentCoding
    rewrites_endpoint = False

    def __init__(
        self,
        vapid_keys: VapidKeys,
        subject: str,
        server_keys: Union[KeyPair, dict[str, str], None] = None,
        salt: Union[bytes, str, None] = None,
        ttl: int = DEFAULT_TTL,
        kdf: Kdf | None = None,
        aead: Aead | None = None,
        key_agreement: KeyAgreement | None = None,
        signer: Signer | None = None,
    ):
        self.vapid_keys = vapid_keys
        self.subject = subject
        self.ttl = ttl
        # Pinned keys and salt make output deterministic. Tests only: reusing
        # both across payloads reuses the AES-GCM nonce.
        self._server_keys = self._pinned_server_keys(server_keys)
        self._salt = self._pinned_salt(salt)
        self.kdf = kdf or HkdfSha256()
        self.aead = aead or AesGcm128()
        self.key_agreement = key_agreement or EcdhP256()
        self.signer = signer or EcdsaP256Sha256()

    @staticmethod
    def _pinned_server_keys(server_keys: Union[KeyPair, dict[str, str], None]) -> Optional[KeyPair]:
        if server_keys is None:
            return None
        if isinstance(server_keys, dict):
            if not server_keys.get('publicKey') or not server_keys.get('privateKey'):
                raise InvalidKeyFormat("Pinned server keys need both publicKey and privateKey")
            return b64_to_key_pair(server_keys['publicKey'], server_keys['privateKey'])
        if server_keys.private_key is None:
            raise InvalidKeyFormat("Pinned server keys need a private key for ECDH")
        return server_keys

    @staticmethod
    def _pinned_salt(salt: Union[bytes, str, None]) -> Optional[bytes]:
        if salt is None:
            return None
        if isinstance(salt, str):
            salt = base64url.decode(salt)
        salt = bytes(salt)
        if len(salt) != SALT_BYTES:
            raise InvalidKeyLength(f"The salt is expected to be {SALT_BYTES} bytes, it was {len(salt)} bytes")
        return salt

    def get_server_keys(self) -> KeyPair:
        if self._server_keys is not None:
            return self._server_keys
        return self.generate_server_keys()

    def get_salt(self) -> bytes:
        if self._salt is not None:
            return self._salt
        return generate_salt()

    @staticmethod
    def generate_server_keys() -> KeyPair:
        return generate_key_pair()

    @staticmethod
    def generate_b64_server_keys() -> dict[str, str]:
        return generate_b64_key_pair()

    # ------------------------------------------------------------------
    # Encryption
    # ------------------------------------------------------------------

    def encrypt_payload(self, subscription: Subscription, payload: bytes) -> Optional[EncryptedPayload]:
        """
        Encrypt `payload` for `subscription`.

        Returns None for an empty payload; the caller then sends an
        unencrypted, bodiless request.
        """
        if len(payload) == 0:
            return None

        # Validates the subscriber key before any derivation
        client_keys = point_to_key_pair(subscription.p256dh)

        salt = self.get_salt()
        server_keys = self.get_server_keys()
        server_public = public_key_bytes(server_keys.public_key)

        shared_secret = self.key_agreement.shared_secret(server_keys.private_key, client_keys.public_key)
        keys = self._generate_encryption_keys(subscription, salt, shared_secret, server_public)

        record = self._pad(bytes(payload))
        sealed = self.aead.seal(keys.content_encryption_key, keys.nonce, record)

        cipher_text = self._frame(sealed, salt, server_public)
        logger.debug(
            "PUSH: Encrypted %d byte payload as %s (%d bytes)",
            len(payload), self.content_coding.value, len(cipher_text),
        )
        return EncryptedPayload(
            cipher_text=cipher_text,
            salt=base64url.encode(salt),
            public_server_key=base64url.encode(server_public),
        )

    def _generate_encryption_keys(
        self,
        subscription: Subscription,
        salt: bytes,
        shared_secret: bytes,
        server_public: bytes,
    ) -> EncryptionKeys:
        prk = self._generate_prk(subscription, shared_secret, server_public)
        cek_info = self._generate_cek_info(subscription, server_public)
        nonce_info = self._generate_nonce_info(subscription, server_public)
        return EncryptionKeys(
            content_encryption_key=self.kdf.derive(prk, salt, cek_info, CEK_LENGTH),
            nonce=self.kdf.derive(prk, salt, nonce_info, NONCE_LENGTH),
        )

    def _generate_prk(self, subscription: Subscription, shared_secret: bytes, server_public: bytes) -> bytes:
        raise NotImplementedError

    def _generate_cek_info(self, subscription: Subscription, server_public: bytes) -> bytes:
        raise NotImplementedError

    def _generate_nonce_info(self, subscription: Subscription, server_public: bytes) -> bytes:
        raise NotImplementedError

    def _pad(self, payload: bytes) -> bytes:
        raise NotImplementedError

    def _frame(self, sealed: bytes, salt: bytes, server_public: bytes) -> bytes:
        return sealed

    def _content_headers(self, encrypted: EncryptedPayload) -> dict[str, Any]:
        return {'Content-Encoding': self.content_coding.value}

    # ------------------------------------------------------------------
    # Request assembly
    # ------------------------------------------------------------------

    def build_request(self, subscription: Subscription, payload: bytes) -> RequestDescriptor:
        endpoint = subscription.endpoint
        if self.rewrites_endpoint:
            endpoint = rewrite_endpoint(endpoint)

        vapid_headers = create_auth_header(self.vapid_keys, endpoint, self.subject, signer=self.signer)

        encrypted = self.encrypt_payload(subscription, payload)

        headers: dict[str, Any] = {'TTL': self.ttl}
        if encrypted:
            body, method = encrypted.cipher_text, 'POST'
            headers.update(self._content_headers(encrypted))
        else:
            body, method = None, 'GET'
            headers['Content-Length'] = 0

        for name, value in vapid_headers.items():
            if name == 'Crypto-Key' and name in headers:
                # dh=... from the payload and p256ecdsa=... from VAPID share the header
                headers[name] = f"{headers[name]};{value}"
            else:
                headers[name] = value

        return RequestDescriptor(url=endpoint, method=method, headers=headers, body=body)

    def get_request_details(self, subscription: Subscription, payload: bytes) -> tuple[str, dict[str, Any]]:
        """Return (url, {'headers', 'body', 'method'}) for delivering `payload`."""
        return self.build_request(subscription, payload).to_fetch_args()
