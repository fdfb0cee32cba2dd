"""
Capability interfaces (Protocol) for the cryptographic operations used by the
encryption engines, plus the default implementations backed by `cryptography`.

Engines take these as constructor arguments so tests can swap in fakes.
"""
from __future__ import annotations

from typing import Protocol

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.utils import decode_dss_signature
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from pushcrypt.hkdf import HKDF


class Kdf(Protocol):
    def derive(self, ikm: bytes, salt: bytes, info: bytes, length: int) -> bytes:
        """Derive `length` bytes of key material."""
        ...


class Aead(Protocol):
    def seal(self, key: bytes, nonce: bytes, plaintext: bytes) -> bytes:
        """Encrypt with no associated data. Returns ciphertext || tag."""
        ...


class KeyAgreement(Protocol):
    def shared_secret(
        self,
        private_key: ec.EllipticCurvePrivateKey,
        peer_public_key: ec.EllipticCurvePublicKey,
    ) -> bytes:
        """ECDH derive, 32 bytes for P-256."""
        ...


class Signer(Protocol):
    def sign(self, private_key: ec.EllipticCurvePrivateKey, message: bytes) -> bytes:
        """ES256 signature in raw r || s form (64 bytes)."""
        ...


class HkdfSha256:
    def derive(self, ikm: bytes, salt: bytes, info: bytes, length: int) -> bytes:
        return HKDF(ikm, salt).generate(info, length)


class AesGcm128:
    # AES-GCM with the 128-bit tag appended to the ciphertext
    def seal(self, key: bytes, nonce: bytes, plaintext: bytes) -> bytes:
        return AESGCM(key).encrypt(nonce, plaintext, None)


class EcdhP256:
    def shared_secret(self, private_key, peer_public_key) -> bytes:
        return private_key.exchange(ec.ECDH(), peer_public_key)


class EcdsaP256Sha256:
    def sign(self, private_key, message: bytes) -> bytes:
        signature = private_key.sign(message, ec.ECDSA(hashes.SHA256()))
        # Convert DER signature to raw r||s format (64 bytes)
        r, s = decode_dss_signature(signature)
        return r.to_bytes(32, 'big') + s.to_bytes(32, 'big')
