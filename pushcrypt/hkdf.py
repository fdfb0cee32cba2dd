"""
HMAC-SHA256 and a single-block HKDF (RFC 5869).

Only the first expand block is computed, so at most 32 bytes can be derived.
Every key and nonce in both Web Push content-codings fits in one block.
"""
from __future__ import annotations

import hashlib
import hmac

from pushcrypt.errors import KeyDerivationError

HASH_LENGTH = 32


def hmac_sign(key: bytes, message: bytes) -> bytes:
    """HMAC-SHA256 sign a message."""
    return hmac.new(bytes(key), bytes(message), hashlib.sha256).digest()


class HKDF:
    """HKDF extract plus one expand step over (ikm, salt)."""

    def __init__(self, ikm: bytes, salt: bytes):
        self._ikm = bytes(ikm)
        self._salt = bytes(salt)

    def generate(self, info: bytes, byte_length: int) -> bytes:
        if not 0 < byte_length <= HASH_LENGTH:
            raise KeyDerivationError(
                f"HKDF output length must be between 1 and {HASH_LENGTH} bytes, got {byte_length}"
            )
        prk = hmac_sign(self._salt, self._ikm)
        t1 = hmac_sign(prk, bytes(info) + b'\x01')
        return t1[:byte_length]
