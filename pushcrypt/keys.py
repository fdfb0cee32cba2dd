"""
P-256 key marshaling.

Web Push carries EC keys as raw bytes: public keys as 65-byte uncompressed
points (0x04 || X || Y) and private keys as 32-byte big-endian scalars.
These helpers convert between that form and `cryptography` key objects.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from cryptography.hazmat.primitives.asymmetric import ec

from pushcrypt import base64url
from pushcrypt.errors import InvalidKeyFormat, InvalidKeyLength

# Length, in bytes, of a P-256 field element. Expected format of the private key.
PRIVATE_KEY_BYTES = 32

# Length, in bytes, of a P-256 public key in uncompressed form (SEC1 2.3.3).
PUBLIC_KEY_BYTES = 65

UNCOMPRESSED_POINT_MARKER = 0x04

SALT_BYTES = 16


@dataclass(frozen=True)
class KeyPair:
    """Key handles usable for ECDH derive and ECDSA sign/verify."""
    public_key: ec.EllipticCurvePublicKey
    private_key: Optional[ec.EllipticCurvePrivateKey] = None


@dataclass(frozen=True)
class RawKeyPair:
    public_key: bytes
    private_key: Optional[bytes] = None


def point_to_key_pair(raw_public: bytes, raw_private: bytes | None = None) -> KeyPair:
    """
    Import a raw uncompressed point (and optional raw scalar) as key objects.

    Raises:
        InvalidKeyLength: public key is not 65 bytes or private key is not 32 bytes
        InvalidKeyFormat: public key is not an uncompressed point on P-256,
            or the private key does not belong to it
    """
    raw_public = bytes(raw_public)
    if len(raw_public) != PUBLIC_KEY_BYTES:
        raise InvalidKeyLength(
            f"The publicKey is expected to be {PUBLIC_KEY_BYTES} bytes, "
            f"it was {len(raw_public)} bytes"
        )
    if raw_public[0] != UNCOMPRESSED_POINT_MARKER:
        raise InvalidKeyFormat("The publicKey is expected to start with an 0x04 byte.")

    x = int.from_bytes(raw_public[1:33], 'big')
    y = int.from_bytes(raw_public[33:65], 'big')
    public_numbers = ec.EllipticCurvePublicNumbers(x, y, ec.SECP256R1())
    try:
        public_key = public_numbers.public_key()
    except ValueError as e:
        raise InvalidKeyFormat(f"The publicKey is not a valid P-256 point: {e}") from e

    if raw_private is None:
        return KeyPair(public_key=public_key)

    raw_private = bytes(raw_private)
    if len(raw_private) != PRIVATE_KEY_BYTES:
        raise InvalidKeyLength(
            f"The privateKey is expected to be {PRIVATE_KEY_BYTES} bytes, "
            f"it was {len(raw_private)} bytes"
        )
    private_numbers = ec.EllipticCurvePrivateNumbers(
        int.from_bytes(raw_private, 'big'), public_numbers
    )
    try:
        private_key = private_numbers.private_key()
    except ValueError as e:
        raise InvalidKeyFormat(f"The privateKey does not match the publicKey: {e}") from e

    return KeyPair(public_key=public_key, private_key=private_key)


def key_pair_to_point(
    public_key: ec.EllipticCurvePublicKey,
    private_key: ec.EllipticCurvePrivateKey | None = None,
) -> RawKeyPair:
    """Export key objects back to the raw 65-byte point and 32-byte scalar."""
    numbers = public_key.public_numbers()
    raw_public = (
        bytes([UNCOMPRESSED_POINT_MARKER])
        + numbers.x.to_bytes(32, 'big')
        + numbers.y.to_bytes(32, 'big')
    )
    raw_private = None
    if private_key is not None:
        raw_private = private_key.private_numbers().private_value.to_bytes(PRIVATE_KEY_BYTES, 'big')
    return RawKeyPair(public_key=raw_public, private_key=raw_private)


def public_key_bytes(public_key: ec.EllipticCurvePublicKey) -> bytes:
    return key_pair_to_point(public_key).public_key


def generate_key_pair() -> KeyPair:
    """Generate a fresh P-256 key pair."""
    private_key = ec.generate_private_key(ec.SECP256R1())
    return KeyPair(public_key=private_key.public_key(), private_key=private_key)


def generate_b64_key_pair() -> dict[str, str]:
    """
    Generate a P-256 key pair exported as base64url raw key material.
    Returns {'publicKey': ..., 'privateKey': ...}.
    """
    keys = generate_key_pair()
    raw = key_pair_to_point(keys.public_key, keys.private_key)
    return {
        'publicKey': base64url.encode(raw.public_key),
        'privateKey': base64url.encode(raw.private_key),
    }


def b64_to_key_pair(public_key: str, private_key: str | None = None) -> KeyPair:
    """Import base64url raw key material (as produced by generate_b64_key_pair)."""
    raw_private = base64url.decode(private_key) if private_key else None
    return point_to_key_pair(base64url.decode(public_key), raw_private)


def generate_salt() -> bytes:
    return os.urandom(SALT_BYTES)
