"""URL-safe base64 without padding, as used by every Web Push header and key."""
from __future__ import annotations

import base64
import binascii

from pushcrypt.errors import DecodeError


def encode(data: bytes, start: int | None = None, end: int | None = None) -> str:
    """URL-safe base64 encode without padding. Optional slice bounds."""
    data = bytes(data)[start:end]
    return base64.urlsafe_b64encode(data).rstrip(b'=').decode('ascii')


def decode(data: str) -> bytes:
    """Decode unpadded base64url. Input in the standard alphabet is tolerated."""
    if isinstance(data, bytes):
        data = data.decode('ascii', errors='replace')
    data = data.strip().rstrip('=')
    # Some browsers hand out keys with + and /
    data = data.replace('+', '-').replace('/', '_')
    if len(data) % 4 == 1:
        raise DecodeError(f"Invalid base64url length: {len(data)}")
    data += '=' * ((4 - len(data) % 4) % 4)
    try:
        return base64.b64decode(data, altchars=b'-_', validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecodeError(f"Invalid base64url data: {e}") from e
