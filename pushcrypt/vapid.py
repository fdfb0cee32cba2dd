"""
VAPID (RFC 8292) application server identification.

Builds the ES256-signed JWT sent in the Authorization header together with
the companion Crypto-Key header carrying the server's public key.
"""
from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlparse

from cryptography.hazmat.primitives.asymmetric import ec

from pushcrypt import base64url
from pushcrypt.errors import MissingAudience, MissingSubject
from pushcrypt.keys import KeyPair, generate_b64_key_pair, key_pair_to_point, point_to_key_pair
from pushcrypt.primitives import EcdsaP256Sha256, Signer

logger = logging.getLogger(__name__)

# Default token validity: twelve hours
DEFAULT_EXPIRATION_SECONDS = 43200

DEFAULT_PORTS = {'http': 80, 'https': 443}


@dataclass(frozen=True)
class VapidKeys:
    """Long-lived application server key pair, kept as raw bytes."""
    public_key: bytes   # 65-byte uncompressed point
    private_key: bytes  # 32-byte scalar

    @classmethod
    def from_b64(cls, public_key: str, private_key: str) -> VapidKeys:
        keys = cls(
            public_key=base64url.decode(public_key),
            private_key=base64url.decode(private_key),
        )
        # Validate lengths, point format, and that the pair belongs together
        keys.to_key_pair()
        return keys

    @classmethod
    def from_private_b64(cls, private_key: str) -> VapidKeys:
        return cls.from_b64(get_vapid_public_key(private_key), private_key)

    def to_key_pair(self) -> KeyPair:
        return point_to_key_pair(self.public_key, self.private_key)

    @property
    def b64_public_key(self) -> str:
        return base64url.encode(self.public_key)


def get_audience(endpoint: str) -> str:
    """
    Reduce a URL to its origin: lowercase scheme and host, port only when
    it is not the scheme's default. Userinfo is dropped.
    """
    parsed = urlparse(endpoint)
    scheme = parsed.scheme.lower()
    host = parsed.hostname
    if not scheme or not host:
        raise MissingAudience(f"Audience must be an absolute URL, got {endpoint!r}")
    try:
        port = parsed.port
    except ValueError as e:
        raise MissingAudience(f"Audience has an invalid port: {endpoint!r}") from e
    if ':' in host:
        host = f"[{host}]"
    if port is not None and port != DEFAULT_PORTS.get(scheme):
        return f"{scheme}://{host}:{port}"
    return f"{scheme}://{host}"


def _json_b64(data: dict) -> str:
    return base64url.encode(json.dumps(data, separators=(',', ':')).encode('utf-8'))


def create_auth_header(
    vapid_keys: VapidKeys,
    audience: str,
    subject: str,
    exp: Optional[int] = None,
    signer: Signer | None = None,
) -> dict[str, str]:
    """
    Create the VAPID Authorization and Crypto-Key headers.

    Args:
        vapid_keys: Application server keys
        audience: Push endpoint URL; only its origin is used
        subject: Contact for the push service, a mailto: or https: link
        exp: Token expiry as a Unix timestamp (default: now + 12 hours)
        signer: ES256 signer producing raw r||s signatures

    Raises:
        MissingAudience: audience is empty
        MissingSubject: subject is empty
    """
    if not audience:
        raise MissingAudience("Audience must be the origin of the server")
    if not subject:
        raise MissingSubject("Subject must be either a mailto or http link")

    if exp is None:
        exp = int(time.time()) + DEFAULT_EXPIRATION_SECONDS

    audience = get_audience(audience)

    header = {'typ': 'JWT', 'alg': 'ES256'}
    body = {'aud': audience, 'exp': exp, 'sub': subject}

    # The unsigned token is the url-safe base64 header and body joined by '.'
    unsigned_token = f"{_json_b64(header)}.{_json_b64(body)}"

    signer = signer or EcdsaP256Sha256()
    signature = signer.sign(vapid_keys.to_key_pair().private_key, unsigned_token.encode('utf-8'))
    jwt_token = f"{unsigned_token}.{base64url.encode(signature)}"

    logger.debug("PUSH: Built VAPID token for %s (exp=%d)", audience, exp)

    return {
        'Authorization': f'WebPush {jwt_token}',
        'Crypto-Key': f'p256ecdsa={vapid_keys.b64_public_key}',
    }


def generate_vapid_keys() -> tuple[str, str]:
    """
    Create an application server identity.

    Returns (private_key, public_key) as base64url raw key material: keep the
    first in VAPID_PRIVATE_KEY, hand the second to PushManager.subscribe().
    """
    keys = generate_b64_key_pair()
    return keys['privateKey'], keys['publicKey']


def get_vapid_public_key(vapid_private_key: str) -> str:
    """Compute the 65-byte public point (base64url) belonging to a raw private scalar."""
    private_key = ec.derive_private_key(
        int.from_bytes(base64url.decode(vapid_private_key), 'big'),
        ec.SECP256R1(),
    )
    raw = key_pair_to_point(private_key.public_key())
    return base64url.encode(raw.public_key)
