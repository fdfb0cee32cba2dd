"""Shared fixtures and a receiver-side decryptor used as a test oracle."""
import os

import pytest
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

from pushcrypt import base64url
from pushcrypt.config import get_settings
from pushcrypt.engine import reset_engine
from pushcrypt.subscription import Subscription
from pushcrypt.vapid import VapidKeys, generate_vapid_keys


# RFC 8291 Appendix A
RFC8291_PLAINTEXT = b"When I grow up, I want to be a watermelon"
RFC8291_AS_PUBLIC = "BP4z9KsN6nGRTbVYI_c7VJSPQTBtkgcy27mlmlMoZIIgDll6e3vCYLocInmYWAmS6TlzAC8wEqKK6PBru3jl7A8"
RFC8291_AS_PRIVATE = "yfWPiYE-n46HLnH0KqZOF1fJJU3MYrct3AELtAQ-oRw"
RFC8291_UA_PUBLIC = "BCVxsr7N_eNgVRqvHtD0zTZsEc6-VV-JvLexhqUzORcxaOzi6-AYWXvTBHm4bjyPjs7Vd8pZGH6SRpkNtoIAiw4"
RFC8291_UA_PRIVATE = "q1dXpw3UpT5VOmu_cf_v6ih07Aems3njxI-JWgLcM94"
RFC8291_SALT = "DGv6ra1nlYgDCS1FRnbzlw"
RFC8291_AUTH = "BTBZMqHH6r4Tts7J_aSIgg"
RFC8291_MESSAGE = (
    "DGv6ra1nlYgDCS1FRnbzlwAAEABBBP4z9KsN6nGRTbVYI_c7VJSPQTBtkgcy27mlmlMoZIIgDll6e3vCYLocInmYWAmS6TlzAC8wEqKK6PBru3jl7A_yl95bQpu6cVPTpK4Mqgkf1CXztLVBSt2Ks3oZwbuwXPXLWyouBWLVWGNWQexSgSxsj_Qulcy4a-fN"
)


# Same inputs encrypted with the draft aesgcm coding (draft-ietf-webpush-encryption-04)
AESGCM_CIPHERTEXT = "4qwOLFm_mNy0vf1A8f3Bm6B5UD15y3aV_xZy14pixUhcPTIoZKHzq5i3dZ6PzqSMxBI_-VDUZ4jW04M"


def _uncompressed(public_key) -> bytes:
    return public_key.public_bytes(
        encoding=serialization.Encoding.X962,
        format=serialization.PublicFormat.UncompressedPoint,
    )


def _hkdf(ikm: bytes, salt: bytes, info: bytes, length: int) -> bytes:
    return HKDF(algorithm=hashes.SHA256(), length=length, salt=salt, info=info).derive(ikm)


class Receiver:
    """The browser side of a subscription: holds the private key and decrypts."""

    def __init__(self, endpoint: str = "https://updates.push.services.mozilla.com/wpush/v2/abc123"):
        self.private_key = ec.generate_private_key(ec.SECP256R1())
        self.public_bytes = _uncompressed(self.private_key.public_key())
        self.auth = os.urandom(16)
        self.endpoint = endpoint

    @property
    def subscription(self) -> Subscription:
        return Subscription(endpoint=self.endpoint, p256dh=self.public_bytes, auth=self.auth)

    def _shared_secret(self, server_public: bytes) -> bytes:
        peer = ec.EllipticCurvePublicKey.from_encoded_point(ec.SECP256R1(), server_public)
        return self.private_key.exchange(ec.ECDH(), peer)

    def decrypt_aes128gcm(self, body: bytes) -> bytes:
        salt = body[:16]
        id_length = body[20]
        server_public = body[21:21 + id_length]
        ciphertext = body[21 + id_length:]

        ikm = _hkdf(
            self._shared_secret(server_public), self.auth,
            b"WebPush: info\x00" + self.public_bytes + server_public, 32,
        )
        cek = _hkdf(ikm, salt, b"Content-Encoding: aes128gcm\x00", 16)
        nonce = _hkdf(ikm, salt, b"Content-Encoding: nonce\x00", 12)

        record = AESGCM(cek).decrypt(nonce, ciphertext, None).rstrip(b"\x00")
        assert record[-1:] == b"\x02"
        return record[:-1]

    def decrypt_aesgcm(self, body: bytes, salt: bytes, server_public: bytes) -> bytes:
        prk = _hkdf(self._shared_secret(server_public), self.auth, b"Content-Encoding: auth\x00", 32)
        context = (
            b"P-256\x00"
            + len(self.public_bytes).to_bytes(2, "big") + self.public_bytes
            + len(server_public).to_bytes(2, "big") + server_public
        )
        cek = _hkdf(prk, salt, b"Content-Encoding: aesgcm\x00" + context, 16)
        nonce = _hkdf(prk, salt, b"Content-Encoding: nonce\x00" + context, 12)

        record = AESGCM(cek).decrypt(nonce, body, None)
        padding = int.from_bytes(record[:2], "big")
        return record[2 + padding:]


@pytest.fixture
def receiver() -> Receiver:
    return Receiver()


@pytest.fixture
def fcm_receiver() -> Receiver:
    return Receiver(endpoint="https://fcm.googleapis.com/fcm/send/ABC")


@pytest.fixture(scope="session")
def vapid_b64() -> tuple[str, str]:
    """(private_key, public_key) base64url."""
    return generate_vapid_keys()


@pytest.fixture
def vapid_keys(vapid_b64) -> VapidKeys:
    private_key, public_key = vapid_b64
    return VapidKeys.from_b64(public_key, private_key)


@pytest.fixture
def rfc8291_subscription() -> Subscription:
    return Subscription(
        endpoint="https://push.example.net/push/JzLQ3raZJfFBR0aqvOMsLrt54w4rJUsV",
        p256dh=base64url.decode(RFC8291_UA_PUBLIC),
        auth=base64url.decode(RFC8291_AUTH),
    )


@pytest.fixture
def vapid_env(monkeypatch, vapid_b64):
    """Configure VAPID settings through the environment."""
    private_key, public_key = vapid_b64
    monkeypatch.setenv("VAPID_PRIVATE_KEY", private_key)
    monkeypatch.setenv("VAPID_PUBLIC_KEY", public_key)
    monkeypatch.setenv("VAPID_SUBJECT", "mailto:ops@example.com")
    get_settings.cache_clear()
    reset_engine()
    yield
    get_settings.cache_clear()
    reset_engine()
