"""
pushcrypt - Web Push message encryption (RFC 8291 aes128gcm and draft aesgcm)
with VAPID authentication.

Usage:
    from pushcrypt import Aes128GcmEncryption, Subscription, VapidKeys

    engine = Aes128GcmEncryption(
        vapid_keys=VapidKeys.from_b64(public_key, private_key),
        subject='mailto:admin@example.com',
    )
    url, options = engine.get_request_details(
        Subscription.from_dict(subscription_json),
        b'{"title": "Hello"}',
    )
"""
from pushcrypt.aes128gcm import Aes128GcmEncryption
from pushcrypt.aesgcm import AesGcmEncryption
from pushcrypt.encryption import EncryptedPayload, EncryptionHelper
from pushcrypt.engine import create_engine, get_engine, get_request_details
from pushcrypt.errors import (
    DecodeError,
    InvalidKeyFormat,
    InvalidKeyLength,
    InvalidSubscription,
    KeyDerivationError,
    MissingAudience,
    MissingSubject,
    PushDeliveryError,
    WebPushError,
)
from pushcrypt.request import ContentCoding, RequestDescriptor
from pushcrypt.subscription import Subscription
from pushcrypt.vapid import VapidKeys, create_auth_header, generate_vapid_keys

__all__ = [
    "Aes128GcmEncryption",
    "AesGcmEncryption",
    "ContentCoding",
    "DecodeError",
    "EncryptedPayload",
    "EncryptionHelper",
    "InvalidKeyFormat",
    "InvalidKeyLength",
    "InvalidSubscription",
    "KeyDerivationError",
    "MissingAudience",
    "MissingSubject",
    "PushDeliveryError",
    "RequestDescriptor",
    "Subscription",
    "VapidKeys",
    "WebPushError",
    "create_auth_header",
    "create_engine",
    "generate_vapid_keys",
    "get_engine",
    "get_request_details",
]
