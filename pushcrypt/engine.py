"""
Process-wide encryption engine.

The engine is built from settings on first use and shared afterwards. Code
that wants a different engine (tests, multi-tenant senders) constructs one
with `create_engine` and passes it around explicitly.
"""
from __future__ import annotations

import logging
import threading
from typing import Any, Optional

from pushcrypt.aes128gcm import Aes128GcmEncryption
from pushcrypt.aesgcm import AesGcmEncryption
from pushcrypt.config import Settings, get_settings
from pushcrypt.encryption import EncryptionHelper
from pushcrypt.request import ContentCoding
from pushcrypt.subscription import Subscription
from pushcrypt.vapid import VapidKeys

logger = logging.getLogger(__name__)

ENGINES: dict[ContentCoding, type[EncryptionHelper]] = {
    ContentCoding.AES128GCM: Aes128GcmEncryption,
    ContentCoding.AESGCM: AesGcmEncryption,
}

_engine: Optional[EncryptionHelper] = None
_engine_lock = threading.Lock()


def create_engine(
    vapid_keys: VapidKeys,
    subject: str,
    content_coding: ContentCoding = ContentCoding.AES128GCM,
    **options: Any,
) -> EncryptionHelper:
    """Construct the engine for `content_coding`. Extra options go to the engine constructor."""
    engine_cls = ENGINES[ContentCoding(content_coding)]
    return engine_cls(vapid_keys=vapid_keys, subject=subject, **options)


def create_engine_from_settings(settings: Settings) -> EncryptionHelper:
    return create_engine(
        settings.get_vapid_keys(),
        settings.vapid_subject,
        settings.content_coding,
        ttl=settings.push_ttl,
    )


def get_engine() -> EncryptionHelper:
    """Return the shared engine, building it exactly once."""
    global _engine
    if _engine is None:
        with _engine_lock:
            if _engine is None:
                settings = get_settings()
                logger.info("PUSH: Initializing %s encryption engine", settings.content_coding.value)
                _engine = create_engine_from_settings(settings)
    return _engine


def reset_engine() -> None:
    """Drop the shared engine so the next get_engine() rebuilds it."""
    global _engine
    with _engine_lock:
        _engine = None


def get_request_details(
    subscription: Subscription,
    payload: bytes,
    engine: EncryptionHelper | None = None,
) -> tuple[str, dict[str, Any]]:
    """
    Encrypt `payload` for `subscription` and describe the HTTP request to send.

    Returns (url, {'headers': ..., 'body': ..., 'method': ...}).
    """
    engine = engine or get_engine()
    return engine.get_request_details(subscription, payload)
