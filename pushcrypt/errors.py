"""
Exceptions raised by the Web Push encryption engine.

Input problems subclass ValueError so callers that already guard key
handling with `except ValueError` keep working.
"""
from __future__ import annotations


class WebPushError(Exception):
    """Base class for all pushcrypt errors."""


class DecodeError(WebPushError, ValueError):
    """Input is not valid URL-safe base64."""


class InvalidKeyLength(WebPushError, ValueError):
    """A raw EC key has the wrong number of bytes."""


class InvalidKeyFormat(WebPushError, ValueError):
    """A raw EC key is not a valid uncompressed P-256 point or scalar."""


class KeyDerivationError(WebPushError, ValueError):
    """HKDF was asked for an output length it cannot produce."""


class MissingAudience(WebPushError, ValueError):
    """VAPID token requested without an audience."""


class MissingSubject(WebPushError, ValueError):
    """VAPID token requested without a subject."""


class InvalidSubscription(WebPushError, ValueError):
    """Subscription is missing its endpoint or keys."""


class PushDeliveryError(WebPushError):
    """The push service rejected the request or could not be reached."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code
