"""
Request descriptors and push-service specific endpoint handling.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Literal, Optional
from urllib.parse import urlparse

from pushcrypt import base64url

FCM_ENDPOINT_PREFIX = 'https://fcm.googleapis.com'


class ContentCoding(str, Enum):
    AES128GCM = 'aes128gcm'
    AESGCM = 'aesgcm'


class PushService(str, Enum):
    FCM = 'fcm'
    MOZILLA = 'mozilla'
    OTHER = 'other'


def classify_endpoint(endpoint: str) -> PushService:
    """Identify the push service behind an endpoint URL."""
    if endpoint.startswith(FCM_ENDPOINT_PREFIX):
        return PushService.FCM
    host = urlparse(endpoint).hostname or ''
    if host == 'mozilla.com' or host.endswith('.mozilla.com'):
        return PushService.MOZILLA
    return PushService.OTHER


def rewrite_endpoint(endpoint: str) -> str:
    """
    Point FCM endpoints at the VAPID-capable /wp/ variant.

    https://fcm.googleapis.com/fcm/send/ABC -> https://fcm.googleapis.com/wp/ABC
    """
    if classify_endpoint(endpoint) is PushService.FCM:
        return endpoint.replace('fcm/send', 'wp', 1)
    return endpoint


def supports_cors(endpoint: str) -> bool:
    """Whether the push service answers cross-origin requests directly.

    Only Mozilla's autopush does; everything else needs a proxy when the
    request originates from a browser.
    """
    return classify_endpoint(endpoint) is PushService.MOZILLA


@dataclass
class RequestDescriptor:
    url: str
    method: Literal['GET', 'POST']
    headers: dict[str, Any] = field(default_factory=dict)
    body: Optional[bytes] = None

    def to_fetch_args(self) -> tuple[str, dict[str, Any]]:
        """Return (url, {'headers', 'body', 'method'}), the shape of fetch(...) arguments."""
        return self.url, {'headers': self.headers, 'body': self.body, 'method': self.method}

    def http_headers(self) -> dict[str, str]:
        """Headers with every value as a string, ready for an HTTP client."""
        return {name: str(value) for name, value in self.headers.items()}

    def to_json(self) -> dict[str, Any]:
        return {
            'url': self.url,
            'method': self.method,
            'headers': self.http_headers(),
            'body': base64url.encode(self.body) if self.body is not None else None,
        }
