"""
Push subscriptions.

The JSON wire shape produced by `PushSubscription.toJSON()` in the browser is
validated by `SubscriptionInfo` and normalized into the canonical
`Subscription`, which holds the decoded key bytes. Engines only accept
`Subscription`.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ValidationError

from pushcrypt import base64url
from pushcrypt.errors import InvalidSubscription


class SubscriptionKeys(BaseModel):
    p256dh: str  # base64url, 65-byte uncompressed point
    auth: str    # base64url, 16-byte secret


class SubscriptionInfo(BaseModel):
    endpoint: str
    keys: SubscriptionKeys
    expirationTime: float | None = None

    def to_subscription(self) -> Subscription:
        if not self.endpoint:
            raise InvalidSubscription("Subscription endpoint is empty")
        return Subscription(
            endpoint=self.endpoint,
            p256dh=base64url.decode(self.keys.p256dh),
            auth=base64url.decode(self.keys.auth),
        )


@dataclass(frozen=True)
class Subscription:
    endpoint: str
    p256dh: bytes
    auth: bytes

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Subscription:
        """Build from {'endpoint': ..., 'keys': {'p256dh': ..., 'auth': ...}}."""
        try:
            info = SubscriptionInfo.model_validate(data)
        except ValidationError as e:
            raise InvalidSubscription(f"Invalid push subscription: {e}") from e
        return info.to_subscription()

    def to_dict(self) -> dict[str, Any]:
        return {
            'endpoint': self.endpoint,
            'keys': {
                'p256dh': base64url.encode(self.p256dh),
                'auth': base64url.encode(self.auth),
            },
        }
