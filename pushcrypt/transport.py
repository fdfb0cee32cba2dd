"""
Delivery of assembled push requests over HTTP.

Push services that do not answer cross-origin requests can be reached
through a CORS proxy when `use_cors_proxy` is enabled; the routing decision
depends only on the endpoint host. No retries are attempted.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Optional
from urllib.parse import quote

import httpx

from pushcrypt.config import Settings, get_settings
from pushcrypt.encryption import EncryptionHelper
from pushcrypt.engine import get_engine
from pushcrypt.errors import PushDeliveryError
from pushcrypt.request import RequestDescriptor, supports_cors
from pushcrypt.subscription import Subscription

logger = logging.getLogger(__name__)

# Push service answers meaning the subscription no longer exists
GONE_STATUS_CODES = (404, 410)


@dataclass(frozen=True)
class DeliveryResult:
    delivered: bool
    status_code: int


def resolve_url(url: str, settings: Settings) -> str:
    """Return the URL to call, going through the CORS proxy when required."""
    if settings.use_cors_proxy and not supports_cors(url):
        return settings.cors_proxy_url + quote(url, safe='')
    return url


async def send_request(
    request: RequestDescriptor,
    settings: Optional[Settings] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> DeliveryResult:
    """
    Send an assembled push request.

    Returns a DeliveryResult with delivered=False if the push service reports
    the subscription as gone (404/410).

    Raises:
        PushDeliveryError for any other failure.
    """
    settings = settings or get_settings()
    url = resolve_url(request.url, settings)

    async def _send(http: httpx.AsyncClient) -> httpx.Response:
        return await http.request(
            request.method,
            url,
            headers=request.http_headers(),
            content=request.body,
            timeout=settings.request_timeout,
        )

    try:
        if client is not None:
            response = await _send(client)
        else:
            async with httpx.AsyncClient() as http:
                response = await _send(http)
    except httpx.HTTPError as e:
        logger.warning("PUSH: Request to %s failed: %s", request.url, e)
        raise PushDeliveryError(f"Push failed: {e}") from e

    if response.status_code in GONE_STATUS_CODES:
        logger.info("PUSH: Subscription gone (%d) for %s", response.status_code, request.url)
        return DeliveryResult(delivered=False, status_code=response.status_code)

    if response.is_error:
        logger.warning("PUSH: Push service returned %d for %s", response.status_code, request.url)
        raise PushDeliveryError(
            f"Push failed: {response.status_code} {response.reason_phrase}",
            status_code=response.status_code,
        )

    logger.info("PUSH: Delivered to %s (%d)", request.url, response.status_code)
    return DeliveryResult(delivered=True, status_code=response.status_code)


async def send_push(
    subscription: Subscription,
    data: dict[str, Any] | str | bytes,
    engine: Optional[EncryptionHelper] = None,
    settings: Optional[Settings] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> DeliveryResult:
    """Encrypt `data` for `subscription` and deliver it. Dicts are JSON-encoded."""
    if isinstance(data, dict):
        payload = json.dumps(data).encode('utf-8')
    elif isinstance(data, str):
        payload = data.encode('utf-8')
    else:
        payload = data

    engine = engine or get_engine()
    request = engine.build_request(subscription, payload)
    return await send_request(request, settings=settings, client=client)
