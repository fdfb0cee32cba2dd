"""Tests for push request delivery."""
import asyncio
import json
from urllib.parse import unquote

import httpx
import pytest

from pushcrypt.aes128gcm import Aes128GcmEncryption
from pushcrypt.config import Settings
from pushcrypt.errors import PushDeliveryError
from pushcrypt.request import RequestDescriptor
from pushcrypt.transport import resolve_url, send_push, send_request

FCM_URL = "https://fcm.googleapis.com/wp/ABC"
MOZILLA_URL = "https://updates.push.services.mozilla.com/wpush/v2/abc"


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def _send(request, settings, handler):
    async def run():
        async with _client(handler) as client:
            return await send_request(request, settings=settings, client=client)
    return asyncio.run(run())


class TestResolveUrl:
    def test_direct_by_default(self):
        assert resolve_url(FCM_URL, Settings()) == FCM_URL

    def test_proxy_for_services_without_cors(self):
        settings = Settings(use_cors_proxy=True)
        resolved = resolve_url(FCM_URL, settings)
        assert resolved.startswith("https://corsproxy.io/?")
        assert unquote(resolved[len("https://corsproxy.io/?"):]) == FCM_URL

    def test_mozilla_never_proxied(self):
        assert resolve_url(MOZILLA_URL, Settings(use_cors_proxy=True)) == MOZILLA_URL


class TestSendRequest:
    def test_post_delivered(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["method"] = request.method
            seen["url"] = str(request.url)
            seen["headers"] = request.headers
            seen["body"] = request.content
            return httpx.Response(201)

        request = RequestDescriptor(
            url=FCM_URL, method="POST",
            headers={"TTL": 60, "Content-Encoding": "aes128gcm", "Authorization": "WebPush x.y.z"},
            body=b"\x01\x02",
        )
        result = _send(request, Settings(), handler)

        assert result.delivered and result.status_code == 201
        assert seen["method"] == "POST"
        assert seen["url"] == FCM_URL
        assert seen["headers"]["ttl"] == "60"
        assert seen["headers"]["content-encoding"] == "aes128gcm"
        assert seen["body"] == b"\x01\x02"

    @pytest.mark.parametrize("status", [404, 410])
    def test_gone_subscription(self, status):
        request = RequestDescriptor(url=FCM_URL, method="GET", headers={"TTL": 60, "Content-Length": 0})
        result = _send(request, Settings(), lambda r: httpx.Response(status))
        assert not result.delivered
        assert result.status_code == status

    def test_error_status_raises(self):
        request = RequestDescriptor(url=FCM_URL, method="GET", headers={})
        with pytest.raises(PushDeliveryError) as excinfo:
            _send(request, Settings(), lambda r: httpx.Response(500))
        assert excinfo.value.status_code == 500

    def test_network_error_raises(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        request = RequestDescriptor(url=FCM_URL, method="GET", headers={})
        with pytest.raises(PushDeliveryError):
            _send(request, Settings(), handler)

    def test_sent_through_proxy(self):
        seen = []

        def handler(request):
            seen.append(request.url.host)
            return httpx.Response(201)

        request = RequestDescriptor(url=FCM_URL, method="GET", headers={})
        _send(request, Settings(use_cors_proxy=True), handler)
        assert seen == ["corsproxy.io"]


class TestSendPush:
    def test_encrypts_json_payload(self, vapid_keys, receiver):
        engine = Aes128GcmEncryption(vapid_keys, "mailto:a@b.c")
        bodies = []

        def handler(request):
            bodies.append(request.content)
            return httpx.Response(201)

        async def run():
            async with _client(handler) as client:
                return await send_push(
                    receiver.subscription, {"title": "Hi"},
                    engine=engine, settings=Settings(), client=client,
                )

        result = asyncio.run(run())
        assert result.delivered
        assert json.loads(receiver.decrypt_aes128gcm(bodies[0])) == {"title": "Hi"}
