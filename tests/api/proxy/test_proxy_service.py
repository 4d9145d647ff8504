"""
反向代理端到端测试

上游使用 httpx.MockTransport 模拟，网关通过 ASGITransport 在进程内调用
"""

from __future__ import annotations

import json
import uuid
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Callable

import httpx
import pytest

from src.config.constants import DEVICE_ID_NAMESPACE, Messages
from src.main import create_app


class UpstreamRecorder:
    def __init__(self, handler: Callable[[httpx.Request], Any]) -> None:
        self.handler = handler
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> Any:
        self.requests.append(request)
        return self.handler(request)


@pytest.fixture
def gateway(make_config):
    @asynccontextmanager
    async def _gateway(
        handler: Callable[[httpx.Request], Any], **env: str
    ) -> AsyncIterator[tuple[httpx.AsyncClient, UpstreamRecorder]]:
        cfg = make_config(**env)
        recorder = UpstreamRecorder(handler)
        upstream = httpx.AsyncClient(transport=httpx.MockTransport(recorder))
        app = create_app(cfg, upstream_client=upstream, start_refresher=False)

        async with app.router.lifespan_context(app):
            async with httpx.AsyncClient(
                transport=httpx.ASGITransport(app=app), base_url="http://gateway"
            ) as client:
                yield client, recorder

    return _gateway


class TestPathRewriteAndHeaders:
    @pytest.mark.asyncio
    async def test_imitate_request_is_rewritten_and_decorated(self, gateway) -> None:
        async with gateway(
            lambda request: httpx.Response(200, json={"ok": True}),
            OPENAI_DEVICE_ID="dev-xyz",
            UA="custom-agent",
        ) as (client, upstream):
            resp = await client.get("/imitate/v1/foo?x=1", headers={"Authorization": "abc"})

        assert resp.status_code == 200
        sent = upstream.requests[0]
        assert str(sent.url) == "https://chatgpt.com/backend-api/foo?x=1"
        assert sent.method == "GET"
        assert sent.content == b""
        assert sent.headers["authorization"] == "Bearer abc"
        assert sent.headers["user-agent"] == "custom-agent"
        assert sent.headers["oai-language"] == "en-US"
        assert sent.headers["oai-device-id"] == "dev-xyz"
        assert sent.headers["cookie"] == "oai-did=dev-xyz;"

    @pytest.mark.asyncio
    async def test_bearer_header_passes_through(self, gateway) -> None:
        async with gateway(lambda request: httpx.Response(200)) as (client, upstream):
            await client.get("/chatgpt/backend-api/me", headers={"Authorization": "Bearer xyz"})

        assert str(upstream.requests[0].url) == "https://chatgpt.com/backend-api/me"
        assert upstream.requests[0].headers["authorization"] == "Bearer xyz"

    @pytest.mark.asyncio
    async def test_x_authorization_header(self, gateway) -> None:
        async with gateway(lambda request: httpx.Response(200)) as (client, upstream):
            await client.get("/platform/v1/models", headers={"X-Authorization": "sk-1"})

        assert str(upstream.requests[0].url) == "https://api.openai.com/v1/models"
        assert upstream.requests[0].headers["authorization"] == "Bearer sk-1"

    @pytest.mark.asyncio
    async def test_falls_back_to_shared_access_token(self, gateway) -> None:
        async with gateway(
            lambda request: httpx.Response(200), IMITATE_ACCESS_TOKEN="static-at"
        ) as (client, upstream):
            await client.get("/imitate/v1/models")

        sent = upstream.requests[0]
        expected_device_id = str(uuid.uuid5(uuid.UUID(DEVICE_ID_NAMESPACE), "static-at"))
        assert sent.headers["authorization"] == "Bearer static-at"
        assert sent.headers["oai-device-id"] == expected_device_id

    @pytest.mark.asyncio
    async def test_post_body_is_copied_verbatim(self, gateway) -> None:
        body = json.dumps({"model": "gpt-4o", "messages": [{"role": "user", "content": "hi"}]})

        async with gateway(lambda request: httpx.Response(200)) as (client, upstream):
            await client.post(
                "/platform/v1/chat/completions",
                content=body.encode(),
                headers={"Authorization": "sk-1", "Content-Type": "application/json"},
            )

        sent = upstream.requests[0]
        assert sent.method == "POST"
        assert sent.content == body.encode()
        assert sent.headers["content-type"] == "application/json"


class TestResponseRelay:
    @pytest.mark.asyncio
    async def test_success_body_is_streamed_unchanged(self, gateway) -> None:
        payload = b'data: {"a":1}\n\ndata: [DONE]\n\n'

        async with gateway(
            lambda request: httpx.Response(
                200, content=payload, headers={"content-type": "text/event-stream"}
            )
        ) as (client, _):
            resp = await client.post("/chatgpt/backend-api/conversation", content=b"{}")

        assert resp.status_code == 200
        assert resp.content == payload
        assert resp.headers["content-type"].startswith("text/event-stream")

    @pytest.mark.asyncio
    async def test_error_status_and_body_are_relayed(self, gateway) -> None:
        async with gateway(
            lambda request: httpx.Response(403, content=b'{"error":"nope"}')
        ) as (client, _):
            resp = await client.get("/imitate/v1/foo")

        assert resp.status_code == 403
        assert resp.json() == {"error": "nope"}
        assert resp.content == b'{"error":"nope"}'

    @pytest.mark.asyncio
    async def test_undecodable_error_body_relays_empty_object(self, gateway) -> None:
        async with gateway(
            lambda request: httpx.Response(502, text="<html>bad gateway</html>")
        ) as (client, _):
            resp = await client.get("/platform/v1/models")

        assert resp.status_code == 502
        assert resp.json() == {}

    @pytest.mark.asyncio
    async def test_unauthorized_logs_deactivated_account(self, gateway, log_messages) -> None:
        async with gateway(
            lambda request: httpx.Response(401, json={"detail": "deactivated"})
        ) as (client, _):
            resp = await client.get(
                "/imitate/v1/me", headers={"Authorization": "abc", "X-Email": "x@y.z"}
            )

        assert resp.status_code == 401
        assert resp.json() == {"detail": "deactivated"}
        assert Messages.ACCOUNT_DEACTIVATED.format("x@y.z") in log_messages

    @pytest.mark.asyncio
    async def test_transport_error_returns_500_envelope(self, gateway) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with gateway(handler) as (client, _):
            resp = await client.get("/chatgpt/backend-api/models")

        assert resp.status_code == 500
        assert resp.json() == {"errorMessage": "connection refused"}


class TestRouting:
    @pytest.mark.asyncio
    async def test_unmatched_route_is_404(self, gateway) -> None:
        async with gateway(lambda request: httpx.Response(200)) as (client, upstream):
            resp = await client.get("/v1/models")

        assert resp.status_code == 404
        assert upstream.requests == []

    @pytest.mark.asyncio
    async def test_healthz(self, gateway) -> None:
        async with gateway(lambda request: httpx.Response(200)) as (client, _):
            resp = await client.get("/healthz")

        assert resp.status_code == 200
        data = resp.json()
        assert data["message"] == Messages.READY_HINT
        assert data["refresh_status"] == "pending"
