"""
反向代理处理器

每个入站请求独立处理，只读取凭证存储，从不写入：
1. 路径改写（chatgpt / imitate / platform）
2. 构建上游请求：GET 不带请求体，其他方法原样复制请求体，保留查询串
3. 注入 User-Agent / Authorization / Oai-Language / Oai-Device-Id / Cookie
4. 通过共享长超时客户端发送
5. 传输错误 -> 500 + {"errorMessage": ...}
6. 非 200 -> 原样透传状态码与 JSON 响应体（401 额外记录账号停用日志）
7. 200 -> 逐字节流式透传
"""

from __future__ import annotations

import json
from typing import Any

import httpx
from fastapi import Request
from fastapi.responses import JSONResponse, StreamingResponse
from starlette.background import BackgroundTask
from starlette.responses import Response

from src.api.proxy.utils import build_upstream_url, get_access_token
from src.config.constants import DEVICE_ID_COOKIE, LANGUAGE, Headers, Messages
from src.core.exceptions import error_envelope
from src.core.logger import logger
from src.services.auth.credentials import CredentialStore


class ProxyService:
    """上游代理转发"""

    def __init__(
        self,
        client: httpx.AsyncClient,
        store: CredentialStore,
        *,
        user_agent: str,
    ) -> None:
        self.client = client
        self.store = store
        self.user_agent = user_agent

    def build_headers(self, request: Request) -> dict[str, str]:
        device_id = self.store.device_id
        headers = {
            Headers.USER_AGENT: self.user_agent,
            Headers.AUTHORIZATION: get_access_token(
                getattr(request.state, "authorization", "")
            ),
            Headers.LANGUAGE: LANGUAGE,
            Headers.DEVICE_ID: device_id,
            Headers.COOKIE: f"{DEVICE_ID_COOKIE}={device_id};",
        }
        content_type = request.headers.get("content-type")
        if content_type and request.method != "GET":
            headers[Headers.CONTENT_TYPE] = content_type
        return headers

    async def proxy(self, request: Request) -> Response:
        url = build_upstream_url(request.url.path, request.url.query)
        method = request.method
        body = None if method == "GET" else await request.body()

        upstream_request = self.client.build_request(
            method, url, headers=self.build_headers(request), content=body
        )
        logger.debug(f"代理请求: {method} {request.url.path} -> {url.split('?')[0]}")

        try:
            resp = await self.client.send(upstream_request, stream=True)
        except httpx.HTTPError as e:
            return JSONResponse(status_code=500, content=error_envelope(str(e) or repr(e)))

        if resp.status_code != 200:
            return await self._relay_error(request, resp)

        # 解压在 curl 传输层完成（已去掉 content-encoding），这里拿到的就是明文字节
        return StreamingResponse(
            resp.aiter_bytes(),
            status_code=200,
            media_type=resp.headers.get("content-type"),
            background=BackgroundTask(resp.aclose),
        )

    async def _relay_error(self, request: Request, resp: httpx.Response) -> JSONResponse:
        if resp.status_code == 401:
            email = getattr(request.state, "email", "") or ""
            logger.warning(Messages.ACCOUNT_DEACTIVATED.format(email))

        try:
            raw = await resp.aread()
        except httpx.HTTPError as e:
            logger.warning(f"读取上游错误响应失败: {e}")
            raw = b""
        finally:
            await resp.aclose()

        return JSONResponse(status_code=resp.status_code, content=_decode_object(raw))


def _decode_object(raw: bytes) -> dict[str, Any]:
    """尽力解析 JSON 对象，失败时返回空字典"""
    try:
        data = json.loads(raw)
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}
