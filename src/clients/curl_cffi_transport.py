"""curl_cffi-based httpx AsyncTransport for TLS fingerprint impersonation.

When ``curl_cffi`` is installed, this transport replaces the default httpx
transport so upstream requests carry a browser-grade TLS fingerprint
(JA3/JA4) selected by ``CLIENT_PROFILE``. Otherwise the client factory falls
back to the default httpx transport.

Design notes:
- Each transport owns exactly one curl_cffi AsyncSession, so every httpx
  client built on it gets its own cookie jar. The shared proxy client keeps
  its session for the process lifetime; per-call clients close theirs.
- Streaming is supported via ``aiter_content()`` on the curl_cffi response.
- Redirects are left to httpx (``allow_redirects=False`` on the curl side).
- Cookies are owned by the httpx client only. The curl session jar never
  stores anything, so an explicit ``Cookie`` header is sent exactly as given
  and cookies set for one caller never leak into another caller's request.
- curl decompresses bodies itself; encoding headers are stripped from the
  response so httpx does not decode a second time.
"""

from __future__ import annotations

import asyncio
from http.cookiejar import Cookie, CookieJar
from typing import Any

import httpx

from src.core.logger import logger

# ---------------------------------------------------------------------------
# Availability check
# ---------------------------------------------------------------------------

try:
    from curl_cffi.requests import AsyncSession  # type: ignore[import-untyped]

    CURL_CFFI_AVAILABLE = True
except ImportError:
    CURL_CFFI_AVAILABLE = False


# ---------------------------------------------------------------------------
# Exception mapping (curl_cffi -> httpx)
# ---------------------------------------------------------------------------


def _map_curl_exception(exc: Exception) -> httpx.HTTPError:
    """Map curl_cffi exceptions to the closest httpx equivalents."""
    if CURL_CFFI_AVAILABLE:
        from curl_cffi.requests.exceptions import ConnectionError as CurlConnectionError
        from curl_cffi.requests.exceptions import ProxyError as CurlProxyError
        from curl_cffi.requests.exceptions import Timeout as CurlTimeout

        if isinstance(exc, CurlTimeout):
            return httpx.ReadTimeout(f"curl_cffi timeout: {exc}")
        if isinstance(exc, CurlProxyError):
            return httpx.ProxyError(f"curl_cffi proxy error: {exc}")
        if isinstance(exc, CurlConnectionError):
            return httpx.ConnectError(f"curl_cffi connection error: {exc}")
    return httpx.ConnectError(f"curl_cffi request failed: {exc}")


# ---------------------------------------------------------------------------
# httpx AsyncTransport implementation
# ---------------------------------------------------------------------------


class _DiscardingCookieJar(CookieJar):
    """Cookie jar that drops every cookie handed to it."""

    def set_cookie(self, cookie: Cookie) -> None:
        return None

    def set_cookie_if_ok(self, cookie: Cookie, request: Any) -> None:
        return None

    def extract_cookies(self, response: Any, request: Any) -> None:
        return None


class CurlCffiStream(httpx.AsyncByteStream):
    """Async byte stream backed by curl_cffi response content iterator."""

    def __init__(self, curl_response: Any) -> None:
        self._response = curl_response
        self._consumed = False

    async def __aiter__(self) -> Any:  # type: ignore[override]
        if self._consumed:
            return
        try:
            async for chunk in self._response.aiter_content():
                yield chunk
        finally:
            self._consumed = True

    async def aclose(self) -> None:
        self._consumed = True
        close_fn = getattr(self._response, "aclose", None)
        if close_fn and callable(close_fn):
            try:
                await close_fn()
            except Exception as exc:
                logger.debug("curl_cffi response close failed: {}", exc)


class CurlCffiTransport(httpx.AsyncBaseTransport):
    """httpx-compatible async transport using curl_cffi for TLS impersonation.

    Usage::

        transport = CurlCffiTransport("chrome124", proxy="http://proxy:8080")
        client = httpx.AsyncClient(transport=transport)
        resp = await client.get(url, headers=headers)
    """

    def __init__(self, impersonate: str, proxy: str | None = None) -> None:
        if not CURL_CFFI_AVAILABLE:
            raise RuntimeError("curl_cffi is not installed")
        self._impersonate = impersonate
        self._proxy = proxy
        self._session: AsyncSession | None = None
        self._lock = asyncio.Lock()

    async def _get_session(self) -> AsyncSession:
        async with self._lock:
            if self._session is None:
                kwargs: dict[str, Any] = {"impersonate": self._impersonate, "verify": True}
                if self._proxy:
                    kwargs["proxy"] = self._proxy
                self._session = AsyncSession(**kwargs)
                self._session.cookies.jar = _DiscardingCookieJar()
                logger.debug(
                    "curl_cffi session created: impersonate={}, proxy={}",
                    self._impersonate,
                    self._proxy or "direct",
                )
            return self._session

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        session = await self._get_session()

        # Build headers dict (skip host header, curl_cffi handles it).
        headers: dict[str, str] = {}
        for key, value in request.headers.raw:
            k = key.decode("latin-1").lower()
            if k in ("host", "content-length", "transfer-encoding"):
                continue
            headers[key.decode("latin-1")] = value.decode("latin-1")

        body = await request.aread()
        method = request.method.upper()
        url = str(request.url)

        # Determine timeout from request extensions.
        timeout: float | None = None
        raw_timeout = request.extensions.get("timeout")
        if isinstance(raw_timeout, dict):
            read_timeout = raw_timeout.get("read")
            if isinstance(read_timeout, (int, float)) and read_timeout > 0:
                timeout = float(read_timeout)

        # 会话 Cookie 必须为空，curl 才会原样发送请求自带的 Cookie 头
        session.cookies.clear()
        try:
            curl_resp = await session.request(
                method,
                url,
                headers=headers,
                data=body or None,
                timeout=timeout,
                allow_redirects=False,
                stream=True,
            )
        except Exception as exc:
            raise _map_curl_exception(exc) from exc

        # curl 已完成解压，去掉编码相关头避免 httpx 二次解码
        resp_headers_list: list[tuple[bytes, bytes]] = []
        if curl_resp.headers:
            for k, v in curl_resp.headers.multi_items():
                if k.lower() in ("content-encoding", "content-length", "transfer-encoding"):
                    continue
                resp_headers_list.append((k.encode("latin-1"), v.encode("latin-1")))

        return httpx.Response(
            status_code=curl_resp.status_code,
            headers=resp_headers_list,
            stream=CurlCffiStream(curl_resp),
            request=request,
        )

    async def aclose(self) -> None:
        async with self._lock:
            session, self._session = self._session, None
        if session is not None:
            await session.close()


__all__ = [
    "CURL_CFFI_AVAILABLE",
    "CurlCffiTransport",
]
