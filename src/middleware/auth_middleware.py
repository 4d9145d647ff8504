"""
认证上下文中间件（纯 ASGI 实现）

为每个请求写入:
- request.state.authorization: 调用方 Authorization 头，其次 X-Authorization，
  都没有时回退到后台刷新得到的访问令牌
- request.state.email: 调用方 X-Email 头；使用刷新令牌时回退到 OPENAI_EMAIL

注意：使用纯 ASGI middleware 而非 BaseHTTPMiddleware，
以避免 Starlette 已知的流式响应兼容性问题。
"""

from starlette.requests import Request
from starlette.types import ASGIApp, Receive, Scope, Send

from src.config.constants import Headers
from src.services.auth.credentials import CredentialStore


class AuthContextMiddleware:
    def __init__(self, app: ASGIApp, store: CredentialStore, default_email: str = "") -> None:
        self.app = app
        self.store = store
        self.default_email = default_email

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request = Request(scope, receive, send)
        authorization = request.headers.get(Headers.AUTHORIZATION) or request.headers.get(
            Headers.X_AUTHORIZATION
        )
        email = request.headers.get(Headers.X_EMAIL, "")

        if not authorization:
            # 调用方未提供令牌，使用共享凭证
            authorization = self.store.access_token
            email = email or self.default_email

        request.state.authorization = authorization or ""
        request.state.email = email

        await self.app(scope, receive, send)
