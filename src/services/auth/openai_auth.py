"""
OpenAI 账号密码登录

chatgpt.com 网页登录流程（auth0）：
1. 获取 CSRF Token
2. 登录入口换取 authorize 地址
3. 访问 authorize 地址，从跳转中取 state
4. 提交邮箱（/u/login/identifier）
5. 提交密码（/u/login/password）
6. 跟随 resume 跳转回到 chatgpt.com，建立会话
7. 从 /api/auth/session 读取 accessToken

整个流程共用一个临时客户端（独立 Cookie Jar），任一步失败都抛出 AuthFlowError。
"""

from __future__ import annotations

from typing import Any, Optional
from urllib.parse import parse_qs, urljoin, urlsplit

import httpx

from src.clients.http_client import HTTPClientPool
from src.config.constants import Headers, Messages, OpenAIAuth
from src.core.exceptions import AuthFlowError
from src.core.logger import logger

_FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"

# 跟随跳转的最大次数（resume -> callback -> chatgpt.com）
_MAX_REDIRECTS = 10


class OpenAIAuthenticator:
    """账号密码登录，换取 chatgpt.com 访问令牌"""

    def __init__(
        self,
        username: str,
        password: str,
        proxy_url: str = "",
        *,
        user_agent: str,
    ) -> None:
        self.username = username
        self.password = password
        self.proxy_url = proxy_url
        self.user_agent = user_agent
        self._access_token = ""

    async def begin(self) -> None:
        """执行完整登录流程，失败时抛出 AuthFlowError"""
        self._access_token = ""
        try:
            async with HTTPClientPool.get_temp_client(
                with_proxy=True, proxy_url=self.proxy_url, follow_redirects=False
            ) as client:
                csrf_token = await self._get_csrf_token(client)
                authorized_url = await self._get_authorized_url(client, csrf_token)
                state = await self._get_state(client, authorized_url)
                await self._check_username(client, state)
                resume_url = await self._check_password(client, state)
                self._access_token = await self._get_access_token(client, resume_url)
        except httpx.HTTPError as e:
            raise AuthFlowError(Messages.GET_ACCESS_TOKEN_FAILED, details=str(e)) from e

        logger.info(f"账号 {self.username} 登录成功")

    def get_access_token(self) -> str:
        return self._access_token

    def _headers(self, **extra: str) -> dict[str, str]:
        headers = {Headers.USER_AGENT: self.user_agent}
        headers.update(extra)
        return headers

    async def _get_csrf_token(self, client: httpx.AsyncClient) -> str:
        resp = await client.get(OpenAIAuth.CSRF_URL, headers=self._headers())
        data = _json_or_none(resp)
        token = data.get("csrfToken") if isinstance(data, dict) else None
        if resp.status_code != 200 or not token:
            raise AuthFlowError(
                Messages.GET_AUTHORIZED_URL_FAILED,
                details=f"csrf: HTTP {resp.status_code}",
                status_code=resp.status_code,
            )
        return str(token)

    async def _get_authorized_url(self, client: httpx.AsyncClient, csrf_token: str) -> str:
        resp = await client.post(
            OpenAIAuth.SIGNIN_URL,
            data={"callbackUrl": "/", "csrfToken": csrf_token, "json": "true"},
            headers=self._headers(**{Headers.CONTENT_TYPE: _FORM_CONTENT_TYPE}),
        )
        data = _json_or_none(resp)
        url = data.get("url") if isinstance(data, dict) else None
        if resp.status_code != 200 or not url or "error" in str(url):
            raise AuthFlowError(
                Messages.GET_AUTHORIZED_URL_FAILED,
                details=f"signin: HTTP {resp.status_code}",
                status_code=resp.status_code,
            )
        return str(url)

    async def _get_state(self, client: httpx.AsyncClient, authorized_url: str) -> str:
        url = authorized_url
        for _ in range(_MAX_REDIRECTS):
            resp = await client.get(url, headers=self._headers())
            location = resp.headers.get("location")
            if location is None:
                break
            url = urljoin(url, location)
            state = _query_value(url, "state")
            if state and "/u/login" in url:
                return state

        raise AuthFlowError(
            Messages.GET_AUTHORIZED_URL_FAILED,
            details="state not found in authorize redirects",
        )

    async def _check_username(self, client: httpx.AsyncClient, state: str) -> None:
        resp = await client.post(
            OpenAIAuth.LOGIN_USERNAME_URL + state,
            data={
                "state": state,
                "username": self.username,
                "js-available": "true",
                "webauthn-available": "true",
                "is-brave": "false",
                "webauthn-platform-available": "false",
                "action": "default",
            },
            headers=self._headers(**{Headers.CONTENT_TYPE: _FORM_CONTENT_TYPE}),
        )
        if resp.status_code != 302:
            raise AuthFlowError(
                Messages.EMAIL_INVALID,
                details=f"identifier: HTTP {resp.status_code}",
                status_code=resp.status_code,
            )

    async def _check_password(self, client: httpx.AsyncClient, state: str) -> str:
        resp = await client.post(
            OpenAIAuth.LOGIN_PASSWORD_URL + state,
            data={
                "state": state,
                "username": self.username,
                "password": self.password,
                "action": "default",
            },
            headers=self._headers(**{Headers.CONTENT_TYPE: _FORM_CONTENT_TYPE}),
        )
        location = resp.headers.get("location")
        if resp.status_code != 302 or not location:
            raise AuthFlowError(
                Messages.EMAIL_OR_PASSWORD_INVALID,
                details=f"password: HTTP {resp.status_code}",
                status_code=resp.status_code,
            )
        return urljoin(OpenAIAuth.AUTH0_URL, location)

    async def _get_access_token(self, client: httpx.AsyncClient, resume_url: str) -> str:
        url: Optional[str] = resume_url
        for _ in range(_MAX_REDIRECTS):
            if url is None:
                break
            resp = await client.get(url, headers=self._headers())
            location = resp.headers.get("location")
            url = urljoin(url, location) if location else None

        resp = await client.get(OpenAIAuth.SESSION_URL, headers=self._headers())
        data = _json_or_none(resp)
        token = data.get("accessToken") if isinstance(data, dict) else None
        if resp.status_code != 200 or not token:
            raise AuthFlowError(
                Messages.GET_ACCESS_TOKEN_FAILED,
                details=f"session: HTTP {resp.status_code}",
                status_code=resp.status_code,
            )
        return str(token)


def _json_or_none(resp: httpx.Response) -> Any:
    try:
        return resp.json()
    except ValueError:
        return None


def _query_value(url: str, key: str) -> str:
    values = parse_qs(urlsplit(url).query).get(key) or [""]
    return values[0]
