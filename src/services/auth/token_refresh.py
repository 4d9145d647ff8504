"""刷新令牌换取访问令牌"""

from __future__ import annotations

from typing import Any

import httpx

from src.clients.http_client import HTTPClientPool
from src.config.constants import Headers, OpenAIAuth
from src.core.logger import logger


async def refresh_access_token(refresh_token: str, *, user_agent: str) -> str:
    """
    用刷新令牌换取新的访问令牌

    经由出站代理。网络错误、响应不是 JSON、缺少 access_token 时记录日志并返回空字符串；
    非 200 状态码只记录日志，仍尝试解析响应体。
    """
    payload = {
        "redirect_uri": OpenAIAuth.REDIRECT_URI,
        "grant_type": "refresh_token",
        "client_id": OpenAIAuth.CLIENT_ID,
        "refresh_token": refresh_token,
    }
    headers = {
        Headers.USER_AGENT: user_agent,
        Headers.CONTENT_TYPE: "application/json",
    }

    try:
        async with HTTPClientPool.get_temp_client(with_proxy=True) as client:
            resp = await client.post(OpenAIAuth.TOKEN_URL, json=payload, headers=headers)
    except httpx.HTTPError as e:
        logger.error(f"Failed to refresh token: {e}")
        return ""
    except Exception as e:
        logger.error(f"Failed to refresh token: failed to create client: {e}")
        return ""

    if resp.status_code != 200:
        logger.error(f"Server responded with status code: {resp.status_code}")

    try:
        result: Any = resp.json()
    except ValueError as e:
        logger.error(f"Failed to decode json: {e}")
        return ""

    access_token = result.get("access_token") if isinstance(result, dict) else None
    if not isinstance(access_token, str) or not access_token:
        logger.error(f"missing access token: {result}")
        return ""
    return access_token
