"""PUID 获取：用有效的访问令牌请求模型列表，从响应 Cookie 中取 _puid"""

from __future__ import annotations

import httpx

from src.clients.http_client import HTTPClientPool
from src.config.constants import (
    DEVICE_ID_COOKIE,
    PUID_COOKIE,
    Headers,
    OpenAIAuth,
)
from src.core.logger import logger


async def get_puid(access_token: str, *, device_id: str, user_agent: str) -> str:
    """
    获取 PUID

    失败时返回空字符串（不抛异常），每条失败路径都记录 error 日志。
    直连请求，不经过出站代理。
    """
    if not access_token:
        logger.error("GetPUID: Missing access token")
        return ""

    headers = {
        Headers.AUTHORIZATION: f"Bearer {access_token}",
        Headers.USER_AGENT: user_agent,
        Headers.COOKIE: f"{DEVICE_ID_COOKIE}={device_id};",
    }

    try:
        async with HTTPClientPool.get_temp_client(with_proxy=False) as client:
            resp = await client.get(OpenAIAuth.MODELS_URL, headers=headers)
    except httpx.HTTPError as e:
        logger.error(f"GetPUID: request failed: {e}")
        return ""
    except Exception as e:
        logger.error(f"GetPUID: failed to create client: {e}")
        return ""

    if resp.status_code != 200:
        logger.error(f"GetPUID: Server responded with status code: {resp.status_code}")
        return ""

    puid = ""
    for cookie in resp.cookies.jar:
        if cookie.name == PUID_COOKIE:
            puid = cookie.value or ""
            break

    if not puid:
        logger.error("GetPUID: PUID cookie not found")
    return puid
