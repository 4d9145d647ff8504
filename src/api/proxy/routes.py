"""
代理路由

- /chatgpt/{path}     -> chatgpt.com
- /imitate/v1/{path}  -> chatgpt.com/backend-api
- /platform/{path}    -> api.openai.com
"""

from typing import Any

from fastapi import APIRouter, Depends, Request

from src.api.proxy.service import ProxyService
from src.config.constants import Routes

PROXY_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "HEAD"]

router = APIRouter(tags=["Proxy"])


def get_proxy_service(request: Request) -> ProxyService:
    return request.app.state.proxy_service  # type: ignore[no-any-return]


@router.api_route(Routes.CHATGPT_PREFIX + "/{path:path}", methods=PROXY_METHODS)
async def proxy_chatgpt(
    request: Request, service: ProxyService = Depends(get_proxy_service)
) -> Any:
    """ChatGPT 网页接口透传"""
    return await service.proxy(request)


@router.api_route(Routes.IMITATE_PREFIX + "/{path:path}", methods=PROXY_METHODS)
async def proxy_imitate(
    request: Request, service: ProxyService = Depends(get_proxy_service)
) -> Any:
    """imitate API，映射到 backend-api"""
    return await service.proxy(request)


@router.api_route(Routes.PLATFORM_PREFIX + "/{path:path}", methods=PROXY_METHODS)
async def proxy_platform(
    request: Request, service: ProxyService = Depends(get_proxy_service)
) -> Any:
    """OpenAI 平台 API 透传"""
    return await service.proxy(request)
