"""
统一异常定义与全局异常处理器

本地产生的错误统一使用 {"errorMessage": "..."} 信封返回
"""

from __future__ import annotations

from typing import Any

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse

from src.config.constants import Messages
from src.core.logger import logger


class AuthFlowError(Exception):
    """账号密码登录流程失败"""

    def __init__(self, message: str, details: str = "", status_code: int = 0) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or message
        self.status_code = status_code

    def __str__(self) -> str:
        if self.details and self.details != self.message:
            return f"{self.message}: {self.details}"
        return self.message


def error_envelope(msg: str) -> dict[str, Any]:
    """构建错误信封，同时记录警告日志"""
    logger.warning(msg)
    return {Messages.ERROR_MESSAGE_KEY: msg}


class ExceptionHandlers:
    """全局异常处理器"""

    @staticmethod
    async def handle_http_exception(request: Request, exc: HTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=error_envelope(str(exc.detail)),
            headers=getattr(exc, "headers", None),
        )

    @staticmethod
    async def handle_generic_exception(request: Request, exc: Exception) -> JSONResponse:
        logger.opt(exception=exc).error(f"未处理的异常: {request.method} {request.url.path}")
        return JSONResponse(status_code=500, content=error_envelope(str(exc)))
