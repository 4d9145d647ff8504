"""
统一日志系统
基于 loguru，导入时自动初始化

- 控制台输出（stderr），级别由 LOG_LEVEL 控制
- 可选文件输出（LOG_FILE），按大小轮转
- 拦截标准库 logging（uvicorn 等），统一经由 loguru 输出
"""

from __future__ import annotations

import logging
import sys

from loguru import logger

from src.config import config

_CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)
_FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{line} - {message}"


class InterceptHandler(logging.Handler):
    """将标准库 logging 记录转发到 loguru"""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame is not None and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def _normalize_level(raw: str) -> str:
    level = (raw or "INFO").split()[0].upper()
    if level not in {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}:
        return "INFO"
    return level


def setup_logger() -> None:
    """初始化日志输出（可重复调用）"""
    level = _normalize_level(config.log_level)

    logger.remove()
    logger.add(sys.stderr, level=level, format=_CONSOLE_FORMAT, enqueue=False)

    if config.log_file:
        logger.add(
            config.log_file,
            level=level,
            format=_FILE_FORMAT,
            rotation="10 MB",
            retention=5,
            encoding="utf-8",
        )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)


setup_logger()

__all__ = ["logger", "setup_logger", "InterceptHandler"]
