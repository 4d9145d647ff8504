"""代理路径改写与认证头工具函数"""

from __future__ import annotations

from src.config.constants import BEARER_PREFIX, Routes


def translate_path(path: str) -> str:
    """
    将入站路径改写为上游地址

    - /chatgpt/*     -> https://chatgpt.com/*
    - /imitate/v1/*  -> https://chatgpt.com/backend-api/*
    - /platform/* 及其他 -> https://api.openai.com/*
    """
    if _has_prefix(path, Routes.CHATGPT_PREFIX):
        return Routes.CHATGPT_URL + path[len(Routes.CHATGPT_PREFIX) :]
    if _has_prefix(path, Routes.IMITATE_PREFIX):
        return Routes.IMITATE_URL + path[len(Routes.IMITATE_PREFIX) :]
    if _has_prefix(path, Routes.PLATFORM_PREFIX):
        return Routes.PLATFORM_URL + path[len(Routes.PLATFORM_PREFIX) :]
    # 未识别的前缀统一按 platform 处理，404 由路由层负责
    return Routes.PLATFORM_URL + path


def build_upstream_url(path: str, query: str = "") -> str:
    """改写路径并保留原始查询串"""
    url = translate_path(path)
    if query:
        url += "?" + query
    return url


def get_access_token(value: str | None) -> str:
    """补全 Bearer 前缀（已带前缀则原样返回）"""
    token = value or ""
    if not token.startswith(BEARER_PREFIX):
        return f"{BEARER_PREFIX} {token}"
    return token


def _has_prefix(path: str, prefix: str) -> bool:
    return path == prefix or path.startswith(prefix + "/")
