"""
TLS 指纹（impersonate）配置解析

CLIENT_PROFILE 既可以填写 curl_cffi 的 impersonate 目标名，
也可以填写常见的 tls-client 风格名称（如 chrome_120、safari_ios_17_0），
后者会映射到最接近的 curl_cffi 目标。
"""

from __future__ import annotations

from src.config.constants import Messages
from src.core.logger import logger

# 未配置时的基线指纹（移动端客户端）
BASELINE_CLIENT_PROFILE = "chrome99_android"

# 配置了无法识别的名称时使用的默认指纹
DEFAULT_CLIENT_PROFILE = "chrome124"

MAPPED_CLIENT_PROFILES: dict[str, str] = {
    # curl_cffi 原生目标
    "chrome99": "chrome99",
    "chrome100": "chrome100",
    "chrome101": "chrome101",
    "chrome104": "chrome104",
    "chrome107": "chrome107",
    "chrome110": "chrome110",
    "chrome116": "chrome116",
    "chrome119": "chrome119",
    "chrome120": "chrome120",
    "chrome123": "chrome123",
    "chrome124": "chrome124",
    "chrome99_android": "chrome99_android",
    "edge99": "edge99",
    "edge101": "edge101",
    "safari15_3": "safari15_3",
    "safari15_5": "safari15_5",
    "safari17_0": "safari17_0",
    "safari17_2_ios": "safari17_2_ios",
    # tls-client 风格名称
    "chrome_103": "chrome104",
    "chrome_104": "chrome104",
    "chrome_105": "chrome107",
    "chrome_106": "chrome107",
    "chrome_107": "chrome107",
    "chrome_108": "chrome110",
    "chrome_109": "chrome110",
    "chrome_110": "chrome110",
    "chrome_111": "chrome110",
    "chrome_112": "chrome110",
    "chrome_116_PSK": "chrome116",
    "chrome_116_PSK_PQ": "chrome116",
    "chrome_117": "chrome116",
    "chrome_120": "chrome120",
    "chrome_124": "chrome124",
    "safari_15_6_1": "safari15_5",
    "safari_16_0": "safari15_5",
    "safari_ios_15_5": "safari15_5",
    "safari_ios_15_6": "safari15_5",
    "safari_ios_16_0": "safari17_0",
    "safari_ios_17_0": "safari17_2_ios",
    "okhttp4_android_7": "chrome99_android",
    "okhttp4_android_8": "chrome99_android",
    "okhttp4_android_9": "chrome99_android",
    "okhttp4_android_10": "chrome99_android",
    "okhttp4_android_11": "chrome99_android",
    "okhttp4_android_12": "chrome99_android",
    "okhttp4_android_13": "chrome99_android",
}


def resolve_client_profile(name: str | None) -> str:
    """
    解析 TLS 指纹名称

    Args:
        name: 配置的指纹名称，为空时使用基线指纹

    Returns:
        curl_cffi impersonate 目标名
    """
    raw = (name or "").strip()
    if not raw:
        return BASELINE_CLIENT_PROFILE

    profile = MAPPED_CLIENT_PROFILES.get(raw)
    if profile is not None:
        logger.info(Messages.CLIENT_PROFILE_USED.format(raw))
        return profile

    logger.info(Messages.CLIENT_PROFILE_DEFAULT)
    return DEFAULT_CLIENT_PROFILE
