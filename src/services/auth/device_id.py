"""设备 ID（oai-did）派生"""

from __future__ import annotations

import uuid

from src.config.constants import DEVICE_ID_NAMESPACE

_NAMESPACE = uuid.UUID(DEVICE_ID_NAMESPACE)


def derive_device_id(
    explicit: str = "",
    *,
    username: str = "",
    refresh_token: str = "",
    access_token: str = "",
) -> str:
    """
    派生稳定的设备 ID

    显式配置的 ID 原样返回；否则以 UUIDv5（固定命名空间）对种子做哈希。
    种子优先级: 用户名 > 刷新令牌 > 访问令牌 > 随机 UUID。
    同一种子在重启后得到同一 ID，上游风控依赖这一点。
    """
    if explicit:
        return explicit

    seed = username or refresh_token or access_token or str(uuid.uuid4())
    return str(uuid.uuid5(_NAMESPACE, seed))
