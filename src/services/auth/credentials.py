"""
进程级凭证存储

单写者（刷新循环）、多读者（代理处理器 / 认证中间件）。
状态为不可变快照，写入时整体替换，读者不会看到写了一半的值。
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, replace
from typing import Optional


@dataclass(frozen=True)
class CredentialState:
    access_token: str = ""
    puid: str = ""
    device_id: str = ""


class CredentialStore:
    """线程安全的凭证持有者"""

    def __init__(self, initial: Optional[CredentialState] = None) -> None:
        self._state = initial or CredentialState()
        self._lock = threading.Lock()

    def snapshot(self) -> CredentialState:
        with self._lock:
            return self._state

    @property
    def access_token(self) -> str:
        return self.snapshot().access_token

    @property
    def puid(self) -> str:
        return self.snapshot().puid

    @property
    def device_id(self) -> str:
        return self.snapshot().device_id

    def update(
        self,
        *,
        access_token: Optional[str] = None,
        puid: Optional[str] = None,
    ) -> CredentialState:
        """更新访问令牌和/或 PUID，None 表示保持原值"""
        changes: dict[str, str] = {}
        if access_token is not None:
            changes["access_token"] = access_token
        if puid is not None:
            changes["puid"] = puid

        with self._lock:
            if changes:
                self._state = replace(self._state, **changes)
            return self._state

    def set_device_id(self, device_id: str) -> None:
        with self._lock:
            self._state = replace(self._state, device_id=device_id)
