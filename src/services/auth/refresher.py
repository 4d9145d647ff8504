"""
凭证刷新循环

启动时按配置选择一种策略（互斥）：
- password: 账号密码登录换取访问令牌，每 7 天重复
- refresh_token: 刷新令牌换取访问令牌，每 7 天重复
- static: 从环境变量读取 PUID 与访问令牌，不刷新

取得访问令牌后派生 PUID；PUID 失败只告警并保留旧值。
取得访问令牌失败则循环永久终止（不重试），代理继续使用现有凭证服务。
"""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Optional, Protocol

from src.config import Config
from src.config.constants import REFRESH_INTERVAL_SECONDS, Messages
from src.core.enums import RefreshStatus, RefreshStrategy
from src.core.exceptions import AuthFlowError
from src.core.logger import logger
from src.services.auth.credentials import CredentialStore
from src.services.auth.openai_auth import OpenAIAuthenticator
from src.services.auth.puid import get_puid
from src.services.auth.token_refresh import refresh_access_token


class Authenticator(Protocol):
    async def begin(self) -> None: ...

    def get_access_token(self) -> str: ...


AuthenticatorFactory = Callable[..., Authenticator]
TokenExchanger = Callable[..., Awaitable[str]]
PuidFetcher = Callable[..., Awaitable[str]]
Sleeper = Callable[[float], Awaitable[Any]]


class CredentialRefresher:
    """后台凭证刷新任务（fire-and-forget，终止状态可观测）"""

    def __init__(
        self,
        config: Config,
        store: CredentialStore,
        *,
        authenticator_factory: AuthenticatorFactory = OpenAIAuthenticator,
        token_exchanger: TokenExchanger = refresh_access_token,
        puid_fetcher: PuidFetcher = get_puid,
        sleep: Sleeper = asyncio.sleep,
        interval: float = REFRESH_INTERVAL_SECONDS,
    ) -> None:
        self.config = config
        self.store = store
        self.strategy = config.refresh_strategy()
        self.status = RefreshStatus.PENDING
        self.terminated = asyncio.Event()
        self.attempts = 0

        self._authenticator_factory = authenticator_factory
        self._token_exchanger = token_exchanger
        self._puid_fetcher = puid_fetcher
        self._sleep = sleep
        self._interval = interval
        self._task: Optional[asyncio.Task[None]] = None

    def load_static(self) -> None:
        """静态策略：同步写入环境变量中的 PUID 与访问令牌"""
        if self.strategy != RefreshStrategy.STATIC:
            return
        self.store.update(
            access_token=self.config.imitate_access_token,
            puid=self.config.puid,
        )

    def start(self) -> None:
        """启动后台刷新任务；静态策略不创建任务"""
        if self.strategy == RefreshStrategy.STATIC:
            self.status = RefreshStatus.STATIC
            logger.info("使用静态凭证，不启动刷新循环")
            return

        if self._task is not None:
            return

        self.status = RefreshStatus.RUNNING
        self._task = asyncio.create_task(self.run(), name="credential-refresher")
        logger.info(f"凭证刷新循环已启动: strategy={self.strategy.value}")

    async def stop(self) -> None:
        """应用关闭时取消后台任务"""
        task, self._task = self._task, None
        if task is None or task.done():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def wait_terminated(self) -> None:
        await self.terminated.wait()

    async def run(self) -> None:
        try:
            while True:
                access_token = await self._obtain_access_token()
                if not access_token:
                    break

                await self._refresh_puid(access_token)
                self.store.update(access_token=access_token)

                await self._sleep(self._interval)
        except asyncio.CancelledError:
            logger.debug("凭证刷新循环已取消")
            raise
        except Exception:
            logger.exception("凭证刷新循环异常退出")

        self._mark_terminated()

    async def _obtain_access_token(self) -> str:
        self.attempts += 1

        if self.strategy == RefreshStrategy.PASSWORD:
            authenticator = self._authenticator_factory(
                self.config.openai_email,
                self.config.openai_password,
                self.config.proxy_url,
                user_agent=self.config.user_agent,
            )
            try:
                await authenticator.begin()
            except AuthFlowError as e:
                logger.warning(f"{Messages.REFRESH_PUID_FAILED}: {e.details}")
                return ""

            access_token = authenticator.get_access_token()
            if not access_token:
                logger.error(Messages.REFRESH_PUID_FAILED)
                return ""
            return access_token

        access_token = await self._token_exchanger(
            self.config.refresh_token, user_agent=self.config.user_agent
        )
        if not access_token:
            logger.error(Messages.REFRESH_PUID_FAILED)
            return ""
        logger.info("accessToken is updated")
        return access_token

    async def _refresh_puid(self, access_token: str) -> None:
        puid = await self._puid_fetcher(
            access_token,
            device_id=self.store.device_id,
            user_agent=self.config.user_agent,
        )
        if not puid:
            logger.warning(Messages.REFRESH_PUID_FAILED)
            return

        self.store.update(puid=puid)
        logger.info("PUID is updated")

    def _mark_terminated(self) -> None:
        self.status = RefreshStatus.TERMINATED
        self.terminated.set()
        logger.error(f"凭证刷新循环已终止: strategy={self.strategy.value}，将继续使用现有凭证")
