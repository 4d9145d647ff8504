"""
服务器配置
从环境变量或 .env 文件加载配置
"""

import os
from pathlib import Path

# 尝试加载 .env 文件
try:
    from dotenv import load_dotenv

    env_file = Path(".env")
    if env_file.exists():
        load_dotenv(env_file)
except ImportError:
    # 如果没有安装 python-dotenv，仍然可以从环境变量读取
    pass

from src.config.constants import DEFAULT_USER_AGENT
from src.core.enums import RefreshStrategy


class Config:
    def __init__(self) -> None:
        # 服务器配置
        self.host = os.getenv("HOST", "0.0.0.0")
        self.port = int(os.getenv("PORT", "8080"))
        self.log_level = os.getenv("LOG_LEVEL", "INFO")
        self.log_file = os.getenv("LOG_FILE", "")

        # TLS 指纹配置，未设置时使用基线指纹
        self.client_profile = os.getenv("CLIENT_PROFILE", "")

        # 上游请求 User-Agent
        self.user_agent = os.getenv("UA") or DEFAULT_USER_AGENT

        # 出站代理（仅用于共享代理客户端和刷新令牌请求）
        self.proxy_url = os.getenv("PROXY", "")

        # 显式指定的设备 ID，设置后不再派生
        self.device_id = os.getenv("OPENAI_DEVICE_ID", "")

        # 认证材料，按优先级: 账号密码 > 刷新令牌 > 静态值
        self.openai_email = os.getenv("OPENAI_EMAIL", "")
        self.openai_password = os.getenv("OPENAI_PASSWORD", "")
        self.refresh_token = os.getenv("OPENAI_REFRESH_TOKEN", "")
        self.puid = os.getenv("PUID", "")
        self.imitate_access_token = os.getenv("IMITATE_ACCESS_TOKEN", "")

    def refresh_strategy(self) -> RefreshStrategy:
        """
        根据已配置的认证材料选择凭证刷新策略

        未配置任何认证材料时退化为静态策略（值为空），不视为错误
        """
        if self.openai_email and self.openai_password:
            return RefreshStrategy.PASSWORD
        if self.refresh_token:
            return RefreshStrategy.REFRESH_TOKEN
        return RefreshStrategy.STATIC

    def log_startup_warnings(self) -> None:
        """
        记录启动时的配置提示
        这个方法应该在 logger 初始化后调用
        """
        from src.core.logger import logger

        strategy = self.refresh_strategy()
        logger.info(f"凭证刷新策略: {strategy.value}")

        if strategy == RefreshStrategy.STATIC and not (self.puid or self.imitate_access_token):
            logger.warning(
                "未配置 OPENAI_EMAIL/OPENAI_PASSWORD、OPENAI_REFRESH_TOKEN 或 IMITATE_ACCESS_TOKEN，"
                "将仅使用调用方提供的令牌"
            )

        if self.openai_email and not self.openai_password:
            logger.warning("设置了 OPENAI_EMAIL 但缺少 OPENAI_PASSWORD，账号密码登录不会启用")

    def __repr__(self):
        """配置信息字符串表示"""
        return f"""
Configuration:
  Server: {self.host}:{self.port}
  Log Level: {self.log_level}
  Client Profile: {self.client_profile or "(default)"}
  Proxy: {self.proxy_url or "(direct)"}
  Refresh Strategy: {self.refresh_strategy().value}
"""


# 创建全局配置实例
config = Config()
