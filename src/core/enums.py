"""
统一的枚举定义
避免重复定义造成的不一致
"""

from enum import Enum


class RefreshStrategy(str, Enum):
    """凭证刷新策略（启动时确定，互斥）"""

    PASSWORD = "password"  # 账号密码登录
    REFRESH_TOKEN = "refresh_token"  # 刷新令牌换取访问令牌
    STATIC = "static"  # 环境变量静态值，不刷新


class RefreshStatus(str, Enum):
    """刷新循环状态"""

    PENDING = "pending"  # 尚未启动
    RUNNING = "running"
    STATIC = "static"  # 静态策略，无循环
    TERMINATED = "terminated"  # 认证失败后永久终止
