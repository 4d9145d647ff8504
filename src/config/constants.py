# Constants for better maintainability
# ==============================================================================
# 路由与上游地址
# ==============================================================================


class Routes:
    """入站路由前缀与对应的上游地址"""

    CHATGPT_PREFIX = "/chatgpt"
    IMITATE_PREFIX = "/imitate/v1"
    PLATFORM_PREFIX = "/platform"

    CHATGPT_URL = "https://chatgpt.com"
    IMITATE_URL = CHATGPT_URL + "/backend-api"
    PLATFORM_URL = "https://api.openai.com"


# ==============================================================================
# 请求头
# ==============================================================================


class Headers:
    """注入到上游请求中的头部名称"""

    AUTHORIZATION = "Authorization"
    X_AUTHORIZATION = "X-Authorization"
    X_EMAIL = "X-Email"
    USER_AGENT = "User-Agent"
    LANGUAGE = "Oai-Language"
    DEVICE_ID = "Oai-Device-Id"
    COOKIE = "Cookie"
    CONTENT_TYPE = "Content-Type"


BEARER_PREFIX = "Bearer"
LANGUAGE = "en-US"
DEVICE_ID_COOKIE = "oai-did"
PUID_COOKIE = "_puid"

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/126.0.0.0 Safari/537.36 Edg/126.0.0.0"
)


# ==============================================================================
# 超时与刷新周期
# ==============================================================================


class Timeouts:
    """HTTP 超时配置（秒）"""

    # 共享代理客户端 - 需要覆盖长时间的流式响应
    PROXY = 600.0

    # 认证/刷新等一次性请求
    AUTH = 30.0


# 凭证刷新周期：7 天，无抖动、无退避
REFRESH_INTERVAL_SECONDS = 7 * 24 * 60 * 60


# ==============================================================================
# 认证相关
# ==============================================================================


class OpenAIAuth:
    """OpenAI 登录 / 刷新令牌端点"""

    AUTH0_URL = "https://auth0.openai.com"
    TOKEN_URL = AUTH0_URL + "/oauth/token"
    LOGIN_USERNAME_URL = AUTH0_URL + "/u/login/identifier?state="
    LOGIN_PASSWORD_URL = AUTH0_URL + "/u/login/password?state="

    CSRF_URL = Routes.CHATGPT_URL + "/api/auth/csrf"
    SIGNIN_URL = Routes.CHATGPT_URL + "/api/auth/signin/login-web?prompt=login"
    SESSION_URL = Routes.CHATGPT_URL + "/api/auth/session"

    CLIENT_ID = "pdlLIX2Y72MIl2rhLhTE9VV9bN905kBh"
    REDIRECT_URI = "com.openai.chat://auth0.openai.com/ios/com.openai.chat/callback"

    MODELS_URL = Routes.IMITATE_URL + "/models?history_and_training_disabled=false"


# 设备 ID 命名空间（UUIDv5），上游风控依赖其稳定性，不可修改
DEVICE_ID_NAMESPACE = "12345678-1234-5678-1234-567812345678"


# ==============================================================================
# 消息文本
# ==============================================================================


class Messages:
    """日志与错误信息"""

    ERROR_MESSAGE_KEY = "errorMessage"

    READY_HINT = "service chatgpt-gateway is ready"
    ACCOUNT_DEACTIVATED = "account {} is deactivated"
    REFRESH_PUID_FAILED = "failed to refresh PUID"

    CLIENT_PROFILE_USED = "ClientProfile: {} is used"
    CLIENT_PROFILE_DEFAULT = "Using default ClientProfile"

    GET_AUTHORIZED_URL_FAILED = "failed to get authorized url"
    EMAIL_INVALID = "email is not valid"
    EMAIL_OR_PASSWORD_INVALID = "email or password is not correct"
    GET_ACCESS_TOKEN_FAILED = "failed to get access token"
