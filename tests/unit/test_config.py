"""配置加载测试"""

from src.config.constants import DEFAULT_USER_AGENT
from src.core.enums import RefreshStrategy


class TestConfig:
    def test_defaults(self, make_config) -> None:
        cfg = make_config()

        assert cfg.user_agent == DEFAULT_USER_AGENT
        assert cfg.proxy_url == ""
        assert cfg.client_profile == ""
        assert cfg.refresh_strategy() == RefreshStrategy.STATIC

    def test_environment_overrides(self, make_config) -> None:
        cfg = make_config(UA="ua-1", PROXY="socks5://127.0.0.1:1080", CLIENT_PROFILE="chrome_120")

        assert cfg.user_agent == "ua-1"
        assert cfg.proxy_url == "socks5://127.0.0.1:1080"
        assert cfg.client_profile == "chrome_120"

    def test_email_without_password_is_not_password_strategy(self, make_config, log_messages) -> None:
        cfg = make_config(OPENAI_EMAIL="a@b.c")

        assert cfg.refresh_strategy() == RefreshStrategy.STATIC
        cfg.log_startup_warnings()
        assert any("OPENAI_PASSWORD" in m for m in log_messages)

    def test_missing_credentials_warning(self, make_config, log_messages) -> None:
        make_config().log_startup_warnings()

        assert any("IMITATE_ACCESS_TOKEN" in m for m in log_messages)
