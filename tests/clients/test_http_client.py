"""HTTP 客户端工厂测试"""

from unittest.mock import patch

import pytest

from src.clients.http_client import HTTPClientPool, create_client


@pytest.fixture(autouse=True)
def _reset_pool():
    HTTPClientPool.configure("chrome124", "http://proxy.local:8080")
    HTTPClientPool._default_client = None
    yield
    HTTPClientPool._default_client = None


class TestCreateClient:
    def test_curl_transport_carries_profile_and_proxy(self) -> None:
        pytest.importorskip("curl_cffi")
        from src.clients.curl_cffi_transport import CurlCffiTransport

        client = create_client(True, profile="safari15_5", proxy_url="http://p:1")
        transport = client._transport

        assert isinstance(transport, CurlCffiTransport)
        assert transport._impersonate == "safari15_5"
        assert transport._proxy == "http://p:1"

    def test_without_proxy_flag_ignores_proxy_url(self) -> None:
        pytest.importorskip("curl_cffi")

        client = create_client(False, profile="chrome124", proxy_url="http://p:1")

        assert client._transport._proxy is None

    def test_fallback_without_curl_cffi(self, log_messages) -> None:
        with patch("src.clients.http_client.CURL_CFFI_AVAILABLE", False):
            client = create_client(False, profile="chrome124")

        assert client.timeout.read == 30.0
        assert any("curl_cffi" in m for m in log_messages)


class TestHTTPClientPool:
    @pytest.mark.asyncio
    async def test_default_client_is_shared_with_long_timeout(self) -> None:
        first = HTTPClientPool.get_default_client()
        second = HTTPClientPool.get_default_client()

        assert first is second
        assert first.timeout.read == 600.0

        await HTTPClientPool.close_all()
        assert first.is_closed

    @pytest.mark.asyncio
    async def test_temp_clients_are_isolated_and_closed(self) -> None:
        async with HTTPClientPool.get_temp_client(with_proxy=False) as one:
            one.cookies.set("a", "1", domain="chatgpt.com")
            async with HTTPClientPool.get_temp_client(with_proxy=False) as two:
                assert two.cookies.get("a") is None

        assert one.is_closed
        assert two.is_closed

    @pytest.mark.asyncio
    async def test_temp_client_construction_failure_propagates(self, log_messages) -> None:
        with patch(
            "src.clients.http_client.create_client", side_effect=RuntimeError("no tls")
        ):
            with pytest.raises(RuntimeError):
                async with HTTPClientPool.get_temp_client():
                    pass

        assert any("no tls" in m for m in log_messages)
