"""设备 ID 派生测试"""

import uuid

from src.config.constants import DEVICE_ID_NAMESPACE
from src.services.auth.device_id import derive_device_id


class TestDeriveDeviceId:
    def test_same_seed_same_id(self) -> None:
        """同一种子多次派生结果一致"""
        for seed in ("user@example.com", "rt-123", "", "中文种子"):
            first = derive_device_id(username=seed, refresh_token="fallback")
            second = derive_device_id(username=seed, refresh_token="fallback")
            assert first == second

    def test_matches_uuid5_with_fixed_namespace(self) -> None:
        expected = uuid.uuid5(uuid.UUID(DEVICE_ID_NAMESPACE), "user@example.com")
        assert derive_device_id(username="user@example.com") == str(expected)

    def test_explicit_id_used_verbatim(self) -> None:
        assert derive_device_id("my-device", username="user@example.com") == "my-device"

    def test_seed_priority(self) -> None:
        """用户名 > 刷新令牌 > 访问令牌"""
        ns = uuid.UUID(DEVICE_ID_NAMESPACE)

        assert derive_device_id(
            username="u", refresh_token="r", access_token="a"
        ) == str(uuid.uuid5(ns, "u"))
        assert derive_device_id(refresh_token="r", access_token="a") == str(uuid.uuid5(ns, "r"))
        assert derive_device_id(access_token="a") == str(uuid.uuid5(ns, "a"))

    def test_random_seed_when_nothing_configured(self) -> None:
        first = derive_device_id()
        second = derive_device_id()

        assert uuid.UUID(first).version == 5
        assert first != second
