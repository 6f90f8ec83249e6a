"""配置模块测试 -- 环境变量覆盖与非法值降级"""

import pytest
from taskhub.core import config


class TestConfig:
    def test_default_db_path(self):
        assert config.get_db_path().endswith("sqlite/taskhub.db")

    def test_db_path_override(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("TASKHUB_DB_PATH", "/tmp/custom.db")
        assert config.get_db_path() == "/tmp/custom.db"

    def test_data_dir_override(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("TASKHUB_DATA_DIR", "/srv/taskhub")
        assert config.get_db_path() == "/srv/taskhub/sqlite/taskhub.db"

    def test_int_from_env(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("TASKHUB_TEST_INT", "42")
        assert config._int_from_env("TASKHUB_TEST_INT", 7) == 42

    def test_invalid_int_falls_back(self, monkeypatch: pytest.MonkeyPatch):
        """非法值不阻塞启动，回退默认值"""
        monkeypatch.setenv("TASKHUB_TEST_INT", "many")
        assert config._int_from_env("TASKHUB_TEST_INT", 7) == 7

    def test_unset_int_uses_default(self):
        assert config._int_from_env("TASKHUB_NOT_SET_ANYWHERE", 3) == 3

    def test_documented_defaults(self):
        assert config.TITLE_MAX_LENGTH == 120
        assert config.IDEMPOTENCY_TTL_SECONDS == 24 * 60 * 60
