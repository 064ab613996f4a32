"""
Settings Tests
"""

from pathlib import Path

import pytest
from pydantic import ValidationError

from conditional_count.app.config import Settings, get_settings


class TestSettings:

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("SEARCH_BACKEND_URL", raising=False)
        monkeypatch.delenv("ENVIRONMENT", raising=False)

        settings = Settings(_env_file=None)

        assert settings.search_backend_url == "http://localhost:9200"
        assert settings.search_index_pattern == "graylog_*"
        assert settings.search_timestamp_field == "timestamp"
        assert settings.alerts_config_path == Path("./configs")
        assert settings.default_window_minutes == 5
        assert settings.default_threshold == 0
        assert settings.is_production() is False

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("SEARCH_INDEX_PREFIX", "logs")
        monkeypatch.setenv("ENVIRONMENT", "production")
        monkeypatch.setenv("SEARCH_TIMEOUT_SECONDS", "2.5")

        settings = Settings(_env_file=None)

        assert settings.search_index_pattern == "logs_*"
        assert settings.is_production() is True
        assert settings.search_timeout_seconds == 2.5

    def test_trailing_slash_is_stripped(self):
        settings = Settings(_env_file=None, search_backend_url="http://search.test:9200/")

        assert settings.search_backend_url == "http://search.test:9200"

    @pytest.mark.parametrize("field,value", [
        ("environment", "qa"),
        ("log_level", "verbose"),
        ("search_timeout_seconds", 0),
        ("default_window_minutes", 0),
    ])
    def test_invalid_values(self, field, value):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, **{field: value})

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()
