"""Tests for application configuration."""

import pytest
from pydantic import ValidationError

from hirescore.core.config import Settings


def make_settings(**overrides) -> Settings:
    return Settings(
        _env_file=None,
        database_url="sqlite+aiosqlite:///./config-test.db",
        ai_api_key="key",
        **overrides,
    )


class TestSettings:
    """Tests for Settings defaults and bounds."""

    def test_defaults(self):
        settings = make_settings()
        assert settings.notification_threshold == 80
        assert settings.extraction_base_delay == 1.5
        assert settings.batch_base_delay == 2.0
        assert settings.batch_inter_file_delay == 1.5
        assert settings.reanalysis_batch_size == 5
        assert settings.match_max_attempts == 3
        assert settings.default_scoring_profile == "standard"

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("NOTIFICATION_THRESHOLD", "65")
        monkeypatch.setenv("BATCH_MAX_ATTEMPTS", "5")
        settings = make_settings()
        assert settings.notification_threshold == 65
        assert settings.batch_max_attempts == 5

    def test_threshold_bounds(self):
        with pytest.raises(ValidationError):
            make_settings(notification_threshold=101)

    def test_batch_size_bounds(self):
        with pytest.raises(ValidationError):
            make_settings(reanalysis_batch_size=0)

    def test_database_url_required(self, monkeypatch):
        monkeypatch.delenv("DATABASE_URL", raising=False)
        with pytest.raises(ValidationError):
            Settings(_env_file=None, ai_api_key="key")
