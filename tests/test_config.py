"""Tests for application settings."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from screener.config import Settings


class TestSettings:
    """SCREENER_* environment overrides and field validation."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("SCREENER_MAX_GROUP_DEPTH", raising=False)
        monkeypatch.delenv("SCREENER_CONFIG_PATH", raising=False)
        settings = Settings(_env_file=None)
        assert settings.max_group_depth == 32
        assert settings.config_path.name == "eligibility_config.json"
        assert settings.config_path.exists()

    def test_env_override(self, monkeypatch, tmp_path):
        monkeypatch.setenv("SCREENER_MAX_GROUP_DEPTH", "4")
        monkeypatch.setenv("SCREENER_CONFIG_PATH", str(tmp_path / "rules.json"))
        monkeypatch.setenv("SCREENER_ENVIRONMENT", "production")
        settings = Settings(_env_file=None)
        assert settings.max_group_depth == 4
        assert settings.config_path == Path(tmp_path / "rules.json")
        assert settings.is_production

    def test_log_level_normalized(self):
        assert Settings(_env_file=None, log_level="debug").log_level == "DEBUG"

    def test_invalid_log_level(self):
        with pytest.raises(ValidationError, match="Invalid log level"):
            Settings(_env_file=None, log_level="LOUD")

    def test_group_depth_must_be_positive(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, max_group_depth=0)
