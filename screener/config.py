"""Application configuration via pydantic-settings.

Values are read from ``SCREENER_*`` environment variables (or a .env file).
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_ROOT_DIR = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    """Screener settings.

    Usage:
        from screener.config import settings
        settings.config_path
        settings.max_group_depth
    """

    model_config = SettingsConfigDict(env_file=".env", env_prefix="SCREENER_", extra="ignore")

    environment: str = Field(default="development")
    log_level: str = Field(default="INFO")
    config_path: Path = Field(
        default=_ROOT_DIR / "data" / "eligibility_config.json",
        description="Rule configuration loaded by load_default_model()",
    )
    max_group_depth: int = Field(
        default=32,
        ge=1,
        description="Deepest allowed nesting of criteria groups; deeper configs are rejected as cyclic",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure log level is valid."""
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid:
            msg = f"Invalid log level: {v}. Must be one of {valid}"
            raise ValueError(msg)
        return upper

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"


# Module-level singleton, import this wherever settings are needed.
settings = Settings()
