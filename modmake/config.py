"""Build configuration loaded from environment variables.

Uses ``pydantic-settings`` for env-var loading, type coercion, and ``.env``
file support.  A ``Settings`` instance is created once at the command-line
boundary and handed to ``Make``, ``build_project`` and ``Executor``
explicitly; nothing below the CLI reads process-wide state.
"""

from __future__ import annotations

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

VERSION = "1.0.0"

DEFAULT_TOOLS: tuple[str, ...] = ("javac", "jar", "javadoc")


class Settings(BaseSettings):
    """Build settings, sourced from ``MODMAKE_*`` environment / ``.env`` file."""

    model_config = SettingsConfigDict(
        env_prefix="MODMAKE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    DEBUG: bool = False
    DRY_RUN: bool = False
    LOG_LEVEL: str = "INFO"

    # -- project properties --
    PROJECT_NAME: str = ""  # blank: last segment of the base directory
    PROJECT_VERSION: str = "1-ea"

    # Feature number of the Java runtime targeted by multi-release builds.
    # Unset: parsed from ``javac --version`` when first needed.
    RELEASE: int | None = Field(default=None, ge=6)

    MAX_WORKERS: int = Field(default=4, ge=1)
    TOOL_TIMEOUT_S: int = Field(default=600, ge=1)

    # External tool names probed on PATH.
    TOOLS: list[str] = Field(default_factory=lambda: list(DEFAULT_TOOLS))

    @field_validator("LOG_LEVEL")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.strip().upper()

    @property
    def effective_log_level(self) -> str:
        return "DEBUG" if self.DEBUG else self.LOG_LEVEL


def load_settings(**overrides) -> Settings:
    """Create settings from the environment, with keyword overrides on top."""
    return Settings(**overrides)
