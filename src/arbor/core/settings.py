"""
Centralized settings for arbor.

One validated, cached settings object replaces ad-hoc environment parsing.
All fields can be set through ``ARBOR_*`` environment variables (e.g.
``ARBOR_HOST=http://localhost:8080``) or a ``.env`` file; CLI options
override them per invocation.

Tags:
    arbor, configuration, settings, pydantic, caching, validation
"""

from __future__ import annotations

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from arbor.core.errors import ConfigError


class ArborSettings(BaseSettings):
    """arbor centralized configuration."""

    model_config = SettingsConfigDict(
        env_prefix="ARBOR_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Target ───────────────────────────────────────────────────
    host: str = Field(default="http://localhost:8080", description="Base URL of the API under test")
    request_timeout: float = Field(default=30.0, gt=0, description="Per-request transport timeout (seconds)")

    # ── Data ─────────────────────────────────────────────────────
    data_dirs: list[str] = Field(default_factory=list, description="Data roots, one suite per root")

    # ── Scheduling ───────────────────────────────────────────────
    workers: int = Field(default=1, ge=1, description="Worker threads; one data root runs one leaf at a time")
    randomize: bool = Field(default=False, description="Shuffle leaf order")
    seed: int | None = Field(default=None, description="Seed used when randomize is set")

    # ── Eventually defaults ──────────────────────────────────────
    eventually_timeout: float = Field(default=1.0, gt=0, description="Default polling window (seconds)")
    eventually_interval: float = Field(default=0.1, gt=0, description="Default poll interval (seconds)")

    # ── Logging ──────────────────────────────────────────────────
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="console")

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        value = value.upper()
        if value not in {"DEBUG", "INFO", "WARNING", "ERROR"}:
            raise ValueError(f"unsupported log level: {value}")
        return value

    @field_validator("log_format")
    @classmethod
    def _known_format(cls, value: str) -> str:
        value = value.lower()
        if value not in {"json", "console"}:
            raise ValueError(f"unsupported log format: {value}")
        return value

    @property
    def json_logs(self) -> bool:
        return self.log_format == "json"


# ── Settings factory with caching ────────────────────────────────────────

_settings_cache: dict[str, ArborSettings] = {}


def _load(**overrides: object) -> ArborSettings:
    try:
        return ArborSettings(**overrides)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(map(str, err['loc']))}: {err['msg']}"
            for err in e.errors()
        )
        raise ConfigError(f"invalid settings: {problems}", cause=e)


def get_settings(*, _force_reload: bool = False, **overrides: object) -> ArborSettings:
    """Load, validate, and cache an :class:`ArborSettings` instance.

    Overrides bypass the cache; they are how the CLI layers its options on
    top of the environment.

    Raises:
        ConfigError: The environment or an override failed validation
    """
    if overrides:
        return _load(**overrides)
    if _force_reload or "default" not in _settings_cache:
        _settings_cache["default"] = _load()
    return _settings_cache["default"]


def clear_settings_cache() -> None:
    """Drop the cached settings (for testing)."""
    _settings_cache.clear()


__all__ = ["ArborSettings", "get_settings", "clear_settings_cache"]
