from __future__ import annotations

"""Configuration utilities for footflow.

This module defines a hierarchical configuration schema using Pydantic models.
The :class:`Settings` container groups the window, metrics, selection, feed
and logging sections.  Instances can be populated from environment variables
(``FOOTFLOW_WINDOW__CAPACITY=12``) or from YAML/JSON files with matching
nested keys.
"""

import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic_settings.sources import EnvSettingsSource

try:  # pragma: no cover - optional dependency
    import yaml  # type: ignore
except Exception:  # pragma: no cover
    yaml = None


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _split_strings(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class SectionModel(BaseModel):
    """Base model for configuration subsections that ignores unknown fields."""

    model_config = ConfigDict(extra="ignore")


# ---------------------------------------------------------------------------
# Settings schema
# ---------------------------------------------------------------------------


class WindowSettings(SectionModel):
    """Live-tail window parameters."""

    capacity: int = Field(default=10, ge=1)


class MetricsSettings(SectionModel):
    """Rounding and scoring parameters for derived metrics."""

    ratio_decimals: int = Field(default=2, ge=0)
    efficiency_decimals: int = Field(default=1, ge=0)
    dwell_target: float = Field(default=180.0, gt=0)
    rank_size: int = Field(default=5, ge=0)


class SelectionSettings(SectionModel):
    """Initial active locations; empty means every location."""

    initial: list[str] = Field(default_factory=list)

    @field_validator("initial", mode="before")
    @classmethod
    def _coerce_names(cls, value: Any) -> Any:
        if isinstance(value, str):
            return _split_strings(value)
        if isinstance(value, (list, tuple)):
            return [str(item) for item in value]
        return value


class FeedSettings(SectionModel):
    """Where offline snapshot files are read from."""

    path: str | None = None


class LoggingSettings(SectionModel):
    """Package logger configuration."""

    level: str = "WARNING"
    format: str = "%(levelname)s:%(name)s:%(message)s"


class Settings(BaseSettings):
    """Container for all runtime configuration sections."""

    window: WindowSettings = Field(default_factory=WindowSettings)
    metrics: MetricsSettings = Field(default_factory=MetricsSettings)
    selection: SelectionSettings = Field(default_factory=SelectionSettings)
    feed: FeedSettings = Field(default_factory=FeedSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    model_config = SettingsConfigDict(
        env_prefix="FOOTFLOW_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        # Allow plain comma separated lists such as
        # FOOTFLOW_SELECTION__INITIAL=Lobby,Gate instead of JSON.
        class LegacyEnvSettingsSource(EnvSettingsSource):
            def decode_complex_value(self, field_name, target_field, value):  # type: ignore[override]
                try:
                    return super().decode_complex_value(field_name, target_field, value)
                except json.JSONDecodeError:
                    return value

        env_settings.__class__ = LegacyEnvSettingsSource
        return init_settings, env_settings, dotenv_settings, file_secret_settings


# ---------------------------------------------------------------------------
# Loading utilities
# ---------------------------------------------------------------------------


def load_settings(path: str | Path) -> Settings:
    """Load settings from a JSON or YAML file."""

    p = Path(path)
    text = p.read_text()
    if p.suffix.lower() in {".yaml", ".yml"}:
        if yaml is None:
            raise RuntimeError("PyYAML is required to load YAML files")
        data = yaml.safe_load(text) or {}
    else:
        data = json.loads(text)
    if not isinstance(data, dict):
        raise TypeError("Configuration file must define a mapping")
    return Settings.model_validate(data)
