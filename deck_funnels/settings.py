"""
Module: settings

Purpose: Centralized configuration management for funnel chart rendering.

Key Functions:
- Settings: Pydantic settings model with validation
- get_settings: Load settings from environment variables (cached)
- load_settings: Load settings from a YAML file, environment overriding it
- configure_logging: Apply the configured log level

Architecture Notes:
- Uses pydantic-settings for type-safe configuration
- All settings have sensible defaults so a deck renders with no config
- Environment variables (prefix FUNNEL_) override file values
"""

import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


ColorPolicy = Literal["palette", "random"]


class Settings(BaseSettings):
    """Runtime configuration for data resolution and chart lifecycle."""

    model_config = SettingsConfigDict(
        env_prefix="FUNNEL_",
        extra="ignore",
    )

    # Data sources
    data_base_url: str | None = None  # e.g. "https://example.org/deck/"
    data_dir: Path = Path(".")  # Root holding data/json and data/csv
    json_path_template: str = "data/json/{id}.json"
    csv_path_template: str = "data/csv/{id}.csv"
    fetch_timeout_s: float = Field(default=10.0, gt=0)

    # Container discovery
    container_prefix: str = "funnel-"
    default_data_source: str = "default"

    # Layout
    vertical_breakpoint: int = Field(default=768, ge=0)
    viewport_width: int = Field(default=1280, gt=0)
    viewport_height: int = Field(default=720, gt=0)
    animation_duration_ms: int = Field(default=1000, ge=0)

    # Color synthesis for sources without colors
    color_policy: ColorPolicy = "palette"
    color_seed: int | None = None

    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value}")
        return level

    @field_validator("container_prefix")
    @classmethod
    def _require_prefix(cls, value: str) -> str:
        if not value:
            raise ValueError("container_prefix must not be empty")
        return value


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get settings from the environment (cached for the process)."""
    return Settings()


def load_settings(path: Path | str | None = None, **overrides: Any) -> Settings:
    """Load settings from a YAML file.

    Expected YAML format:
    ```yaml
    funnels:
      data_dir: examples/deck
      color_policy: random
      vertical_breakpoint: 768
    ```

    A top-level ``funnels`` key is optional. Environment variables take
    precedence over file values; keyword overrides take precedence over both.

    Args:
        path: Path to the YAML config file, or None for env/defaults only
        **overrides: Explicit values (e.g. from CLI flags)

    Returns:
        Validated Settings

    Raises:
        FileNotFoundError: If the config file doesn't exist
        yaml.YAMLError: If the YAML is invalid
    """
    file_values: dict[str, Any] = {}

    if path is not None:
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            logger.warning(f"Invalid config file {path}, expected a mapping")
            data = {}
        file_values = data.get("funnels", data)
        if not isinstance(file_values, dict):
            logger.warning(f"Invalid 'funnels' section in {path}, expected a mapping")
            file_values = {}

    # Precedence: overrides > environment > file > defaults
    env_settings = Settings()
    values = dict(file_values)
    values.update(env_settings.model_dump(include=env_settings.model_fields_set))
    values.update({k: v for k, v in overrides.items() if v is not None})

    return Settings(**values)


def configure_logging(settings: Settings | None = None, *, verbose: bool = False) -> None:
    """Configure root logging for scripts.

    Args:
        settings: Settings providing the log level (defaults to get_settings())
        verbose: Force DEBUG level
    """
    settings = settings or get_settings()
    level = logging.DEBUG if verbose else getattr(logging, settings.log_level)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
    )
