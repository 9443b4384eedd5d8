"""Settings and logging configuration for prioritylib.

Values come from, in increasing priority: field defaults, a ``.env`` file,
``PRIORITYLIB_*`` environment variables, and finally an optional YAML or
JSON configuration file passed to ``load_settings``.
"""

import json
import logging
from pathlib import Path
from typing import Any, Optional, Union

import yaml
from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from prioritylib.domain.constants import (
    DEFAULT_IMPORTANCE_SCORE,
    IMPORTANT_SCORE_THRESHOLD,
    RATING_K_FACTOR,
    RATING_SCALE,
    URGENT_THRESHOLD_HOURS,
)

logger = logging.getLogger(__name__)

PACKAGE_LOGGER = "prioritylib"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class PrioritySettings(BaseSettings):
    """Runtime configuration for classification, rating and logging."""

    environment: str = Field(
        default="development",
        validation_alias=AliasChoices("PRIORITYLIB_ENV", "env", "environment"),
    )
    log_level: str = Field(
        default="INFO",
        validation_alias=AliasChoices("PRIORITYLIB_LOG_LEVEL", "log_level"),
    )

    default_importance_score: float = Field(
        default=DEFAULT_IMPORTANCE_SCORE,
        validation_alias=AliasChoices("PRIORITYLIB_DEFAULT_IMPORTANCE_SCORE", "default_importance_score"),
    )
    important_score_threshold: float = Field(
        default=IMPORTANT_SCORE_THRESHOLD,
        validation_alias=AliasChoices("PRIORITYLIB_IMPORTANT_THRESHOLD", "important_score_threshold"),
    )
    urgent_threshold_hours: float = Field(
        default=URGENT_THRESHOLD_HOURS,
        validation_alias=AliasChoices("PRIORITYLIB_URGENT_HOURS", "urgent_threshold_hours"),
    )

    rating_k_factor: float = Field(
        default=RATING_K_FACTOR,
        validation_alias=AliasChoices("PRIORITYLIB_RATING_K_FACTOR", "rating_k_factor"),
    )
    rating_scale: float = Field(
        default=RATING_SCALE,
        validation_alias=AliasChoices("PRIORITYLIB_RATING_SCALE", "rating_scale"),
    )

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}, got {v!r}")
        return level

    @field_validator('rating_k_factor', 'rating_scale', 'urgent_threshold_hours')
    @classmethod
    def validate_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("Value must be positive")
        return v

    @field_validator('default_importance_score', 'important_score_threshold')
    @classmethod
    def validate_non_negative(cls, v: float) -> float:
        if v < 0:
            raise ValueError("Value must be non-negative")
        return v

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


def _read_config_file(config_file: Path) -> dict[str, Any]:
    with open(config_file, 'r') as f:
        if config_file.suffix.lower() in ['.yml', '.yaml']:
            config_data = yaml.safe_load(f)
        else:
            config_data = json.load(f)

    if config_data is None:
        return {}
    if not isinstance(config_data, dict):
        raise ValueError(f"Configuration file {config_file} must contain a mapping")

    # A file may nest the values under a top-level "prioritylib" section
    section = config_data.get("prioritylib", config_data)
    if not isinstance(section, dict):
        raise ValueError(f"Section 'prioritylib' in {config_file} must be a mapping")
    return section


def load_settings(
    config_file: Optional[Union[str, Path]] = None,
    **overrides: Any,
) -> PrioritySettings:
    """Build settings from the environment, a config file and overrides.

    Args:
        config_file: Optional YAML (.yml/.yaml) or JSON file
        **overrides: Values that win over everything else

    Raises:
        FileNotFoundError: If ``config_file`` does not exist
        ValueError: If the file does not hold a mapping
    """
    values: dict[str, Any] = {}
    if config_file is not None:
        path = Path(config_file)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")
        values.update(_read_config_file(path))
        logger.debug(f"Loaded configuration from {path}")

    values.update(overrides)
    return PrioritySettings(**values)


def configure_logging(settings: PrioritySettings) -> logging.Logger:
    """Set the package logger level from settings and return the logger."""
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(getattr(logging, settings.log_level))
    logger.debug(f"Logging configured at {settings.log_level} for {settings.environment}")
    return package_logger
