"""Configuration for the OpenAPI inliner.

Settings come from ``OPENAPI_*`` environment variables and, when present, a
``.spec-inliner.yaml`` file in the project directory. Values in the file win
over the environment.
"""

from enum import Enum
from pathlib import Path

import yaml
from loguru import logger
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

CONFIG_FILENAME = ".spec-inliner.yaml"

LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")


class FileFormat(Enum):
    """Enum representing the format of an OpenAPI specification file."""

    JSON = "json"
    YAML = "yaml"


class InlinerSettings(BaseSettings):
    """Runtime settings for inlining."""

    inline_components_on_save: bool = Field(
        default=False,
        description="Inline all components before a specification is saved",
    )
    recover_circular: bool = Field(
        default=True,
        description="Break cycles with a same-named entry from another component bucket",
    )
    log_level: str = Field(default="WARNING", description="Minimum loguru level for diagnostics")

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v):
        if isinstance(v, str):
            v = v.strip().upper()
        if v not in LOG_LEVELS:
            raise ValueError(f"Unknown log level {v!r}, expected one of {', '.join(LOG_LEVELS)}")
        return v

    model_config = SettingsConfigDict(
        env_prefix="OPENAPI_",
        extra="ignore",
        validate_assignment=True,
    )


def get_config_path(target_dir: Path) -> Path:
    """Get the path to the config file in the target directory."""
    return target_dir / CONFIG_FILENAME


def load_settings(target_dir: Path) -> InlinerSettings:
    """
    Load settings from the environment and .spec-inliner.yaml.
    Returns environment-only settings if the file doesn't exist.
    """
    config_path = get_config_path(target_dir)
    if not config_path.exists():
        return InlinerSettings()
    with open(config_path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    logger.debug(f"Loaded settings from {config_path}")
    return InlinerSettings(**data)


def save_settings(target_dir: Path, settings: InlinerSettings) -> bool:
    """
    Save settings to .spec-inliner.yaml.
    Only writes if file doesn't exist (preserves user edits).
    Returns True if created, False if already existed.
    """
    config_path = get_config_path(target_dir)
    if config_path.exists():
        return False
    config_path.parent.mkdir(parents=True, exist_ok=True)
    data = settings.model_dump(exclude_defaults=True)
    with open(config_path, "w", encoding="utf-8") as f:
        yaml.dump(data, f, default_flow_style=False, allow_unicode=True, sort_keys=False)
    return True
