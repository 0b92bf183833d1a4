"""Configuration management for rapidreporter.

Loads settings from a YAML configuration file with environment variable
overrides (``RAPIDREPORTER_`` prefix, ``__`` as the nested delimiter).
Supports .env files.
"""

from __future__ import annotations

import logging
import tempfile
from pathlib import Path

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config/rapidreporter.yaml")


def _default_work_dir() -> Path:
    return Path(tempfile.gettempdir()) / "rapid-reporter"


class CaptureConfig(BaseModel):
    screenshot_dir: Path = Field(
        default_factory=_default_work_dir,
        description="Where full-frame captures and crops are written",
    )
    min_drag_size: int = Field(default=5, gt=0, description="Smallest accepted drag, in logical units")
    snip_timeout: float = Field(default=45.0, gt=0, description="Seconds to wait for a native snip")
    snip_poll_interval: float = Field(default=0.15, gt=0)


class ExportConfig(BaseModel):
    destination_root: Path = Field(
        default_factory=lambda: Path.home() / "Documents",
        description="Directory that receives RapidReporter-* export folders",
    )
    icon_dir: Path | None = Field(
        default=None, description="Optional directory of custom <type>.png icons"
    )
    icon_cache_dir: Path = Field(
        default_factory=lambda: _default_work_dir() / "icons",
        description="Where generated icons are materialised",
    )


class LoggingConfig(BaseModel):
    level: str = Field(default="INFO")
    format: str = Field(
        default="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    file: str | None = Field(default=None)


class Settings(BaseSettings):
    """Root configuration for the rapidreporter system.

    Loads from YAML file and supports environment variable overrides.
    Reads .env files automatically.
    """

    model_config = {
        "env_prefix": "RAPIDREPORTER_",
        "env_nested_delimiter": "__",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    capture: CaptureConfig = Field(default_factory=CaptureConfig)
    export: ExportConfig = Field(default_factory=ExportConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def load_settings(config_path: Path | str | None = None) -> Settings:
    """Load settings from YAML + .env + environment variables.

    Priority: init values (YAML) > env vars > .env file > defaults
    """
    path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH

    yaml_data = {}
    if path.exists():
        with open(path) as f:
            yaml_data = yaml.safe_load(f) or {}
        logger.info("Loaded configuration from %s", path)
    else:
        logger.warning("Config file %s not found, using defaults + env vars", path)

    return Settings(**yaml_data)
