"""Configuration — bot token file plus environment overrides."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError

load_dotenv()

DEFAULT_CONFIG_PATH = "config.json"
DEFAULT_LOG_LEVEL = "INFO"


class ConfigError(Exception):
    """Config file is missing or malformed. Fatal at startup."""


class ConfigFile(BaseModel):
    """Schema of config.json: ``{"token": "<bot token>"}``."""

    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    token: str = Field(min_length=1)


@dataclass
class AppConfig:
    token: str = ""
    log_level: str = DEFAULT_LOG_LEVEL
    config_path: str = DEFAULT_CONFIG_PATH

    @classmethod
    def load(cls, path: Optional[Union[str, Path]] = None) -> "AppConfig":
        """Read the token from ``path`` (or $PINBOT_CONFIG, or ./config.json)."""
        config_path = Path(path or os.getenv("PINBOT_CONFIG", DEFAULT_CONFIG_PATH))
        try:
            raw = config_path.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigError(f"Cannot read config file {config_path}: {e}") from e

        try:
            parsed = ConfigFile.model_validate_json(raw)
        except ValidationError as e:
            raise ConfigError(f"Invalid config file {config_path}: {e}") from e

        return cls(
            token=parsed.token,
            log_level=os.getenv("PINBOT_LOG_LEVEL", DEFAULT_LOG_LEVEL).strip().upper(),
            config_path=str(config_path),
        )

