"""Configuration manager for settings stored as JSON."""

import json
import os
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from .errors import FileSystemError, InvalidConfigError
from .logging import get_logger
from .paths import CONFIG_PATH, CREDENTIALS_PATH, TOKEN_PATH

logger = get_logger(__name__)

GMAIL_READONLY_SCOPE = "https://www.googleapis.com/auth/gmail.readonly"


class FetchConfig(BaseModel):
    """Pydantic model for the fetch task."""

    page_size: int = Field(default=20, ge=1, le=500)
    max_part_depth: int = Field(default=32, ge=1)


class GmailConfig(BaseModel):
    """Pydantic model for the Gmail provider and its credentials."""

    credentials_path: str = str(CREDENTIALS_PATH)
    token_path: str = str(TOKEN_PATH)
    scopes: List[str] = Field(default_factory=lambda: [GMAIL_READONLY_SCOPE])
    redirect_port: int = 8080


class UIConfig(BaseModel):
    """Pydantic model for UI settings."""

    theme: str = "dark"
    tick_interval: float = Field(default=0.1, gt=0)


class KeyBindingsConfig(BaseModel):
    """Pydantic model for the key binding table."""

    up: List[str] = Field(default_factory=lambda: ["up", "k"])
    down: List[str] = Field(default_factory=lambda: ["down", "j"])
    page_up: List[str] = Field(default_factory=lambda: ["pageup"])
    page_down: List[str] = Field(default_factory=lambda: ["pagedown"])
    half_up: List[str] = Field(default_factory=lambda: ["ctrl+u"])
    half_down: List[str] = Field(default_factory=lambda: ["ctrl+d"])
    select: List[str] = Field(default_factory=lambda: ["enter"])
    back: List[str] = Field(default_factory=lambda: ["escape"])
    help: List[str] = Field(default_factory=lambda: ["question_mark", "?"])
    quit: List[str] = Field(default_factory=lambda: ["Q", "ctrl+c"])
    refresh: List[str] = Field(default_factory=lambda: ["r"])
    filter: List[str] = Field(default_factory=lambda: ["slash", "/"])


class LoggingConfig(BaseModel):
    """Pydantic model for logging settings."""

    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        if value.upper() not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level: {value}")
        return value.upper()


class AppConfig(BaseModel):
    """Pydantic model for overall application configuration."""

    version: str = "0.1.0"
    fetch: FetchConfig = Field(default_factory=FetchConfig)
    gmail: GmailConfig = Field(default_factory=GmailConfig)
    ui: UIConfig = Field(default_factory=UIConfig)
    keys: KeyBindingsConfig = Field(default_factory=KeyBindingsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def default_config_path() -> Path:
    """Config file location, overridable through TERMAIL_CONFIG."""
    override = os.environ.get("TERMAIL_CONFIG")
    return Path(override).expanduser() if override else CONFIG_PATH


class ConfigManager:
    """Loads the application configuration.

    The file is only read; a missing file means defaults.
    """

    def __init__(self, config_path: Optional[Path] = None):
        self.path = Path(config_path) if config_path else default_config_path()
        self.config = self._load_config()

    def _load_config(self) -> AppConfig:
        """Load configuration from file or fall back to defaults."""

        if not self.path.exists():
            logger.info(f"No config file at {self.path}, using defaults")
            return AppConfig()

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
            config = AppConfig(**data)
            logger.debug("Configuration successfully loaded and validated.")
            return config

        except json.JSONDecodeError as e:
            logger.error(f"Failed to parse config file: {e}")
            raise InvalidConfigError(f"Configuration file is not valid JSON: {str(e)}") from e
        except ValidationError as e:
            logger.error(f"Failed to validate config file: {e}")
            raise InvalidConfigError(
                f"Configuration data does not match expected schema: {str(e)}"
            ) from e
        except TypeError as e:
            raise InvalidConfigError("Configuration file must contain a JSON object") from e
        except OSError as e:
            raise FileSystemError(f"Failed to read configuration file: {str(e)}") from e
