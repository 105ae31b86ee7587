"""Configuration management for scraperwiki-api using Pydantic models."""

import json
import logging
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from rich.logging import RichHandler

CONFIG_FILE_NAME = ".scraperwiki.json"
DEFAULT_BASE_URL = "https://api.scraperwiki.com/api/1.0"


class LogLevel(str, Enum):
    """Logging levels."""
    ERROR = "error"
    WARN = "warn"
    INFO = "info"
    DEBUG = "debug"


class ClientConfig(BaseModel):
    """API client configuration section."""
    base_url: str = Field(alias="baseUrl", default=DEFAULT_BASE_URL)
    apikey: str | None = None
    timeout_seconds: float = Field(alias="timeoutSeconds", default=30.0)
    user_agent: str = Field(alias="userAgent", default="scraperwiki-api (python)")

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v):
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"base_url must be an http(s) URL, got: {v}")
        return v.rstrip("/")

    @field_validator("timeout_seconds")
    @classmethod
    def validate_timeout(cls, v):
        if v <= 0:
            raise ValueError("timeout_seconds must be > 0")
        return v

    model_config = ConfigDict(populate_by_name=True)


class LoggingConfig(BaseModel):
    """Logging configuration section."""
    level: LogLevel = LogLevel.WARN

    model_config = ConfigDict(use_enum_values=True)


class ScraperWikiConfig(BaseModel):
    """Complete scraperwiki-api configuration model."""
    client: ClientConfig = Field(default_factory=ClientConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = ConfigDict(extra="forbid")


def load_config(config_path: str | Path | None = None) -> ScraperWikiConfig:
    """Read the configuration file, or return the defaults when there is none.

    With no ``config_path`` the working directory and its parents are searched
    for ``.scraperwiki.json``. A path that does not exist gives the defaults.

    Raises:
        ValueError: If the file is not JSON or does not validate
    """
    path = find_config_file() if config_path is None else Path(config_path)
    if path is None or not path.is_file():
        return ScraperWikiConfig()

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in config file {path}: {e}")

    try:
        return ScraperWikiConfig.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Failed to load config from {path}: {e}")


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Return the nearest ``.scraperwiki.json`` at or above ``start_dir``."""
    start = Path(start_dir or Path.cwd()).resolve()
    for directory in (start, *start.parents):
        candidate = directory / CONFIG_FILE_NAME
        if candidate.is_file():
            return candidate
    return None


_LEVELS = {
    LogLevel.ERROR.value: logging.ERROR,
    LogLevel.WARN.value: logging.WARNING,
    LogLevel.INFO.value: logging.INFO,
    LogLevel.DEBUG.value: logging.DEBUG,
}


def configure_logging(level: LogLevel | str = LogLevel.WARN) -> None:
    """Route the package loggers through a Rich handler at the given level."""
    if isinstance(level, LogLevel):
        level = level.value

    package_logger = logging.getLogger("scraperwiki_api")
    package_logger.setLevel(_LEVELS.get(level, logging.WARNING))

    if not any(isinstance(h, RichHandler) for h in package_logger.handlers):
        package_logger.addHandler(RichHandler(show_path=False, rich_tracebacks=True))
