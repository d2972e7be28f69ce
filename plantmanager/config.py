"""
Configuration for PlantManager Reminders
========================================
Runtime settings loaded from environment variables, plus the logging
setup shared by the web app and the command line tool.
"""

from __future__ import annotations

import os
from contextlib import suppress
from dataclasses import dataclass, field
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from plantmanager.domain.exceptions import ConfigurationError


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.lower() in {"1", "true", "t", "yes", "on"}


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        raise ConfigurationError(f"Environment variable {name} must be a number.") from None


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        raise ConfigurationError(f"Environment variable {name} must be an integer.") from None


@dataclass
class AppConfig:
    """Runtime configuration loaded from environment variables."""

    environment: str = field(default_factory=lambda: os.getenv("PLANTMANAGER_ENV", "development"))
    secret_key: str = field(default_factory=lambda: os.getenv("PLANTMANAGER_SECRET_KEY", "PlantManagerDevSecretKey"))

    # Reminder store: one JSON document per device
    store_dir: str = field(default_factory=lambda: os.getenv("PLANTMANAGER_STORE_DIR", "var"))
    store_file: str = field(default_factory=lambda: os.getenv("PLANTMANAGER_STORE_FILE", "plants.json"))
    store_key: str = field(default_factory=lambda: os.getenv("PLANTMANAGER_STORE_KEY", "@plantmanager:plants"))
    lock_timeout_seconds: float = field(default_factory=lambda: _env_float("PLANTMANAGER_LOCK_TIMEOUT", 5.0))
    # Lock files older than this are treated as abandoned by a crashed writer
    lock_stale_seconds: float = field(default_factory=lambda: _env_float("PLANTMANAGER_LOCK_STALE", 30.0))

    # Default cadence applied when a plant is watered without its own frequency
    default_waterings_per_day: int = field(default_factory=lambda: _env_int("PLANTMANAGER_DEFAULT_TIMES_PER_DAY", 1))
    # IANA zone for the HH:MM watering label; empty means UTC
    display_timezone: str = field(default_factory=lambda: os.getenv("PLANTMANAGER_DISPLAY_TZ", ""))

    DEBUG: bool = field(default_factory=lambda: _env_bool("PLANTMANAGER_DEBUG", False))
    log_level: str = field(default_factory=lambda: os.getenv("PLANTMANAGER_LOG_LEVEL", "INFO"))
    log_file: str = field(default_factory=lambda: os.getenv("PLANTMANAGER_LOG_FILE", "logs/plantmanager.log"))

    _DEFAULT_SECRET_KEY: str = field(default="PlantManagerDevSecretKey", init=False, repr=False)

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if not self.store_key:
            raise ConfigurationError("PLANTMANAGER_STORE_KEY must not be empty")
        if not self.store_file or os.path.basename(self.store_file) != self.store_file:
            raise ConfigurationError(f"PLANTMANAGER_STORE_FILE must be a bare file name, got {self.store_file!r}")
        if self.lock_timeout_seconds <= 0:
            raise ConfigurationError("PLANTMANAGER_LOCK_TIMEOUT must be positive")
        if self.lock_stale_seconds <= self.lock_timeout_seconds:
            raise ConfigurationError("PLANTMANAGER_LOCK_STALE must be greater than PLANTMANAGER_LOCK_TIMEOUT")
        if self.default_waterings_per_day < 1:
            raise ConfigurationError("PLANTMANAGER_DEFAULT_TIMES_PER_DAY must be at least 1")
        if self.display_timezone:
            try:
                ZoneInfo(self.display_timezone)
            except (OSError, ValueError, ZoneInfoNotFoundError):
                raise ConfigurationError(f"Unknown PLANTMANAGER_DISPLAY_TZ {self.display_timezone!r}") from None
        if self.environment == "production" and self.secret_key == self._DEFAULT_SECRET_KEY:
            raise ConfigurationError(
                "Cannot use the default secret key in production. Set PLANTMANAGER_SECRET_KEY."
            )

    @property
    def store_path(self) -> str:
        return os.path.join(self.store_dir, self.store_file)

    @property
    def display_tz(self) -> ZoneInfo | None:
        return ZoneInfo(self.display_timezone) if self.display_timezone else None

    def as_flask_config(self) -> dict[str, Any]:
        """Render configuration values for the Flask application."""
        return {
            "ENV": self.environment,
            "SECRET_KEY": self.secret_key,
            "DEBUG": self.DEBUG,
            "REMINDER_STORE_PATH": self.store_path,
            "REMINDER_STORE_KEY": self.store_key,
        }


def setup_logging(debug: bool = False, *, level: str | None = None, log_file: str | None = None) -> None:
    """Setup logging configuration."""
    import logging
    import sys
    from logging.handlers import RotatingFileHandler

    if debug:
        log_level = logging.DEBUG
    else:
        log_level = logging.getLevelName((level or "INFO").upper())
        if not isinstance(log_level, int):
            log_level = logging.INFO

    root = logging.getLogger()
    root.setLevel(log_level)

    # Avoid duplicate handlers when create_app / main run more than once
    has_console = any(getattr(h, "name", "") == "plantmanager_console" for h in root.handlers)
    has_file = any(getattr(h, "name", "") == "plantmanager_file" for h in root.handlers)
    added_handler = False

    stream = sys.stderr
    with suppress(AttributeError, ValueError):
        stream.reconfigure(encoding="utf-8", errors="replace")
    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    if not has_console:
        console_handler = logging.StreamHandler(stream=stream)
        console_handler.name = "plantmanager_console"
        console_handler.setFormatter(formatter)
        root.addHandler(console_handler)
        added_handler = True

    if log_file and not has_file:
        os.makedirs(os.path.dirname(os.path.abspath(log_file)), exist_ok=True)
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=2 * 1024 * 1024,
            backupCount=3,
            encoding="utf-8",
        )
        file_handler.name = "plantmanager_file"
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)
        added_handler = True

    for handler in root.handlers:
        if getattr(handler, "name", "") in {"plantmanager_console", "plantmanager_file"}:
            handler.setLevel(log_level)

    if added_handler:
        root.info("Logging initialized at level: %s", logging.getLevelName(log_level))

    if _env_bool("PLANTMANAGER_SILENCE_WERKZEUG", True):
        logging.getLogger("werkzeug").setLevel(logging.WARNING)


def load_config(**overrides: Any) -> AppConfig:
    """Helper for callers to load and validate configuration.

    Keyword overrides win over environment variables.
    """
    try:
        return AppConfig(**overrides)
    except TypeError as exc:
        raise ConfigurationError(f"Unknown configuration option: {exc}") from exc
