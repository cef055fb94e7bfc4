"""Logging utility for termail"""

import json
import logging
import re
import time
from contextlib import contextmanager
from datetime import datetime, timezone
from functools import wraps
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Iterator, Optional

from rich.logging import RichHandler

from .paths import LOGS_DIR

_LOG_DIR: Optional[Path] = None


def _get_log_dir() -> Path:
    """Get log directory, creating it on first access."""

    from .errors import FileSystemError

    global _LOG_DIR

    if _LOG_DIR is None:
        _LOG_DIR = LOGS_DIR
        try:
            _LOG_DIR.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise FileSystemError(f"Failed to create log directory: {_LOG_DIR}") from e

    return _LOG_DIR


## Custom JSON Formatter


class JSONFormatter(logging.Formatter):
    """One JSON object per line, stamped with the record's creation time."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "function": record.funcName,
            "line": record.lineno,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry)


## Log Masking


class SensitiveDataMasker:
    """Masks OAuth material and mailbox addresses before they reach a log."""

    REDACTED = "[REDACTED]"

    # key=value or "key": "value" pairs whose value is secret
    _KEY_VALUE = re.compile(
        r'((?:access_token|refresh_token|client_secret|token|secret|code)["\']?\s*[:=]\s*["\']?)'
        r'([^"\'},&\s]+)',
        re.IGNORECASE,
    )
    _BEARER = re.compile(r"(bearer\s+)([A-Za-z0-9._~+/-]+=*)", re.IGNORECASE)
    _EMAIL = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")

    SENSITIVE_FIELDS = {
        "access_token",
        "authorization",
        "client_secret",
        "code",
        "credential",
        "refresh_token",
        "secret",
        "token",
    }

    def mask_string(self, text: str) -> str:
        """Mask sensitive data in a string message."""
        if not text:
            return text
        text = self._KEY_VALUE.sub(lambda m: m.group(1) + self.REDACTED, text)
        text = self._BEARER.sub(lambda m: m.group(1) + self.REDACTED, text)
        return self._EMAIL.sub(lambda m: self._mask_email(m.group(0)), text)

    def mask_dict(self, data: Dict[str, Any]) -> Dict[str, Any]:
        masked: Dict[str, Any] = {}
        for key, value in data.items():
            if key.lower() in self.SENSITIVE_FIELDS:
                masked[key] = self.REDACTED
            elif isinstance(value, dict):
                masked[key] = self.mask_dict(value)
            elif isinstance(value, str):
                masked[key] = self.mask_string(value)
            else:
                masked[key] = value
        return masked

    @staticmethod
    def _mask_email(address: str) -> str:
        """``alice@example.com`` -> ``a***@e***``"""
        user, _, domain = address.partition("@")
        return f"{user[0] if len(user) > 1 else ''}***@{domain[0]}***"


class SensitiveDataFilter(logging.Filter):
    """Logging filter to mask sensitive data in log records."""

    def __init__(self):
        super().__init__()
        self.masker = SensitiveDataMasker()

    def filter(self, record) -> bool:
        """Filter log record to mask sensitive data."""

        if isinstance(record.msg, str):
            record.msg = self.masker.mask_string(record.msg)

        if isinstance(record.args, dict):
            record.args = self.masker.mask_dict(record.args)
        elif isinstance(record.args, tuple):
            record.args = tuple(
                self.masker.mask_string(arg) if isinstance(arg, str) else arg
                for arg in record.args
            )

        return True


## Main Log Manager


class LogManager:
    """Manages logging configuration and provides logger instances."""

    def __init__(self, log_level: str = "INFO", log_to_file: bool = True):
        self.log_level = self._parse_level(log_level)
        self.root_logger = logging.getLogger("termail")
        self.root_logger.setLevel(logging.DEBUG)
        self.root_logger.propagate = False
        self.console_handler: Optional[logging.Handler] = None
        self._setup_handlers(log_to_file)

    @staticmethod
    def _parse_level(level: str) -> int:
        value = getattr(logging, level.upper(), None)
        if not isinstance(value, int):
            raise ValueError(f"Invalid logging level: {level}")
        return value

    def _setup_handlers(self, log_to_file: bool) -> None:
        """Setup console and file handlers with sensitive data filtering."""

        from .errors import FileSystemError

        sensitive_filter = SensitiveDataFilter()

        self.root_logger.handlers.clear()

        console_handler = RichHandler(
            show_time=True,
            show_path=False,
            markup=False,
            rich_tracebacks=True,
        )
        console_handler.setLevel(max(self.log_level, logging.WARNING))
        console_handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
        console_handler.addFilter(sensitive_filter)
        self.root_logger.addHandler(console_handler)
        self.console_handler = console_handler

        if not log_to_file:
            return

        try:
            app_handler = RotatingFileHandler(
                _get_log_dir() / "app.log",
                maxBytes=5_242_880,
                backupCount=5,
                encoding="utf-8",
            )
        except OSError as e:
            raise FileSystemError(f"Failed to create app.log handler: {str(e)}") from e

        app_handler.setLevel(self.log_level)
        app_handler.setFormatter(JSONFormatter())
        app_handler.addFilter(sensitive_filter)
        self.root_logger.addHandler(app_handler)

    def set_level(self, level: str) -> None:
        """Set logging level at runtime"""

        self.log_level = self._parse_level(level)

        for handler in self.root_logger.handlers:
            if handler is self.console_handler:
                handler.setLevel(max(self.log_level, logging.WARNING))
            else:
                handler.setLevel(self.log_level)

    @contextmanager
    def console_muted(self) -> Iterator[None]:
        """Detach the console handler while a full-screen UI owns the terminal."""

        handler = self.console_handler
        if handler is not None:
            self.root_logger.removeHandler(handler)
        try:
            yield
        finally:
            if handler is not None:
                self.root_logger.addHandler(handler)


## Decorators for Logging


def _call_name(func) -> str:
    return f"{func.__module__}.{func.__qualname__}"


def _log_exit(logger: logging.Logger, name: str, started: float, error: Optional[Exception] = None) -> None:
    elapsed = time.perf_counter() - started
    if error is None:
        logger.debug(f"<- {name} ({elapsed:.3f}s)")
    else:
        logger.debug(f"<- {name} raised {type(error).__name__} after {elapsed:.3f}s", exc_info=error)


def log_call(func):
    """Log entry, exit and duration of a function at debug level."""
    logger = logging.getLogger(func.__module__)
    name = _call_name(func)

    @wraps(func)
    def wrapper(*args, **kwargs):
        logger.debug(f"-> {name}")
        started = time.perf_counter()
        try:
            result = func(*args, **kwargs)
        except Exception as e:
            _log_exit(logger, name, started, e)
            raise
        _log_exit(logger, name, started)
        return result

    return wrapper


def async_log_call(func):
    """Coroutine version of :func:`log_call`."""
    logger = logging.getLogger(func.__module__)
    name = _call_name(func)

    @wraps(func)
    async def wrapper(*args, **kwargs):
        logger.debug(f"-> {name} (async)")
        started = time.perf_counter()
        try:
            result = await func(*args, **kwargs)
        except Exception as e:
            _log_exit(logger, name, started, e)
            raise
        _log_exit(logger, name, started)
        return result

    return wrapper


## Module-level LogManager Instance and Helper Functions

_log_manager: Optional[LogManager] = None


def init_logging(log_level: str = "INFO", log_to_file: bool = True) -> LogManager:
    """Initialize logging system and return LogManager instance."""

    global _log_manager

    if _log_manager is None:
        _log_manager = LogManager(log_level, log_to_file=log_to_file)
    else:
        _log_manager.set_level(log_level)

    return _log_manager


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Get a logger instance below the termail namespace.

    Loggers are plain children of the ``termail`` logger, so handlers
    installed later by ``init_logging`` still apply to them.
    """

    if not name:
        return logging.getLogger("termail")
    if name == "termail" or name.startswith("termail."):
        return logging.getLogger(name)
    return logging.getLogger(f"termail.{name}")
