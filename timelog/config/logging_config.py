"""Logging setup for the timelog CLI.

Console output uses a short human-readable line; ``LOG_FORMAT=json`` switches
every handler to one JSON object per line with the session/delivery
correlation fields as top-level keys.
"""

import json
import logging
import logging.handlers
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
FORMATS = ("standard", "json")

STANDARD_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"
STANDARD_DATEFMT = "%Y-%m-%d %H:%M:%S"

# HTTP client loggers that only matter when debugging delivery
NOISY_LOGGERS = ("urllib3", "requests")

# LogRecord attributes that are not "extra" fields
_RESERVED_FIELDS = set(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))
) | {"message", "asctime"}


class JSONFormatter(logging.Formatter):
    """One JSON object per record.

    Fields added through ``extra={}`` or LogContext (``session_id``,
    ``delivery_id``, ...) become top-level keys. Values that are not JSON
    serializable are written as their ``str()``.
    """

    def format(self, record: logging.LogRecord) -> str:
        data = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        data.update(
            (key, value)
            for key, value in record.__dict__.items()
            if key not in _RESERVED_FIELDS and not key.startswith("_")
        )
        if record.exc_info:
            data["exception"] = self.formatException(record.exc_info)
        return json.dumps(data, default=str)


@dataclass
class LoggingConfig:
    """
    Where and how log records are written.

    Attributes:
        log_level: One of LEVELS (case-insensitive)
        log_format: 'standard' or 'json'
        log_file: Path of the rotating log file
        enable_console: Write to stderr
        enable_file: Write to log_file
        max_file_size: Rotate after this many bytes
        backup_count: Rotated files kept
    """

    log_level: str = "INFO"
    log_format: str = "standard"
    log_file: Optional[str] = None
    enable_console: bool = True
    enable_file: bool = False
    max_file_size: int = 10 * 1024 * 1024
    backup_count: int = 5

    def __post_init__(self):
        self.log_level = self.log_level.upper()
        if self.log_level not in LEVELS:
            raise ValueError(
                f"Invalid log level: {self.log_level}. Must be one of {', '.join(LEVELS)}"
            )
        if self.log_format not in FORMATS:
            raise ValueError(
                f"Invalid log format: {self.log_format}. Must be one of {', '.join(FORMATS)}"
            )
        if self.enable_file and not self.log_file:
            raise ValueError("log_file must be specified when enable_file is True")

    @classmethod
    def from_env(cls, log_level: Optional[str] = None) -> "LoggingConfig":
        """
        Build the configuration from LOG_* environment variables.

        LOG_FORMAT, LOG_FILE (file output is on when set), LOG_CONSOLE,
        LOG_MAX_FILE_SIZE and LOG_BACKUP_COUNT are read here; LOG_LEVEL is
        only used when ``log_level`` is not given (the CLI passes the value
        validated by TimeLogConfig).
        """
        env = os.environ
        log_file = env.get("LOG_FILE") or None
        return cls(
            log_level=log_level or env.get("LOG_LEVEL", "INFO"),
            log_format=env.get("LOG_FORMAT", "standard").lower(),
            log_file=log_file,
            enable_console=env.get("LOG_CONSOLE", "true").lower() in ("1", "true", "yes"),
            enable_file=log_file is not None,
            max_file_size=int(env.get("LOG_MAX_FILE_SIZE", cls.max_file_size)),
            backup_count=int(env.get("LOG_BACKUP_COUNT", cls.backup_count)),
        )

    def build_handlers(self) -> list:
        handlers: list = []
        if self.enable_console:
            handlers.append(logging.StreamHandler())
        if self.enable_file:
            Path(self.log_file).parent.mkdir(parents=True, exist_ok=True)
            handlers.append(
                logging.handlers.RotatingFileHandler(
                    self.log_file,
                    maxBytes=self.max_file_size,
                    backupCount=self.backup_count,
                    encoding="utf-8",
                )
            )
        return handlers


def configure_logging(config: LoggingConfig) -> None:
    """
    Replace the root logger's handlers according to ``config``.

    Safe to call repeatedly. Every handler carries the LogContext filter so
    session and delivery ids reach the formatter.
    """
    from timelog.utils.logging_utils import _ContextFilter

    reset_logging()
    level = logging.getLevelName(config.log_level)
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    if config.log_format == "json":
        formatter: logging.Formatter = JSONFormatter()
    else:
        formatter = logging.Formatter(STANDARD_FORMAT, datefmt=STANDARD_DATEFMT)

    context_filter = _ContextFilter()
    for handler in config.build_handlers():
        handler.setLevel(level)
        handler.setFormatter(formatter)
        handler.addFilter(context_filter)
        root_logger.addHandler(handler)

    noisy_level = logging.DEBUG if level == logging.DEBUG else logging.WARNING
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(noisy_level)


def get_logger(name: str) -> logging.Logger:
    """Logger for a module (typically ``__name__``)."""
    return logging.getLogger(name)


def reset_logging() -> None:
    """Close and remove all root handlers; the root level goes back to WARNING."""
    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()
    root_logger.setLevel(logging.WARNING)
