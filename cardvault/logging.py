"""
Logging Module for CardVault.

Architecture:
- Structured logging (JSON format for production)
- Multiple handlers (console + rotating file)
- Service-specific loggers with isolated log files
- Environment-aware configuration (LOG_LEVEL, LOG_DIR, LOG_TO_FILE, ENVIRONMENT)
- Correlation ID support: every hydration logs with its own short correlation id

Usage:
    logger = get_logger("hydration-engine")
    logger.info("Hydration started", extra={"correlation_id": "3f2a9c1d", "strategy": "set"})
"""

import logging
import sys
import json
import os
import time
import functools
from pathlib import Path
from logging.handlers import RotatingFileHandler
from datetime import datetime, timezone
from typing import Optional


PROJECT_ROOT = Path(__file__).parent.parent
LOGS_DIR = Path(os.getenv("LOG_DIR", str(PROJECT_ROOT / "logs")))

# Attributes present on every LogRecord; anything else came in through extra=
_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None)).keys()
) | {"message", "asctime"}


def _extra_fields(record: logging.LogRecord) -> dict:
    return {
        key: value
        for key, value in vars(record).items()
        if key not in _RESERVED_ATTRS and not key.startswith("_")
    }


class StructuredFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.
    Outputs one JSON object per line for log aggregators.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "service": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        extra = _extra_fields(record)
        correlation_id = extra.pop("correlation_id", None)
        if correlation_id is not None:
            log_data["correlation_id"] = correlation_id
        if extra:
            log_data["extra"] = extra

        return json.dumps(log_data, default=str, ensure_ascii=False)


class ColoredConsoleFormatter(logging.Formatter):
    """
    Colored console formatter for development.
    Appends the correlation id (when present) so interleaved hydrations stay readable.
    """

    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, self.RESET)
        levelname = record.levelname
        record.levelname = f"{color}{levelname:8}{self.RESET}"
        try:
            formatted = super().format(record)
        finally:
            record.levelname = levelname

        correlation_id = getattr(record, "correlation_id", None)
        if correlation_id:
            formatted = f"{formatted} [{correlation_id}]"
        return formatted


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def get_logger(
    service_name: str,
    log_level: Optional[str] = None,
    enable_console: bool = True,
    enable_file: Optional[bool] = None,
    enable_json: Optional[bool] = None,
) -> logging.Logger:
    """
    Get a configured logger for a service.

    Args:
        service_name: Name of the service (e.g., 'hydration-engine', 'tcgdex-client')
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        enable_console: Enable console output
        enable_file: Enable file output with rotation (defaults to LOG_TO_FILE, true)
        enable_json: Use JSON format (defaults to true in production)

    Returns:
        Configured logger instance
    """
    if log_level is None:
        log_level = os.getenv("LOG_LEVEL", "INFO").upper()
    level = getattr(logging, log_level)

    environment = os.getenv("ENVIRONMENT", "development").lower()
    is_production = environment == "production"

    if enable_json is None:
        enable_json = is_production
    if enable_file is None:
        enable_file = _env_flag("LOG_TO_FILE", True)

    logger = logging.getLogger(service_name)
    logger.setLevel(level)
    logger.handlers.clear()  # Avoid duplicate handlers on repeated calls

    if enable_console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)

        if enable_json:
            console_formatter = StructuredFormatter()
        else:
            console_formatter = ColoredConsoleFormatter(
                fmt="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )

        console_handler.setFormatter(console_formatter)
        logger.addHandler(console_handler)

    if enable_file:
        LOGS_DIR.mkdir(parents=True, exist_ok=True)
        log_file = LOGS_DIR / f"{service_name}.log"

        # 10MB per file, keep 5 backups
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=10 * 1024 * 1024,
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.setLevel(level)

        if enable_json:
            file_formatter = StructuredFormatter()
        else:
            file_formatter = logging.Formatter(
                fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(module)s:%(funcName)s:%(lineno)d | %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )

        file_handler.setFormatter(file_formatter)
        logger.addHandler(file_handler)

    logger.propagate = False

    return logger


def log_execution_time(logger: logging.Logger):
    """
    Decorator to log function execution time.

    Usage:
        @log_execution_time(logger)
        def fetch_all_groups():
            ...
    """

    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            start_time = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception:
                execution_time = time.perf_counter() - start_time
                logger.error(
                    f"{func.__qualname__} failed after {execution_time:.2f}s",
                    extra={"execution_time_seconds": round(execution_time, 3)},
                )
                raise
            execution_time = time.perf_counter() - start_time
            logger.info(
                f"{func.__qualname__} finished in {execution_time:.2f}s",
                extra={"execution_time_seconds": round(execution_time, 3)},
            )
            return result

        return wrapper

    return decorator
