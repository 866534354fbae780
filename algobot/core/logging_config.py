"""
Logging Configuration
=====================
Centralized logging setup for the strategy runtime.
"""

import os
import sys
import logging
from pathlib import Path
from datetime import datetime
from logging.handlers import RotatingFileHandler
from typing import Any, Optional


# Default log format
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)-20s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

ROOT_LOGGER = "algobot"

# Log levels for different components
COMPONENT_LOG_LEVELS = {
    "algobot": logging.INFO,
    "algobot.core": logging.INFO,
    "algobot.risk": logging.INFO,
    "algobot.execution": logging.INFO,
    "algobot.strategies": logging.INFO,
    "algobot.indicators": logging.DEBUG,  # More verbose for warm-up issues
}


class ColorFormatter(logging.Formatter):
    """Colored log formatter for console output"""

    COLORS = {
        logging.DEBUG: "\033[36m",     # Cyan
        logging.INFO: "\033[32m",      # Green
        logging.WARNING: "\033[33m",   # Yellow
        logging.ERROR: "\033[31m",     # Red
        logging.CRITICAL: "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def format(self, record):
        color = self.COLORS.get(record.levelno, self.RESET)
        record = logging.makeLogRecord(record.__dict__)
        record.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(record)


def setup_logging(
    log_dir: Optional[Path] = None,
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
    max_bytes: int = 10 * 1024 * 1024,  # 10 MB
    backup_count: int = 5,
) -> None:
    """
    Set up logging for the runtime.

    Console output is always installed. Rotating log files are written only
    when ``log_dir`` is given.

    Args:
        log_dir: Directory for log files
        console_level: Logging level for console output
        file_level: Logging level for file output
        max_bytes: Max size of each log file
        backup_count: Number of backup files to keep
    """
    root_logger = logging.getLogger(ROOT_LOGGER)
    root_logger.setLevel(logging.DEBUG)  # Capture all, handlers will filter

    # Clear existing handlers
    root_logger.handlers.clear()

    # Console handler with colors
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(console_level)
    if sys.platform != "win32" or os.getenv("TERM"):
        console_handler.setFormatter(ColorFormatter(LOG_FORMAT, LOG_DATE_FORMAT))
    else:
        console_handler.setFormatter(logging.Formatter(LOG_FORMAT, LOG_DATE_FORMAT))
    root_logger.addHandler(console_handler)

    if log_dir is not None:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        today = datetime.now().strftime("%Y-%m-%d")

        # Main log file (rotating by size)
        file_handler = RotatingFileHandler(
            log_dir / f"algobot_{today}.log",
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(file_level)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT, LOG_DATE_FORMAT))
        root_logger.addHandler(file_handler)

        # Error log (separate file for errors only)
        error_handler = RotatingFileHandler(
            log_dir / f"errors_{today}.log",
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(logging.Formatter(LOG_FORMAT, LOG_DATE_FORMAT))
        root_logger.addHandler(error_handler)

    # Set levels for specific components
    for component, level in COMPONENT_LOG_LEVELS.items():
        logging.getLogger(component).setLevel(level)

    root_logger.info("Logging initialized: %s", log_dir or "console only")


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a component.

    Args:
        name: Component name (e.g., "risk", "execution", "strategies")

    Returns:
        Logger instance with proper hierarchy
    """
    if not name.startswith(ROOT_LOGGER):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)


def format_fields(fields: dict[str, Any]) -> str:
    """Render key/value fields as ``k=v`` pairs in insertion order"""
    parts = []
    for key, value in fields.items():
        if isinstance(value, float):
            value = f"{value:.6g}"
        parts.append(f"{key}={value}")
    return " ".join(parts)


class EventLogger:
    """
    Structured event logger used by strategies.

    Each call logs ``"<event> | k=v k=v"`` at the matching severity, so
    records stay greppable by event tag.

    Usage:
        log = EventLogger("strategies.BTCUSDT")
        log.info("order_submitted", symbol="BTCUSDT", qty=0.5)
    """

    def __init__(self, name: str = "strategies"):
        self.logger = get_logger(name)

    def _log(self, level: int, event: str, fields: dict[str, Any]) -> None:
        if fields:
            self.logger.log(level, "%s | %s", event, format_fields(fields))
        else:
            self.logger.log(level, "%s", event)

    def info(self, event: str, **fields: Any) -> None:
        self._log(logging.INFO, event, fields)

    def warn(self, event: str, **fields: Any) -> None:
        self._log(logging.WARNING, event, fields)

    def error(self, event: str, **fields: Any) -> None:
        self._log(logging.ERROR, event, fields)
