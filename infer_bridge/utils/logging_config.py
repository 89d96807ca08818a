import logging
import sys
import os
from datetime import datetime
from typing import Optional, Union

from infer_bridge.core.config import LOG_DIR, LOG_LEVEL

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(threadName)s | %(name)s:%(lineno)d - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Loggers that follow the configured level
_SERVICE_LOGGERS = ("infer_bridge", "main", "uvicorn", "uvicorn.error", "uvicorn.access")

# The docker SDK logs every daemon HTTP request through urllib3
_QUIET_LOGGERS = ("docker", "urllib3")


class ColoredFormatter(logging.Formatter):
    """Colours whole console lines by level; plain output when colour is off."""

    COLORS = {
        logging.DEBUG: "\x1b[36m",
        logging.INFO: "\x1b[32m",
        logging.WARNING: "\x1b[33m",
        logging.ERROR: "\x1b[31m",
        logging.CRITICAL: "\x1b[31;1m",
    }
    RESET = "\x1b[0m"

    def __init__(self, use_color: bool = True) -> None:
        super().__init__(LOG_FORMAT, datefmt=DATE_FORMAT)
        self.use_color = use_color

    def format(self, record):
        line = super().format(record)
        color = self.COLORS.get(record.levelno) if self.use_color else None
        return f"{color}{line}{self.RESET}" if color else line


def resolve_level(level: Union[int, str, None]) -> int:
    """Accept a logging constant or a level name such as "debug"; unknown names fall back to INFO."""
    if level is None:
        level = LOG_LEVEL
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).strip().upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def setup_logging(level: Union[int, str, None] = None, log_dir: Optional[str] = LOG_DIR) -> Optional[str]:
    """
    Install the console handler and, when ``log_dir`` is set, a daily log file.

    Returns the log file path, or None for console-only logging.
    """
    level = resolve_level(level)
    root_logger = logging.getLogger()

    # Replace handlers from an earlier call instead of duplicating them
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    root_logger.setLevel(level)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(ColoredFormatter(use_color=sys.stderr.isatty()))
    root_logger.addHandler(console_handler)

    log_path = None
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        log_path = os.path.join(log_dir, f"infer_bridge_{datetime.now().strftime('%Y%m%d')}.log")
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        root_logger.addHandler(file_handler)

    for name in _SERVICE_LOGGERS:
        service_logger = logging.getLogger(name)
        service_logger.setLevel(level)
        service_logger.propagate = True

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    root_logger.info(
        "Logging initialized | level=%s | file=%s",
        logging.getLevelName(level), log_path or "none",
    )
    return log_path
