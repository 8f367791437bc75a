# cmap_logger.py
"""
Colour-friendly logging for the CMAP client: console + optional rotating file.

Usage:
    from cmap_client.utils.cmap_logger import cmapLogger, get_logger

    cmapLogger.info("Hello")        # package-wide logger
    log = get_logger("rest")        # child logger: cmap.rest
    log.debug("EXEC uspCatalog")

Env overrides:
    CMAP_LOG_LEVEL=INFO
    CMAP_LOG_FILE=/path/to/cmap.log
    CMAP_LOG_NO_COLOR=1
"""

# pylint: disable=W0718, W0603

from __future__ import annotations

import os
import sys
from typing import Optional
import logging
import logging.handlers
import colorama

import pandas as pd

BASE_NAME = "cmap"

__CONFIGURED = False

# ########################################################################
# Color support
# ########################################################################


_RESET = "\x1b[0m"
_BOLD = "\x1b[1m"

ANSI = {
    "red": "\x1b[31m",
    "yellow": "\x1b[33m",
    "cyan": "\x1b[36m",
    "light_green": "\x1b[92m",
}


def _stream_supports_color(stream: object) -> bool:
    """Return True if stream is a TTY and likely supports ANSI color."""
    if not hasattr(stream, "isatty"):
        return False
    try:
        return bool(stream.isatty())
    except (OSError, ValueError):
        return False


def _enable_windows_ansi() -> bool:
    """Let colorama translate ANSI codes on legacy Windows consoles."""
    try:
        colorama.just_fix_windows_console()
        return True
    except Exception:
        return False


# ########################################################################
# Formatter
# ########################################################################


class ColorFormatter(logging.Formatter):
    """
    Highlights the level name and message by severity.
    Plain text when color is disabled or the stream is not a terminal.
    """

    DEFAULT_FMT = (
        "%(asctime)s-%(levelname)s "
        "[%(name)s:%(funcName)s():%(lineno)d]: %(message)s"
    )
    DEFAULT_DATEFMT = "%Y-%m-%d %H:%M:%S"

    LEVEL_STYLE = {
        logging.DEBUG: ANSI["cyan"],
        logging.INFO: ANSI["light_green"],
        logging.WARNING: ANSI["yellow"],
        logging.ERROR: ANSI["red"],
        logging.CRITICAL: _BOLD + ANSI["red"],
    }

    def __init__(
                self,
                fmt: Optional[str] = None,
                datefmt: Optional[str] = None,
                use_color: Optional[bool] = None,
                stream: Optional[object] = None
                ):
        super().__init__(fmt or self.DEFAULT_FMT, datefmt or self.DEFAULT_DATEFMT)
        if use_color is None:
            use_color = _stream_supports_color(stream or sys.stderr)
            if sys.platform.startswith("win"):
                use_color = _enable_windows_ansi() and use_color
        self.use_color = bool(use_color)

    def format(self, record: logging.LogRecord) -> str:
        if not self.use_color:
            return super().format(record)

        style = self.LEVEL_STYLE.get(record.levelno, "")
        original_levelname = record.levelname
        original_msg, original_args = record.msg, record.args

        record.levelname = f"{style}{original_levelname}{_RESET}"
        record.msg = f"{style}{record.getMessage()}{_RESET}"
        record.args = None
        try:
            return super().format(record)
        finally:
            record.levelname = original_levelname
            record.msg, record.args = original_msg, original_args


# ########################################################################
# Configuration
# ########################################################################


def _resolve_level(level: Optional[int | str]) -> int:
    if level is None:
        level = os.getenv("CMAP_LOG_LEVEL") or "WARNING"
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        return resolved if isinstance(resolved, int) else logging.WARNING
    return level


def configure_logger(
                    level: Optional[int | str] = None,
                    use_color: Optional[bool] = None,
                    filename: Optional[str] = None,
                    max_bytes: int = 5 * 1024 * 1024,
                    backup_count: int = 3,
                ) -> logging.Logger:
    """
    Configure and return the package logger.

    Args:
        level: Logging level or name. Defaults to env CMAP_LOG_LEVEL or WARNING.
        use_color: Force color on/off. Defaults to auto-detect.
        filename: Adds a RotatingFileHandler writing to this path.
            Defaults to env CMAP_LOG_FILE.
        max_bytes: Rotation size.
        backup_count: Number of rotated backups to keep.
    """
    global __CONFIGURED

    level = _resolve_level(level)
    if filename is None:
        filename = os.getenv("CMAP_LOG_FILE")
    if use_color is None and os.getenv("CMAP_LOG_NO_COLOR"):
        use_color = False

    logger = logging.getLogger(BASE_NAME)
    logger.setLevel(level)

    # Reconfiguring replaces handlers instead of stacking them
    for h in list(logger.handlers):
        logger.removeHandler(h)
        h.close()

    console = logging.StreamHandler(stream=sys.stderr)
    console.setLevel(level)
    console.setFormatter(ColorFormatter(use_color=use_color, stream=sys.stderr))
    logger.addHandler(console)

    if filename:
        folder = os.path.dirname(filename)
        if folder:
            os.makedirs(folder, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
                                                            filename,
                                                            maxBytes=max_bytes,
                                                            backupCount=backup_count,
                                                            encoding="utf-8"
                                                            )
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(ColorFormatter.DEFAULT_FMT,
                                                    datefmt=ColorFormatter.DEFAULT_DATEFMT))
        logger.addHandler(file_handler)

    logger.propagate = False
    __CONFIGURED = True
    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get the package logger or one of its children; configures once if needed.
    """
    if not __CONFIGURED:
        configure_logger()
    return logging.getLogger(BASE_NAME if not name else f"{BASE_NAME}.{name}")


def format_rows(df: pd.DataFrame, max_rows: int = 20) -> str:
    """Render a DataFrame for a log line, truncated to `max_rows`."""
    return df.to_string(max_rows=max_rows, index=False)


cmapLogger = get_logger()
