"""Config for the CMAP client"""

# pylint: disable=W1201

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from cmap_client.utils.cmap_logger import cmapLogger, configure_logger


# -----------------------------------------------------------------------------
# Load .env from project root (never overrides the real environment)
# -----------------------------------------------------------------------------
ROOT = Path(__file__).resolve().parent.parent.parent
env_path = ROOT / ".env"
if env_path.exists():
    load_dotenv(dotenv_path=env_path, override=False)


DEFAULT_DOMAIN = "https://simonscmap.com"
DEFAULT_KEY_PREFIX = "Api-Key "
DEFAULT_KEY_FILE = "api_key.csv"


# -----------------------------------------------------------------------------
# Helpers for parsing & validation
# -----------------------------------------------------------------------------
def _get_str(name: str, default: Optional[str] = None) -> str:
    raw = os.getenv(name)
    if raw is None or raw == "":
        if default is None:
            msg = f"Missing required env var: {name}"
            cmapLogger.error(msg)
            raise RuntimeError(msg)
        return default
    return raw.strip().strip("'").strip('"')


def _get_prefix(name: str, default: str) -> str:
    # The prefix carries a meaningful trailing space, so only quotes are stripped
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    return raw.strip("'").strip('"')


def _log_level_to_std(name: str) -> str:
    lvl = _get_str(name, "WARNING").upper()
    valid = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "NOTSET"}
    if lvl not in valid:
        msg = f"Invalid {name} {lvl!r}. Choose one of {sorted(valid)}."
        cmapLogger.error(msg)
        raise RuntimeError(msg)
    return lvl


# -----------------------------------------------------------------------------
# Settings
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class Config:
    """Config for the CMAP client"""
    # System
    log_level: str

    # Service
    domain: str
    api_key_prefix: str

    # Credentials
    api_key: str = field(repr=False)
    api_key_file: str

    @property
    def has_api_key(self) -> bool:
        """True when a key was supplied through the environment."""
        return bool(self.api_key)


def load_config() -> Config:
    """Load config"""
    return Config(
        log_level=_log_level_to_std("CMAP_LOG_LEVEL"),
        domain=_get_str("CMAP_DOMAIN", DEFAULT_DOMAIN).rstrip("/"),
        api_key_prefix=_get_prefix("CMAP_API_KEY_PREFIX", DEFAULT_KEY_PREFIX),
        api_key=_get_str("CMAP_API_KEY", ""),
        api_key_file=_get_str("CMAP_API_KEY_FILE", DEFAULT_KEY_FILE),
    )


config = load_config()

configure_logger(level=config.log_level)
cmapLogger.debug("CMAP_LOG_LEVEL: " + config.log_level)
cmapLogger.debug("CMAP domain: " + config.domain)
cmapLogger.debug("API key file: " + config.api_key_file)
cmapLogger.debug("API key from environment: " + str(config.has_api_key))
