"""API key storage and the immutable credentials a client is built from."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Optional

import pandas as pd

from cmap_client.data_api.errors import CredentialsError
from cmap_client.utils.cmap_logger import cmapLogger
from cmap_client.utils.config import config

KEY_COLUMN = "apiKey"


def set_api_key(key: str, path: Optional[str] = None) -> str:
    """
    Save the API key on local disk as a one-cell CSV. Returns the file path.

    Example:
        set_api_key("your-api-key")
    """
    if not key:
        msg = "Refusing to store an empty API key"
        cmapLogger.error(msg)
        raise CredentialsError(msg)
    path = path or config.api_key_file
    folder = os.path.dirname(path)
    if folder:
        os.makedirs(folder, exist_ok=True)
    pd.DataFrame({KEY_COLUMN: [key]}).to_csv(path, index=False)
    cmapLogger.info(f"API key saved to {path}")
    return path


def get_api_key(path: Optional[str] = None) -> str:
    """Return the stored API key."""
    path = path or config.api_key_file
    if not os.path.isfile(path):
        msg = (
            f"API key file not found: {path}. Register your key with:\n\n"
            "    set_api_key('your-api-key')\n"
        )
        cmapLogger.error(msg)
        raise CredentialsError(msg)
    df = pd.read_csv(path, dtype=str, keep_default_na=False)
    if df.empty or df.columns.empty or not str(df.iloc[0, 0]).strip():
        msg = f"API key file is empty: {path}"
        cmapLogger.error(msg)
        raise CredentialsError(msg)
    return str(df.iloc[0, 0]).strip()


@dataclass(frozen=True)
class Credentials:
    """API key, its header prefix and the service base address."""
    key: str = field(repr=False)
    key_prefix: str = config.api_key_prefix
    domain: str = config.domain

    def __post_init__(self):
        for name in ("key", "key_prefix", "domain"):
            if not getattr(self, name):
                msg = f"Credentials require a non-empty {name}"
                cmapLogger.error(msg)
                raise CredentialsError(msg)
        object.__setattr__(self, "domain", self.domain.rstrip("/"))
        if not self.domain:
            msg = "Credentials require a non-empty domain"
            cmapLogger.error(msg)
            raise CredentialsError(msg)

    @property
    def authorization(self) -> str:
        """Value of the Authorization header."""
        return f"{self.key_prefix}{self.key}"

    @classmethod
    def resolve(
                cls,
                key: Optional[str] = None,
                key_prefix: Optional[str] = None,
                domain: Optional[str] = None,
                key_file: Optional[str] = None,
                ) -> "Credentials":
        """
        Build credentials, looking the key up when not given:
        explicit key, then CMAP_API_KEY, then the key file.
        """
        if not key:
            key = config.api_key or get_api_key(key_file)
        return cls(
            key=key,
            key_prefix=config.api_key_prefix if key_prefix is None else key_prefix,
            domain=domain or config.domain,
        )
