"""Exceptions raised by the CMAP client"""

from __future__ import annotations

from typing import Optional

import pandas as pd


class CMAPError(Exception):
    """Base class for every error raised by this package."""


class CredentialsError(CMAPError, ValueError):
    """API key, prefix or domain is missing or empty."""


class StatementError(CMAPError, ValueError):
    """A query statement could not be rendered from its parameters."""


# ########################################################################
# Transport
# ########################################################################


class RequestError(CMAPError):
    """A request to the CMAP service did not produce a table."""

    def __init__(self, message: str, route: str = "", status: Optional[int] = None):
        super().__init__(message)
        self.route = route
        self.status = status


class NetworkError(RequestError):
    """Connection, DNS, TLS or other transport-level failure."""


class AuthenticationError(RequestError):
    """The service rejected the API key (HTTP 401/403)."""


class ServiceError(RequestError):
    """The service answered with a non-success status."""

    def __init__(self, message: str, route: str = "", status: Optional[int] = None, body: str = ""):
        super().__init__(message, route=route, status=status)
        self.body = body


class ResponseParseError(RequestError):
    """The response body is not a delimited table."""


# ########################################################################
# Lookups & parameters
# ########################################################################


class InvalidNameError(CMAPError, LookupError):
    """A table, cruise or variable name matched nothing."""


class AmbiguousNameError(CMAPError, LookupError):
    """A name matched more than one row; `matches` holds the candidates."""

    def __init__(self, message: str, matches: Optional[pd.DataFrame] = None):
        super().__init__(message)
        self.matches = matches if matches is not None else pd.DataFrame()


class InvalidIntervalError(CMAPError, ValueError):
    """Unknown time-series binning interval."""


class UnsupportedBinningError(CMAPError, ValueError):
    """Custom time binning requested on a climatological dataset."""


class DatasetTooLargeError(CMAPError):
    """Whole-table retrieval refused because the dataset is too large."""

    def __init__(self, message: str, rows: int, limit: int):
        super().__init__(message)
        self.rows = rows
        self.limit = limit


class ToleranceMismatchError(CMAPError, ValueError):
    """Target and tolerance sequences passed to a match are not aligned."""
