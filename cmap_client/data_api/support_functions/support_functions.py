"""Support functions for CMAP requests and responses"""

from __future__ import annotations

import io
from typing import Sequence

import pandas as pd

from cmap_client.data_api.errors import (
    AmbiguousNameError,
    InvalidIntervalError,
    InvalidNameError,
    ToleranceMismatchError,
)
from cmap_client.utils.cmap_logger import cmapLogger, format_rows


DEFAULT_TIME_SERIES_USP = "uspTimeSeries"

INTERVAL_TO_USP = {
    "": DEFAULT_TIME_SERIES_USP,
    **dict.fromkeys(("w", "week", "weekly"), "uspWeekly"),
    **dict.fromkeys(("m", "month", "monthly"), "uspMonthly"),
    **dict.fromkeys(("q", "s", "season", "seasonal", "seasonality", "quarterly"), "uspQuarterly"),
    **dict.fromkeys(("a", "y", "year", "yearly", "annual"), "uspAnnual"),
}


def interval_to_usp_name(interval: str) -> str:
    """Return the time-series stored procedure for a binning interval (case-sensitive)."""
    try:
        return INTERVAL_TO_USP[interval]
    except (KeyError, TypeError) as e:
        msg = f"Invalid interval: {interval!r}"
        cmapLogger.error(msg)
        raise InvalidIntervalError(msg) from e


def is_climatology(table_name: str) -> bool:
    """
    True if the table holds a climatological dataset.
    Decided by table name only, until the catalog exposes the dataset kind.
    """
    return "_Climatology" in table_name


def ensure_single_match(df: pd.DataFrame, name: str, kind: str) -> pd.DataFrame:
    """
    Enforce that a name lookup returned exactly one row.

    Raises InvalidNameError for no rows and AmbiguousNameError (after logging
    the candidates) for several. Returns `df` otherwise.
    """
    if len(df) < 1:
        msg = f"Invalid {kind} name: {name}"
        cmapLogger.error(msg)
        raise InvalidNameError(msg)
    if len(df) > 1:
        cmapLogger.warning(f"{len(df)} {kind}s match {name!r}:\n{format_rows(df)}")
        msg = f"More than one {kind} found for {name!r}. Please provide a more specific name."
        cmapLogger.error(msg)
        raise AmbiguousNameError(msg, matches=df)
    return df


def first_value(df: pd.DataFrame, column: str, what: str):
    """Return `df[column]` of the first row, or raise InvalidNameError if empty."""
    if len(df) < 1 or column not in df.columns:
        msg = f"Not found: {what}"
        cmapLogger.error(msg)
        raise InvalidNameError(msg)
    return df[column].iloc[0]


def validate_tolerances(
                        target_tables: Sequence[str],
                        target_variables: Sequence[str],
                        time_tolerance: Sequence[int],
                        lat_tolerance: Sequence[float],
                        lon_tolerance: Sequence[float],
                        depth_tolerance: Sequence[float],
                        ) -> int:
    """Check that targets and tolerances line up one-to-one; return their count."""
    sizes = {
        "target_tables": len(target_tables),
        "target_variables": len(target_variables),
        "time_tolerance": len(time_tolerance),
        "lat_tolerance": len(lat_tolerance),
        "lon_tolerance": len(lon_tolerance),
        "depth_tolerance": len(depth_tolerance),
    }
    n = sizes["target_tables"]
    if n == 0 or any(size != n for size in sizes.values()):
        msg = (
            "target_tables, target_variables and the four tolerance sequences "
            f"must be non-empty and of equal length, got {sizes}"
        )
        cmapLogger.error(msg)
        raise ToleranceMismatchError(msg)
    return n


def parse_table(text: str) -> pd.DataFrame:
    """Parse a newline-terminated CSV body; an empty body is an empty table."""
    body = text.rstrip("\r\n")
    if not body.strip():
        return pd.DataFrame()
    return pd.read_csv(io.StringIO(body))
