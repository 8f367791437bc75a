"""CMAP REST transport: authenticated GET requests returning DataFrames."""

from __future__ import annotations

from typing import Dict, Optional, Tuple

import pandas as pd
import requests

from cmap_client.data_api.credentials import Credentials
from cmap_client.data_api.errors import (
    AuthenticationError,
    NetworkError,
    ResponseParseError,
    ServiceError,
)
from cmap_client.data_api.support_functions.support_functions import parse_table
from cmap_client.utils.cmap_logger import get_logger

log = get_logger("rest")

QUERY_ROUTE = "/api/data/query"


class RestAPI:
    """
    Request executor and query gateway for one set of credentials.

    Every call is a single synchronous GET: no retries, no pacing and the
    transport's default timeout. Failures raise a RequestError subclass.
    """

    def __init__(
                self,
                api_key: Optional[str] = None,
                credentials: Optional[Credentials] = None,
                session: Optional[requests.Session] = None,
                ):
        self.credentials = credentials or Credentials.resolve(key=api_key)
        self.session = session if session is not None else requests.Session()

    def close(self):
        """Release the session's pooled connections."""
        self.session.close()

    def __enter__(self) -> "RestAPI":
        return self

    def __exit__(self, *exc):
        self.close()

    @property
    def headers(self) -> Dict[str, str]:
        """Request headers for this client's credentials."""
        return {
            "Authorization": self.credentials.authorization,
            "content-type": "application/json",
        }

    def _get(self, route: str, payload: Optional[Dict[str, str]] = None) -> Tuple[int, pd.DataFrame]:
        """Send one GET and parse the body into a DataFrame."""
        log.debug(f"GET {route} {payload or ''}")
        try:
            r = self.session.get(self.credentials.domain + route, params=payload or None, headers=self.headers)
        except requests.RequestException as e:
            msg = f"Request to {route} failed: {e}"
            log.error(msg)
            raise NetworkError(msg, route=route) from e

        if r.status_code in (401, 403):
            msg = f"CMAP rejected the API key (HTTP {r.status_code}) on {route}"
            log.error(msg)
            raise AuthenticationError(msg, route=route, status=r.status_code)
        if not r.ok:
            msg = f"CMAP returned HTTP {r.status_code} on {route}: {r.text[:500]}"
            log.error(msg)
            raise ServiceError(msg, route=route, status=r.status_code, body=r.text)

        try:
            df = parse_table(r.text)
        except (pd.errors.ParserError, UnicodeDecodeError, ValueError) as e:
            msg = f"Could not parse response from {route} as a table: {e}"
            log.error(msg)
            raise ResponseParseError(msg, route=route, status=r.status_code) from e
        log.debug(f"HTTP {r.status_code}: {len(df)} row(s)")
        return r.status_code, df

    def query(self, statement: str) -> Tuple[int, pd.DataFrame]:
        """
        Run a SQL statement on CMAP and return (status, DataFrame).

        Example:
            api = RestAPI()
            status, df = api.query("SELECT * FROM tblSensors")
        """
        return self._get(QUERY_ROUTE, {"query": statement})


def query(
          credentials: Credentials,
          statement: str,
          session: Optional[requests.Session] = None,
          ) -> Tuple[int, pd.DataFrame]:
    """Run one statement with explicit credentials, without keeping a client around."""
    if session is not None:
        return RestAPI(credentials=credentials, session=session).query(statement)
    with requests.Session() as s:
        return RestAPI(credentials=credentials, session=s).query(statement)
