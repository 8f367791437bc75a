"""Stub HTTP session for exercising the client without a network."""

from typing import Callable, List, Optional, Tuple, Union
from urllib.parse import urlsplit

import pandas as pd
import pytest
import requests

from cmap_client.data_api.api_cmap import CMAP
from cmap_client.data_api.credentials import Credentials

Reply = Union[str, Tuple[int, str]]


class FakeResponse:
    def __init__(self, status_code: int, text: str):
        self.status_code = status_code
        self.text = text

    @property
    def ok(self) -> bool:
        return self.status_code < 400


class FakeSession:
    """Records every GET and answers with `handler(statement)` (echo by default)."""

    def __init__(self, handler: Optional[Callable[[Optional[str]], Reply]] = None):
        self.handler = handler or echo
        self.calls: List[dict] = []
        self.closed = False

    @property
    def statements(self) -> List[Optional[str]]:
        return [c["statement"] for c in self.calls]

    def get(self, url, params=None, headers=None, **kwargs):
        prepared = requests.Request("GET", url, params=params).prepare().url
        statement = (params or {}).get("query")
        self.calls.append({
            "url": prepared,
            "path": urlsplit(prepared).path,
            "headers": headers,
            "statement": statement,
        })
        reply = self.handler(statement)
        if isinstance(reply, tuple):
            return FakeResponse(*reply)
        return FakeResponse(200, reply)

    def close(self):
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


def csv_body(df: pd.DataFrame) -> str:
    return df.to_csv(index=False)


def echo(statement: Optional[str]) -> str:
    """Return the received statement as a single-cell table."""
    return csv_body(pd.DataFrame({"statement": [statement]}))


def scripted(*rules: Tuple[str, Reply], default: Reply = "") -> Callable[[Optional[str]], Reply]:
    """Answer with the reply of the first rule whose text occurs in the statement."""
    def handler(statement):
        for needle, reply in rules:
            if needle in (statement or ""):
                return reply
        return default
    return handler


@pytest.fixture
def credentials():
    return Credentials(key="secret-key", key_prefix="Api-Key ", domain="https://cmap.test")


@pytest.fixture
def make_api(credentials):
    def _make(handler=echo):
        session = FakeSession(handler)
        return CMAP(credentials=credentials, session=session), session
    return _make
