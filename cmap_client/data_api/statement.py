"""
Query statement construction.

Statements sent to CMAP are plain text, so values are bound client-side:
templates use `?` placeholders and every parameter is rendered as a SQL
literal through `sql_literal`. Names that must appear in identifier position
(tables in a FROM clause, stored procedures) go through `identifier`.

    >>> bind("EXEC uspHead ?, ?", "tblFalkor_2018", 5)
    "EXEC uspHead 'tblFalkor_2018', 5"
    >>> exec_procedure("uspColumns", "tblAMT13_Chisholm")
    "EXEC uspColumns 'tblAMT13_Chisholm'"
"""

from __future__ import annotations

import math
import numbers
import re
from typing import Any

from cmap_client.data_api.errors import StatementError
from cmap_client.utils.cmap_logger import cmapLogger

PLACEHOLDER = "?"
_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def sql_literal(value: Any) -> str:
    """Render one Python (or numpy) scalar as a T-SQL literal."""
    if value is None:
        return "NULL"
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, numbers.Integral):
        return str(int(value))
    if isinstance(value, numbers.Real):
        value = float(value)
        if math.isnan(value) or math.isinf(value):
            msg = f"Cannot bind non-finite number: {value!r}"
            cmapLogger.error(msg)
            raise StatementError(msg)
        return repr(value)
    if isinstance(value, str):
        return "'" + value.replace("'", "''") + "'"
    msg = f"Unsupported parameter type {type(value).__name__}: {value!r}"
    cmapLogger.error(msg)
    raise StatementError(msg)


def identifier(name: str) -> str:
    """Return `name` unchanged if it is a bare SQL identifier."""
    if not isinstance(name, str) or not _IDENTIFIER.match(name):
        msg = f"Invalid identifier: {name!r}"
        cmapLogger.error(msg)
        raise StatementError(msg)
    return name


def bind(template: str, *params: Any) -> str:
    """Substitute each `?` in `template` with the matching parameter literal."""
    pieces = template.split(PLACEHOLDER)
    if len(pieces) - 1 != len(params):
        msg = (f"Statement expects {len(pieces) - 1} parameter(s), "
               f"got {len(params)}: {template!r}")
        cmapLogger.error(msg)
        raise StatementError(msg)

    out = [pieces[0]]
    for value, tail in zip(params, pieces[1:]):
        out.append(sql_literal(value))
        out.append(tail)
    return "".join(out)


def exec_procedure(name: str, *args: Any) -> str:
    """Render a stored-procedure call: EXEC <name> <arg>, <arg>, ..."""
    statement = f"EXEC {identifier(name)}"
    if not args:
        return statement
    return bind(statement + " " + ", ".join([PLACEHOLDER] * len(args)), *args)
