import numpy as np
import pytest

from cmap_client.data_api.errors import StatementError
from cmap_client.data_api.statement import bind, exec_procedure, identifier, sql_literal


@pytest.mark.parametrize("value, literal", [
    ("tblCHL_REP", "'tblCHL_REP'"),
    ("O'Brien", "'O''Brien'"),
    (5, "5"),
    (np.int64(42), "42"),
    (30.0, "30.0"),
    (-159.25, "-159.25"),
    (np.float64(0.5), "0.5"),
    (True, "1"),
    (None, "NULL"),
])
def test_sql_literal(value, literal):
    assert sql_literal(value) == literal


@pytest.mark.parametrize("value", [float("nan"), float("inf"), [1, 2], {"a": 1}])
def test_sql_literal_rejects_unbindable_values(value):
    with pytest.raises(StatementError):
        sql_literal(value)


def test_bind_quotes_every_parameter():
    statement = bind("SELECT * FROM tblVariables WHERE Table_Name=? AND Short_Name=?", "tblCHL_REP", "chl")
    assert statement == "SELECT * FROM tblVariables WHERE Table_Name='tblCHL_REP' AND Short_Name='chl'"


def test_bind_neutralises_injection():
    statement = bind("EXEC uspColumns ?", "x'; DROP TABLE tblVariables; --")
    assert statement == "EXEC uspColumns 'x''; DROP TABLE tblVariables; --'"


def test_bind_counts_placeholders():
    with pytest.raises(StatementError):
        bind("SELECT ? , ?", 1)
    with pytest.raises(StatementError):
        bind("SELECT 1", 1)


def test_bind_leaves_question_marks_in_values():
    assert bind("EXEC uspSearchCatalog ?", "what?") == "EXEC uspSearchCatalog 'what?'"


def test_exec_procedure():
    assert exec_procedure("uspCatalog") == "EXEC uspCatalog"
    assert exec_procedure("uspHead", "tblFalkor_2018", 5) == "EXEC uspHead 'tblFalkor_2018', 5"


@pytest.mark.parametrize("name", ["tbl X", "tbl;DROP", "1tbl", "", "[dbo].tbl"])
def test_identifier_rejects_non_identifiers(name):
    with pytest.raises(StatementError):
        identifier(name)
    with pytest.raises(StatementError):
        exec_procedure(name)


def test_identifier_accepts_table_names():
    assert identifier("tblHOT_LAVA") == "tblHOT_LAVA"
