import pandas as pd
import pytest

from cmap_client.data_api.errors import (
    AmbiguousNameError,
    InvalidIntervalError,
    InvalidNameError,
    ToleranceMismatchError,
)
from cmap_client.data_api.support_functions.support_functions import (
    ensure_single_match,
    first_value,
    interval_to_usp_name,
    is_climatology,
    parse_table,
    validate_tolerances,
)


@pytest.mark.parametrize("interval, usp", [
    ("", "uspTimeSeries"),
    ("w", "uspWeekly"), ("week", "uspWeekly"), ("weekly", "uspWeekly"),
    ("m", "uspMonthly"), ("month", "uspMonthly"), ("monthly", "uspMonthly"),
    ("q", "uspQuarterly"), ("s", "uspQuarterly"), ("season", "uspQuarterly"),
    ("seasonal", "uspQuarterly"), ("seasonality", "uspQuarterly"), ("quarterly", "uspQuarterly"),
    ("a", "uspAnnual"), ("y", "uspAnnual"), ("year", "uspAnnual"),
    ("yearly", "uspAnnual"), ("annual", "uspAnnual"),
])
def test_interval_maps_to_procedure(interval, usp):
    assert interval_to_usp_name(interval) == usp


@pytest.mark.parametrize("interval", ["Monthly", "W", "daily", "months", " ", "annually", None])
def test_unknown_interval_is_rejected(interval):
    with pytest.raises(InvalidIntervalError, match="Invalid interval"):
        interval_to_usp_name(interval)


def test_is_climatology_uses_table_name():
    assert is_climatology("tblDarwin_Plankton_Climatology")
    assert is_climatology("tblDarwin_Nutrient_Climatology")
    assert not is_climatology("tblArgoMerge_REP")
    assert not is_climatology("tblclimatology")


def test_single_match_passes_through():
    df = pd.DataFrame({"ID": [7], "Name": ["KOK1606"]})
    assert ensure_single_match(df, "KOK1606", "cruise") is df


def test_no_match_is_invalid_name():
    with pytest.raises(InvalidNameError, match="Invalid cruise name: nowhere"):
        ensure_single_match(pd.DataFrame({"ID": []}), "nowhere", "cruise")


def test_several_matches_are_ambiguous_and_carry_rows():
    df = pd.DataFrame({"ID": [1, 2], "Name": ["Gradients_1", "Gradients_2"]})
    with pytest.raises(AmbiguousNameError, match="More than one cruise") as info:
        ensure_single_match(df, "Gradients", "cruise")
    assert list(info.value.matches["ID"]) == [1, 2]


def test_first_value():
    df = pd.DataFrame({"Unit": ["mg/m3"], "Short_Name": ["chl"]})
    assert first_value(df, "Unit", "chl") == "mg/m3"
    with pytest.raises(InvalidNameError):
        first_value(df.iloc[0:0], "Unit", "chl")
    with pytest.raises(InvalidNameError):
        first_value(df, "Long_Name", "chl")


def test_aligned_tolerances_return_target_count():
    assert validate_tolerances(["a", "b"], ["x", "y"], [0, 1], [0.1, 0.2], [0.1, 0.2], [0, 5]) == 2


@pytest.mark.parametrize("args", [
    (["a", "b"], ["x"], [0, 1], [0.1, 0.2], [0.1, 0.2], [0, 5]),
    (["a"], ["x"], [0, 1], [0.1], [0.1], [0]),
    (["a"], ["x"], [0], [0.1], [0.1], []),
    ([], [], [], [], [], []),
])
def test_misaligned_tolerances_are_rejected(args):
    with pytest.raises(ToleranceMismatchError):
        validate_tolerances(*args)


def test_parse_table_strips_trailing_newline():
    df = parse_table("time,lat,sst\n2016-01-01,30.5,21.3\n")
    assert list(df.columns) == ["time", "lat", "sst"]
    assert len(df) == 1
    assert df["sst"].iloc[0] == pytest.approx(21.3)


def test_parse_table_empty_body():
    assert parse_table("").empty
    assert parse_table("\n").empty
