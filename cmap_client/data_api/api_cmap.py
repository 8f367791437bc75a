"""Simons CMAP data accessors: catalog, datasets, variables, cruises, subsets and matching."""

from __future__ import annotations

import json
import math
from typing import List, Optional, Sequence

import pandas as pd

from cmap_client.data_api.api_rest import RestAPI
from cmap_client.data_api.errors import (
    DatasetTooLargeError,
    ResponseParseError,
    ToleranceMismatchError,
    UnsupportedBinningError,
)
from cmap_client.data_api.statement import bind, exec_procedure, identifier
from cmap_client.data_api.support_functions.support_functions import (
    DEFAULT_TIME_SERIES_USP,
    ensure_single_match,
    first_value,
    interval_to_usp_name,
    is_climatology,
    validate_tolerances,
)
from cmap_client.utils.cmap_logger import get_logger

log = get_logger("api")

MAX_DATASET_ROWS = 2_000_000
CRUISE_TRAJECTORY_TABLE = "tblCruise_Trajectory"


class CMAP(RestAPI):
    """
    Client for the Simons CMAP database.

    Each method composes one statement (a stored-procedure call or a SELECT),
    runs it through `query` and returns the resulting pandas.DataFrame.
    Name lookups are not cached: every call resolves again.

        api = CMAP(api_key="...")
        api.space_time(table="tblArgoMerge_REP", variable="argo_merge_salinity_adj",
                       dt1="2015-05-01", dt2="2015-05-30", lat1=28.1, lat2=35.4,
                       lon1=-71.3, lon2=-50, depth1=0, depth2=100)
    """

    def _df(self, statement: str) -> pd.DataFrame:
        _, df = self.query(statement)
        return df

    # --------------------------------------------------------------------
    # Catalog
    # --------------------------------------------------------------------
    def get_catalog(self) -> pd.DataFrame:
        """Full catalog of variables."""
        return self._df(exec_procedure("uspCatalog"))

    def search_catalog(self, keywords: str) -> pd.DataFrame:
        """
        Catalog variables annotated with keywords similar to `keywords`.

        Keywords are blank-separated; order and case do not matter. Any hint
        works: a variable name (NO3) or term (Nitrate), a methodology or
        instrument (satellite, CTD), a cruise name (KOK1606, Falkor), a data
        producer or institution.

            api.search_catalog("nitrite falkor")
        """
        return self._df(exec_procedure("uspSearchCatalog", keywords))

    def datasets(self) -> pd.DataFrame:
        """Datasets hosted by CMAP."""
        return self._df(exec_procedure("uspDatasets"))

    def head(self, table: str, rows: int = 5) -> pd.DataFrame:
        """Top `rows` records of a dataset."""
        return self._df(exec_procedure("uspHead", table, int(rows)))

    def columns(self, table: str) -> pd.DataFrame:
        """Columns of a dataset."""
        return self._df(exec_procedure("uspColumns", table))

    # --------------------------------------------------------------------
    # Datasets
    # --------------------------------------------------------------------
    def get_dataset_ID(self, table: str) -> int:  # pylint: disable=C0103
        """Dataset ID of a table (case-insensitive name match, must be unique)."""
        df = self._df(bind(
            "SELECT DISTINCT(Dataset_ID) FROM dbo.udfCatalog() WHERE LOWER(Table_Name)=LOWER(?)",
            table,
        ))
        df = ensure_single_match(df, table, "table")
        return int(df["Dataset_ID"].iloc[0])

    def get_dataset(self, table: str) -> pd.DataFrame:
        """
        The entire dataset, without its metadata.

        Refuses datasets with more than MAX_DATASET_ROWS records before
        requesting them; fetch those in chunks with `space_time`.
        """
        dataset_id = self.get_dataset_ID(table)
        stats = self._df(bind("SELECT JSON_stats FROM tblDataset_Stats WHERE Dataset_ID=?", dataset_id))
        rows = self._row_count(stats, table)
        if rows > MAX_DATASET_ROWS:
            msg = (
                f"The requested dataset has {rows} records.\n"
                f"It is not recommended to retrieve datasets with more than {MAX_DATASET_ROWS} rows "
                "using this method.\n"
                "For large datasets, please use the 'space_time' method and retrieve the data in smaller chunks."
            )
            log.error(msg)
            raise DatasetTooLargeError(msg, rows=rows, limit=MAX_DATASET_ROWS)
        return self._df(f"SELECT * FROM {identifier(table)}")

    @staticmethod
    def _row_count(stats: pd.DataFrame, table: str) -> int:
        raw = first_value(stats, "JSON_stats", f"statistics of {table}")
        try:
            return int(float(json.loads(raw)["lat"]["count"]))
        except (TypeError, KeyError, ValueError) as e:
            msg = f"Unreadable statistics for {table}: {raw!r}"
            log.error(msg)
            raise ResponseParseError(msg) from e

    def get_dataset_metadata(self, table: str) -> pd.DataFrame:
        """Dataset metadata."""
        return self._df(exec_procedure("uspDatasetMetadata", table))

    def get_references(self, dataset_id: int) -> pd.DataFrame:
        """References associated with a dataset."""
        return self._df(bind("SELECT Reference FROM dbo.udfDatasetReferences(?)", int(dataset_id)))

    # --------------------------------------------------------------------
    # Variables
    # --------------------------------------------------------------------
    def get_var(self, table: str, variable: str) -> pd.DataFrame:
        """Row of tblVariables describing `variable`."""
        return self._df(bind(
            "SELECT * FROM tblVariables WHERE Table_Name=? AND Short_Name=?", table, variable
        ))

    def get_var_catalog(self, table: str, variable: str) -> pd.DataFrame:
        """Catalog entry of a variable."""
        return self._df(bind(
            "SELECT * FROM [dbo].udfCatalog() WHERE Table_Name=? AND Variable=?", table, variable
        ))

    def get_var_long_name(self, table: str, variable: str) -> str:
        """Long name of a variable."""
        df = self._df(bind(
            "SELECT Long_Name, Short_Name FROM tblVariables WHERE Table_Name=? AND Short_Name=?",
            table, variable,
        ))
        return first_value(df, "Long_Name", f"variable {variable} in {table}")

    def get_unit(self, table: str, variable: str) -> str:
        """Unit of a variable."""
        df = self._df(bind(
            "SELECT Unit, Short_Name FROM tblVariables WHERE Table_Name=? AND Short_Name=?",
            table, variable,
        ))
        return first_value(df, "Unit", f"variable {variable} in {table}")

    def get_var_resolution(self, table: str, variable: str) -> pd.DataFrame:
        """Spatial and temporal resolution of a variable."""
        return self._df(exec_procedure("uspVariableResolution", table, variable))

    def get_var_coverage(self, table: str, variable: str) -> pd.DataFrame:
        """Spatial and temporal coverage of a variable."""
        return self._df(exec_procedure("uspVariableCoverage", table, variable))

    def get_var_stat(self, table: str, variable: str) -> pd.DataFrame:
        """Summary statistics of a variable."""
        return self._df(exec_procedure("uspVariableStat", table, variable))

    def get_metadata(self, table: str, variable: str) -> pd.DataFrame:
        """Variable metadata."""
        return self._df(exec_procedure("uspVariableMetaData", table, variable))

    def has_field(self, table: str, variable: str) -> bool:
        """True if `variable` is a column of `table`."""
        df = self._df(bind("SELECT COL_LENGTH(?, ?) AS RESULT", table, variable))
        return len(df) > 0 and not pd.isna(df["RESULT"].iloc[0])

    def is_grid(self, table: str, variable: str) -> Optional[bool]:
        """
        True for gridded variables, False for irregular ones, None if the
        variable is unknown.
        """
        df = self._df(bind(
            "SELECT Spatial_Res_ID, RTRIM(LTRIM(Spatial_Resolution)) AS Spatial_Resolution FROM tblVariables "
            "JOIN tblSpatial_Resolutions ON [tblVariables].Spatial_Res_ID=[tblSpatial_Resolutions].ID "
            "WHERE Table_Name=? AND Short_Name=?",
            table, variable,
        ))
        if len(df) < 1:
            return None
        return str(df["Spatial_Resolution"].iloc[0]).strip().lower() != "irregular"

    # --------------------------------------------------------------------
    # Cruises
    # --------------------------------------------------------------------
    def cruises(self) -> pd.DataFrame:
        """All hosted cruises."""
        return self._df(exec_procedure("uspCruises"))

    def cruise_by_name(self, cruise_name: str) -> pd.DataFrame:
        """
        Single-row cruise details: official name, nickname, ship, start/end
        time and location. Nicknames ('Diel', 'Gradients_1') work as well.
        """
        df = self._df(exec_procedure("uspCruiseByName", cruise_name))
        return ensure_single_match(df, cruise_name, "cruise")

    def _cruise_id(self, cruise_name: str) -> int:
        return int(self.cruise_by_name(cruise_name)["ID"].iloc[0])

    def cruise_bounds(self, cruise_name: str) -> pd.DataFrame:
        """Space-time bounding box of a cruise."""
        return self._df(exec_procedure("uspCruiseBounds", self._cruise_id(cruise_name)))

    def cruise_trajectory(self, cruise_name: str) -> pd.DataFrame:
        """Cruise trajectory."""
        return self._df(exec_procedure("uspCruiseTrajectory", self._cruise_id(cruise_name)))

    def cruise_variables(self, cruise_name: str) -> pd.DataFrame:
        """Variables measured during a cruise."""
        return self._df(bind("SELECT * FROM dbo.udfCruiseVariables(?)", self._cruise_id(cruise_name)))

    # --------------------------------------------------------------------
    # Space-time subsets
    # --------------------------------------------------------------------
    def subset(
                self,
                sp_name: str,
                table: str,
                variable: str,
                dt1: str,
                dt2: str,
                lat1: float,
                lat2: float,
                lon1: float,
                lon2: float,
                depth1: float,
                depth2: float,
                ) -> pd.DataFrame:
        """
        Run a space-time stored procedure:
            EXEC <sp_name> table, variable, dt1, dt2, lat1, lat2, lon1, lon2, depth1, depth2
        Dates are passed through as given; bounds are sent as floats.
        """
        return self._df(exec_procedure(
            sp_name,
            table,
            variable,
            dt1,
            dt2,
            float(lat1),
            float(lat2),
            float(lon1),
            float(lon2),
            float(depth1),
            float(depth2),
        ))

    def space_time(self, table, variable, dt1, dt2, lat1, lat2, lon1, lon2, depth1, depth2) -> pd.DataFrame:
        """Subset ordered by time, lat, lon and depth (if any)."""
        return self.subset("uspSpaceTime", table, variable, dt1, dt2, lat1, lat2, lon1, lon2, depth1, depth2)

    def time_series(
                    self,
                    table: str,
                    variable: str,
                    dt1: str,
                    dt2: str,
                    lat1: float,
                    lat2: float,
                    lon1: float,
                    lon2: float,
                    depth1: float,
                    depth2: float,
                    interval: str = "",
                    ) -> pd.DataFrame:
        """
        Mean and standard deviation of the variable at each time step within
        the space-time box, ordered by time.

        `interval` bins the series weekly ('w'), monthly ('m'), quarterly ('q')
        or annually ('a'); binning is not available for climatological datasets.
        """
        usp = interval_to_usp_name(interval)
        if usp != DEFAULT_TIME_SERIES_USP and is_climatology(table):
            msg = (
                "Custom binning (monthly, weekly, ...) is not supported for climatological data sets. "
                f"Table {table} represents a climatological data set."
            )
            log.error(msg)
            raise UnsupportedBinningError(msg)
        return self.subset(usp, table, variable, dt1, dt2, lat1, lat2, lon1, lon2, depth1, depth2)

    def depth_profile(self, table, variable, dt1, dt2, lat1, lat2, lon1, lon2, depth1, depth2) -> pd.DataFrame:
        """Mean and standard deviation at each depth level, ordered by depth."""
        return self.subset("uspDepthProfile", table, variable, dt1, dt2, lat1, lat2, lon1, lon2, depth1, depth2)

    def section(self, table, variable, dt1, dt2, lat1, lat2, lon1, lon2, depth1, depth2) -> pd.DataFrame:
        """Section subset ordered by time, lat, lon and depth."""
        return self.subset("uspSectionMap", table, variable, dt1, dt2, lat1, lat2, lon1, lon2, depth1, depth2)

    # --------------------------------------------------------------------
    # Colocalization
    # --------------------------------------------------------------------
    def match(
                self,
                source_table: str,
                source_variable: str,
                target_tables: Sequence[str],
                target_variables: Sequence[str],
                dt1: str,
                dt2: str,
                lat1: float,
                lat2: float,
                lon1: float,
                lon2: float,
                depth1: float,
                depth2: float,
                time_tolerance: Sequence[int],
                lat_tolerance: Sequence[float],
                lon_tolerance: Sequence[float],
                depth_tolerance: Sequence[float],
                ) -> pd.DataFrame:
        """
        Colocalize the source variable with each target variable.

        Target i is matched within time_tolerance[i] (days, or months for
        monthly climatologies; whole numbers only), lat/lon_tolerance[i]
        degrees and depth_tolerance[i] meters. One uspMatch call is issued per
        target and the results are joined on their shared columns, so the
        returned frame holds the source variable plus every target variable.

            api.match(source_table="tblKM1314_Cobalmins",
                      source_variable="Me_PseudoCobalamin_Particulate_pM",
                      target_tables=["tblDarwin_Phytoplankton"],
                      target_variables=["picoprokaryote"],
                      dt1="2013-08-11", dt2="2013-09-05",
                      lat1=22.25, lat2=45.25, lon1=-159.25, lon2=-127.75,
                      depth1=-5, depth2=305,
                      time_tolerance=[1], lat_tolerance=[0.25],
                      lon_tolerance=[0.25], depth_tolerance=[5])
        """
        n = validate_tolerances(
            target_tables, target_variables, time_tolerance, lat_tolerance, lon_tolerance, depth_tolerance
        )
        time_steps = [_whole(t) for t in time_tolerance]
        frames: List[pd.DataFrame] = []
        for i in range(n):
            log.info(f"Matching {source_table}.{source_variable} with {target_tables[i]}.{target_variables[i]}")
            frames.append(self._df(exec_procedure(
                "uspMatch",
                source_table,
                source_variable,
                target_tables[i],
                target_variables[i],
                dt1,
                dt2,
                float(lat1),
                float(lat2),
                float(lon1),
                float(lon2),
                float(depth1),
                float(depth2),
                time_steps[i],
                float(lat_tolerance[i]),
                float(lon_tolerance[i]),
                float(depth_tolerance[i]),
            )))
        return merge_matches(frames)

    def along_track(
                    self,
                    cruise: str,
                    target_tables: Sequence[str],
                    target_variables: Sequence[str],
                    depth1: float,
                    depth2: float,
                    time_tolerance: Sequence[int],
                    lat_tolerance: Sequence[float],
                    lon_tolerance: Sequence[float],
                    depth_tolerance: Sequence[float],
                    ) -> pd.DataFrame:
        """
        Colocalize a cruise track with the target variables. The cruise's
        bounding box becomes the source time and space window.

            api.along_track(cruise="gradients_1",
                            target_tables=["tblSeaFlow", "tblDarwin_Nutrient_Climatology"],
                            target_variables=["prochloro_abundance", "PO4_darwin_clim"],
                            depth1=0, depth2=5,
                            time_tolerance=[0, 0], lat_tolerance=[0.01, 0.25],
                            lon_tolerance=[0.01, 0.25], depth_tolerance=[0, 5])
        """
        bounds = self.cruise_bounds(cruise)
        first_value(bounds, "ID", f"bounds of cruise {cruise}")
        b = bounds.iloc[0]
        return self.match(
            source_table=CRUISE_TRAJECTORY_TABLE,
            source_variable=str(int(b["ID"])),
            target_tables=target_tables,
            target_variables=target_variables,
            dt1=str(b["dt1"]),
            dt2=str(b["dt2"]),
            lat1=b["lat1"],
            lat2=b["lat2"],
            lon1=b["lon1"],
            lon2=b["lon2"],
            depth1=depth1,
            depth2=depth2,
            time_tolerance=time_tolerance,
            lat_tolerance=lat_tolerance,
            lon_tolerance=lon_tolerance,
            depth_tolerance=depth_tolerance,
        )


def _whole(value) -> int:
    try:
        number = float(value)
    except (TypeError, ValueError):
        number = math.nan
    if not math.isfinite(number) or number != int(number):
        msg = f"Time tolerance must be a whole number, got {value!r}"
        log.error(msg)
        raise ToleranceMismatchError(msg)
    return int(number)


def merge_matches(frames: Sequence[pd.DataFrame]) -> pd.DataFrame:
    """
    Join per-target match results. The first frame is the base; later frames
    add only their new columns, left-joined on the columns they share with it.
    """
    if not frames:
        return pd.DataFrame()
    merged = frames[0]
    for df in frames[1:]:
        shared = [c for c in df.columns if c in merged.columns]
        extra = [c for c in df.columns if c not in merged.columns]
        if not extra:
            continue
        if not shared:
            merged = pd.concat([merged.reset_index(drop=True), df[extra].reset_index(drop=True)], axis=1)
            continue
        merged = merged.merge(df[shared + extra].drop_duplicates(subset=shared), on=shared, how="left")
    return merged
