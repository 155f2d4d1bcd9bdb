"""
Data loading and merging utilities for the internet usage vs. happiness project.

This module is intentionally self-contained so it can be reused by:
- the offline analysis script (`run_analysis.py`)
- the interactive Streamlit application (`app.py`)

Loading is a thin wrapper around `pandas.read_csv`; the interesting part is
`merge_tables`, which joins the two tables on a normalized country name.
"""

from __future__ import annotations

import logging
import math
import numbers
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping

import pandas as pd

from .config import DEFAULT_CONFIG, AnalysisConfig


logger = logging.getLogger(__name__)

# Raw column names of the source CSV files
INTERNET_COUNTRY_COL = "Country"
INTERNET_USAGE_COL = "PctOfPopulationUsingInternet"
INTERNET_LAT_COL = "Latitude"
INTERNET_LON_COL = "Longitude"
HAPPINESS_COUNTRY_COL = "Country"
HAPPINESS_SCORE_COL = "Ladder score"

INTERNET_REQUIRED_COLUMNS = [
    INTERNET_COUNTRY_COL,
    INTERNET_USAGE_COL,
    INTERNET_LAT_COL,
    INTERNET_LON_COL,
]
HAPPINESS_REQUIRED_COLUMNS = [HAPPINESS_COUNTRY_COL, HAPPINESS_SCORE_COL]

# Columns of the merged record frame
COUNTRY = "country"
INTERNET = "internet_usage_pct"
HAPPINESS = "happiness_score"
LATITUDE = "latitude"
LONGITUDE = "longitude"
CLUSTER_ID = "cluster_id"
LOCAL_SLOPE = "local_slope"

RECORD_COLUMNS = [COUNTRY, INTERNET, HAPPINESS, LATITUDE, LONGITUDE]
DROPPED_COLUMNS = ["table", "row", "country", "reason"]

# Reasons reported in `MergeResult.dropped`
MISSING_COUNTRY = "missing country"
INVALID_INTERNET = "invalid internet usage"
INVALID_HAPPINESS = "invalid happiness score"
NO_HAPPINESS_MATCH = "no happiness match"
INVALID_COORDINATES = "invalid coordinates"
DUPLICATE_COUNTRY = "duplicate country"


class DataLoadError(ValueError):
    """Raised when a source table cannot be used (e.g. missing columns)."""


@dataclass
class MergeResult:
    """Output of `merge_tables`: surviving records plus what was dropped."""

    records: pd.DataFrame
    dropped: pd.DataFrame
    n_internet_rows: int
    n_happiness_rows: int

    @property
    def n_dropped(self) -> int:
        """Number of internet-table rows that did not make it into `records`."""
        return int((self.dropped["table"] == "internet").sum())

    @property
    def drop_rate(self) -> float:
        """Share of internet-table rows that were dropped (0 for an empty table)."""
        if self.n_internet_rows == 0:
            return 0.0
        return self.n_dropped / self.n_internet_rows


def empty_records() -> pd.DataFrame:
    """Return an empty merged-record frame with the expected columns."""
    return pd.DataFrame(
        {
            COUNTRY: pd.Series(dtype=object),
            INTERNET: pd.Series(dtype=float),
            HAPPINESS: pd.Series(dtype=float),
            LATITUDE: pd.Series(dtype=float),
            LONGITUDE: pd.Series(dtype=float),
        }
    )


def _read_table(path: Path | str, required: List[str], label: str) -> pd.DataFrame:
    path = Path(path)
    try:
        df = pd.read_csv(path)
    except (OSError, pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        logger.error("Could not load %s table from %s: %s", label, path, e)
        raise

    missing = [c for c in required if c not in df.columns]
    if missing:
        logger.error(
            "%s table %s is missing required columns: %s",
            label,
            path,
            ", ".join(missing),
        )
        raise DataLoadError(
            f"{label} table is missing required columns: " + ", ".join(missing)
        )
    logger.info("Loaded %d rows from %s table %s", len(df), label, path)
    return df


def load_internet_table(path: Path | str) -> pd.DataFrame:
    """
    Load the internet usage CSV.

    Expected columns: `Country`, `PctOfPopulationUsingInternet`,
    `Latitude`, `Longitude` (header row present).
    """
    return _read_table(path, INTERNET_REQUIRED_COLUMNS, "internet")


def load_happiness_table(path: Path | str) -> pd.DataFrame:
    """Load the World Happiness Report CSV (`Country`, `Ladder score`)."""
    return _read_table(path, HAPPINESS_REQUIRED_COLUMNS, "happiness")


def normalize_country_name(name: Any, aliases: Mapping[str, str] | None = None) -> str:
    """
    Trim a raw country name and apply the manual alias table.

    Missing values (None / NaN) normalize to the empty string.
    """
    if aliases is None:
        aliases = DEFAULT_CONFIG.aliases
    if name is None or (isinstance(name, float) and math.isnan(name)):
        return ""
    clean = str(name).strip()
    return aliases.get(clean, clean)


def parse_number(value: Any) -> float | None:
    """
    Coerce a CSV cell to a finite float.

    Returns None for missing, unparseable, or non-finite values.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, numbers.Real):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if not math.isfinite(number):
        return None
    return number


def _as_rows(rows: Iterable[Mapping[str, Any]] | pd.DataFrame) -> List[Mapping[str, Any]]:
    if isinstance(rows, pd.DataFrame):
        return rows.to_dict(orient="records")
    return list(rows)


def build_happiness_lookup(
    happiness_rows: Iterable[Mapping[str, Any]] | pd.DataFrame,
    aliases: Mapping[str, str] | None = None,
) -> tuple[Dict[str, float], List[Dict[str, Any]]]:
    """
    Map normalized country name -> ladder score.

    A later valid row for a name overwrites an earlier one; the overwritten
    row is reported as a duplicate. Returns the lookup and the list of
    dropped happiness rows.
    """
    lookup: Dict[str, float] = {}
    seen_at: Dict[str, int] = {}
    dropped: List[Dict[str, Any]] = []

    for i, row in enumerate(_as_rows(happiness_rows)):
        name = normalize_country_name(row.get(HAPPINESS_COUNTRY_COL), aliases)
        if not name:
            dropped.append(_drop("happiness", i, "", MISSING_COUNTRY))
            continue
        score = parse_number(row.get(HAPPINESS_SCORE_COL))
        if score is None:
            dropped.append(_drop("happiness", i, name, INVALID_HAPPINESS))
            continue
        if name in seen_at:
            dropped.append(_drop("happiness", seen_at[name], name, DUPLICATE_COUNTRY))
        lookup[name] = score
        seen_at[name] = i

    return lookup, dropped


def _drop(table: str, row: int, country: str, reason: str) -> Dict[str, Any]:
    return {"table": table, "row": row, "country": country, "reason": reason}


def merge_tables(
    internet_rows: Iterable[Mapping[str, Any]] | pd.DataFrame,
    happiness_rows: Iterable[Mapping[str, Any]] | pd.DataFrame,
    config: AnalysisConfig = DEFAULT_CONFIG,
) -> MergeResult:
    """
    Join the internet usage and happiness tables on normalized country name.

    Steps:
    1. Build a lookup from happiness rows (normalized name -> ladder score)
    2. Walk the internet rows in input order
    3. Keep a row only if usage, happiness, latitude and longitude are all
       finite numbers

    Rows failing any step are not errors; they are listed in
    `MergeResult.dropped` with a reason. Duplicate names after normalization
    are resolved with `config.duplicate_policy`.
    """
    internet_list = _as_rows(internet_rows)
    happiness_list = _as_rows(happiness_rows)

    lookup, dropped = build_happiness_lookup(happiness_list, config.aliases)

    records: List[Dict[str, Any]] = []
    source_rows: List[int] = []
    for i, row in enumerate(internet_list):
        name = normalize_country_name(row.get(INTERNET_COUNTRY_COL), config.aliases)
        if not name:
            dropped.append(_drop("internet", i, "", MISSING_COUNTRY))
            continue
        usage = parse_number(row.get(INTERNET_USAGE_COL))
        if usage is None:
            dropped.append(_drop("internet", i, name, INVALID_INTERNET))
            continue
        happiness = lookup.get(name)
        if happiness is None:
            dropped.append(_drop("internet", i, name, NO_HAPPINESS_MATCH))
            continue
        lat = parse_number(row.get(INTERNET_LAT_COL))
        lon = parse_number(row.get(INTERNET_LON_COL))
        if lat is None or lon is None:
            dropped.append(_drop("internet", i, name, INVALID_COORDINATES))
            continue

        records.append(
            {
                COUNTRY: name,
                INTERNET: usage,
                HAPPINESS: happiness,
                LATITUDE: lat,
                LONGITUDE: lon,
            }
        )
        source_rows.append(i)

    records, duplicates = _resolve_duplicates(records, source_rows, config.duplicate_policy)
    dropped.extend(duplicates)

    df_records = pd.DataFrame(records, columns=RECORD_COLUMNS) if records else empty_records()
    df_dropped = pd.DataFrame(dropped, columns=DROPPED_COLUMNS)

    result = MergeResult(
        records=df_records.reset_index(drop=True),
        dropped=df_dropped,
        n_internet_rows=len(internet_list),
        n_happiness_rows=len(happiness_list),
    )
    logger.info(
        "Merged %d countries (%d of %d internet rows dropped, %d happiness rows dropped)",
        len(result.records),
        result.n_dropped,
        result.n_internet_rows,
        len(df_dropped) - result.n_dropped,
    )
    return result


def _resolve_duplicates(
    records: List[Dict[str, Any]], source_rows: List[int], policy: str
) -> tuple[List[Dict[str, Any]], List[Dict[str, Any]]]:
    """Apply the duplicate policy; order of survivors follows the input order."""
    if policy == "keep":
        return records, []

    keep_index: Dict[str, int] = {}
    for pos, rec in enumerate(records):
        name = rec[COUNTRY]
        if policy == "first":
            keep_index.setdefault(name, pos)
        else:
            keep_index[name] = pos

    kept = set(keep_index.values())
    survivors = [rec for pos, rec in enumerate(records) if pos in kept]
    duplicates = [
        _drop("internet", source_rows[pos], rec[COUNTRY], DUPLICATE_COUNTRY)
        for pos, rec in enumerate(records)
        if pos not in kept
    ]
    return survivors, duplicates
