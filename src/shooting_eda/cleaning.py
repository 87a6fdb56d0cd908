from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, fields
from datetime import date, timedelta
from typing import Dict, Iterable, List

import pandas as pd

from .config import (
    DATE_COLUMN,
    DATE_FORMAT,
    LOCATION_COLUMN,
    MISSING_LOCATION,
    PARSE_POLICIES,
    RECORDED_MISSING_LOCATION,
    TIME_COLUMN,
)
from .errors import RecordParseError

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class IncidentRecord:
    occurrence_date: date | None
    occurrence_time: timedelta | None
    location_category: str | None


INCIDENT_COLUMNS: List[str] = [f.name for f in fields(IncidentRecord)]


def coerce_incident_types(frame: pd.DataFrame) -> pd.DataFrame:
    return pd.DataFrame(
        {
            "occurrence_date": pd.to_datetime(frame["occurrence_date"]),
            "occurrence_time": pd.to_timedelta(frame["occurrence_time"]),
            "location_category": escape_reserved_locations(frame["location_category"].astype("string")),
        },
        index=frame.index,
    )


def escape_reserved_locations(locations: pd.Series) -> pd.Series:
    reserved = locations.eq(MISSING_LOCATION).fillna(False).astype(bool)
    if reserved.any():
        log.warning(
            "%s records carry the literal location %r; relabelled %r",
            f"{int(reserved.sum()):,}",
            MISSING_LOCATION,
            RECORDED_MISSING_LOCATION,
        )
        locations = locations.mask(reserved, RECORDED_MISSING_LOCATION)
    return locations


def frame_from_records(records: Iterable[IncidentRecord]) -> pd.DataFrame:
    rows = [asdict(record) for record in records]
    return coerce_incident_types(pd.DataFrame(rows, columns=INCIDENT_COLUMNS))


def normalize_strings(series: pd.Series) -> pd.Series:
    return series.astype("string").str.strip().replace({"": pd.NA})


def location_labels(series: pd.Series) -> pd.Series:
    """Location categories with missing values folded into their own label."""
    return series.astype("string").fillna(MISSING_LOCATION).astype(str)


def _apply_parse_policy(column: str, failures: int, parse_policy: str) -> None:
    if failures == 0:
        return
    message = f"{failures:,} {column} values could not be parsed and were set to null"
    if parse_policy == "raise":
        raise RecordParseError(message)
    level = logging.WARNING if parse_policy == "warn" else logging.INFO
    log.log(level, message)


def parse_occurrence_columns(raw: pd.DataFrame, parse_policy: str = "coerce") -> pd.DataFrame:
    """Parse the month/day/year date and the elapsed-since-midnight time.

    Unparseable values become NaT; ``parse_policy`` decides whether that is
    logged quietly, logged as a warning, or raised.
    """
    if parse_policy not in PARSE_POLICIES:
        raise ValueError(f"Unknown parse policy '{parse_policy}'.")
    date_text = raw[DATE_COLUMN].str.strip()
    time_text = raw[TIME_COLUMN].str.strip()
    dates = pd.to_datetime(date_text, format=DATE_FORMAT, errors="coerce")
    times = pd.to_timedelta(time_text, errors="coerce")

    _apply_parse_policy(DATE_COLUMN, int((raw[DATE_COLUMN].notna() & dates.isna()).sum()), parse_policy)
    _apply_parse_policy(TIME_COLUMN, int((raw[TIME_COLUMN].notna() & times.isna()).sum()), parse_policy)

    return pd.DataFrame(
        {"occurrence_date": dates, "occurrence_time": times},
        index=raw.index,
    )


def clean_dataframe(raw: pd.DataFrame, parse_policy: str = "coerce") -> pd.DataFrame:
    parsed = parse_occurrence_columns(raw, parse_policy=parse_policy)
    clean = coerce_incident_types(
        parsed.assign(location_category=normalize_strings(raw[LOCATION_COLUMN]))
    )[INCIDENT_COLUMNS]
    log.info("Cleaned %s incident records", f"{len(clean):,}")
    if log.isEnabledFor(logging.DEBUG):
        log.debug("Cleaned table summary:\n%s", describe_frame(clean).to_string())
    return clean


def describe_frame(df: pd.DataFrame) -> pd.DataFrame:
    return df.describe(include="all")


def compute_quality_metrics(raw: pd.DataFrame, clean: pd.DataFrame) -> Dict[str, object]:
    dates = clean["occurrence_date"].dropna()
    missing = clean.isna().mean().sort_values(ascending=False).round(4).to_dict()
    metrics = {
        "records": int(len(clean)),
        "date_min": str(dates.min().date()) if not dates.empty else None,
        "date_max": str(dates.max().date()) if not dates.empty else None,
        "date_parse_failures": int((raw[DATE_COLUMN].notna() & clean["occurrence_date"].isna()).sum()),
        "time_parse_failures": int((raw[TIME_COLUMN].notna() & clean["occurrence_time"].isna()).sum()),
        "missing_fraction": {col: float(share) for col, share in missing.items()},
        "distinct_locations": int(location_labels(clean["location_category"]).nunique()),
    }
    return metrics
