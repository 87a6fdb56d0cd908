from __future__ import annotations

from typing import Dict

import pandas as pd

from .cleaning import location_labels
from .config import TOP_N


def aggregate_weekday_hour(df: pd.DataFrame) -> pd.DataFrame:
    """Incident counts per (weekday, hour); records with an unknown key keep their own row."""
    agg = (
        df.groupby(["weekday", "hour"], dropna=False, observed=True, sort=True)
        .size()
        .reset_index(name="incidents")
    )
    return agg


def aggregate_locations(df: pd.DataFrame) -> pd.DataFrame:
    counts = (
        df.assign(location_category=location_labels(df["location_category"]))
        .groupby("location_category")
        .size()
        .reset_index(name="incidents")
    )
    return rank_top(counts, "incidents", n=None)


def rank_top(table: pd.DataFrame, value: str, n: int | None = TOP_N) -> pd.DataFrame:
    """Sort descending by ``value``, ties broken by category name, keep the first ``n``."""
    ranked = table.sort_values(
        [value, "location_category"],
        ascending=[False, True],
        kind="mergesort",
    )
    if n is not None:
        ranked = ranked.head(n)
    return ranked.reset_index(drop=True)


def compute_insights(df: pd.DataFrame) -> Dict[str, object]:
    hourly_counts = df.dropna(subset=["hour"]).groupby("hour").size()
    weekday_counts = df.dropna(subset=["weekday"]).groupby("weekday", observed=True).size()
    labelled = df["late_night"].dropna()
    insights: Dict[str, object] = {
        "late_night_share": float(labelled.mean()) if not labelled.empty else None,
        "late_night_incidents": int(labelled.sum()),
    }
    if not hourly_counts.empty:
        insights["hourly_peak"] = {
            "hour": int(hourly_counts.idxmax()),
            "incidents": int(hourly_counts.max()),
            "min_hour": int(hourly_counts.idxmin()),
            "min_incidents": int(hourly_counts.min()),
        }
    if not weekday_counts.empty:
        total = int(weekday_counts.sum())
        insights["weekday_peak"] = {
            "name": str(weekday_counts.idxmax()),
            "share": float(weekday_counts.max() / total),
            "min_name": str(weekday_counts.idxmin()),
            "min_share": float(weekday_counts.min() / total),
        }
    return insights
