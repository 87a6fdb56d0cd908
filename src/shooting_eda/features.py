from __future__ import annotations

import pandas as pd

from .config import LATE_NIGHT_END, LATE_NIGHT_START, WEEKDAY_ORDER


def late_night(hour: int) -> int:
    return int(hour >= LATE_NIGHT_START or hour < LATE_NIGHT_END)


def weekday_labels(dates: pd.Series) -> pd.Series:
    # dayofweek counts from Monday; shift so Sunday is code 0
    codes = ((dates.dt.dayofweek + 1) % 7).fillna(-1).astype(int)
    return pd.Series(
        pd.Categorical.from_codes(codes, categories=WEEKDAY_ORDER, ordered=True),
        index=dates.index,
    )


def hour_of_day(times: pd.Series) -> pd.Series:
    # hours component of the elapsed time, so 0-23 even past a day boundary
    return times.dt.components["hours"].astype("Int64")


def augment_temporal_features(df: pd.DataFrame) -> pd.DataFrame:
    df = df.copy()
    df["weekday"] = weekday_labels(df["occurrence_date"])
    df["hour"] = hour_of_day(df["occurrence_time"])
    return df


def flag_late_night(df: pd.DataFrame) -> pd.DataFrame:
    """Add the 0/1 ``late_night`` label; records without an hour stay NA."""
    df = df.copy()
    df["late_night"] = pd.array(
        [pd.NA if pd.isna(hour) else late_night(int(hour)) for hour in df["hour"]],
        dtype="Int64",
    )
    return df
