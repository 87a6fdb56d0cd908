"""Pytest fixtures for the shooting report tests."""

from datetime import date, timedelta

import matplotlib

matplotlib.use("Agg")

import numpy as np
import pandas as pd
import pytest

from shooting_eda.cleaning import IncidentRecord, frame_from_records
from shooting_eda.features import augment_temporal_features, flag_late_night


SOURCE_HEADER = (
    "INCIDENT_KEY,OCCUR_DATE,OCCUR_TIME,BORO,PRECINCT,JURISDICTION_CODE,LOCATION_DESC,"
    "STATISTICAL_MURDER_FLAG,X_COORD_CD,Y_COORD_CD,Latitude,Longitude,Lon_Lat"
)


def _render_source_csv(rows):
    """Render (date, time, location) tuples as a CSV in the source layout."""
    lines = [SOURCE_HEADER]
    for idx, (occur_date, occur_time, location) in enumerate(rows, start=1):
        lines.append(
            f"{idx},{occur_date},{occur_time},BRONX,44,0,{location},false,"
            f"1007314,241257,40.83,-73.91,POINT (-73.91 40.83)"
        )
    return "\n".join(lines) + "\n"


@pytest.fixture
def make_source_csv():
    """Factory turning (date, time, location) rows into source CSV text."""
    return _render_source_csv


@pytest.fixture
def three_incidents() -> pd.DataFrame:
    """Saturday 23:00 bar, Sunday 14:00 unknown location, Sunday 02:00 bar."""
    return frame_from_records(
        [
            IncidentRecord(date(2020, 1, 4), timedelta(hours=23), "BAR/NIGHT CLUB"),
            IncidentRecord(date(2020, 1, 5), timedelta(hours=14), None),
            IncidentRecord(date(2020, 1, 5), timedelta(hours=2), "BAR/NIGHT CLUB"),
        ]
    )


@pytest.fixture
def synthetic_incidents() -> pd.DataFrame:
    """Cleaned incidents across four locations with different late-night mixes."""
    rng = np.random.default_rng(7)
    late_share = {"BAR/NIGHT CLUB": 0.7, "MULTI DWELL - PUBLIC HOUS": 0.35, "GROCERY/BODEGA": 0.15, None: 0.3}
    size = {"BAR/NIGHT CLUB": 60, "MULTI DWELL - PUBLIC HOUS": 120, "GROCERY/BODEGA": 50, None: 90}
    late_hours = [22, 23, 0, 1, 2, 3, 4]
    day_hours = list(range(5, 22))
    records = []
    start = date(2021, 3, 1)
    for location, share in late_share.items():
        for idx in range(size[location]):
            hours = late_hours if rng.random() < share else day_hours
            hour = int(rng.choice(hours))
            records.append(
                IncidentRecord(
                    start + timedelta(days=int(rng.integers(0, 365))),
                    timedelta(hours=hour, minutes=int(rng.integers(0, 60))),
                    location,
                )
            )
    return frame_from_records(records)


@pytest.fixture
def labelled_incidents(synthetic_incidents) -> pd.DataFrame:
    return flag_late_night(augment_temporal_features(synthetic_incidents))
