"""Tests for weekday/hour derivation and the late-night label."""

from datetime import date, timedelta

import pandas as pd
import pytest

from shooting_eda.cleaning import IncidentRecord, frame_from_records
from shooting_eda.features import (
    augment_temporal_features,
    flag_late_night,
    hour_of_day,
    late_night,
)


class TestLateNight:
    """Tests for the per-record late-night rule."""

    def test_whole_day(self):
        """Exactly 22:00-04:59 is late night."""
        for hour in range(24):
            expected = 1 if hour in {22, 23, 0, 1, 2, 3, 4} else 0
            assert late_night(hour) == expected

    @pytest.mark.parametrize("hour,expected", [(21, 0), (22, 1), (4, 1), (5, 0)])
    def test_boundaries(self, hour, expected):
        """Window edges."""
        assert late_night(hour) == expected

    def test_flag_matches_rule(self, three_incidents):
        """Frame-level flag uses the same rule, record by record."""
        flagged = flag_late_night(augment_temporal_features(three_incidents))
        assert flagged["late_night"].tolist() == [1, 0, 1]

    def test_unknown_hour_stays_missing(self):
        """A record without a time gets no label rather than a guessed one."""
        frame = frame_from_records(
            [
                IncidentRecord(date(2020, 1, 4), None, "STREET"),
                IncidentRecord(date(2020, 1, 4), timedelta(hours=5), "STREET"),
            ]
        )
        flagged = flag_late_night(augment_temporal_features(frame))
        assert pd.isna(flagged["late_night"].iloc[0])
        assert flagged["late_night"].iloc[1] == 0


class TestTemporalFeatures:
    """Tests for weekday and hour columns."""

    def test_weekday_labels(self, three_incidents):
        """2020-01-04 is a Saturday, 2020-01-05 a Sunday."""
        featured = augment_temporal_features(three_incidents)
        assert featured["weekday"].astype(str).tolist() == ["Sat", "Sun", "Sun"]

    def test_weekday_order_starts_sunday(self, three_incidents):
        """Weekday is an ordered categorical beginning on Sunday."""
        weekday = augment_temporal_features(three_incidents)["weekday"]
        assert weekday.cat.ordered
        assert list(weekday.cat.categories) == ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]

    def test_hour_boundaries(self):
        """Midnight is hour 0 and 23:59:59 is hour 23."""
        times = pd.to_timedelta(pd.Series(["00:00:00", "23:59:59", "12:30:00"]))
        assert hour_of_day(times).tolist() == [0, 23, 12]

    def test_input_not_mutated(self, three_incidents):
        """Stages return a new frame."""
        before = three_incidents.columns.tolist()
        augment_temporal_features(three_incidents)
        assert three_incidents.columns.tolist() == before
