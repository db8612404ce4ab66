"""Tests for zones.schedule: range resolution, classification, modification time."""

from datetime import date, datetime

import pytest

from ridebook.core.clock import Clock
from ridebook.core.exceptions import ZoneConfigError
from ridebook.zones.models import NO_RANGE, NO_ZONE, ZoneRange
from ridebook.zones.schedule import ZoneSchedule


def _schedule(*starts_and_thresholds):
    return ZoneSchedule([ZoneRange(start=s, thresholds=t) for s, t in starts_and_thresholds])


class TestResolveRange:
    def test_empty_schedule(self):
        assert ZoneSchedule().resolve_range(date(2024, 1, 1)) == NO_RANGE

    def test_before_first_range(self):
        sched = _schedule((date(2024, 1, 1), (100,)), (date(2024, 6, 1), (120,)))
        assert sched.resolve_range(date(2023, 12, 31)) == NO_RANGE

    def test_picks_latest_started_range(self):
        sched = _schedule((date(2024, 1, 1), (100,)), (date(2024, 6, 1), (120,)))
        assert sched.resolve_range(date(2024, 1, 1)) == 0
        assert sched.resolve_range(date(2024, 5, 31)) == 0
        assert sched.resolve_range(date(2024, 6, 1)) == 1
        assert sched.resolve_range(date(2030, 1, 1)) == 1

    def test_monotonic_in_date(self):
        sched = _schedule((date(2024, 1, 1), (100,)), (date(2024, 3, 1), (110,)), (date(2024, 6, 1), (120,)))
        days = [date(2023, 12, 1), date(2024, 1, 15), date(2024, 3, 1), date(2024, 4, 1), date(2024, 7, 1)]
        resolved = [sched.resolve_range(d) for d in days]
        assert resolved == sorted(resolved)
        assert resolved == [NO_RANGE, 0, 1, 1, 2]

    def test_ranges_sorted_regardless_of_insert_order(self):
        sched = _schedule((date(2024, 6, 1), (120,)), (date(2024, 1, 1), (100,)))
        assert [r.start for r in sched.ranges] == [date(2024, 1, 1), date(2024, 6, 1)]

    def test_same_start_later_insert_wins(self):
        sched = ZoneSchedule()
        sched.add_range(ZoneRange(start=date(2024, 1, 1), thresholds=(100,)))
        sched.add_range(ZoneRange(start=date(2024, 1, 1), thresholds=(150,)))
        index = sched.resolve_range(date(2024, 2, 1))
        assert sched.ranges[index].thresholds == (150.0,)

    def test_accepts_datetime(self):
        sched = _schedule((date(2024, 1, 1), (100,)))
        assert sched.resolve_range(datetime(2024, 1, 1, 6, 30)) == 0


class TestClassify:
    @pytest.fixture
    def sched(self):
        return _schedule((date(2024, 1, 1), (100, 200)))

    def test_zone_count(self, sched):
        assert sched.zone_count(0) == 3
        assert sched.zone_count(NO_RANGE) == 0

    @pytest.mark.parametrize(
        "value,zone",
        [(0, 0), (99.9, 0), (100, 1), (150, 1), (199.99, 1), (200, 2), (1500, 2)],
    )
    def test_boundaries(self, sched, value, zone):
        assert sched.classify(0, value) == zone

    def test_invalid_values(self, sched):
        assert sched.classify(0, -1) == NO_ZONE
        assert sched.classify(0, None) == NO_ZONE
        assert sched.classify(0, float("nan")) == NO_ZONE

    def test_no_range(self, sched):
        assert sched.classify(NO_RANGE, 150) == NO_ZONE

    def test_zone_name_and_bounds(self, sched):
        assert sched.zone_name(0, 1) == "Z2"
        assert sched.zone_bounds(0, 1) == (100.0, 200.0)


class TestModification:
    def test_mutations_advance_modification_time(self):
        sched = ZoneSchedule()
        stamps = [sched.modification_time]
        sched.add_range(ZoneRange(start=date(2024, 1, 1), thresholds=(100,)))
        stamps.append(sched.modification_time)
        sched.replace_range(0, ZoneRange(start=date(2024, 1, 1), thresholds=(110,)))
        stamps.append(sched.modification_time)
        sched.touch()
        stamps.append(sched.modification_time)
        sched.remove_range(0)
        stamps.append(sched.modification_time)
        assert stamps == sorted(stamps)
        assert len(set(stamps)) == len(stamps)

    def test_replace_keeps_order(self):
        sched = _schedule((date(2024, 1, 1), (100,)), (date(2024, 6, 1), (120,)))
        sched.replace_range(0, ZoneRange(start=date(2024, 9, 1), thresholds=(130,)))
        assert [r.start for r in sched.ranges] == [date(2024, 6, 1), date(2024, 9, 1)]

    def test_injected_clock(self):
        clock = Clock(lambda: datetime(2024, 1, 1, 12, 0))
        sched = ZoneSchedule(clock=clock)
        assert sched.modification_time == datetime(2024, 1, 1, 12, 0)


class TestFromConfig:
    def test_explicit_thresholds(self):
        sched = ZoneSchedule.from_config(
            {
                "kind": "power",
                "ranges": [{"start": date(2024, 1, 1), "threshold": 250, "thresholds": [100, 200]}],
            }
        )
        assert len(sched) == 1
        assert sched.ranges[0].threshold == 250
        assert sched.kind == "power"

    def test_threshold_only_uses_defaults(self):
        sched = ZoneSchedule.from_config({"kind": "hr", "ranges": [{"start": "2024-01-01", "threshold": 160}]})
        assert sched.kind == "hr"
        assert sched.zone_count(0) == 7

    def test_missing_start(self):
        with pytest.raises(ZoneConfigError, match="start"):
            ZoneSchedule.from_config({"ranges": [{"thresholds": [100]}]})

    def test_missing_thresholds(self):
        with pytest.raises(ZoneConfigError):
            ZoneSchedule.from_config({"ranges": [{"start": "2024-01-01"}]})

    def test_bad_date(self):
        with pytest.raises(ZoneConfigError, match="start date"):
            ZoneSchedule.from_config({"ranges": [{"start": "yesterday", "thresholds": [100]}]})

    def test_unknown_kind(self):
        with pytest.raises(ZoneConfigError, match="kind"):
            ZoneSchedule.from_config({"kind": "pace", "ranges": []})

    def test_scalar_thresholds(self):
        with pytest.raises(ZoneConfigError, match="must be a list"):
            ZoneSchedule.from_config({"ranges": [{"start": "2024-01-01", "thresholds": 100}]})

    def test_non_numeric_thresholds(self):
        with pytest.raises(ZoneConfigError):
            ZoneSchedule.from_config({"ranges": [{"start": "2024-01-01", "thresholds": [100, "abc"]}]})

    @pytest.mark.parametrize("threshold", ["high", float("inf"), -10])
    def test_bad_threshold(self, threshold):
        with pytest.raises(ZoneConfigError, match="Threshold"):
            ZoneSchedule.from_config({"ranges": [{"start": "2024-01-01", "threshold": threshold}]})
