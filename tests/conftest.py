"""Shared test fixtures for ridebook."""

import os
import tempfile
from datetime import date, datetime

import pytest

from ridebook.rides.series import Sample, SampleSeries
from ridebook.zones.models import ZoneRange
from ridebook.zones.schedule import ZoneSchedule


@pytest.fixture
def tmp_dir():
    """Provide a temporary directory that is cleaned up after the test."""
    with tempfile.TemporaryDirectory() as d:
        yield d


@pytest.fixture
def power_zones():
    """Three power zones from 2024: [0,100), [100,200), [200,inf)."""
    return ZoneSchedule([ZoneRange(start=date(2024, 1, 1), thresholds=(100, 200), threshold=200)])


@pytest.fixture
def hr_zones():
    """Two heart-rate zones from 2024: [0,150), [150,inf)."""
    return ZoneSchedule([ZoneRange(start=date(2024, 1, 1), thresholds=(150,))], kind="hr")


@pytest.fixture
def write_ride(tmp_dir):
    """Write a ``secs,watts,hr`` CSV ride into tmp_dir and return its file name."""

    def _write(file_name="2024_05_01_07_30_00.csv", watts=(50, 150, 250, -1), hr=(120, 140, 160, 170), step=1):
        lines = ["secs,watts,hr"]
        for i, (w, h) in enumerate(zip(watts, hr)):
            w_cell = "" if w is None else str(w)
            h_cell = "" if h is None else str(h)
            lines.append(f"{i * step},{w_cell},{h_cell}")
        with open(os.path.join(tmp_dir, file_name), "w") as f:
            f.write("\n".join(lines) + "\n")
        return file_name

    return _write


@pytest.fixture
def make_series():
    def _make(watts, hr=None, rec_int=1.0, start=datetime(2024, 5, 1, 7, 30)):
        hr = hr if hr is not None else [None] * len(watts)
        samples = [Sample(secs=i * rec_int, watts=w, hr=h) for i, (w, h) in enumerate(zip(watts, hr))]
        return SampleSeries(samples, rec_int, start)

    return _make
