"""Tests for rides.registry and the CSV loader plugin."""

import os
from datetime import datetime
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from ridebook.core.exceptions import RideLoadError
from ridebook.rides.loader import BaseLoader, RideLoader
from ridebook.rides.plugins.csv_file import CsvLoader
from ridebook.rides.registry import LoaderRegistry
from ridebook.rides.series import Sample, SampleSeries


class FakeLoader(BaseLoader):
    name = "fake"
    suffixes = (".fake",)

    def load(self, path, start_time=None):
        return SampleSeries([Sample(secs=0, watts=100)], 1.0, start_time or datetime(2024, 1, 1))


class CrashingLoader(BaseLoader):
    name = "crashing"
    suffixes = (".fake",)

    def load(self, path, start_time=None):
        raise TypeError("unexpected column layout")


class BrokenLoader(BaseLoader):
    name = "broken"
    suffixes = (".fake",)

    def load(self, path, start_time=None):
        raise PermissionError("denied")


class TestLoaderRegistry:
    def test_register_and_get(self):
        reg = LoaderRegistry()
        loader = FakeLoader()
        reg.register(loader)
        assert reg.get(".fake") is loader
        assert reg.get(".FAKE") is loader
        assert reg.get(".csv") is None
        assert reg.suffixes() == [".fake"]

    def test_with_builtins_has_csv(self):
        assert isinstance(LoaderRegistry.with_builtins().get(".csv"), CsvLoader)

    def test_can_open(self):
        reg = LoaderRegistry.with_builtins()
        assert reg.can_open("2024_01_01_00_00_00.csv")
        assert not reg.can_open("notes.txt")

    def test_open_unknown_suffix(self, tmp_dir):
        with pytest.raises(RideLoadError, match="No ride loader"):
            LoaderRegistry().open_ride(os.path.join(tmp_dir, "ride.gpx"))

    def test_open_dispatches_by_suffix(self, tmp_dir):
        reg = LoaderRegistry()
        reg.register(FakeLoader())
        series = reg.open_ride(Path(tmp_dir) / "x.fake", datetime(2024, 3, 1))
        assert series.start_time == datetime(2024, 3, 1)

    def test_os_error_becomes_io_load_error(self, tmp_dir):
        reg = LoaderRegistry()
        reg.register(BrokenLoader())
        with pytest.raises(RideLoadError) as exc_info:
            reg.open_ride(Path(tmp_dir) / "x.fake")
        assert exc_info.value.kind == "io"

    def test_unexpected_loader_error_becomes_format_load_error(self, tmp_dir):
        reg = LoaderRegistry()
        reg.register(CrashingLoader())
        with pytest.raises(RideLoadError, match="Malformed") as exc_info:
            reg.open_ride(Path(tmp_dir) / "x.fake")
        assert exc_info.value.kind == "format"
        assert isinstance(exc_info.value.__cause__, TypeError)

    def test_missing_file_is_io_error(self, tmp_dir):
        with pytest.raises(RideLoadError) as exc_info:
            LoaderRegistry.with_builtins().open_ride(Path(tmp_dir) / "missing.csv")
        assert exc_info.value.kind == "io"

    def test_discover_registers_loader_class(self, monkeypatch):
        ep = MagicMock()
        ep.name = "fake_ep"
        ep.load.return_value = FakeLoader
        monkeypatch.setattr("ridebook.rides.registry.entry_points", lambda group: [ep])

        reg = LoaderRegistry()
        result = reg.discover()
        assert isinstance(result[".fake"], FakeLoader)

    def test_discover_skips_invalid_entry(self, monkeypatch):
        class NotALoader:
            pass

        ep = MagicMock()
        ep.name = "invalid"
        ep.load.return_value = NotALoader
        monkeypatch.setattr("ridebook.rides.registry.entry_points", lambda group: [ep])

        assert LoaderRegistry().discover() == {}

    def test_discover_survives_import_failure(self, monkeypatch):
        ep = MagicMock()
        ep.name = "exploding"
        ep.load.side_effect = ImportError("no module")
        monkeypatch.setattr("ridebook.rides.registry.entry_points", lambda group: [ep])

        assert LoaderRegistry().discover() == {}


class TestCsvLoader:
    def test_satisfies_protocol(self):
        assert isinstance(CsvLoader(), RideLoader)

    def test_load(self, tmp_dir, write_ride):
        name = write_ride(watts=(50, None, 250), hr=(120, 130, None), step=2)
        series = CsvLoader().load(Path(tmp_dir) / name, datetime(2024, 5, 1, 7, 30))
        assert len(series) == 3
        assert series.rec_int_secs == 2.0
        assert series.samples[0].watts == 50.0
        assert series.samples[1].watts is None
        assert series.samples[2].hr is None
        assert series.start_time == datetime(2024, 5, 1, 7, 30)

    def test_keeps_negative_readings(self, tmp_dir, write_ride):
        name = write_ride(watts=(-1,), hr=(-1,))
        series = CsvLoader().load(Path(tmp_dir) / name)
        assert series.samples[0].watts == -1.0
        assert series.rec_int_secs == 1.0

    def test_optional_columns(self, tmp_dir):
        path = Path(tmp_dir) / "only_secs.csv"
        path.write_text("secs\n0\n1\n")
        series = CsvLoader().load(path)
        assert [s.watts for s in series.samples] == [None, None]

    def test_missing_secs_column(self, tmp_dir):
        path = Path(tmp_dir) / "bad.csv"
        path.write_text("watts,hr\n100,120\n")
        loader = CsvLoader()
        with pytest.raises(RideLoadError, match="secs") as exc_info:
            loader.load(path)
        assert exc_info.value.kind == "format"
        assert loader.stats["failed"] == 1

    def test_non_numeric_secs(self, tmp_dir):
        path = Path(tmp_dir) / "bad.csv"
        path.write_text("secs,watts\nzero,100\n")
        with pytest.raises(RideLoadError):
            CsvLoader().load(path)

    def test_empty_file(self, tmp_dir):
        path = Path(tmp_dir) / "empty.csv"
        path.write_text("")
        with pytest.raises(RideLoadError, match="Malformed"):
            CsvLoader().load(path)

    def test_duplicate_columns_after_normalising(self, tmp_dir):
        path = Path(tmp_dir) / "dupes.csv"
        path.write_text("secs,Watts,watts\n0,100,100\n1,150,150\n")
        loader = CsvLoader()
        with pytest.raises(RideLoadError, match="repeats") as exc_info:
            loader.load(path)
        assert exc_info.value.kind == "format"
        assert loader.stats["failed"] == 1

    def test_overflowing_secs(self, tmp_dir):
        path = Path(tmp_dir) / "huge.csv"
        path.write_text("secs,watts\n0,50\n1e400,150\n")
        with pytest.raises(RideLoadError, match="non-finite"):
            CsvLoader().load(path)

    def test_non_finite_readings_are_missing(self, tmp_dir):
        path = Path(tmp_dir) / "inf.csv"
        path.write_text("secs,watts,hr\n0,1e400,120\n1,150,inf\n")
        series = CsvLoader().load(path)
        assert [s.watts for s in series.samples] == [None, 150.0]
        assert [s.hr for s in series.samples] == [120.0, None]
