"""CSV ride loader.

Reads the simple column export most head units and trainer apps can produce::

    secs,watts,hr
    0,182,121
    1,190,122

``secs`` is required; ``watts`` and ``hr`` are optional and blank cells mean
"not recorded".  The recording interval is the median spacing of ``secs``.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

import numpy as np
import pandas as pd
from loguru import logger

from ridebook.core.exceptions import RideLoadError
from ridebook.rides.loader import BaseLoader
from ridebook.rides.series import Sample, SampleSeries

DEFAULT_REC_INT_SECS = 1.0


def _optional(value: float) -> float | None:
    return float(value) if np.isfinite(value) else None


class CsvLoader(BaseLoader):
    """Load ``secs,watts,hr`` CSV recordings."""

    name = "csv"
    suffixes = (".csv",)

    def load(self, path: Path, start_time: datetime | None = None) -> SampleSeries:
        path = Path(path)
        try:
            df = pd.read_csv(path)
        except (pd.errors.EmptyDataError, pd.errors.ParserError, UnicodeDecodeError) as e:
            self.stats["failed"] += 1
            raise RideLoadError(f"Malformed CSV ride {path.name}: {e}", path=str(path)) from e

        df.columns = [str(c).strip().lower() for c in df.columns]
        if df.columns.duplicated().any():
            self.stats["failed"] += 1
            duplicates = sorted(set(df.columns[df.columns.duplicated()]))
            raise RideLoadError(f"CSV ride {path.name} repeats column(s) {duplicates}", path=str(path))
        if "secs" not in df.columns:
            self.stats["failed"] += 1
            raise RideLoadError(f"CSV ride {path.name} has no 'secs' column", path=str(path))

        for col in ("secs", "watts", "hr"):
            if col in df.columns:
                df[col] = pd.to_numeric(df[col], errors="coerce")
            else:
                df[col] = float("nan")

        if not np.isfinite(df["secs"]).all():
            self.stats["failed"] += 1
            raise RideLoadError(f"CSV ride {path.name} has non-numeric or non-finite 'secs' values", path=str(path))

        df = df.sort_values("secs", kind="stable")
        rec_int = DEFAULT_REC_INT_SECS
        if len(df) > 1:
            spacing = df["secs"].diff().dropna()
            spacing = spacing[spacing > 0]
            if not spacing.empty:
                rec_int = float(spacing.median())

        samples = [
            Sample(secs=float(row.secs), watts=_optional(row.watts), hr=_optional(row.hr))
            for row in df[["secs", "watts", "hr"]].itertuples(index=False)
        ]
        if start_time is None:
            start_time = datetime.fromtimestamp(path.stat().st_mtime)

        self.stats["loaded"] += 1
        logger.debug(f"Parsed {len(samples)} samples from {path.name} at {rec_int}s interval")
        return SampleSeries(samples, rec_int, start_time, source=str(path))
