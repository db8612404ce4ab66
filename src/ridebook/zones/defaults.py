"""Standard zone layouts derived from a single threshold value.

Power zones scale with critical power (CP/FTP), heart-rate zones with
lactate threshold heart rate (LTHR).  Each entry is ``(name, lower fraction)``;
the first zone always starts at zero.
"""

from datetime import date

from .models import ZoneRange

POWER_ZONE_FRACTIONS: list[tuple[str, float]] = [
    ("Active Recovery", 0.00),
    ("Endurance", 0.55),
    ("Tempo", 0.75),
    ("Threshold", 0.90),
    ("VO2max", 1.05),
    ("Anaerobic", 1.20),
    ("Neuromuscular", 1.50),
]

HR_ZONE_FRACTIONS: list[tuple[str, float]] = [
    ("Recovery", 0.00),
    ("Aerobic", 0.85),
    ("Tempo", 0.90),
    ("Sub-threshold", 0.95),
    ("Super-threshold", 1.00),
    ("Aerobic Capacity", 1.03),
    ("Anaerobic", 1.06),
]


def _build(start: date, threshold: float, layout: list[tuple[str, float]]) -> ZoneRange:
    names = tuple(name for name, _ in layout)
    thresholds = tuple(float(round(threshold * fraction)) for _, fraction in layout[1:])
    return ZoneRange(start=start, thresholds=thresholds, threshold=threshold, names=names)


def power_range(start: date, cp: float) -> ZoneRange:
    """Seven-zone power range for a critical power of *cp* watts."""
    return _build(start, cp, POWER_ZONE_FRACTIONS)


def hr_range(start: date, lthr: float) -> ZoneRange:
    """Seven-zone heart-rate range for a threshold heart rate of *lthr* bpm."""
    return _build(start, lthr, HR_ZONE_FRACTIONS)
