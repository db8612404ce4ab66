"""
Dated zone definitions for power and heart rate.
"""

from .defaults import HR_ZONE_FRACTIONS, POWER_ZONE_FRACTIONS, hr_range, power_range
from .loader import load_zone_schedule
from .models import NO_RANGE, NO_ZONE, ZoneRange
from .schedule import ZoneSchedule

__all__ = [
    "HR_ZONE_FRACTIONS",
    "NO_RANGE",
    "NO_ZONE",
    "POWER_ZONE_FRACTIONS",
    "ZoneRange",
    "ZoneSchedule",
    "hr_range",
    "load_zone_schedule",
    "power_range",
]
