"""Temporal patterns.

This module provides time-indexed generators:
- LinearGrowth: steady growth or decline from a base time
- SeasonalPattern: daily/weekly/monthly/yearly cycles with trend
- BusinessHours: peak / business / off-peak activity by local time
- WeeklyPattern: timestamps weighted by weekday and hour
"""

from __future__ import annotations

from floe_patterns.temporal.base import Interval, TemporalPattern
from floe_patterns.temporal.business_hours import BusinessHours
from floe_patterns.temporal.linear import LinearGrowth
from floe_patterns.temporal.seasonal import SeasonalPattern
from floe_patterns.temporal.weekly import WeeklyPattern

__all__ = [
    "BusinessHours",
    "Interval",
    "LinearGrowth",
    "SeasonalPattern",
    "TemporalPattern",
    "WeeklyPattern",
]
