"""Seasonal cycles with optional trend."""

from __future__ import annotations

import calendar
import math
from datetime import datetime
from typing import Literal

from pydantic import Field

from floe_patterns.temporal.base import TemporalConfig, TemporalPattern, elapsed

# Relative noise applied to every value (kept small so peaks stay distinguishable)
JITTER = 0.02

# Peak position used when no configured peak is valid for the period
DEFAULT_PEAK_POSITION = 0.5

WEEKDAYS = {
    name: index
    for index, name in enumerate(
        ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")
    )
}
MONTHS = {
    name: index
    for index, name in enumerate(
        (
            "january", "february", "march", "april", "may", "june",
            "july", "august", "september", "october", "november", "december",
        )
    )
}

Period = Literal["day", "week", "month", "year"]
AmplitudeMode = Literal["absolute", "relative"]


class SeasonalConfig(TemporalConfig):
    """Configuration for SeasonalPattern.

    Attributes:
        base_value: Level around which the cycle oscillates
        amplitude: Height of the cycle above/below base_value
        amplitude_mode: "absolute" units, or "relative" (fraction of base_value)
        period: Cycle length
        peaks: Peak points within the period (hours, weekday names or
            numbers, days of month, month names or numbers)
        trend_rate: Change in level per elapsed period
    """

    base_value: float = Field(
        default=100.0, description="Base value around which seasonal variation occurs"
    )
    amplitude: float = Field(default=20.0, ge=0, description="Amplitude of seasonal variation")
    amplitude_mode: AmplitudeMode = Field(
        default="absolute",
        description="Interpret amplitude as absolute units or as a fraction of base_value",
    )
    period: Period = Field(
        default="year", description="Period of seasonality (day, week, month, year)"
    )
    peaks: list[str | float] = Field(
        default_factory=lambda: ["december", "july"],
        description='Peak periods (e.g., ["december", "july"] for year period)',
    )
    trend_rate: float = Field(
        default=0.0, description="Overall trend rate (growth/decline per period)"
    )


def _as_number(peak: str | float) -> float | None:
    if isinstance(peak, (int, float)):
        return float(peak)
    try:
        return float(peak)
    except ValueError:
        return None


class SeasonalPattern(TemporalPattern):
    """Cosine cycle peaking at configured points of a day/week/month/year.

    The seasonal term is ``amplitude * cos(2 * pi * d)`` where ``d`` is the
    wrap-around distance (as a fraction of the period) to the nearest peak:
    +amplitude at a peak, -amplitude half a period away.

    Example:
        >>> sales = SeasonalPattern({"peaks": ["december"], "amplitude": 20, "base_value": 100})
        >>> sales.generate_at(datetime(2024, 12, 15)) > sales.generate_at(datetime(2024, 6, 15))
        True
    """

    name = "Seasonal Pattern"
    description = "Generates values with seasonal variations"
    config_model = SeasonalConfig

    settings: SeasonalConfig

    def _configure(self) -> None:
        super()._configure()
        self._peak_positions = self._resolve_peaks()

    def generate_at(self, timestamp: datetime) -> float:
        value = (
            self.settings.base_value
            + self.seasonal_component(timestamp)
            + self.trend_component(timestamp)
        )
        value *= self._jitter(JITTER)
        return self.clamp(value, self.settings.min, self.settings.max)

    @property
    def effective_amplitude(self) -> float:
        if self.settings.amplitude_mode == "relative":
            return self.settings.amplitude * self.settings.base_value
        return self.settings.amplitude

    def seasonal_component(self, timestamp: datetime) -> float:
        """Noise-free seasonal offset from base_value at ``timestamp``."""
        position = self.position_in_period(timestamp)

        distance = 1.0
        for peak in self._peak_positions:
            gap = abs(position - peak)
            distance = min(distance, gap, 1.0 - gap)

        return self.effective_amplitude * math.cos(2.0 * math.pi * distance)

    def trend_component(self, timestamp: datetime) -> float:
        """Noise-free trend offset accumulated since base_time."""
        if self.settings.trend_rate == 0:
            return 0.0
        return self.settings.trend_rate * elapsed(self.base_time, timestamp, self.settings.period)

    def position_in_period(self, timestamp: datetime) -> float:
        """Fraction of the current period elapsed at ``timestamp``, in [0, 1)."""
        seconds_of_day = timestamp.hour * 3600 + timestamp.minute * 60 + timestamp.second
        period = self.settings.period

        if period == "day":
            return seconds_of_day / 86400
        if period == "week":
            return (timestamp.weekday() + seconds_of_day / 86400) / 7
        if period == "month":
            days_in_month = calendar.monthrange(timestamp.year, timestamp.month)[1]
            return (timestamp.day - 1) / days_in_month

        days_in_year = 366 if calendar.isleap(timestamp.year) else 365
        return (timestamp.timetuple().tm_yday - 1) / days_in_year

    def _resolve_peaks(self) -> list[float]:
        period = self.settings.period
        positions: list[float] = []

        for peak in self.settings.peaks:
            name = peak.lower() if isinstance(peak, str) else None
            number = _as_number(peak)

            if period == "day":
                if number is not None:
                    positions.append(number / 24)
            elif period == "week":
                if name in WEEKDAYS:
                    positions.append(WEEKDAYS[name] / 7)
                elif number is not None:
                    positions.append((number - 1) / 7)
            elif period == "month":
                if number is not None:
                    positions.append((number - 1) / 30)
            elif name in MONTHS:
                positions.append(MONTHS[name] / 12)
            elif number is not None:
                positions.append((number - 1) / 12)

        return positions or [DEFAULT_PEAK_POSITION]

    def get_period(self) -> str | None:
        return self.settings.period
