"""Business-hours activity levels."""

from __future__ import annotations

from datetime import datetime, timezone, tzinfo
from typing import Annotated
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from floe_patterns.temporal.base import TemporalConfig, TemporalPattern, as_utc

# Relative noise per activity band
PEAK_JITTER = 0.10
BUSINESS_JITTER = 0.15
OFF_PEAK_JITTER = 0.20

# Hours either side of a peak hour that count as peak
PEAK_WINDOW_HOURS = 1.0

IsoWeekday = Annotated[int, Field(ge=1, le=7)]


def resolve_timezone(name: str) -> tzinfo:
    """Look up an IANA timezone name ("UTC" needs no tz database).

    Raises:
        ValueError: If the name is unknown
    """
    if name.upper() == "UTC":
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"Unknown timezone '{name}'") from exc


class BusinessWindow(BaseModel):
    """Opening hours as fractional hours of day, end exclusive."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    start: float = Field(default=9.0, ge=0, le=24, description="Opening hour")
    end: float = Field(default=17.0, ge=0, le=24, description="Closing hour (exclusive)")

    @model_validator(mode="after")
    def _check_order(self) -> BusinessWindow:
        if self.start >= self.end:
            raise ValueError("business hours start must be before end")
        return self


class BusinessHoursConfig(TemporalConfig):
    """Configuration for BusinessHours.

    Attributes:
        peak_value: Level near peak hours
        off_peak_value: Level outside business hours and days
        business_hours: Opening window
        business_days: ISO weekdays that are open (1=Monday, 7=Sunday)
        peak_hours: Hours of peak activity within the window
        timezone: IANA timezone the window is expressed in
    """

    peak_value: float = Field(default=100.0, description="Value during peak hours")
    off_peak_value: float = Field(default=10.0, description="Value during off-peak hours")
    business_hours: BusinessWindow = Field(
        default_factory=BusinessWindow, description="Business hours (start and end)"
    )
    business_days: list[IsoWeekday] = Field(
        default_factory=lambda: [1, 2, 3, 4, 5],
        description="Business days (1=Monday, 7=Sunday)",
    )
    peak_hours: list[float] = Field(
        default_factory=lambda: [12.0, 14.0, 16.0],
        description="Peak hours within business hours",
    )
    timezone: str = Field(default="UTC", description="Timezone for business hours")

    @field_validator("timezone")
    @classmethod
    def _check_timezone(cls, value: str) -> str:
        resolve_timezone(value)
        return value


class BusinessHours(TemporalPattern):
    """Peak / business / off-peak levels by local time of week.

    Naive timestamps are interpreted as UTC before conversion to the
    configured timezone.

    Example:
        >>> support = BusinessHours({"timezone": "Europe/London", "peak_hours": [11]})
        >>> support.generate_at(datetime(2024, 1, 6, 11))  # Saturday: off-peak  # doctest: +SKIP
    """

    name = "Business Hours Pattern"
    description = "Generates values based on business hours and peak times"
    config_model = BusinessHoursConfig

    settings: BusinessHoursConfig

    def _configure(self) -> None:
        super()._configure()
        self._zone = resolve_timezone(self.settings.timezone)

    def to_local(self, timestamp: datetime) -> datetime:
        return as_utc(timestamp).astimezone(self._zone)

    def generate_at(self, timestamp: datetime) -> float:
        value = self._level(self.to_local(timestamp))
        return self.clamp(value, self.settings.min, self.settings.max)

    def _level(self, local: datetime) -> float:
        settings = self.settings

        if local.isoweekday() not in settings.business_days:
            return self._off_peak_value()

        hour = local.hour + local.minute / 60
        if hour < settings.business_hours.start or hour >= settings.business_hours.end:
            return self._off_peak_value()

        if any(abs(hour - peak) < PEAK_WINDOW_HOURS for peak in settings.peak_hours):
            return settings.peak_value * self._jitter(PEAK_JITTER)

        midpoint = (settings.peak_value + settings.off_peak_value) / 2
        return midpoint * self._jitter(BUSINESS_JITTER)

    def _off_peak_value(self) -> float:
        return self.settings.off_peak_value * self._jitter(OFF_PEAK_JITTER)

    def get_activity_level(self, timestamp: datetime) -> float:
        """Generated value rescaled so off-peak is 0 and peak is 1."""
        value = self.generate_at(timestamp)
        spread = self.settings.peak_value - self.settings.off_peak_value
        if spread == 0:
            return 0.5
        return (value - self.settings.off_peak_value) / spread

    def get_period(self) -> str | None:
        return "week"
