"""Temporal pattern contract and time-series helpers.

Temporal patterns are keyed by a timestamp instead of an opaque context.
This module provides:
- TemporalPattern: base class with generate_at / generate_series
- Interval: fixed or calendar step parsed from strings like "15 minutes"
- Elapsed-time helpers shared by the trend-bearing patterns
"""

from __future__ import annotations

import calendar
import re
from abc import abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Literal

from pydantic import Field

from floe_patterns.base import BoundedConfig, Context, Pattern
from floe_patterns.errors import ConfigurationError
from floe_patterns.observability import pattern_operation

TimeUnit = Literal["second", "minute", "hour", "day", "week", "month", "year"]

# Months and years are approximated as 30 and 365 days
SECONDS_PER_UNIT: dict[str, float] = {
    "second": 1.0,
    "minute": 60.0,
    "hour": 3600.0,
    "day": 86400.0,
    "week": 604800.0,
    "month": 2592000.0,
    "year": 31536000.0,
}

_CALENDAR_MONTHS = {"month": 1, "year": 12}

_INTERVAL_RE = re.compile(
    r"^\s*(?P<amount>\d+)?\s*(?P<unit>second|minute|hour|day|week|month|year)s?\s*$",
    re.IGNORECASE,
)


def now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(tz=timezone.utc)


def to_datetime(value: datetime | date | str) -> datetime:
    """Coerce a datetime, date or ISO-8601 string to a datetime.

    Raises:
        ConfigurationError: If the value cannot be interpreted as a moment
    """
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time())
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value)
        except ValueError as exc:
            raise ConfigurationError(
                f"Invalid timestamp '{value}'", internal_details=str(exc)
            ) from exc
    raise ConfigurationError(f"Invalid timestamp of type {type(value).__name__}")


def as_utc(moment: datetime) -> datetime:
    """Read a naive datetime as UTC; aware values are returned unchanged."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def elapsed(start: datetime, end: datetime, unit: str) -> float:
    """Elapsed time from start to end, expressed in ``unit``.

    Naive datetimes are read as UTC, independent of the host timezone.
    """
    seconds = as_utc(end).timestamp() - as_utc(start).timestamp()
    return seconds / SECONDS_PER_UNIT[unit]


def add_months(moment: datetime, months: int) -> datetime:
    """Shift by calendar months, clamping the day to the target month's length."""
    month_index = moment.month - 1 + months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


@dataclass(frozen=True)
class Interval:
    """Series step: a fixed duration plus whole calendar months.

    Example:
        >>> Interval.parse("15 minutes").delta
        datetime.timedelta(seconds=900)
        >>> Interval.parse("1 year").months
        12
    """

    delta: timedelta = timedelta(0)
    months: int = 0

    @classmethod
    def parse(cls, interval: Interval | timedelta | str) -> Interval:
        """Build an Interval from a timedelta or a string like "2 hours".

        Raises:
            ConfigurationError: If the interval is unparseable or not positive
        """
        if isinstance(interval, Interval):
            parsed = interval
        elif isinstance(interval, timedelta):
            parsed = cls(delta=interval)
        else:
            match = _INTERVAL_RE.match(str(interval))
            if match is None:
                raise ConfigurationError(f"Invalid interval '{interval}'", field_path="interval")
            amount = int(match.group("amount") or 1)
            unit = match.group("unit").lower()
            if unit in _CALENDAR_MONTHS:
                parsed = cls(months=amount * _CALENDAR_MONTHS[unit])
            else:
                parsed = cls(delta=timedelta(seconds=amount * SECONDS_PER_UNIT[unit]))

        if parsed.months < 0 or parsed.delta < timedelta(0) or not (parsed.months or parsed.delta):
            raise ConfigurationError(
                f"Interval must be positive, got '{interval}'", field_path="interval"
            )
        return parsed

    def offset(self, start: datetime, steps: int) -> datetime:
        """Moment ``steps`` intervals after ``start`` (computed from start, no drift)."""
        moment = add_months(start, self.months * steps) if self.months else start
        return moment + self.delta * steps


class TemporalConfig(BoundedConfig):
    """Configuration shared by temporal patterns.

    Attributes:
        base_time: Reference moment for trend calculations (default: now)
    """

    base_time: datetime | None = Field(
        default=None, description="Base time for calculations (default: now)"
    )


class TemporalPattern(Pattern):
    """Abstract base class for time-indexed patterns.

    Subclasses implement ``generate_at`` and ``get_period``.
    """

    settings: TemporalConfig

    def __init__(self, config: Any = None, **params: Any) -> None:
        self._base_time: datetime | None = None
        super().__init__(config, **params)

    def _configure(self) -> None:
        if self._base_time is None:
            self._base_time = self.settings.base_time or now()

    def set_config(self, config: Mapping[str, Any]) -> None:
        """Merge new parameters; base_time changes only when ``config`` names it."""
        super().set_config(config)
        if config.get("base_time") is not None:
            assert self.settings.base_time is not None
            self._base_time = self.settings.base_time

    @abstractmethod
    def generate_at(self, timestamp: datetime) -> float:  # pragma: no cover - abstract
        """Generate the value for a specific moment."""
        ...

    @abstractmethod
    def get_period(self) -> str | None:  # pragma: no cover - abstract
        """Repeat period ("day", "week", ...) or None for aperiodic patterns."""
        ...

    def generate(self, context: Context | None = None) -> float:
        timestamp = (context or {}).get("timestamp")
        return self.generate_at(to_datetime(timestamp) if timestamp is not None else now())

    def generate_for_date(self, moment: datetime | date | str) -> float:
        """Generate the value for a date, datetime or ISO string."""
        return self.generate_at(to_datetime(moment))

    def generate_series(
        self,
        start: datetime | date | str,
        end: datetime | date | str,
        interval: Interval | timedelta | str,
    ) -> list[dict[str, Any]]:
        """Generate values from start to end inclusive.

        Args:
            start: First timestamp
            end: Last timestamp (included when reached exactly)
            interval: Step, e.g. ``"1 hour"`` or ``timedelta(days=1)``

        Returns:
            List of ``{"timestamp": datetime, "value": float}`` points

        Raises:
            ConfigurationError: If the interval is not positive
        """
        first = to_datetime(start)
        last = to_datetime(end)
        step = Interval.parse(interval)

        series: list[dict[str, Any]] = []
        with pattern_operation("generate_series", pattern=self.name):
            index = 0
            current = first
            while current <= last:
                series.append({"timestamp": current, "value": self.generate_at(current)})
                index += 1
                current = step.offset(first, index)
        return series

    @property
    def period(self) -> str | None:
        return self.get_period()

    @property
    def base_time(self) -> datetime:
        assert self._base_time is not None  # set by _configure
        return self._base_time

    def set_base_time(self, base_time: datetime | date | str) -> None:
        """Set the reference moment for relative calculations."""
        self._base_time = to_datetime(base_time)
