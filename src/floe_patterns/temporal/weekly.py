"""Weekly activity weighting for event timestamps."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import date, datetime, timedelta
from typing import Annotated, Any

import structlog
from pydantic import Field

from floe_patterns.base import Context, Pattern, PatternConfig
from floe_patterns.observability import pattern_operation
from floe_patterns.temporal.base import now, to_datetime

logger = structlog.get_logger(__name__)

# Acceptance probabilities
Weight = Annotated[float, Field(ge=0.0, le=1.0)]

# Index 0 = Sunday
DEFAULT_WEEKDAY_WEIGHTS = [0.6, 1.0, 1.0, 1.0, 1.0, 0.9, 0.7]
DEFAULT_WINDOW = timedelta(weeks=1)


class WeeklyConfig(PatternConfig):
    """Configuration for WeeklyPattern.

    Attributes:
        weekday_weights: Acceptance weight per day (index 0=Sunday, 6=Saturday)
        hourly_weights: Acceptance weight per hour of day (0-23)
        max_attempts: Draws before the last candidate is accepted regardless
    """

    weekday_weights: list[Weight] = Field(
        default_factory=lambda: list(DEFAULT_WEEKDAY_WEIGHTS),
        min_length=7,
        max_length=7,
        description="Weights for each day of week (0=Sunday, 6=Saturday)",
    )
    hourly_weights: list[Weight] = Field(
        default_factory=lambda: [1.0] * 24,
        min_length=24,
        max_length=24,
        description="Weights for each hour of day (0-23)",
    )
    max_attempts: int = Field(
        default=100, ge=1, description="Rejection-sampling attempts per timestamp"
    )


def sunday_index(moment: datetime) -> int:
    """Day of week with 0=Sunday, 6=Saturday."""
    return (moment.weekday() + 1) % 7


class WeeklyPattern(Pattern):
    """Timestamps whose day/hour frequencies follow weekly activity weights.

    Candidates are drawn uniformly in a window and kept with probability
    ``weekday_weight * hourly_weight``. Retries are iterative and bounded by
    ``max_attempts``; after that the last candidate is accepted.

    Example:
        >>> office = WeeklyPattern({"weekday_weights": [0, 1, 1, 1, 1, 1, 0], "seed": 7})
        >>> office.generate_timestamp(datetime(2024, 1, 1), datetime(2024, 1, 31)).weekday() < 5
        True
    """

    name = "Weekly Pattern"
    description = "Generates values following weekly activity patterns"
    config_model = WeeklyConfig

    settings: WeeklyConfig

    def generate(self, context: Context | None = None) -> datetime:  # type: ignore[override]
        context = context or {}
        end = context.get("end_date")
        start = context.get("start_date")
        end_dt = to_datetime(end) if end is not None else now()
        start_dt = to_datetime(start) if start is not None else end_dt - DEFAULT_WINDOW
        return self.generate_timestamp(start_dt, end_dt)

    def generate_timestamp(
        self,
        start: datetime | date | str,
        end: datetime | date | str,
    ) -> datetime:
        """Draw one weighted timestamp between start and end.

        Args:
            start: Window start
            end: Window end

        Returns:
            Accepted timestamp within [start, end]
        """
        start_dt = to_datetime(start)
        span_seconds = max((to_datetime(end) - start_dt).total_seconds(), 0.0)

        candidate = start_dt
        for _ in range(self.settings.max_attempts):
            candidate = start_dt + timedelta(seconds=self._rng.uniform(0.0, span_seconds))
            if self._rng.random() < self.weight_at(candidate):
                return candidate

        logger.warning(
            "rejection_sampling_exhausted",
            pattern=self.name,
            max_attempts=self.settings.max_attempts,
        )
        return candidate

    def generate_timestamps(
        self,
        count: int,
        start: datetime | date | str,
        end: datetime | date | str,
    ) -> list[datetime]:
        """Draw ``count`` weighted timestamps, sorted ascending."""
        with pattern_operation("generate_timestamps", pattern=self.name, count=count):
            return sorted(self.generate_timestamp(start, end) for _ in range(count))

    def weight_at(self, moment: datetime) -> float:
        """Combined day and hour weight for a moment."""
        weekday = self.settings.weekday_weights[sunday_index(moment)]
        return weekday * self.settings.hourly_weights[moment.hour]

    def get_value_for_period(self, period: datetime | date | str | int) -> float:
        """Weight for a timestamp, or the day weight for a weekday index (0=Sunday).

        Args:
            period: Moment or weekday index

        Returns:
            Combined weight for moments, weekday weight for indexes
        """
        if isinstance(period, int) and not isinstance(period, bool):
            return self.settings.weekday_weights[period % 7]
        return self.weight_at(to_datetime(period))

    def apply(
        self,
        records: Iterable[Mapping[str, Any]],
        field: str = "created_at",
        start: datetime | date | str | None = None,
        end: datetime | date | str | None = None,
    ) -> list[dict[str, Any]]:
        """Stamp each record with a weighted timestamp.

        Args:
            records: Records to stamp (not modified)
            field: Field receiving the timestamp
            start: Window start (default: a week before end)
            end: Window end (default: now)

        Returns:
            New records with ``field`` set
        """
        context: dict[str, Any] = {}
        if start is not None:
            context["start_date"] = start
        if end is not None:
            context["end_date"] = end
        return [{**record, field: self.generate(context)} for record in records]

    @property
    def peak_days(self) -> list[int]:
        """Weekday indexes (0=Sunday) carrying the highest weight."""
        weights = self.settings.weekday_weights
        return [day for day, weight in enumerate(weights) if weight == max(weights)]

    @property
    def peak_hours(self) -> list[int]:
        """Hours carrying the highest weight."""
        weights = self.settings.hourly_weights
        return [hour for hour, weight in enumerate(weights) if weight == max(weights)]

    def get_period(self) -> str | None:
        return "week"
