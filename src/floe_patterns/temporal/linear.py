"""Linear growth over time."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field

from floe_patterns.temporal.base import TemporalConfig, TemporalPattern, TimeUnit, elapsed

# Relative noise applied to every value
JITTER = 0.05


class LinearGrowthConfig(TemporalConfig):
    """Configuration for LinearGrowth.

    Attributes:
        initial_value: Value at base_time
        growth_rate: Change per time unit (negative for decline)
        time_unit: Unit the growth rate is expressed in
    """

    initial_value: float = Field(default=100.0, description="Starting value")
    growth_rate: float = Field(default=1.0, description="Growth per time unit")
    time_unit: TimeUnit = Field(
        default="day",
        description="Time unit (second, minute, hour, day, week, month, year)",
    )


class LinearGrowth(TemporalPattern):
    """Values that grow linearly from ``base_time`` with +/-5% noise.

    Example:
        >>> users = LinearGrowth({"initial_value": 1000, "growth_rate": 25,
        ...                       "base_time": "2024-01-01T00:00:00"})
        >>> users.generate_at(datetime(2024, 1, 11))  # doctest: +SKIP
        1250.0
    """

    name = "Linear Growth"
    description = "Generates values with linear growth over time"
    config_model = LinearGrowthConfig

    settings: LinearGrowthConfig

    def generate_at(self, timestamp: datetime) -> float:
        units = elapsed(self.base_time, timestamp, self.settings.time_unit)
        value = self.settings.initial_value + self.settings.growth_rate * units
        value *= self._jitter(JITTER)
        return self.clamp(value, self.settings.min, self.settings.max)

    def get_period(self) -> str | None:
        return None
