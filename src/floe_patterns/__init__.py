"""Statistical pattern engine for floe-runtime.

This package provides seeded, configurable value generators for realistic
synthetic data: statistical distributions, time-indexed patterns and
combinations of both, looked up by name through a registry.

Key Components:
- distributions: Normal, Exponential, Pareto and Poisson samplers
- temporal: Linear growth, seasonal cycles, business hours, weekly weighting
- composite: Weighted sum/product, weighted choice and round-robin combinations
- registry: Names and aliases for built-in and custom patterns
- stats: Descriptive statistics and PyArrow tables for generated values
- configure_logging: structlog setup for applications using the package

Example:
    >>> from floe_patterns import PatternRegistry
    >>>
    >>> registry = PatternRegistry()
    >>> ages = registry.create("normal", {"mean": 35, "stddev": 10, "min": 18, "seed": 42})
    >>> ages.sample(3)  # doctest: +SKIP
    [39.1, 28.4, 35.9]

Example with a composite:
    >>> traffic = registry.load({
    ...     "type": "composite",
    ...     "combination": "multiplicative",
    ...     "patterns": {
    ...         "base": {"type": "poisson", "lambda": 200},
    ...         "season": {"type": "seasonal", "peaks": ["december"], "base_value": 1,
    ...                    "amplitude": 0.4, "amplitude_mode": "relative"},
    ...     },
    ... })
    >>> traffic.generate_for_date("2024-12-20")  # doctest: +SKIP
"""

from __future__ import annotations

from floe_patterns.base import BoundedConfig, Pattern, PatternConfig
from floe_patterns.composite import CompositePattern
from floe_patterns.distributions import (
    Distribution,
    ExponentialDistribution,
    NormalDistribution,
    ParetoDistribution,
    PoissonDistribution,
)
from floe_patterns.errors import (
    ConfigurationError,
    DomainError,
    PatternError,
    PatternNotFoundError,
)
from floe_patterns.observability import configure_logging
from floe_patterns.registry import PatternRegistry
from floe_patterns.temporal import (
    BusinessHours,
    Interval,
    LinearGrowth,
    SeasonalPattern,
    TemporalPattern,
    WeeklyPattern,
)

__version__ = "0.1.0"

__all__ = [
    "BoundedConfig",
    "BusinessHours",
    "CompositePattern",
    "ConfigurationError",
    "Distribution",
    "DomainError",
    "ExponentialDistribution",
    "Interval",
    "LinearGrowth",
    "NormalDistribution",
    "ParetoDistribution",
    "Pattern",
    "PatternConfig",
    "PatternError",
    "PatternNotFoundError",
    "PatternRegistry",
    "PoissonDistribution",
    "SeasonalPattern",
    "TemporalPattern",
    "WeeklyPattern",
    "configure_logging",
]
