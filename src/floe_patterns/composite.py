"""Composite patterns.

This module combines several patterns into one:
- combine: weighted sum (additive) or weighted product (multiplicative)
- select: weighted random choice of one sub-pattern per call
- sequence: round-robin over the sub-patterns

Example:
    >>> from floe_patterns.distributions import NormalDistribution
    >>> from floe_patterns.temporal import SeasonalPattern
    >>> traffic = CompositePattern(
    ...     {
    ...         "base": NormalDistribution({"mean": 1000, "stddev": 100}),
    ...         "season": SeasonalPattern({"peaks": [7], "amplitude": 0.3,
    ...                                    "amplitude_mode": "relative", "base_value": 1}),
    ...     },
    ...     {"combination": "multiplicative"},
    ... )
    >>> visitors = traffic.generate_for_date(datetime(2024, 7, 15))  # doctest: +SKIP
"""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from datetime import date, datetime
from typing import Annotated, Any, Literal

import structlog
from pydantic import Field

from floe_patterns.base import Context, Pattern, PatternConfig
from floe_patterns.errors import ConfigurationError, DomainError
from floe_patterns.temporal.base import TemporalPattern, to_datetime

logger = structlog.get_logger(__name__)

DEFAULT_WEIGHT = 1.0

NonNegative = Annotated[float, Field(ge=0.0)]


class CompositeConfig(PatternConfig):
    """Configuration for CompositePattern.

    Attributes:
        mode: combine, select or sequence
        combination: additive or multiplicative (combine mode)
        weights: Per-pattern weights, positional or keyed by pattern name;
            missing weights default to 1.0
    """

    mode: Literal["combine", "select", "sequence"] = Field(
        default="combine", description="Combination mode (combine, select, sequence)"
    )
    combination: Literal["additive", "multiplicative"] = Field(
        default="additive", description="How combine mode merges values"
    )
    weights: list[NonNegative] | dict[str, NonNegative] = Field(
        default_factory=list, description="Weights for combination or selection"
    )


def _name_patterns(
    patterns: Sequence[Pattern] | Mapping[str, Pattern] | None,
) -> dict[str, Pattern]:
    if patterns is None:
        return {}
    if isinstance(patterns, Mapping):
        named = dict(patterns)
    else:
        named = {str(index): pattern for index, pattern in enumerate(patterns)}

    for name, pattern in named.items():
        if not isinstance(pattern, Pattern):
            raise ConfigurationError(
                f"Sub-pattern '{name}' does not implement the Pattern contract",
                pattern_name=CompositePattern.name,
                field_path="patterns",
            )
    return named


class CompositePattern(Pattern):
    """Pattern built from other patterns.

    Args:
        patterns: Sub-patterns, as a list (named "0", "1", ...) or a
            name-to-pattern mapping
        config: CompositeConfig parameters
        **params: Individual parameters, merged over ``config``
    """

    name = "Composite Pattern"
    description = "Combines multiple patterns"
    config_model = CompositeConfig

    settings: CompositeConfig

    def __init__(
        self,
        patterns: Sequence[Pattern] | Mapping[str, Pattern] | None = None,
        config: Mapping[str, Any] | None = None,
        **params: Any,
    ) -> None:
        self._patterns = _name_patterns(patterns)
        self._weights: dict[str, float] = {}
        self._cursor = 0
        super().__init__(config, **params)

    def _configure(self) -> None:
        configured = self._configured_weights(self.settings.weights)
        self._weights = {
            name: float(configured.get(name, self._weights.get(name, DEFAULT_WEIGHT)))
            for name in self._patterns
        }

    def _configured_weights(
        self, weights: Sequence[float] | Mapping[str, float]
    ) -> dict[str, float]:
        names = list(self._patterns)

        if isinstance(weights, Mapping):
            unknown = sorted(set(weights) - set(names))
            if unknown:
                raise ConfigurationError(
                    "Weights reference unknown sub-patterns",
                    pattern_name=self.name,
                    field_path="weights",
                    internal_details=f"unknown={unknown} known={names}",
                )
            return dict(weights)

        if len(weights) > len(names):
            raise ConfigurationError(
                f"Got {len(weights)} weights for {len(names)} sub-patterns",
                pattern_name=self.name,
                field_path="weights",
            )
        return dict(zip(names, weights))

    def validation_errors(self, config: Mapping[str, Any]) -> list[str]:
        """List configuration problems, including weights that do not fit the sub-patterns."""
        errors = super().validation_errors(config)
        if errors:
            return errors
        try:
            self._configured_weights(self._parse(config).weights)
        except ConfigurationError as exc:
            return [f"weights: {exc.user_message}"]
        return []

    def generate(self, context: Context | None = None) -> Any:
        if not self._patterns:
            raise DomainError("Composite pattern has no sub-patterns")

        context = context or {}
        mode = self.settings.mode

        if mode == "select":
            return self._value_of(self._select(), context)
        if mode == "sequence":
            patterns = list(self._patterns.values())
            pattern = patterns[self._cursor % len(patterns)]
            self._cursor += 1
            return self._value_of(pattern, context)
        return self._combine(context)

    def generate_at(self, timestamp: datetime | date | str) -> Any:
        """Generate with ``timestamp`` routed to temporal sub-patterns."""
        return self.generate({"timestamp": to_datetime(timestamp)})

    def generate_for_date(self, moment: datetime | date | str) -> Any:
        return self.generate_at(moment)

    def _value_of(self, pattern: Pattern, context: Context) -> Any:
        timestamp = context.get("timestamp")
        if timestamp is not None and isinstance(pattern, TemporalPattern):
            return pattern.generate_at(to_datetime(timestamp))
        return pattern.generate(context)

    def _combine(self, context: Context) -> float:
        terms: list[tuple[float, float]] = []
        for name, pattern in self._patterns.items():
            value = self._value_of(pattern, context)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise DomainError(
                    f"Sub-pattern '{name}' produced a non-numeric value",
                    internal_details=f"type={type(value).__name__}",
                )
            terms.append((float(value), self._weights[name]))

        if self.settings.combination == "additive":
            return math.fsum(weight * value for value, weight in terms)

        result = 1.0
        for value, weight in terms:
            if value < 0 and not weight.is_integer():
                raise DomainError(
                    "Cannot raise a negative value to a fractional weight",
                    internal_details=f"value={value} weight={weight}",
                )
            result *= value**weight
        return result

    def _select(self) -> Pattern:
        names = list(self._patterns)
        weights = [self._weights[name] for name in names]
        total = sum(weights)

        if total <= 0:
            return self._patterns[names[int(self._rng.random() * len(names))]]

        draw = self._rng.random() * total
        cumulative = 0.0
        for name, weight in zip(names, weights, strict=True):
            cumulative += weight
            if draw < cumulative:
                return self._patterns[name]

        # Floating-point shortfall: fall back to the last weighted pattern
        last = next(name for name, weight in zip(names[::-1], weights[::-1]) if weight > 0)
        return self._patterns[last]

    @property
    def patterns(self) -> dict[str, Pattern]:
        return dict(self._patterns)

    @property
    def weights(self) -> list[float]:
        """Effective weights in sub-pattern order."""
        return [self._weights[name] for name in self._patterns]

    @property
    def probabilities(self) -> dict[str, float]:
        """Selection probability per sub-pattern (select mode)."""
        total = sum(self._weights.values())
        if total <= 0:
            return {name: 1.0 / len(self._weights) for name in self._weights}
        return {name: weight / total for name, weight in self._weights.items()}

    def add_pattern(self, name: str, pattern: Pattern, weight: float = DEFAULT_WEIGHT) -> None:
        """Add or replace a named sub-pattern."""
        if not isinstance(pattern, Pattern):
            raise ConfigurationError(
                f"Sub-pattern '{name}' does not implement the Pattern contract",
                pattern_name=self.name,
                field_path="patterns",
            )
        weight = float(weight)
        if math.isnan(weight) or weight < 0:
            raise ConfigurationError(
                "Weights must be non-negative numbers", pattern_name=self.name, field_path="weights"
            )
        self._patterns[name] = pattern
        self._weights[name] = weight
        logger.debug("sub_pattern_added", composite=self.name, sub_pattern=name, weight=weight)

    def remove_pattern(self, name: str) -> None:
        """Remove a named sub-pattern (no-op when absent)."""
        self._patterns.pop(name, None)
        self._weights.pop(name, None)

    def reset(self) -> None:
        """Rewind the sequence cursor, the selection stream and every sub-pattern."""
        super().reset()
        self._cursor = 0
        for pattern in self._patterns.values():
            pattern.reset()
