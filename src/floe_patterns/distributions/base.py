"""Distribution contract.

A Distribution is a Pattern with known moments and density functions.
"""

from __future__ import annotations

import math
from abc import abstractmethod

from floe_patterns.base import Context, Pattern
from floe_patterns.errors import DomainError
from floe_patterns.observability import pattern_operation


class Distribution(Pattern):
    """Abstract base class for statistical distributions.

    Subclasses implement ``generate``, ``mean``, ``variance``, ``pdf`` and
    ``cdf``. ``standard_deviation`` and ``sample`` are derived.
    """

    @abstractmethod
    def generate(self, context: Context | None = None) -> float:  # pragma: no cover - abstract
        ...

    @property
    @abstractmethod
    def mean(self) -> float:  # pragma: no cover - abstract
        """Expected value (``math.inf`` when undefined)."""
        ...

    @property
    @abstractmethod
    def variance(self) -> float:  # pragma: no cover - abstract
        """Variance (``math.inf`` when undefined)."""
        ...

    @property
    def standard_deviation(self) -> float:
        variance = self.variance
        return math.inf if math.isinf(variance) else math.sqrt(variance)

    @abstractmethod
    def pdf(self, x: float) -> float:  # pragma: no cover - abstract
        """Probability density (or mass) at ``x``."""
        ...

    @abstractmethod
    def cdf(self, x: float) -> float:  # pragma: no cover - abstract
        """Cumulative probability up to ``x``."""
        ...

    def sample(self, count: int) -> list[float]:
        """Draw independent values.

        Args:
            count: Number of values to draw

        Returns:
            List of ``count`` values

        Raises:
            DomainError: If count is negative
        """
        if count < 0:
            raise DomainError(f"Sample count must be non-negative, got {count}")

        with pattern_operation("sample", pattern=self.name, count=count):
            return [self.generate() for _ in range(count)]

    @staticmethod
    def _check_point(x: float) -> None:
        if math.isnan(x):
            raise DomainError("Cannot evaluate a distribution at NaN")
