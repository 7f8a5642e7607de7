"""Pareto distribution (power law, 80/20 rule)."""

from __future__ import annotations

import math

from pydantic import Field, model_validator

from floe_patterns.base import Context, PatternConfig
from floe_patterns.distributions.base import Distribution
from floe_patterns.errors import DomainError


class ParetoConfig(PatternConfig):
    """Configuration for ParetoDistribution.

    The default ``alpha`` of 1.16 gives the classic 80/20 split.

    Attributes:
        alpha: Shape parameter (lower = more inequality)
        xmin: Scale parameter, the smallest possible value
        max: Optional upper truncation (must exceed xmin)
    """

    alpha: float = Field(
        default=1.16, gt=0, description="Shape parameter (lower = more inequality, 1.16 = 80/20)"
    )
    xmin: float = Field(default=1.0, gt=0, description="Minimum value (scale parameter)")
    max: float | None = Field(default=None, description="Maximum value (optional truncation)")

    @model_validator(mode="after")
    def _check_max(self) -> ParetoConfig:
        if self.max is not None and self.max <= self.xmin:
            raise ValueError("max must be greater than xmin")
        return self


class ParetoDistribution(Distribution):
    """Heavy-tailed values via inverse-transform sampling.

    Example:
        >>> revenue = ParetoDistribution({"alpha": 1.16, "xmin": 10})
        >>> round(revenue.percentile_ownership(0.2), 2)
        0.8
    """

    name = "Pareto Distribution"
    description = "Generates values following a Pareto distribution (80/20 rule, power law)"
    config_model = ParetoConfig

    settings: ParetoConfig

    def generate(self, context: Context | None = None) -> float:
        u = self._open_unit()
        value = self.settings.xmin / u ** (1.0 / self.settings.alpha)
        return self.clamp(value, self.settings.xmin, self.settings.max)

    @property
    def mean(self) -> float:
        alpha = self.settings.alpha
        if alpha <= 1:
            return math.inf
        return alpha * self.settings.xmin / (alpha - 1.0)

    @property
    def variance(self) -> float:
        alpha = self.settings.alpha
        if alpha <= 2:
            return math.inf
        return self.settings.xmin**2 * alpha / ((alpha - 1.0) ** 2 * (alpha - 2.0))

    @property
    def median(self) -> float:
        return self.settings.xmin * 2.0 ** (1.0 / self.settings.alpha)

    def pdf(self, x: float) -> float:
        self._check_point(x)
        alpha, xmin = self.settings.alpha, self.settings.xmin
        if x < xmin:
            return 0.0
        return alpha * xmin**alpha / x ** (alpha + 1.0)

    def cdf(self, x: float) -> float:
        self._check_point(x)
        if x < self.settings.xmin:
            return 0.0
        return 1.0 - (self.settings.xmin / x) ** self.settings.alpha

    def percentile_ownership(self, percentile: float) -> float:
        """Share of the total held by the top ``percentile`` of the population.

        Args:
            percentile: Population fraction in the open interval (0, 1)

        Returns:
            Fraction of the total value owned by that top slice

        Raises:
            DomainError: If percentile is outside (0, 1)
        """
        if not 0.0 < percentile < 1.0:
            raise DomainError(f"Percentile must be between 0 and 1, got {percentile}")

        alpha = self.settings.alpha
        if alpha <= 1:
            # Infinite mean: the top slice holds effectively everything
            return 1.0
        return percentile ** ((alpha - 1.0) / alpha)
