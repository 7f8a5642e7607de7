"""Exponential distribution (time between events)."""

from __future__ import annotations

import math

from pydantic import Field

from floe_patterns.base import BoundedConfig, Context
from floe_patterns.distributions.base import Distribution


class ExponentialConfig(BoundedConfig):
    """Configuration for ExponentialDistribution.

    Attributes:
        lambda_: Rate parameter, 1/mean (config key ``lambda``)
        min: Lower truncation (default 0, never negative)
        max: Optional upper truncation
    """

    lambda_: float = Field(
        default=1.0, gt=0, alias="lambda", description="Rate parameter (1/mean)"
    )
    min: float | None = Field(default=0.0, ge=0, description="Minimum value")


class ExponentialDistribution(Distribution):
    """Memoryless waiting times via inverse-transform sampling."""

    name = "Exponential Distribution"
    description = "Generates values following an exponential distribution (time between events)"
    config_model = ExponentialConfig

    settings: ExponentialConfig

    def generate(self, context: Context | None = None) -> float:
        u = self._open_unit()
        value = -math.log(1.0 - u) / self.settings.lambda_
        return self.clamp(value, self.settings.min, self.settings.max)

    @property
    def mean(self) -> float:
        return 1.0 / self.settings.lambda_

    @property
    def variance(self) -> float:
        return 1.0 / self.settings.lambda_**2

    @property
    def median(self) -> float:
        return math.log(2.0) / self.settings.lambda_

    @property
    def mode(self) -> float:
        return 0.0

    def pdf(self, x: float) -> float:
        self._check_point(x)
        if x < 0:
            return 0.0
        rate = self.settings.lambda_
        return rate * math.exp(-rate * x)

    def cdf(self, x: float) -> float:
        self._check_point(x)
        if x < 0:
            return 0.0
        return 1.0 - math.exp(-self.settings.lambda_ * x)
