"""Normal (Gaussian) distribution."""

from __future__ import annotations

import math

from pydantic import Field

from floe_patterns.base import BoundedConfig, Context
from floe_patterns.distributions.base import Distribution

# Abramowitz & Stegun 7.1.26 coefficients (max error 1.5e-7)
_ERF_A1 = 0.254829592
_ERF_A2 = -0.284496736
_ERF_A3 = 1.421413741
_ERF_A4 = -1.453152027
_ERF_A5 = 1.061405429
_ERF_P = 0.3275911


def erf(x: float) -> float:
    """Error function, rational approximation accurate to about 1.5e-7.

    Args:
        x: Point to evaluate

    Returns:
        Approximation of erf(x)
    """
    sign = -1.0 if x < 0 else 1.0
    x = abs(x)

    t = 1.0 / (1.0 + _ERF_P * x)
    poly = ((((_ERF_A5 * t + _ERF_A4) * t + _ERF_A3) * t + _ERF_A2) * t + _ERF_A1) * t
    return sign * (1.0 - poly * math.exp(-x * x))


class NormalConfig(BoundedConfig):
    """Configuration for NormalDistribution.

    Attributes:
        mean: Center of the distribution
        stddev: Spread of the distribution (must be positive)
        min: Optional lower truncation
        max: Optional upper truncation
    """

    mean: float = Field(default=0.0, description="Mean (center) of the distribution")
    stddev: float = Field(
        default=1.0, gt=0, description="Standard deviation (spread) of the distribution"
    )


class NormalDistribution(Distribution):
    """Bell-curve values via the Box-Muller transform.

    Example:
        >>> ages = NormalDistribution({"mean": 35, "stddev": 10, "min": 18, "seed": 42})
        >>> ages.sample(3)  # doctest: +SKIP
    """

    name = "Normal Distribution"
    description = "Generates values following a normal (Gaussian) distribution"
    config_model = NormalConfig

    settings: NormalConfig

    def generate(self, context: Context | None = None) -> float:
        value = self.settings.mean + self._standard_normal() * self.settings.stddev
        return self.clamp(value, self.settings.min, self.settings.max)

    @property
    def mean(self) -> float:
        return self.settings.mean

    @property
    def variance(self) -> float:
        return self.settings.stddev**2

    @property
    def standard_deviation(self) -> float:
        return self.settings.stddev

    def pdf(self, x: float) -> float:
        self._check_point(x)
        stddev = self.settings.stddev
        coefficient = 1.0 / (stddev * math.sqrt(2.0 * math.pi))
        exponent = -((x - self.settings.mean) ** 2) / (2.0 * stddev**2)
        return coefficient * math.exp(exponent)

    def cdf(self, x: float) -> float:
        self._check_point(x)
        z = (x - self.settings.mean) / self.settings.stddev
        return 0.5 * (1.0 + erf(z / math.sqrt(2.0)))
