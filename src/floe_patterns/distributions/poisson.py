"""Poisson distribution (event counts)."""

from __future__ import annotations

import math
from functools import lru_cache

from pydantic import Field

from floe_patterns.base import Context, PatternConfig
from floe_patterns.distributions.base import Distribution

# Above this lambda, sample from the normal approximation
NORMAL_APPROXIMATION_THRESHOLD = 30.0
# Safety cap on uniform draws in Knuth's algorithm
MAX_KNUTH_DRAWS = 1000
# Largest n whose factorial fits in a float
MAX_EXACT_FACTORIAL = 170
# Relative size below which further cdf terms are dropped
CDF_TAIL_TOLERANCE = 1e-17


@lru_cache(maxsize=None)
def _exact_factorial(n: int) -> float:
    return float(math.factorial(n))


def _stirling_log_factorial(n: int) -> float:
    # log of sqrt(2*pi*n) * (n/e)^n
    return 0.5 * math.log(2.0 * math.pi * n) + n * (math.log(n) - 1.0)


def log_factorial(n: int) -> float:
    """Natural log of n!, exact up to 170 and Stirling beyond."""
    if n <= MAX_EXACT_FACTORIAL:
        return math.log(_exact_factorial(n))
    return _stirling_log_factorial(n)


def factorial(n: int) -> float:
    """n! as a float, Stirling-approximated above 170 (inf once out of range)."""
    if n <= MAX_EXACT_FACTORIAL:
        return _exact_factorial(n)
    try:
        return math.exp(_stirling_log_factorial(n))
    except OverflowError:
        return math.inf


class PoissonConfig(PatternConfig):
    """Configuration for PoissonDistribution.

    Attributes:
        lambda_: Average number of events (config key ``lambda``)
        max: Optional integer upper truncation
    """

    lambda_: float = Field(
        default=1.0, gt=0, alias="lambda", description="Average rate of events (lambda)"
    )
    max: int | None = Field(default=None, ge=0, description="Maximum value (optional truncation)")


class PoissonDistribution(Distribution):
    """Integer event counts.

    Knuth's multiplication method below lambda 30, a rounded normal
    approximation at or above it.
    """

    name = "Poisson Distribution"
    description = "Generates values following a Poisson distribution (event frequency)"
    config_model = PoissonConfig

    settings: PoissonConfig

    def generate(self, context: Context | None = None) -> int:  # type: ignore[override]
        rate = self.settings.lambda_

        if rate < NORMAL_APPROXIMATION_THRESHOLD:
            limit = math.exp(-rate)
            k = 0
            product = 1.0
            while True:
                k += 1
                product *= self._open_unit()
                if product <= limit or k >= MAX_KNUTH_DRAWS:
                    break
            value = k - 1
        else:
            approx = rate + self._standard_normal() * math.sqrt(rate)
            value = round(max(approx, 0.0))

        if self.settings.max is not None:
            value = min(value, self.settings.max)

        return int(value)

    @property
    def mean(self) -> float:
        return self.settings.lambda_

    @property
    def variance(self) -> float:
        return self.settings.lambda_

    def pmf(self, k: int) -> float:
        """Probability of exactly ``k`` events."""
        if k < 0:
            return 0.0
        rate = self.settings.lambda_
        return math.exp(k * math.log(rate) - rate - log_factorial(k))

    def pdf(self, x: float) -> float:
        self._check_point(x)
        if x < 0 or math.isinf(x) or math.floor(x) != x:
            return 0.0
        return self.pmf(int(x))

    def cdf(self, x: float) -> float:
        """P(X <= x), summed until the tail past lambda stops contributing."""
        self._check_point(x)
        if x < 0:
            return 0.0
        if math.isinf(x):
            return 1.0

        rate = self.settings.lambda_
        last = math.floor(x)
        total = 0.0
        k = 0
        while k <= last:
            term = self.pmf(k)
            total += term
            if total >= 1.0 or (k > rate and term <= CDF_TAIL_TOLERANCE * total):
                break
            k += 1
        return min(1.0, total)
