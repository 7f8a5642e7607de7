"""Statistical distributions.

This module provides seeded samplers with closed-form moments:
- NormalDistribution: bell curves (Box-Muller)
- ExponentialDistribution: waiting times (inverse transform)
- ParetoDistribution: power laws and 80/20 splits (inverse transform)
- PoissonDistribution: event counts (Knuth / normal approximation)
"""

from __future__ import annotations

from floe_patterns.distributions.base import Distribution
from floe_patterns.distributions.exponential import ExponentialDistribution
from floe_patterns.distributions.normal import NormalDistribution
from floe_patterns.distributions.pareto import ParetoDistribution
from floe_patterns.distributions.poisson import PoissonDistribution

__all__ = [
    "Distribution",
    "ExponentialDistribution",
    "NormalDistribution",
    "ParetoDistribution",
    "PoissonDistribution",
]
