"""Descriptive statistics and Arrow hand-off for generated values.

Samples and series are converted to PyArrow so downstream loaders can
write them without another conversion step.

Example:
    >>> from floe_patterns.distributions import PoissonDistribution
    >>> orders = PoissonDistribution({"lambda": 50, "seed": 1}).sample(10_000)
    >>> summary = describe(orders)
    >>> round(summary.mean)  # doctest: +SKIP
    50
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

import pyarrow as pa
import pyarrow.compute as pc
from pydantic import BaseModel, ConfigDict, Field

from floe_patterns.errors import DomainError


class SampleStatistics(BaseModel):
    """Summary of a numeric sample.

    Attributes:
        count: Number of values
        mean: Arithmetic mean
        variance: Variance with ``ddof`` delta degrees of freedom
        stddev: Square root of variance
        min: Smallest value
        max: Largest value
        median: 50th percentile (linear interpolation)
    """

    model_config = ConfigDict(frozen=True)

    count: int = Field(..., ge=0)
    mean: float
    variance: float
    stddev: float
    min: float
    max: float
    median: float


def _to_array(
    values: Iterable[float] | pa.Array | pa.ChunkedArray,
) -> pa.Array | pa.ChunkedArray:
    if isinstance(values, (pa.Array, pa.ChunkedArray)):
        return values.cast(pa.float64())
    return pa.array(list(values), type=pa.float64())


def describe(
    values: Iterable[float] | pa.Array | pa.ChunkedArray,
    *,
    ddof: int = 0,
) -> SampleStatistics:
    """Compute descriptive statistics with pyarrow.compute.

    Args:
        values: Numeric sample (nulls are ignored)
        ddof: Delta degrees of freedom for variance (0 = population)

    Returns:
        SampleStatistics for the non-null values

    Raises:
        DomainError: If the sample has no values (or too few for ``ddof``)
    """
    array = _to_array(values)
    count = len(array) - array.null_count
    if count <= ddof:
        raise DomainError(f"Cannot describe a sample of {count} values with ddof={ddof}")

    extremes = pc.min_max(array)
    return SampleStatistics(
        count=count,
        mean=pc.mean(array).as_py(),
        variance=pc.variance(array, ddof=ddof).as_py(),
        stddev=pc.stddev(array, ddof=ddof).as_py(),
        min=extremes["min"].as_py(),
        max=extremes["max"].as_py(),
        median=pc.quantile(array, q=0.5, interpolation="linear")[0].as_py(),
    )


def samples_to_table(values: Sequence[float], column: str = "value") -> pa.Table:
    """Wrap a sample in a single-column Arrow table.

    Integer samples (Poisson) keep an int64 column; everything else is float64.
    """
    integral = all(isinstance(v, int) and not isinstance(v, bool) for v in values)
    arrow_type = pa.int64() if values and integral else pa.float64()
    return pa.table({column: pa.array(list(values), type=arrow_type)})


def series_to_table(series: Sequence[Mapping[str, Any]]) -> pa.Table:
    """Convert ``generate_series`` output to a timestamp/value Arrow table."""
    return pa.table(
        {
            "timestamp": pa.array([point["timestamp"] for point in series]),
            "value": pa.array([point["value"] for point in series], type=pa.float64()),
        }
    )
