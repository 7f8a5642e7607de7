"""Unit tests for CompositePattern.

Tests cover:
- Additive and multiplicative combination
- Weighted selection and round-robin sequencing
- Temporal routing
- Sub-pattern management and reset
"""

from __future__ import annotations

from collections import Counter
from datetime import datetime, timezone

import pytest

from floe_patterns.base import Pattern
from floe_patterns.composite import CompositePattern
from floe_patterns.errors import ConfigurationError, DomainError
from floe_patterns.temporal import BusinessHours, WeeklyPattern

pytestmark = pytest.mark.unit


class TestCombine:
    """Tests for combine mode."""

    def test_multiplicative_exact(self, constant: type[Pattern]) -> None:
        """2^1 * 3^1 is exactly 6."""
        composite = CompositePattern(
            [constant({"value": 2}), constant({"value": 3})],
            {"combination": "multiplicative", "weights": [1, 1]},
        )

        assert composite.generate() == 6

    def test_additive_weighted(self, constant: type[Pattern]) -> None:
        """Weighted sum of sub-pattern values."""
        composite = CompositePattern(
            [constant({"value": 100}), constant({"value": 50})], {"weights": [0.7, 0.3]}
        )

        assert composite.generate() == pytest.approx(85)

    def test_missing_weights_default_to_one(self, constant: type[Pattern]) -> None:
        """Unweighted sub-patterns count once."""
        composite = CompositePattern(
            [constant({"value": 2}), constant({"value": 3})], {"weights": [2]}
        )

        assert composite.generate() == 7
        assert composite.weights == [2, 1]

    def test_weights_by_name(self, constant: type[Pattern]) -> None:
        """Weights may be keyed by sub-pattern name."""
        composite = CompositePattern(
            {"base": constant({"value": 10}), "boost": constant({"value": 2})},
            {"combination": "multiplicative", "weights": {"boost": 2}},
        )

        assert composite.generate() == 40

    def test_negative_value_integer_weight(self, constant: type[Pattern]) -> None:
        """Negative values are fine with whole-number weights."""
        composite = CompositePattern(
            [constant({"value": -2}), constant({"value": 3})],
            {"combination": "multiplicative", "weights": [2, 1]},
        )

        assert composite.generate() == 12

    def test_negative_value_fractional_weight(self, constant: type[Pattern]) -> None:
        """A negative base with a fractional weight has no real result."""
        composite = CompositePattern(
            [constant({"value": -2})], {"combination": "multiplicative", "weights": [0.5]}
        )

        with pytest.raises(DomainError):
            composite.generate()

    @pytest.mark.parametrize("value", ["high", True, None])
    def test_non_numeric_raises(self, constant: type[Pattern], value: object) -> None:
        """Non-numeric sub-results cannot be combined."""
        composite = CompositePattern([constant({"value": value})])

        with pytest.raises(DomainError):
            composite.generate()

    def test_timestamp_sub_pattern_not_combinable(self) -> None:
        """Weekly timestamps are not numbers."""
        composite = CompositePattern([WeeklyPattern({"seed": 1})])

        with pytest.raises(DomainError):
            composite.generate({"start_date": "2024-01-01", "end_date": "2024-01-08"})

    def test_empty_raises(self) -> None:
        """Generating from no sub-patterns is a domain error."""
        with pytest.raises(DomainError):
            CompositePattern().generate()


class TestConfiguration:
    """Tests for composite configuration."""

    def test_too_many_weights(self, constant: type[Pattern]) -> None:
        """More weights than sub-patterns is rejected."""
        with pytest.raises(ConfigurationError):
            CompositePattern([constant()], {"weights": [1, 2]})

    def test_unknown_weight_name(self, constant: type[Pattern]) -> None:
        """Named weights must match sub-pattern names."""
        with pytest.raises(ConfigurationError):
            CompositePattern({"a": constant()}, {"weights": {"b": 1}})

    def test_negative_weight(self, constant: type[Pattern]) -> None:
        """Weights must be non-negative."""
        with pytest.raises(ConfigurationError):
            CompositePattern([constant()], {"weights": [-1]})

    def test_validate_checks_weight_count(self, constant: type[Pattern]) -> None:
        """validate rejects weights that construction would reject."""
        composite = CompositePattern([constant(), constant()])

        assert composite.validate({"weights": [1, 2, 3]}) is False
        assert composite.validate({"weights": {"9": 1}}) is False
        assert composite.validate({"weights": [1, 2]}) is True
        assert composite.validation_errors({"weights": [1, 2, 3]})[0].startswith("weights")

    def test_invalid_mode(self) -> None:
        """Unknown modes fail validation."""
        assert CompositePattern().validate({"mode": "shuffle"}) is False

    def test_non_pattern_rejected(self) -> None:
        """Sub-patterns must implement the Pattern contract."""
        with pytest.raises(ConfigurationError):
            CompositePattern([42])  # type: ignore[list-item]

    def test_list_names(self, constant: type[Pattern]) -> None:
        """List sub-patterns are named by position."""
        composite = CompositePattern([constant(), constant()])

        assert list(composite.patterns) == ["0", "1"]


class TestSelect:
    """Tests for select mode."""

    def test_zero_weight_never_selected(self, constant: type[Pattern]) -> None:
        """Only weighted sub-patterns are chosen."""
        composite = CompositePattern(
            {"a": constant({"value": "a"}), "b": constant({"value": "b"})},
            {"mode": "select", "weights": {"b": 0}, "seed": 3},
        )

        assert {composite.generate() for _ in range(200)} == {"a"}

    def test_selection_frequency(self, constant: type[Pattern]) -> None:
        """Selection frequency follows the weights."""
        composite = CompositePattern(
            {"a": constant({"value": "a"}), "b": constant({"value": "b"})},
            {"mode": "select", "weights": [3, 1], "seed": 42},
        )
        counts = Counter(composite.generate() for _ in range(10_000))

        assert counts["a"] / 10_000 == pytest.approx(0.75, abs=0.03)
        assert composite.probabilities == {"a": 0.75, "b": 0.25}

    def test_select_deterministic(self, constant: type[Pattern]) -> None:
        """Selection uses the composite's seeded stream."""

        def build() -> CompositePattern:
            return CompositePattern(
                [constant({"value": 1}), constant({"value": 2})], {"mode": "select", "seed": 8}
            )

        first, second = build(), build()

        assert [first.generate() for _ in range(50)] == [second.generate() for _ in range(50)]


class TestSequence:
    """Tests for sequence mode."""

    def test_round_robin(self, constant: type[Pattern]) -> None:
        """Sub-patterns are used in turn."""
        composite = CompositePattern(
            [constant({"value": v}) for v in (1, 2, 3)], {"mode": "sequence"}
        )

        assert [composite.generate() for _ in range(5)] == [1, 2, 3, 1, 2]

    def test_cursor_per_instance(self, constant: type[Pattern]) -> None:
        """Two composites keep independent cursors."""
        first = CompositePattern([constant({"value": v}) for v in (1, 2)], {"mode": "sequence"})
        second = CompositePattern([constant({"value": v}) for v in (1, 2)], {"mode": "sequence"})

        first.generate()

        assert second.generate() == 1
        assert first.generate() == 2


class TestTemporalRouting:
    """Tests for timestamps reaching temporal sub-patterns."""

    def test_generate_at(self) -> None:
        """Temporal sub-patterns see the composite's timestamp."""
        composite = CompositePattern({"traffic": BusinessHours({"seed": 1})})
        monday_noon = datetime(2024, 1, 1, 12, tzinfo=timezone.utc)
        saturday_noon = datetime(2024, 1, 6, 12, tzinfo=timezone.utc)

        assert composite.generate_at(monday_noon) >= 90
        assert composite.generate_for_date(saturday_noon) <= 12

    def test_mixed_with_constant(self, constant: type[Pattern]) -> None:
        """Non-temporal sub-patterns ignore the timestamp."""
        composite = CompositePattern(
            {"traffic": BusinessHours({"seed": 1}), "scale": constant({"value": 0.5})},
            {"combination": "multiplicative"},
        )

        assert 45 <= composite.generate_at("2024-01-01T12:00:00+00:00") <= 55


class TestManagement:
    """Tests for adding, removing and resetting."""

    def test_add_and_remove(self, constant: type[Pattern]) -> None:
        """Sub-patterns can be added and removed by name."""
        composite = CompositePattern({"a": constant({"value": 1})})
        composite.add_pattern("b", constant({"value": 4}), weight=0.5)

        assert composite.generate() == 3
        composite.remove_pattern("a")
        assert list(composite.patterns) == ["b"]
        assert composite.generate() == 2

    def test_add_negative_weight(self, constant: type[Pattern]) -> None:
        """Added weights must be non-negative."""
        with pytest.raises(ConfigurationError):
            CompositePattern().add_pattern("a", constant(), weight=-1)

    def test_added_integer_weight_with_negative_value(self, constant: type[Pattern]) -> None:
        """Integer weights given to add_pattern behave like whole-number floats."""
        composite = CompositePattern(
            {"a": constant({"value": -2.0})}, {"combination": "multiplicative"}
        )
        composite.add_pattern("b", constant({"value": -3.0}), 2)

        assert composite.weights == [1.0, 2.0]
        assert isinstance(composite.weights[1], float)
        assert composite.generate() == -18.0

    def test_add_nan_weight(self, constant: type[Pattern]) -> None:
        """NaN weights are rejected."""
        with pytest.raises(ConfigurationError):
            CompositePattern().add_pattern("a", constant(), weight=float("nan"))

    def test_patterns_is_a_copy(self, constant: type[Pattern]) -> None:
        """Mutating the returned mapping does not change the composite."""
        composite = CompositePattern({"a": constant()})
        composite.patterns.clear()

        assert "a" in composite.patterns

    def test_added_weight_survives_reconfiguration(self, constant: type[Pattern]) -> None:
        """set_config keeps weights of sub-patterns it does not mention."""
        composite = CompositePattern({"a": constant({"value": 1})})
        composite.add_pattern("b", constant({"value": 1}), weight=3)
        composite.set_config({"combination": "additive"})

        assert composite.weights == [1.0, 3]

    def test_reset(self, constant: type[Pattern], counting: type[Pattern]) -> None:
        """reset rewinds the cursor and every sub-pattern."""
        composite = CompositePattern(
            {"count": counting(), "zero": constant({"value": 0})}, {"mode": "sequence"}
        )
        assert [composite.generate() for _ in range(4)] == [1, 0, 2, 0]

        composite.reset()

        assert [composite.generate() for _ in range(2)] == [1, 0]
