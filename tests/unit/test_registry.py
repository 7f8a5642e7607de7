"""Unit tests for PatternRegistry.

Tests cover:
- Built-in catalog and aliases
- Registering classes, instances and factories
- Loading from configuration records
- Introspection, categories and removal
"""

from __future__ import annotations

from typing import Any

import pytest
from structlog.testing import capture_logs

from floe_patterns.base import Pattern
from floe_patterns.composite import CompositePattern
from floe_patterns.distributions import (
    ExponentialDistribution,
    NormalDistribution,
    ParetoDistribution,
    PoissonDistribution,
)
from floe_patterns.errors import ConfigurationError, PatternNotFoundError
from floe_patterns.registry import BUILTIN_ALIASES, BUILTIN_PATTERNS, PatternRegistry
from floe_patterns.temporal import BusinessHours, LinearGrowth, SeasonalPattern, WeeklyPattern

pytestmark = pytest.mark.unit


@pytest.fixture
def registry() -> PatternRegistry:
    """Return a registry with the built-in patterns."""
    return PatternRegistry()


class TestBuiltins:
    """Tests for the built-in catalog."""

    @pytest.mark.parametrize(
        ("name", "pattern_class"),
        [
            ("distribution.normal", NormalDistribution),
            ("distribution.pareto", ParetoDistribution),
            ("distribution.poisson", PoissonDistribution),
            ("distribution.exponential", ExponentialDistribution),
            ("temporal.linear", LinearGrowth),
            ("temporal.seasonal", SeasonalPattern),
            ("temporal.business_hours", BusinessHours),
            ("temporal.weekly", WeeklyPattern),
            ("composite", CompositePattern),
        ],
    )
    def test_builtin_names(
        self, registry: PatternRegistry, name: str, pattern_class: type[Pattern]
    ) -> None:
        """Every built-in name creates its pattern class."""
        assert isinstance(registry.create(name), pattern_class)

    @pytest.mark.parametrize("alias", sorted(BUILTIN_ALIASES))
    def test_builtin_aliases(self, registry: PatternRegistry, alias: str) -> None:
        """Every built-in alias resolves."""
        assert registry.has(alias)
        assert registry.resolve(alias) == BUILTIN_ALIASES[alias]

    def test_alias_equivalent_to_name(self, registry: PatternRegistry) -> None:
        """An alias creates the same pattern as its target name."""
        config = {"mean": 35, "stddev": 10, "seed": 42}

        by_alias = registry.create("normal", config)
        by_name = registry.create("distribution.normal", config)

        assert type(by_alias) is type(by_name)
        assert by_alias.sample(20) == by_name.sample(20)

    def test_without_builtins(self) -> None:
        """include_builtins=False starts empty."""
        registry = PatternRegistry(include_builtins=False)

        assert len(registry) == 0
        assert registry.aliases() == {}

    def test_all_and_aliases(self, registry: PatternRegistry) -> None:
        """all and aliases expose the catalog."""
        assert set(registry.all()) == set(BUILTIN_PATTERNS)
        assert registry.aliases() == BUILTIN_ALIASES


class TestRegister:
    """Tests for registering patterns."""

    def test_register_instance(self, registry: PatternRegistry) -> None:
        """Registered instances are handed out as they are."""
        pattern = NormalDistribution({"mean": 50})
        registry.register("custom.instance", pattern)

        assert registry.get("custom.instance") is pattern
        assert registry.create("custom.instance", {"mean": 1}) is pattern

    def test_register_subclass(self, registry: PatternRegistry, constant: type[Pattern]) -> None:
        """Custom subclasses can be registered and configured."""
        registry.register("custom.constant", constant)

        assert registry.create("custom.constant", {"value": 9}).generate() == 9

    @pytest.mark.parametrize("target", [object(), dict, "distribution.normal", lambda cfg: None])
    def test_register_non_pattern(self, registry: PatternRegistry, target: Any) -> None:
        """Targets without the Pattern contract are rejected."""
        with pytest.raises(ConfigurationError):
            registry.register("bad", target)

    def test_register_replaces(self, registry: PatternRegistry, constant: type[Pattern]) -> None:
        """Registering an existing name replaces it."""
        registry.register("distribution.normal", constant)

        assert isinstance(registry.create("normal"), constant)

    def test_register_logs(self, registry: PatternRegistry, constant: type[Pattern]) -> None:
        """Registration is logged."""
        with capture_logs() as logs:
            registry.register("custom.constant", constant)

        assert logs == [
            {
                "event": "pattern_registered",
                "name": "custom.constant",
                "kind": "class",
                "log_level": "debug",
            }
        ]


class TestFactories:
    """Tests for factory registration."""

    def test_factory_defaults(self, registry: PatternRegistry) -> None:
        """Factories receive their defaults beneath caller overrides."""
        registry.register_factory(
            "factory.normal", lambda cfg: NormalDistribution(cfg), {"mean": 100, "stddev": 15}
        )

        default = registry.get("factory.normal")
        override = registry.create("factory.normal", {"mean": 5})

        assert isinstance(default, NormalDistribution)
        assert default.mean == 100
        assert override.mean == 5
        assert override.standard_deviation == 15

    def test_factory_builds_fresh_patterns(self, registry: PatternRegistry) -> None:
        """Each create calls the factory again."""
        registry.register_factory("factory.normal", NormalDistribution)

        assert registry.get("factory.normal") is not registry.get("factory.normal")

    def test_factory_must_return_pattern(self, registry: PatternRegistry) -> None:
        """Factories returning something else fail on create."""
        registry.register_factory("factory.bad", lambda cfg: 42)  # type: ignore[arg-type]

        with pytest.raises(ConfigurationError):
            registry.get("factory.bad")

    def test_factory_must_be_callable(self, registry: PatternRegistry) -> None:
        """Non-callables are rejected."""
        with pytest.raises(ConfigurationError):
            registry.register_factory("factory.bad", 42)  # type: ignore[arg-type]


class TestAliasAndLookup:
    """Tests for aliases and missing names."""

    def test_alias_requires_registered_name(self, registry: PatternRegistry) -> None:
        """Aliases must point at a registered name."""
        with pytest.raises(PatternNotFoundError):
            registry.alias("ln", "distribution.lognormal")

    def test_custom_alias(self, registry: PatternRegistry) -> None:
        """Custom aliases resolve like built-in ones."""
        registry.alias("bell", "distribution.normal")

        assert isinstance(registry.create("bell"), NormalDistribution)
        assert "bell" in registry

    def test_unknown_name(self, registry: PatternRegistry) -> None:
        """Unknown names raise with the available names listed."""
        with pytest.raises(PatternNotFoundError, match="Pattern 'lognormal' not found") as exc:
            registry.create("lognormal")

        assert "distribution.normal" in exc.value.available
        assert not registry.has("lognormal")

    def test_create_logs(self, registry: PatternRegistry) -> None:
        """Creation is logged with the resolved name."""
        with capture_logs() as logs:
            registry.create("gaussian")

        assert logs[-1]["event"] == "pattern_created"
        assert logs[-1]["name"] == "distribution.normal"
        assert logs[-1]["requested"] == "gaussian"


class TestLoad:
    """Tests for configuration records."""

    def test_flat_record(self, registry: PatternRegistry) -> None:
        """type is stripped and the rest is configuration."""
        pattern = registry.load({"type": "pareto", "alpha": 2.0, "xmin": 10})

        assert isinstance(pattern, ParetoDistribution)
        assert pattern.config == {"alpha": 2.0, "xmin": 10}

    def test_nested_record(self, registry: PatternRegistry) -> None:
        """Parameters may be nested under config."""
        pattern = registry.load({"type": "poisson", "config": {"lambda": 4}})

        assert pattern.mean == 4

    def test_missing_type(self, registry: PatternRegistry) -> None:
        """Records without a type are rejected."""
        with pytest.raises(ConfigurationError):
            registry.load({"mean": 5})

    def test_invalid_parameters(self, registry: PatternRegistry) -> None:
        """Invalid parameters surface as configuration errors."""
        with pytest.raises(ConfigurationError):
            registry.load({"type": "normal", "stddev": 0})

    def test_composite_record(self, registry: PatternRegistry) -> None:
        """A patterns key builds a composite."""
        pattern = registry.load(
            {
                "type": "composite",
                "combination": "multiplicative",
                "patterns": {
                    "base": {"type": "normal", "mean": 10, "stddev": 1},
                    "growth": "linear",
                },
            }
        )

        assert isinstance(pattern, CompositePattern)
        assert list(pattern.patterns) == ["base", "growth"]
        assert pattern.settings.combination == "multiplicative"

    def test_patterns_key_requires_composite_type(self, registry: PatternRegistry) -> None:
        """Sub-patterns under a non-composite type are rejected."""
        with pytest.raises(ConfigurationError):
            registry.load({"type": "normal", "patterns": ["linear"]})

    def test_patterns_key_unknown_type(self, registry: PatternRegistry) -> None:
        """An unregistered type with sub-patterns is not found."""
        with pytest.raises(PatternNotFoundError):
            registry.load({"type": "mixture", "patterns": ["linear"]})


class TestComposite:
    """Tests for registry.composite."""

    def test_mixed_sources(self, registry: PatternRegistry, constant: type[Pattern]) -> None:
        """Names, records and instances are all accepted."""
        composite = registry.composite(
            ["normal", {"type": "poisson", "lambda": 3}, constant({"value": 1})],
            {"mode": "sequence"},
        )

        assert [type(p) for p in composite.patterns.values()] == [
            NormalDistribution,
            PoissonDistribution,
            constant,
        ]
        assert composite.settings.mode == "sequence"

    def test_invalid_sub_pattern(self, registry: PatternRegistry) -> None:
        """Other sub-pattern types are rejected."""
        with pytest.raises(ConfigurationError):
            registry.composite({"a": 42})


class TestLoadFromConfig:
    """Tests for bulk registration."""

    def test_class_and_type_records(self, registry: PatternRegistry) -> None:
        """Both record styles register factories."""
        registry.load_from_config(
            {
                "order_value": {"class": NormalDistribution, "config": {"mean": 50, "stddev": 10}},
                "wait_time": {"type": "exponential", "lambda": 0.1},
            }
        )

        order_value = registry.get("order_value")
        assert isinstance(order_value, NormalDistribution)
        assert order_value.mean == 50
        assert registry.create("order_value", {"mean": 60}).mean == 60
        assert registry.get("wait_time").mean == pytest.approx(10)
        assert registry.get("order_value") is not order_value

    def test_invalid_records(self, registry: PatternRegistry) -> None:
        """Records need a Pattern class or a type."""
        with pytest.raises(ConfigurationError):
            registry.load_from_config({"bad": {"config": {}}})
        with pytest.raises(ConfigurationError):
            registry.load_from_config({"bad": {"class": dict}})


class TestIntrospection:
    """Tests for info, categories and removal."""

    def test_info(self, registry: PatternRegistry) -> None:
        """info describes the resolved pattern."""
        info = registry.info("bell_curve")

        assert info["name"] == "Normal Distribution"
        assert info["description"]
        assert "stddev" in info["parameters"]
        assert info["kind"] == "class"
        assert info["aliases"] == ["bell_curve", "gaussian", "normal"]
        assert info["built_in"] is True

    def test_info_custom_factory(self, registry: PatternRegistry) -> None:
        """Factory entries report the class they build."""
        registry.register_factory("custom.poisson", PoissonDistribution, {"lambda": 2})
        info = registry.info("custom.poisson")

        assert info["name"] == "Poisson Distribution"
        assert info["kind"] == "factory"
        assert info["built_in"] is False
        assert info["aliases"] == []

    def test_get_by_category(self, registry: PatternRegistry) -> None:
        """Categories filter on the dotted prefix."""
        distributions = registry.get_by_category("distribution")

        assert set(distributions) == {
            "distribution.normal",
            "distribution.pareto",
            "distribution.poisson",
            "distribution.exponential",
        }
        assert registry.get_by_category("dist") == {}

    def test_get_categories(self, registry: PatternRegistry) -> None:
        """Undotted names have no category."""
        assert registry.get_categories() == ["distribution", "temporal"]

    def test_remove_prunes_aliases(self, registry: PatternRegistry) -> None:
        """Removing a name drops every alias pointing at it."""
        registry.remove("distribution.normal")

        assert not registry.has("distribution.normal")
        assert not registry.has("normal")
        assert not registry.has("bell_curve")
        assert "gaussian" not in registry.aliases()
        assert registry.has("pareto")

    def test_remove_alias_only(self, registry: PatternRegistry) -> None:
        """Removing an alias keeps its target."""
        registry.remove("gaussian")

        assert not registry.has("gaussian")
        assert registry.has("distribution.normal")
        assert registry.has("normal")

    def test_remove_unknown(self, registry: PatternRegistry) -> None:
        """Removing an unknown name raises."""
        with pytest.raises(PatternNotFoundError):
            registry.remove("nonexistent")
