"""Pattern registry.

Catalog mapping dotted names (``distribution.normal``) and aliases
(``bell_curve``) to pattern classes, pre-built instances or factories.

Example:
    >>> registry = PatternRegistry()
    >>> order_value = registry.create("pareto", {"alpha": 1.5, "xmin": 10})
    >>> signups = registry.load({"type": "growth", "initial_value": 50, "growth_rate": 2})
    >>> registry.get_by_category("temporal")  # doctest: +ELLIPSIS
    {'temporal.linear': ...}
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Literal

import structlog

from floe_patterns.base import Pattern
from floe_patterns.composite import CompositePattern
from floe_patterns.distributions import (
    ExponentialDistribution,
    NormalDistribution,
    ParetoDistribution,
    PoissonDistribution,
)
from floe_patterns.errors import ConfigurationError, PatternNotFoundError
from floe_patterns.temporal import BusinessHours, LinearGrowth, SeasonalPattern, WeeklyPattern

logger = structlog.get_logger(__name__)

PatternFactory = Callable[[Mapping[str, Any]], Pattern]
EntryKind = Literal["class", "instance", "factory"]

BUILTIN_PATTERNS: dict[str, type[Pattern]] = {
    "distribution.normal": NormalDistribution,
    "distribution.pareto": ParetoDistribution,
    "distribution.poisson": PoissonDistribution,
    "distribution.exponential": ExponentialDistribution,
    "temporal.linear": LinearGrowth,
    "temporal.seasonal": SeasonalPattern,
    "temporal.business_hours": BusinessHours,
    "temporal.weekly": WeeklyPattern,
    "composite": CompositePattern,
}

BUILTIN_ALIASES: dict[str, str] = {
    "normal": "distribution.normal",
    "bell_curve": "distribution.normal",
    "gaussian": "distribution.normal",
    "pareto": "distribution.pareto",
    "80-20": "distribution.pareto",
    "poisson": "distribution.poisson",
    "exponential": "distribution.exponential",
    "linear": "temporal.linear",
    "growth": "temporal.linear",
    "seasonal": "temporal.seasonal",
    "business_hours": "temporal.business_hours",
    "working_hours": "temporal.business_hours",
    "weekly": "temporal.weekly",
}


@dataclass(frozen=True)
class PatternEntry:
    """Registered target: a Pattern subclass, a Pattern instance, or a factory.

    Attributes:
        kind: Which of the three target kinds this entry holds
        target: The class, instance or factory callable
        defaults: Configuration passed to factories beneath caller overrides
    """

    kind: EntryKind
    target: Any
    defaults: dict[str, Any] = field(default_factory=dict)

    def build(self, config: Mapping[str, Any] | None = None) -> Pattern:
        if self.kind == "instance":
            if config:
                logger.debug("instance_entry_ignores_config", keys=sorted(config))
            return self.target
        if self.kind == "class":
            return self.target(config=dict(config or {}))

        pattern = self.target({**self.defaults, **(config or {})})
        if not isinstance(pattern, Pattern):
            raise ConfigurationError(
                "Pattern factory did not return a Pattern",
                internal_details=f"factory={self.target!r} returned={type(pattern).__name__}",
            )
        return pattern


class PatternRegistry:
    """Named catalog of patterns.

    Args:
        include_builtins: Register the built-in patterns and aliases

    Example:
        >>> registry = PatternRegistry()
        >>> registry.has("bell_curve")
        True
    """

    def __init__(self, include_builtins: bool = True) -> None:
        self._entries: dict[str, PatternEntry] = {}
        self._aliases: dict[str, str] = {}
        self._builtins: frozenset[str] = frozenset()

        if include_builtins:
            for name, pattern_class in BUILTIN_PATTERNS.items():
                self.register(name, pattern_class)
            for alias, name in BUILTIN_ALIASES.items():
                self.alias(alias, name)
            self._builtins = frozenset(BUILTIN_PATTERNS)

    def register(self, name: str, pattern: type[Pattern] | Pattern) -> None:
        """Register a Pattern subclass or a configured Pattern instance.

        Args:
            name: Registry name (dotted names group into categories)
            pattern: Class to instantiate on create, or instance to hand out

        Raises:
            ConfigurationError: If ``pattern`` is neither a Pattern subclass
                nor a Pattern instance
        """
        if isinstance(pattern, type) and issubclass(pattern, Pattern):
            entry = PatternEntry(kind="class", target=pattern)
        elif isinstance(pattern, Pattern):
            entry = PatternEntry(kind="instance", target=pattern)
        else:
            raise ConfigurationError(
                f"Cannot register '{name}': target does not implement the Pattern contract",
                internal_details=f"target={pattern!r}",
            )

        self._entries[name] = entry
        logger.debug("pattern_registered", name=name, kind=entry.kind)

    def register_factory(
        self,
        name: str,
        factory: PatternFactory,
        defaults: Mapping[str, Any] | None = None,
    ) -> None:
        """Register a callable that builds a Pattern from a configuration.

        Args:
            name: Registry name
            factory: Callable receiving the merged configuration
            defaults: Configuration merged beneath caller overrides

        Raises:
            ConfigurationError: If ``factory`` is not callable
        """
        if not callable(factory):
            raise ConfigurationError(f"Cannot register '{name}': factory is not callable")
        self._entries[name] = PatternEntry(
            kind="factory", target=factory, defaults=dict(defaults or {})
        )
        logger.debug("pattern_registered", name=name, kind="factory")

    def alias(self, alias: str, name: str) -> None:
        """Make ``alias`` resolve to the registered ``name``.

        Raises:
            PatternNotFoundError: If ``name`` is not registered
        """
        if name not in self._entries:
            raise PatternNotFoundError(name, list(self._entries))
        self._aliases[alias] = name

    def resolve(self, name: str) -> str | None:
        """Canonical name for a name or alias (None when unknown)."""
        if name in self._entries:
            return name
        return self._aliases.get(name)

    def _entry(self, name: str) -> tuple[str, PatternEntry]:
        resolved = self.resolve(name)
        if resolved is None:
            raise PatternNotFoundError(name, [*self._entries, *self._aliases])
        return resolved, self._entries[resolved]

    def create(self, name: str, config: Mapping[str, Any] | None = None) -> Pattern:
        """Build a pattern by name or alias.

        Classes are instantiated with ``config``, factories are called with
        their defaults merged beneath ``config``, and registered instances
        are returned as they are.

        Raises:
            PatternNotFoundError: If the name is not registered
            ConfigurationError: If the configuration is invalid
        """
        resolved, entry = self._entry(name)
        pattern = entry.build(config)
        logger.debug("pattern_created", name=resolved, requested=name, kind=entry.kind)
        return pattern

    def get(self, name: str) -> Pattern:
        """Pattern for a name with its default configuration."""
        return self.create(name)

    def load(self, config: Mapping[str, Any]) -> Pattern:
        """Build a pattern from a ``{"type": ..., **params}`` record.

        Parameters may also be nested under ``"config"``. A ``"patterns"``
        key builds a composite from the listed sub-pattern records.

        Raises:
            ConfigurationError: If the record has no type
            PatternNotFoundError: If the type is not registered
        """
        if "type" not in config:
            raise ConfigurationError(
                "Pattern configuration must include a type", field_path="type"
            )

        rest = {key: value for key, value in config.items() if key != "type"}
        params = dict(rest.pop("config", None) or {})
        params.update(rest)

        pattern_type = str(config["type"])
        if "patterns" in params:
            resolved, entry = self._entry(pattern_type)
            if not (
                entry.kind == "class"
                and isinstance(entry.target, type)
                and issubclass(entry.target, CompositePattern)
            ):
                raise ConfigurationError(
                    f"Only composite patterns accept sub-patterns, got type '{pattern_type}'",
                    field_path="patterns",
                    internal_details=f"resolved={resolved} kind={entry.kind}",
                )
            return self.composite(params.pop("patterns"), params)
        return self.create(pattern_type, params)

    def composite(
        self,
        patterns: Mapping[str, Any] | Sequence[Any],
        config: Mapping[str, Any] | None = None,
    ) -> CompositePattern:
        """Build a composite from names, records or Pattern instances.

        Args:
            patterns: Sub-pattern sources, as a list or keyed by sub-pattern name.
                Each source is a registry name, a ``load`` record, or a Pattern.
            config: CompositePattern configuration (mode, combination, weights)
        """
        items = patterns.items() if isinstance(patterns, Mapping) else enumerate(patterns)
        built: dict[str, Pattern] = {}
        for key, source in items:
            if isinstance(source, Pattern):
                built[str(key)] = source
            elif isinstance(source, str):
                built[str(key)] = self.create(source)
            elif isinstance(source, Mapping):
                built[str(key)] = self.load(source)
            else:
                raise ConfigurationError(
                    f"Invalid sub-pattern configuration for '{key}'",
                    pattern_name=CompositePattern.name,
                    field_path=f"patterns.{key}",
                )
        return CompositePattern(built, config)

    def load_from_config(self, config: Mapping[str, Mapping[str, Any]]) -> None:
        """Register named patterns from configuration records.

        Each record is either ``{"class": PatternSubclass, "config": {...}}``
        or a ``load`` record (``{"type": ..., ...}``); both become factories
        so every ``create`` returns a fresh pattern.

        Raises:
            ConfigurationError: If a record has neither class nor type
        """
        for name, record in config.items():
            if "class" in record:
                pattern_class = record["class"]
                if not (isinstance(pattern_class, type) and issubclass(pattern_class, Pattern)):
                    raise ConfigurationError(
                        f"Cannot register '{name}': class does not implement the Pattern contract",
                        field_path=f"{name}.class",
                    )
                self.register_factory(
                    name, lambda cfg, cls=pattern_class: cls(config=cfg), record.get("config")
                )
            elif "type" in record:
                self.register_factory(name, self.load, record)
            else:
                raise ConfigurationError(
                    f"Pattern '{name}' needs a class or a type", field_path=name
                )

    def has(self, name: str) -> bool:
        return self.resolve(name) is not None

    def info(self, name: str) -> dict[str, Any]:
        """Describe a registered pattern.

        Returns:
            Dict with name, description, parameters, kind, aliases and built_in
        """
        resolved, entry = self._entry(name)
        pattern_class = entry.target if entry.kind == "class" else type(entry.build())
        return {
            "name": pattern_class.name,
            "description": pattern_class.description,
            "parameters": pattern_class.get_parameters(),
            "kind": entry.kind,
            "aliases": sorted(a for a, target in self._aliases.items() if target == resolved),
            "built_in": resolved in self._builtins,
        }

    def all(self) -> dict[str, Any]:
        """Registered names mapped to their class, instance or factory."""
        return {name: entry.target for name, entry in self._entries.items()}

    def aliases(self) -> dict[str, str]:
        return dict(self._aliases)

    def remove(self, name: str) -> None:
        """Remove a name (and every alias pointing to it) or a single alias.

        Raises:
            PatternNotFoundError: If the name is not registered
        """
        if name in self._aliases and name not in self._entries:
            del self._aliases[name]
            return
        if name not in self._entries:
            raise PatternNotFoundError(name, [*self._entries, *self._aliases])

        del self._entries[name]
        self._aliases = {
            alias: target for alias, target in self._aliases.items() if target != name
        }
        logger.debug("pattern_removed", name=name)

    def get_by_category(self, category: str) -> dict[str, Any]:
        """Registered names under ``<category>.``."""
        prefix = f"{category}."
        return {
            name: entry.target
            for name, entry in self._entries.items()
            if name.startswith(prefix)
        }

    def get_categories(self) -> list[str]:
        """Distinct leading segments of dotted names, in registration order."""
        categories: list[str] = []
        for name in self._entries:
            category, dot, _ = name.partition(".")
            if dot and category not in categories:
                categories.append(category)
        return categories

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.has(name)

    def __len__(self) -> int:
        return len(self._entries)
