"""Base pattern contract and shared generator behavior.

Every pattern:
- Is configured from a flat parameter map validated by a pydantic model
- Owns its random stream (seeded for reproducibility, OS entropy otherwise)
- Reports its parameter schema, name and description
- Supports partial reconfiguration and state reset

Example:
    >>> from floe_patterns.distributions import NormalDistribution
    >>> pattern = NormalDistribution({"mean": 35, "stddev": 10, "seed": 42})
    >>> pattern.validate({"stddev": 0})
    False
    >>> value = pattern.generate()
"""

from __future__ import annotations

import math
import random
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any, ClassVar

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from floe_patterns.errors import ConfigurationError

logger = structlog.get_logger(__name__)

Context = Mapping[str, Any]


class PatternConfig(BaseModel):
    """Configuration shared by every pattern.

    Attributes:
        seed: Random seed for reproducibility (None = OS entropy)
    """

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    seed: int | None = Field(default=None, description="Random seed for reproducibility")


class BoundedConfig(PatternConfig):
    """Configuration for patterns that truncate their output.

    Either bound may be omitted; when both are given ``min < max``.
    """

    min: float | None = Field(default=None, description="Minimum value (optional truncation)")
    max: float | None = Field(default=None, description="Maximum value (optional truncation)")

    @model_validator(mode="after")
    def _check_bounds(self) -> BoundedConfig:
        if self.min is not None and self.max is not None and self.min >= self.max:
            raise ValueError("min must be less than max")
        return self


def _type_name(annotation: Any) -> str:
    if isinstance(annotation, type):
        return annotation.__name__
    return str(annotation).replace("typing.", "")


def _format_error(error: Mapping[str, Any]) -> str:
    location = ".".join(str(part) for part in error.get("loc", ()))
    return f"{location}: {error['msg']}" if location else str(error["msg"])


class Pattern(ABC):
    """Abstract base class for seeded value generators.

    Subclasses declare ``name``, ``description`` and ``config_model`` and
    implement ``generate``. Validated settings are available as
    ``self.settings``; the raw merged map as ``self.config``.

    Args:
        config: Parameter map for ``config_model``.
        **params: Individual parameters, merged over ``config``.

    Raises:
        ConfigurationError: If the configuration fails validation.
    """

    name: ClassVar[str] = "Pattern"
    description: ClassVar[str] = "No description available"
    config_model: ClassVar[type[PatternConfig]] = PatternConfig

    def __init__(self, config: Mapping[str, Any] | None = None, **params: Any) -> None:
        raw = {**(config or {}), **params}
        self.settings = self._parse(raw)
        self._config = raw
        self.seed: int | None = self.settings.seed
        self._rng = random.Random(self.seed)  # noqa: S311 - not used for security
        self._configure()

    @abstractmethod
    def generate(self, context: Context | None = None) -> Any:  # pragma: no cover - abstract
        """Generate one value.

        Args:
            context: Optional generation context (e.g. ``{"timestamp": dt}``)

        Returns:
            Generated value
        """
        ...

    def _configure(self) -> None:
        """Derive instance state from ``self.settings`` (after init and set_config)."""

    @classmethod
    def _parse(cls, raw: Mapping[str, Any]) -> PatternConfig:
        try:
            return cls.config_model.model_validate(dict(raw))
        except ValidationError as exc:
            first = exc.errors()[0]
            field_path = ".".join(str(part) for part in first["loc"]) or None
            raise ConfigurationError(
                f"Invalid configuration: {first['msg']}",
                pattern_name=cls.name,
                field_path=field_path,
                internal_details=str(exc),
            ) from exc

    def validate(self, config: Mapping[str, Any]) -> bool:
        """Check a configuration without raising.

        Args:
            config: Parameter map to check

        Returns:
            True if the configuration is valid for this pattern
        """
        return not self.validation_errors(config)

    def validation_errors(self, config: Mapping[str, Any]) -> list[str]:
        """List the problems with a configuration.

        Args:
            config: Parameter map to check

        Returns:
            Human-readable error strings (empty when valid)
        """
        try:
            self.config_model.model_validate(dict(config))
        except ValidationError as exc:
            return [_format_error(error) for error in exc.errors()]
        except (TypeError, ValueError) as exc:
            return [str(exc)]
        return []

    @classmethod
    def get_parameters(cls) -> dict[str, dict[str, Any]]:
        """Describe the accepted parameters.

        Returns:
            Mapping of parameter name to ``type``, ``default``, ``required``
            and ``description``
        """
        parameters: dict[str, dict[str, Any]] = {}
        for field_name, field in cls.config_model.model_fields.items():
            required = field.is_required()
            parameters[field.alias or field_name] = {
                "type": _type_name(field.annotation),
                "default": None if required else field.get_default(call_default_factory=True),
                "required": required,
                "description": field.description or "",
            }
        return parameters

    @property
    def config(self) -> dict[str, Any]:
        """Merged raw configuration."""
        return dict(self._config)

    def set_config(self, config: Mapping[str, Any]) -> None:
        """Merge new parameters into the current configuration.

        The random stream is reseeded only when ``config`` carries a seed.

        Args:
            config: Parameters to merge

        Raises:
            ConfigurationError: If the merged configuration is invalid
        """
        merged = {**self._config, **config}
        self.settings = self._parse(merged)
        self._config = merged

        if config.get("seed") is not None:
            self.seed = self.settings.seed
            self._rng.seed(self.seed)

        self._configure()
        logger.debug("pattern_reconfigured", pattern=self.name, keys=sorted(config))

    def reset(self) -> None:
        """Rewind the random stream to the configured seed."""
        if self.seed is not None:
            self._rng.seed(self.seed)

    @staticmethod
    def clamp(
        value: float,
        minimum: float | None = None,
        maximum: float | None = None,
    ) -> float:
        """Clamp a value on whichever sides are bounded.

        Args:
            value: Value to clamp
            minimum: Lower bound (None = unbounded)
            maximum: Upper bound (None = unbounded)

        Returns:
            Clamped value
        """
        if minimum is not None and value < minimum:
            return minimum
        if maximum is not None and value > maximum:
            return maximum
        return value

    def _open_unit(self) -> float:
        """Uniform draw from the open interval (0, 1)."""
        u = self._rng.random()
        while u == 0.0:
            u = self._rng.random()
        return u

    def _jitter(self, spread: float) -> float:
        """Multiplier drawn uniformly from [1 - spread, 1 + spread]."""
        return self._rng.uniform(1.0 - spread, 1.0 + spread)

    def _standard_normal(self) -> float:
        """Standard normal draw via the Box-Muller transform."""
        u1 = self._open_unit()
        u2 = self._rng.random()
        return math.sqrt(-2.0 * math.log(u1)) * math.cos(2.0 * math.pi * u2)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._config!r})"
