"""Custom exception hierarchy for floe-patterns.

This module defines the exception classes raised by patterns and the registry:
- PatternError: Base exception for all pattern-related errors
- ConfigurationError: Raised when a pattern configuration is invalid
- PatternNotFoundError: Raised when a registry lookup fails
- DomainError: Raised when a computation is mathematically impossible

User-facing messages are safe to display. Technical details (raw pydantic
errors, offending values) are logged internally via structlog.
"""

from __future__ import annotations

import structlog

logger = structlog.get_logger(__name__)


class PatternError(Exception):
    """Base exception for floe-patterns.

    Args:
        user_message: Safe message to display to the user.
        internal_details: Optional technical details for logging. This is
            logged internally but never included in the message.

    Example:
        >>> raise PatternError(
        ...     "Pattern configuration invalid",
        ...     internal_details="stddev: Input should be greater than 0",
        ... )
    """

    def __init__(
        self,
        user_message: str,
        *,
        internal_details: str | None = None,
    ) -> None:
        """Initialize PatternError with user message and optional internal details.

        Args:
            user_message: Safe message to display to the user.
            internal_details: Technical details for internal logging only.
        """
        super().__init__(user_message)
        self.user_message = user_message

        if internal_details:
            logger.error(
                "pattern_error",
                error_type=self.__class__.__name__,
                user_message=user_message,
                internal_details=internal_details,
            )


class ConfigurationError(PatternError):
    """Raised when a pattern configuration fails validation.

    Use this exception when:
    - A parameter is outside its domain (e.g. ``stddev <= 0``)
    - Bounds are inconsistent (``min >= max``)
    - An unknown parameter is supplied
    - A registration target does not implement the Pattern contract

    Attributes:
        pattern_name: Display name of the pattern being configured (if known).
        field_path: Dot-separated path to the invalid field (e.g., "business_hours.start").

    Example:
        >>> raise ConfigurationError(
        ...     "Invalid configuration",
        ...     pattern_name="Normal Distribution",
        ...     field_path="stddev",
        ... )
    """

    def __init__(
        self,
        user_message: str,
        *,
        pattern_name: str | None = None,
        field_path: str | None = None,
        internal_details: str | None = None,
    ) -> None:
        """Initialize ConfigurationError with context.

        Args:
            user_message: Safe message to display to the user.
            pattern_name: Display name of the pattern (optional).
            field_path: Dot-separated path to the field (optional).
            internal_details: Technical details for internal logging only.
        """
        context_parts: list[str] = []
        if pattern_name:
            context_parts.append(f"pattern '{pattern_name}'")
        if field_path:
            context_parts.append(f"field '{field_path}'")

        if context_parts:
            full_message = f"{user_message} ({', '.join(context_parts)})"
        else:
            full_message = user_message

        super().__init__(full_message, internal_details=internal_details)

        self.pattern_name = pattern_name
        self.field_path = field_path


class PatternNotFoundError(PatternError):
    """Raised when a pattern name or alias is not registered.

    Always includes the registered names for actionable feedback.

    Attributes:
        name: The requested name or alias.
        available: Registered pattern names.

    Example:
        >>> raise PatternNotFoundError("lognormal", ["distribution.normal"])
        # User sees: "Pattern 'lognormal' not found. Available: distribution.normal"
    """

    def __init__(
        self,
        name: str,
        available: list[str],
        *,
        internal_details: str | None = None,
    ) -> None:
        """Initialize PatternNotFoundError with available names.

        Args:
            name: The requested name or alias.
            available: Registered pattern names.
            internal_details: Technical details for internal logging only.
        """
        available_str = ", ".join(sorted(available)) if available else "none"
        user_message = f"Pattern '{name}' not found. Available: {available_str}"

        super().__init__(user_message, internal_details=internal_details)

        self.name = name
        self.available = available


class DomainError(PatternError):
    """Raised when a computation has no meaningful result.

    Use this exception when:
    - A percentile lies outside the open interval (0, 1)
    - A negative sample count is requested
    - A density is evaluated at NaN
    - A multiplicative combination would produce a complex number
    """

    pass
