"""Custom exception hierarchy for section-testing.

All section-testing errors inherit from SectionTestingError and include:
- error_code: A unique ErrorCode enum for categorization
- context: ErrorContext with function/section/location details
- suggestions: List of actionable steps to resolve the issue

Failures raised by the test body itself are never wrapped in these
types; they propagate unchanged.

Example:
    try:
        section("outside")
    except SectionMisuseError as e:
        print(f"Error: {e}")
        for suggestion in e.suggestions:
            print(f"  - {suggestion}")
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class ErrorCode(Enum):
    """Standardized error codes for section-testing.

    Error codes are organized by category:
    - E1xx: Usage errors (helpers called outside an exploration)
    - E2xx: Configuration errors
    - E9xx: Unknown/internal errors
    """

    # Usage errors (E1xx)
    SECTION_OUTSIDE_RUN = "E101"
    INVALID_SECTION = "E102"
    UNSUPPORTED_FUNCTION = "E103"

    # Configuration errors (E2xx)
    INVALID_CONFIG = "E201"

    # Unknown/internal errors (E9xx)
    UNKNOWN = "E999"

    @property
    def category(self) -> str:
        """Get the error category name."""
        code_num = int(self.value[1:])
        if code_num < 200:
            return "usage"
        elif code_num < 300:
            return "config"
        else:
            return "unknown"


@dataclass
class ErrorContext:
    """Structured context for error reporting.

    Attributes:
        function_name: Name of the function being explored (if known)
        section_label: Label of the section involved (if any)
        location: "file:line" of the offending call
        extra: Additional context-specific information
        timestamp: When the error occurred
    """

    function_name: str | None = None
    section_label: str | None = None
    location: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict[str, Any]:
        """Convert context to dictionary for serialization."""
        result = {
            "function_name": self.function_name,
            "section_label": self.section_label,
            "location": self.location,
            "extra": self.extra,
            "timestamp": self.timestamp.isoformat(),
        }
        return {k: v for k, v in result.items() if v is not None}

    def format_location(self) -> str:
        """Format the error location as a readable string."""
        parts = []
        if self.function_name:
            parts.append(f"function={self.function_name}")
        if self.section_label:
            parts.append(f"section={self.section_label!r}")
        if self.location:
            parts.append(self.location)
        return " > ".join(parts) if parts else "unknown location"


class SectionTestingError(Exception):
    """Base exception for all section-testing errors.

    Attributes:
        error_code: Unique ErrorCode for this error type
        message: Human-readable error description
        context: ErrorContext with execution details
        suggestions: List of actionable steps to resolve the issue
        cause: The underlying exception (if any)
    """

    error_code: ErrorCode = ErrorCode.UNKNOWN
    default_message: str = "An unexpected error occurred"
    default_suggestions: list[str] = []

    def __init__(
        self,
        message: str | None = None,
        error_code: ErrorCode | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
        suggestions: list[str] | None = None,
        **extra_context: Any,
    ) -> None:
        self.message = message or self.default_message
        self.error_code = error_code or self.error_code
        self.context = context or ErrorContext()
        self.cause = cause
        self._suggestions = suggestions

        if extra_context:
            self.context.extra.update(extra_context)

        super().__init__(self.message)

    @property
    def suggestions(self) -> list[str]:
        """Get actionable suggestions for resolving this error."""
        if self._suggestions is not None:
            return self._suggestions
        return self.default_suggestions.copy()

    def __str__(self) -> str:
        parts = [f"[{self.error_code.value}] {self.message}"]

        location = self.context.format_location()
        if location != "unknown location":
            parts.append(f"at {location}")

        return " | ".join(parts)

    def format_verbose(self) -> str:
        """Format error with full details including suggestions."""
        lines = [
            f"Error [{self.error_code.value}]: {self.message}",
        ]

        location = self.context.format_location()
        if location != "unknown location":
            lines.append(f"Location: {location}")

        if self.suggestions:
            lines.append("")
            lines.append("Suggestions:")
            for suggestion in self.suggestions:
                lines.append(f"  - {suggestion}")

        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for serialization."""
        return {
            "error_code": self.error_code.value,
            "error_type": self.__class__.__name__,
            "message": self.message,
            "suggestions": self.suggestions,
            "context": self.context.to_dict(),
            "cause": str(self.cause) if self.cause else None,
        }


class SectionMisuseError(SectionTestingError):
    """section() was called while no exploration pass is running.

    This always indicates a programming error: the helper was used in a
    function that is not decorated with @sections (or marked with
    pytest.mark.sections), or after the exploration already finished.
    """

    error_code = ErrorCode.SECTION_OUTSIDE_RUN
    default_message = '"section(...)" must be called from inside a "@sections" function'
    default_suggestions = [
        "Decorate the enclosing test function with @sections",
        "Or mark the test with @pytest.mark.sections",
        "Helpers that call section() must be invoked from inside such a test",
    ]


class InvalidSectionError(SectionTestingError):
    """A section label was not a string."""

    error_code = ErrorCode.INVALID_SECTION
    default_message = "Section labels must be strings"
    default_suggestions = [
        'Pass a literal label, e.g. section("empty list")',
    ]


class UnsupportedFunctionError(SectionTestingError):
    """@sections was applied to a coroutine or generator function.

    Calling such a function only creates a coroutine or generator object,
    so its body would never run and every pass would appear to succeed.
    """

    error_code = ErrorCode.UNSUPPORTED_FUNCTION
    default_message = "@sections only supports plain synchronous functions"
    default_suggestions = [
        "Turn the test into a regular def function",
        "Drive async code from inside the body, e.g. with asyncio.run()",
    ]


class ConfigValidationError(SectionTestingError):
    """Configuration value failed validation."""

    error_code = ErrorCode.INVALID_CONFIG
    default_message = "Configuration validation failed"
    default_suggestions = [
        "Check the SECTION_TESTING_* environment variables",
        "Check the keys in your section-testing YAML file",
    ]

    def __init__(
        self,
        message: str | None = None,
        field: str | None = None,
        value: Any = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message=message, **kwargs)
        self.field = field
        self.value = value
        if field:
            self.context.extra["field"] = field
        if value is not None:
            self.context.extra["value"] = value
