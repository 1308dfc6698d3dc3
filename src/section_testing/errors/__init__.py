"""section-testing error handling.

Usage errors and configuration errors share one hierarchy rooted at
SectionTestingError. Failures raised by test bodies are not part of it.
"""

from section_testing.errors.base import (
    ConfigValidationError,
    ErrorCode,
    ErrorContext,
    InvalidSectionError,
    SectionMisuseError,
    SectionTestingError,
    UnsupportedFunctionError,
)

__all__ = [
    "SectionTestingError",
    "ErrorCode",
    "ErrorContext",
    "SectionMisuseError",
    "InvalidSectionError",
    "UnsupportedFunctionError",
    "ConfigValidationError",
]
