"""section-testing - Section-style testing for Python.

Write one test function with nested ``section()`` branch points; it is
re-run until every combination of sections has been visited once, and
each pass starts with fresh local state.

Quick Start:
    from section_testing import section, sections

    @sections
    def test_stack():
        v = []

        def check_123(v):
            assert v == [1, 2, 3]
            if section("reverse"):
                v.reverse()
                assert v == [3, 2, 1]

        if section("push"):
            v.extend([1, 2, 3])
            check_123(v)

        if section("insert"):
            v.insert(0, 3)
            v.insert(0, 1)
            v.insert(1, 2)
            check_123(v)

A failing pass prints the sections it was inside to stderr.
"""

from __future__ import annotations

from section_testing.config import (
    SectionTestingConfig,
    get_config,
    load_config,
    reset_config,
    set_config,
)
from section_testing.errors import (
    ConfigValidationError,
    ErrorCode,
    ErrorContext,
    InvalidSectionError,
    SectionMisuseError,
    SectionTestingError,
    UnsupportedFunctionError,
)
from section_testing.exploration import (
    Entry,
    ExplorationEngine,
    ExplorationResult,
    PassRecord,
    Path,
    PathFrontier,
    Section,
    enter_section,
    get_engine,
    is_running,
    last_result,
)
from section_testing.reporting import FailureReporter, format_trace
from section_testing.runtime import PassGuard, section, sections

__version__ = "0.1.0"

__all__ = [
    # Main API
    "sections",
    "section",
    "last_result",
    # Engine
    "ExplorationEngine",
    "PassGuard",
    "get_engine",
    "enter_section",
    "is_running",
    # Types
    "Section",
    "Entry",
    "Path",
    "PathFrontier",
    "PassRecord",
    "ExplorationResult",
    # Reporting
    "FailureReporter",
    "format_trace",
    # Config
    "SectionTestingConfig",
    "load_config",
    "get_config",
    "set_config",
    "reset_config",
    # Errors
    "SectionTestingError",
    "SectionMisuseError",
    "InvalidSectionError",
    "UnsupportedFunctionError",
    "ConfigValidationError",
    "ErrorCode",
    "ErrorContext",
]
