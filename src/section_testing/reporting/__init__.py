"""Reporting of failing passes."""

from section_testing.reporting.console import (
    TRACE_HEADER,
    FailureReporter,
    display_path,
    format_trace,
    quote_label,
)

__all__ = ["TRACE_HEADER", "FailureReporter", "display_path", "format_trace", "quote_label"]
