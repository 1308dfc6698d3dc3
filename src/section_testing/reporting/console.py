"""Console reporter for failing passes.

When a pass aborts, the sections that were active are written as one
block so the output cannot interleave with other diagnostics::

    ---- the failure was inside these sections ----
      0) "push" at tests/test_stack.py:34
      1) "pop+remove+insert+push" at tests/test_stack.py:25
"""

from __future__ import annotations

import sys
from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING, TextIO

if TYPE_CHECKING:
    from section_testing.config import SectionTestingConfig
    from section_testing.exploration.section import Section

TRACE_HEADER = "---- the failure was inside these sections ----"

_ESCAPES = {"\t": "\\t", "\r": "\\r", "\n": "\\n", "\\": "\\\\", '"': '\\"', "\0": "\\0"}


def quote_label(label: str) -> str:
    """Double-quote ``label`` for the trace.

    Printable characters, non-ASCII included, are kept as they are; other
    characters are written as ``\\u{hex}``, e.g. ESC becomes ``\\u{1b}``.
    """
    out = []
    for char in label:
        if char in _ESCAPES:
            out.append(_ESCAPES[char])
        elif char.isprintable():
            out.append(char)
        else:
            out.append(f"\\u{{{ord(char):x}}}")
    return '"' + "".join(out) + '"'


def display_path(file: str, relative: bool = True) -> str:
    """Return ``file`` relative to the working directory when it lies under it."""
    if not relative:
        return file
    try:
        return str(Path(file).relative_to(Path.cwd()))
    except ValueError:
        return file


def format_trace(sections: Sequence[Section], relative_paths: bool = True) -> str:
    """Format the failure trace for sections already ordered by rank.

    Returns an empty string when no section was active.
    """
    if not sections:
        return ""
    lines = [TRACE_HEADER]
    for i, section in enumerate(sections):
        label = quote_label(section.label)
        location = f"{display_path(section.file, relative_paths)}:{section.line}"
        lines.append(f"{i:>3}) {label} at {location}")
    return "\n".join(lines) + "\n"


class FailureReporter:
    """Writes the failure trace of an aborted pass.

    Example::

        reporter = FailureReporter()
        reporter.report(active_sections(path))

        # Write somewhere else, keeping absolute paths
        reporter = FailureReporter(file=log_file, relative_paths=False)
    """

    def __init__(
        self,
        file: TextIO | None = None,
        stream: str = "stderr",
        relative_paths: bool = True,
        enabled: bool = True,
    ) -> None:
        """Initialize the failure reporter.

        Args:
            file: Output file. When omitted, ``stream`` is looked up on
                ``sys`` at report time so captured streams are honoured.
            stream: "stderr" or "stdout".
            relative_paths: Show locations relative to the working directory.
            enabled: When False, report() formats but writes nothing.
        """
        self.file = file
        self.stream = stream
        self.relative_paths = relative_paths
        self.enabled = enabled

    @classmethod
    def from_config(cls, config: SectionTestingConfig) -> FailureReporter:
        return cls(
            stream=config.report_stream,
            relative_paths=config.relative_paths,
            enabled=config.report_failures,
        )

    def format(self, sections: Sequence[Section]) -> str:
        return format_trace(sections, self.relative_paths)

    def report(self, sections: Sequence[Section]) -> str:
        """Write the trace in a single call and return it."""
        text = self.format(sections)
        if text and self.enabled:
            out = self.file or getattr(sys, self.stream)
            out.write(text)
            out.flush()
        return text


__all__ = ["TRACE_HEADER", "FailureReporter", "display_path", "format_trace", "quote_label"]
