"""Exploration - deciding which sections run on each pass.

Core abstractions:
- Section: Identity of one branch point (label, file, line)
- Entry: Decision recorded for a section within one path
- Path: One combination of decisions, replayed by a pass
- PathFrontier: FIFO queue of paths still to run
- ExplorationEngine: Per-thread run state (start, step, query, finalize)
- ExplorationResult: Record of every pass of a run
"""

from section_testing.exploration.engine import (
    ExplorationEngine,
    enter_section,
    get_engine,
    is_running,
    last_result,
    start,
    step,
)
from section_testing.exploration.frontier import PathFrontier
from section_testing.exploration.result import ExplorationResult, PassRecord
from section_testing.exploration.section import Entry, Path, Section, active_sections

__all__ = [
    # Core types
    "Section",
    "Entry",
    "Path",
    "active_sections",
    "PathFrontier",
    "ExplorationResult",
    "PassRecord",
    # Engine
    "ExplorationEngine",
    "get_engine",
    "start",
    "step",
    "enter_section",
    "is_running",
    "last_result",
]
