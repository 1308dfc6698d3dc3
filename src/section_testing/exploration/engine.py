"""ExplorationEngine - Decides which sections run on each pass.

The engine replays one path per pass. A section found in the current
path answers with its recorded decision; a section missing from it is
newly discovered, answers False, and is scheduled for later passes. When
a pass completes, one new path is queued per discovered section, each
entering exactly that section on top of the decisions already made.

Engines are kept per thread: tests running concurrently on different
threads never share a queue, and a section-bearing helper called from
inside another one on the same thread joins the outer run instead of
starting its own.
"""

from __future__ import annotations

import logging
import threading

from section_testing.config import get_config
from section_testing.exploration.frontier import PathFrontier
from section_testing.exploration.result import ExplorationResult, PassRecord
from section_testing.exploration.section import Entry, Path, Section, active_sections
from section_testing.reporting import FailureReporter

logger = logging.getLogger(__name__)

_local = threading.local()


class ExplorationEngine:
    """Exploration state for one thread.

    Lifecycle per top-level run::

        engine.start()              # reset, seeded with one empty path
        while engine.step():        # make the next pending path current
            try:
                body()              # calls engine.query(...) per section
            except BaseException:
                engine.finalize_failure()
                raise
            engine.finalize_success()
        engine.finish()

    Args:
        reporter: Reporter for failing passes. Defaults to one built from
            the active configuration each time a pass fails.
    """

    def __init__(self, reporter: FailureReporter | None = None) -> None:
        self._reporter = reporter
        self._running = False
        self._frontier = PathFrontier()
        self._current: Path = {}
        self._new: list[Section] = []
        self._new_seen: set[Section] = set()
        self.result = ExplorationResult()

    @property
    def reporter(self) -> FailureReporter:
        if self._reporter is not None:
            return self._reporter
        return FailureReporter.from_config(get_config())

    @property
    def current_path(self) -> Path:
        """Copy of the path being replayed."""
        return dict(self._current)

    @property
    def discovered(self) -> list[Section]:
        """Sections seen for the first time during the current pass."""
        return list(self._new)

    @property
    def pending(self) -> int:
        return len(self._frontier)

    def is_running(self) -> bool:
        return self._running

    def start(self, name: str | None = None) -> bool:
        """Begin a top-level run.

        Returns False without touching any state when a pass is already
        running on this engine: the caller is nested and must defer to the
        enclosing run.
        """
        if self._running:
            return False
        self._frontier.reset()
        self._current = {}
        self._new = []
        self._new_seen = set()
        self.result = ExplorationResult(name=name)
        return True

    def step(self) -> bool:
        """Make the next pending path current. Returns False once exhausted."""
        path = self._frontier.pop()
        if path is None:
            return False
        self._current = path
        self._new.clear()
        self._new_seen.clear()
        self._running = True
        logger.debug(
            "pass %d: entering %s",
            self.result.pass_count,
            [section.label for section in active_sections(path)],
        )
        return True

    def query(self, section: Section) -> bool:
        """Return whether ``section`` runs on the current pass.

        Unknown sections never run the first time they are seen; they are
        recorded once per pass and explored by later passes.
        """
        entry = self._current.get(section)
        if entry is not None:
            return entry.should_enter
        if section not in self._new_seen:
            self._new_seen.add(section)
            self._new.append(section)
        return False

    def finalize_success(self) -> int:
        """Close a pass that completed normally.

        Queues one path per discovered section and returns how many were
        queued.
        """
        self._running = False
        new, self._new = self._new, []
        self._new_seen = set()
        rank = sum(1 for entry in self._current.values() if entry.should_enter)
        self._frontier.add_many(self._branch(new, rank))

        self._record(succeeded=True)
        if new:
            logger.debug(
                "discovered %d section(s): %s", len(new), [section.label for section in new]
            )
        return len(new)

    def finalize_failure(self) -> list[Section]:
        """Close a pass that aborted and report the sections it was inside.

        Returns the active sections ordered by rank, outermost first.
        """
        self._running = False
        self._new = []
        self._new_seen = set()
        active = active_sections(self._current)
        self._record(succeeded=False)
        self.reporter.report(active)
        return active

    def finish(self, truncated: bool = False) -> ExplorationResult:
        """Mark the run finished and return its result."""
        self.result.truncated_by_max_passes = truncated
        self.result.finish()
        return self.result

    def _branch(self, new: list[Section], rank: int) -> list[Path]:
        paths = []
        for section in new:
            path = dict(self._current)
            for sibling in new:
                path[sibling] = Entry(should_enter=sibling == section, rank=rank)
            paths.append(path)
        return paths

    def _record(self, succeeded: bool) -> None:
        self.result.add_pass(
            PassRecord(
                index=self.result.pass_count,
                active=tuple(active_sections(self._current)),
                succeeded=succeeded,
            )
        )


def get_engine() -> ExplorationEngine:
    """Return the calling thread's engine, creating it on first use."""
    engine = getattr(_local, "engine", None)
    if engine is None:
        engine = ExplorationEngine()
        _local.engine = engine
    return engine


def start(name: str | None = None) -> bool:
    return get_engine().start(name)


def step() -> bool:
    return get_engine().step()


def enter_section(label: str, file: str, line: int) -> bool:
    """Return whether the section at ``file:line`` runs on this thread's current pass."""
    return get_engine().query(Section(label, file, line))


def is_running() -> bool:
    return get_engine().is_running()


def last_result() -> ExplorationResult:
    """Result of the most recent (or in-progress) top-level run on this thread."""
    return get_engine().result


__all__ = [
    "ExplorationEngine",
    "get_engine",
    "start",
    "step",
    "enter_section",
    "is_running",
    "last_result",
]
