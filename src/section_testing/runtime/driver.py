"""Run driver - re-runs a test body until every section has been visited.

Example::

    from section_testing import section, sections

    @sections
    def test_list():
        v = []

        if section("append"):
            v.append(1)
            assert v == [1]

        if section("extend"):
            v.extend([1, 2])
            assert len(v) == 2

The body above runs three times: once to discover both sections, then
once with each section entered. ``v`` starts empty on every pass.
"""

from __future__ import annotations

import functools
import inspect
import logging
import sys
from collections.abc import Callable
from typing import Any, TypeVar

from section_testing.config import get_config
from section_testing.errors import (
    ErrorContext,
    InvalidSectionError,
    SectionMisuseError,
    UnsupportedFunctionError,
)
from section_testing.exploration.engine import ExplorationEngine, get_engine
from section_testing.exploration.section import Section

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


class PassGuard:
    """Closes exactly one pass, however the body exits.

    The body must call complete() as its last step; leaving the block
    without it (an exception, or a BaseException such as
    KeyboardInterrupt) counts as a failed pass. Exceptions are never
    suppressed. Guards for nested invocations do nothing, since the
    enclosing run owns the pass.

    Args:
        engine: Engine the pass belongs to.
        is_top_level: Whether this invocation drives the run.
        annotate: Attach the failure trace to the exception as a note.
    """

    def __init__(self, engine: ExplorationEngine, is_top_level: bool, annotate: bool = True) -> None:
        self.engine = engine
        self.is_top_level = is_top_level
        self.annotate = annotate
        self.completed = False

    def complete(self) -> None:
        self.completed = True

    def __enter__(self) -> PassGuard:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        if not self.is_top_level:
            return
        if self.completed:
            self.engine.finalize_success()
            return
        active = self.engine.finalize_failure()
        if active and self.annotate and exc_val is not None:
            exc_val.add_note(self.engine.reporter.format(active).rstrip("\n"))


def sections(func: F) -> F:
    """Run ``func`` once per combination of the sections it reaches.

    The outermost decorated call on a thread drives the run and returns
    None. A decorated function called while a run is already in progress
    (for example a shared helper full of sections) executes once as part
    of the current pass and returns its own value.

    Exploration stops at the first failing pass: its exception
    propagates after the active sections have been reported.

    Raises:
        UnsupportedFunctionError: If ``func`` is a coroutine function or a
            generator function, whose body would never run here.
    """
    if (
        inspect.iscoroutinefunction(func)
        or inspect.isgeneratorfunction(func)
        or inspect.isasyncgenfunction(func)
    ):
        kind = "coroutine" if inspect.iscoroutinefunction(func) else "generator"
        raise UnsupportedFunctionError(
            f"@sections cannot drive {kind} function {func.__qualname__!r}",
            context=ErrorContext(function_name=func.__qualname__),
            function_kind=kind,
        )

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        engine = get_engine()
        name = func.__qualname__
        if not engine.start(name):
            return func(*args, **kwargs)

        config = get_config()
        truncated = False
        try:
            while True:
                if config.max_passes is not None and engine.result.pass_count >= config.max_passes:
                    truncated = engine.pending > 0
                    if truncated:
                        logger.warning(
                            "%s: stopped after %d passes with %d combination(s) unexplored",
                            name,
                            engine.result.pass_count,
                            engine.pending,
                        )
                    break
                if not engine.step():
                    break
                with PassGuard(engine, is_top_level=True, annotate=config.annotate_exceptions) as guard:
                    func(*args, **kwargs)
                    guard.complete()
        finally:
            result = engine.finish(truncated)

        logger.info(
            "%s: explored %d combination(s) in %d pass(es)",
            name,
            len(result.combinations),
            result.pass_count,
        )
        return None

    return wrapper  # type: ignore[return-value]


def section(label: str, stacklevel: int = 1) -> bool:
    """Return True if the branch point at the caller's location runs on this pass.

    Args:
        label: Name shown in failure reports.
        stacklevel: Which caller's file and line identify the section; raise
            it in helpers that wrap section() so each of their call sites
            stays a distinct section.

    Raises:
        SectionMisuseError: If no pass is running on this thread.
        InvalidSectionError: If label is not a string.
    """
    frame = sys._getframe(stacklevel)
    file, line = frame.f_code.co_filename, frame.f_lineno
    del frame

    engine = get_engine()
    if not isinstance(label, str):
        raise InvalidSectionError(
            context=ErrorContext(
                function_name=engine.result.name if engine.is_running() else None,
                location=f"{file}:{line}",
            ),
            label_type=type(label).__name__,
        )

    if not engine.is_running():
        raise SectionMisuseError(
            context=ErrorContext(section_label=label, location=f"{file}:{line}")
        )
    return engine.query(Section(label, file, line))


__all__ = ["PassGuard", "sections", "section"]
