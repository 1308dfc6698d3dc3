"""Frontier - Holds the paths that have been discovered but not yet run.

Paths are replayed in the order they were added (FIFO), so sibling
sections are explored before the sections nested inside them and the
sequence of combinations is deterministic for a deterministic body.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable

from section_testing.exploration.section import Path


class PathFrontier:
    """FIFO queue of pending paths.

    A fresh frontier holds exactly one empty path: the first pass runs
    with no section entered and discovers the top-level sections.
    """

    def __init__(self) -> None:
        self._queue: deque[Path] = deque()
        self.reset()

    def reset(self) -> None:
        """Drop all pending paths and seed the frontier with one empty path."""
        self._queue.clear()
        self._queue.append({})

    def add(self, path: Path) -> None:
        self._queue.append(path)

    def add_many(self, paths: Iterable[Path]) -> None:
        self._queue.extend(paths)

    def pop(self) -> Path | None:
        if self.is_empty():
            return None
        return self._queue.popleft()

    def is_empty(self) -> bool:
        return len(self._queue) == 0

    def __len__(self) -> int:
        return len(self._queue)


__all__ = ["PathFrontier"]
