"""Section, Entry and Path - the data recorded for each branch point."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TypeAlias


@dataclass(frozen=True)
class Section:
    """Identity of one branch point.

    Two sections are equal when label, file and line all match, so the
    same label used at two call sites gives two distinct sections, while
    the same call site reached twice gives the same one.

    Attributes:
        label: Human-readable label passed to section().
        file: Source file of the call site.
        line: Line number of the call site.
    """

    label: str
    file: str
    line: int


@dataclass(frozen=True)
class Entry:
    """Decision recorded for one section within one path.

    Attributes:
        should_enter: Whether the section runs when the path is replayed.
        rank: Number of sections that were already active when this one was
            discovered. Only used to order failure reports.
    """

    should_enter: bool
    rank: int


Path: TypeAlias = dict[Section, Entry]


def active_sections(path: Path) -> list[Section]:
    """Return the sections a path enters, ordered by rank."""
    active = [(entry.rank, section) for section, entry in path.items() if entry.should_enter]
    active.sort(key=lambda item: item[0])
    return [section for _, section in active]


__all__ = ["Section", "Entry", "Path", "active_sections"]
