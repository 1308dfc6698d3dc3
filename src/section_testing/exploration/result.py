"""ExplorationResult - Record of every pass of one top-level run."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from section_testing.exploration.section import Section


@dataclass(frozen=True)
class PassRecord:
    """Outcome of a single pass.

    Attributes:
        index: 0-based position of the pass within its run.
        active: Sections entered during the pass, ordered by rank.
        succeeded: True if the body returned normally.
    """

    index: int
    active: tuple[Section, ...]
    succeeded: bool

    @property
    def labels(self) -> tuple[str, ...]:
        return tuple(section.label for section in self.active)


@dataclass
class ExplorationResult:
    """The complete output of exploring one function.

    Example::

        @sections
        def test_stack():
            ...

        test_stack()
        result = last_result()
        print(result.combinations)
        # [('push',), ('push', 'reverse'), ...]

    Attributes:
        name: Qualified name of the explored function.
        passes: Every pass in execution order.
        started_at: When exploration started.
        finished_at: When exploration finished.
        duration_ms: Total exploration time in milliseconds.
        truncated_by_max_passes: True if the pass limit stopped exploration
            while paths were still pending.
    """

    name: str | None = None
    passes: list[PassRecord] = field(default_factory=list)
    started_at: datetime = field(default_factory=datetime.now)
    finished_at: datetime | None = None
    duration_ms: float = 0.0
    truncated_by_max_passes: bool = False

    @property
    def pass_count(self) -> int:
        return len(self.passes)

    @property
    def combinations(self) -> list[tuple[str, ...]]:
        """Labels entered by each pass that entered at least one section."""
        return [record.labels for record in self.passes if record.active]

    @property
    def leaf_combinations(self) -> list[tuple[str, ...]]:
        """Combinations that no other combination extends.

        For nested sections this is one entry per innermost branch reached,
        e.g. two outer sections each holding two inner ones give four.
        """
        combos = self.combinations
        return [
            combo
            for combo in combos
            if not any(len(other) > len(combo) and other[: len(combo)] == combo for other in combos)
        ]

    @property
    def failed_pass(self) -> PassRecord | None:
        for record in self.passes:
            if not record.succeeded:
                return record
        return None

    @property
    def success(self) -> bool:
        return self.failed_pass is None

    def add_pass(self, record: PassRecord) -> None:
        self.passes.append(record)

    def finish(self) -> None:
        """Mark exploration as finished and compute duration."""
        self.finished_at = datetime.now()
        self.duration_ms = (self.finished_at - self.started_at).total_seconds() * 1000

    def summary(self) -> dict[str, int | float | bool | str | None]:
        return {
            "name": self.name,
            "passes": self.pass_count,
            "combinations": len(self.combinations),
            "leaf_combinations": len(self.leaf_combinations),
            "truncated_by_max_passes": self.truncated_by_max_passes,
            "success": self.success,
            "duration_ms": round(self.duration_ms, 2),
        }


__all__ = ["PassRecord", "ExplorationResult"]
