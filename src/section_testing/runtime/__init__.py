"""Runtime - the @sections driver and the section() helper."""

from section_testing.runtime.driver import PassGuard, section, sections

__all__ = ["PassGuard", "section", "sections"]
