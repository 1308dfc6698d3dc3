"""pytest integration.

Tests marked ``@pytest.mark.sections`` are driven exactly as if they were
decorated with ``@sections``::

    import pytest
    from section_testing import section

    @pytest.mark.sections
    def test_stack(tmp_path):
        items = []
        if section("push"):
            ...

Fixtures are resolved once per test item and shared by every pass; only
the test function's own locals start fresh on each pass.
"""

from __future__ import annotations

import pytest

from section_testing.config import SectionTestingConfig, get_config, set_config
from section_testing.runtime import sections

_previous_config = pytest.StashKey[SectionTestingConfig]()


def pytest_addoption(parser: pytest.Parser) -> None:
    group = parser.getgroup("section-testing")
    group.addoption(
        "--sections-max-passes",
        action="store",
        type=int,
        default=None,
        help="Stop exploring a sections test after this many passes",
    )
    group.addoption(
        "--sections-no-report",
        action="store_true",
        default=False,
        help="Do not write the active sections of a failing pass",
    )


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line(
        "markers",
        "sections: re-run the test once per combination of section() branch points",
    )

    overrides: dict[str, object] = {}
    max_passes = config.getoption("--sections-max-passes", None)
    if max_passes is not None:
        overrides["max_passes"] = max_passes
    if config.getoption("--sections-no-report", False):
        overrides["report_failures"] = False
    if overrides:
        current = get_config()
        config.stash[_previous_config] = current
        set_config(SectionTestingConfig(**{**current.model_dump(), **overrides}))


def pytest_unconfigure(config: pytest.Config) -> None:
    previous = config.stash.get(_previous_config, None)
    if previous is not None:
        set_config(previous)


@pytest.hookimpl(tryfirst=True)
def pytest_pyfunc_call(pyfuncitem: pytest.Function) -> bool | None:
    if pyfuncitem.get_closest_marker("sections") is None:
        return None
    funcargs = pyfuncitem.funcargs
    testargs = {arg: funcargs[arg] for arg in pyfuncitem._fixtureinfo.argnames}
    sections(pyfuncitem.obj)(**testargs)
    return True
