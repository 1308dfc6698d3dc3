"""Pytest fixtures for section-testing tests."""

from __future__ import annotations

import io

import pytest

from section_testing.config import reset_config
from section_testing.exploration import engine as engine_module
from section_testing.exploration import ExplorationEngine
from section_testing.reporting import FailureReporter


@pytest.fixture(autouse=True)
def _isolate_state():
    """Give every test default configuration and a fresh engine for its thread."""
    reset_config()
    engine_module._local.__dict__.pop("engine", None)
    yield
    reset_config()
    engine_module._local.__dict__.pop("engine", None)


@pytest.fixture
def trace_file() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def engine(trace_file: io.StringIO) -> ExplorationEngine:
    """Standalone engine that reports into ``trace_file``."""
    return ExplorationEngine(reporter=FailureReporter(file=trace_file, relative_paths=False))
