"""Tests for the @sections driver and the section() helper."""

from __future__ import annotations

import threading

import pytest

from section_testing import (
    ErrorCode,
    InvalidSectionError,
    SectionMisuseError,
    SectionTestingConfig,
    UnsupportedFunctionError,
    get_engine,
    last_result,
    section,
    sections,
    set_config,
)
from section_testing.reporting import display_path

HERE = display_path(__file__)


def line_of(marker: str) -> int:
    """Line number in this file of the line tagged with ``# site: <marker>``."""
    with open(__file__) as f:
        for number, text in enumerate(f, 1):
            if text.rstrip().endswith(f"# site: {marker}"):
                return number
    raise LookupError(marker)


def check_123(v: list[int], log: list[str]) -> None:
    assert v == [1, 2, 3]

    if section("reverse"):
        log.append("reverse")
        v.reverse()
        assert v == [3, 2, 1]

    if section("pop+remove+insert+push"):
        log.append("pop+remove+insert+push")
        three = v.pop()
        one = v.pop(0)
        v.insert(0, three)
        v.append(one)
        assert v == [3, 2, 1]


class TestStackScenario:
    """Two top-level sections sharing a helper with two nested sections."""

    def test_visits_every_combination_once(self):
        runs: list[tuple[str, ...]] = []

        @sections
        def example():
            v: list[int] = []
            log: list[str] = []

            if section("push"):
                log.append("push")
                v.extend([1, 2, 3])
                check_123(v, log)

            if section("insert"):
                log.append("insert")
                v.insert(0, 3)
                v.insert(0, 1)
                v.insert(1, 2)
                check_123(v, log)

            runs.append(tuple(log))

        assert example() is None

        assert runs == [
            (),
            ("push",),
            ("insert",),
            ("push", "reverse"),
            ("push", "pop+remove+insert+push"),
            ("insert", "reverse"),
            ("insert", "pop+remove+insert+push"),
        ]
        result = last_result()
        assert result.pass_count == 7
        assert sorted(result.combinations) == sorted(runs[1:])
        assert len(set(result.combinations)) == 6
        assert result.success is True

    def test_reports_failing_combination(self, capsys):
        def broken_check(v: list[int]) -> None:
            assert v == [1, 2, 3]
            section("reverse")
            if section("pop+remove+insert+push"):  # site: broken-pop
                three = v.pop()
                v.pop(0)
                v.insert(0, three)
                assert v == [3, 2, 1]

        @sections
        def example():
            v: list[int] = []
            if section("push"):  # site: broken-push
                v.extend([1, 2, 3])
                broken_check(v)
            if section("insert"):
                v[:] = [1, 2, 3]
                broken_check(v)

        with pytest.raises(AssertionError):
            example()

        err = capsys.readouterr().err
        assert err == (
            "---- the failure was inside these sections ----\n"
            f'  0) "push" at {HERE}:{line_of("broken-push")}\n'
            f'  1) "pop+remove+insert+push" at {HERE}:{line_of("broken-pop")}\n'
        )
        assert '"insert"' not in err
        # Exploration stops at the first failing combination
        assert last_result().failed_pass.labels == ("push", "pop+remove+insert+push")
        assert last_result().pass_count == 5


class TestCombinationCounts:
    def test_independent_sections(self):
        entered: list[list[str]] = []

        @sections
        def body():
            hits = [name for name in ("a", "b", "c", "d") if section(name)]
            entered.append(hits)

        body()
        assert entered == [[], ["a"], ["b"], ["c"], ["d"]]

    def test_two_by_two_nesting_gives_four_leaves(self):
        @sections
        def body():
            if section("A"):
                section("a1")
                section("a2")
            if section("B"):
                section("b1")
                section("b2")

        body()
        result = last_result()
        assert result.leaf_combinations == [("A", "a1"), ("A", "a2"), ("B", "b1"), ("B", "b2")]
        assert result.combinations == [
            ("A",),
            ("B",),
            ("A", "a1"),
            ("A", "a2"),
            ("B", "b1"),
            ("B", "b2"),
        ]

    def test_body_without_sections_runs_once(self):
        calls = []

        @sections
        def body():
            calls.append(1)

        body()
        assert calls == [1]
        assert last_result().combinations == []

    def test_section_in_loop_is_one_section(self):
        counts = []

        @sections
        def body():
            n = 0
            for _ in range(3):
                if section("loop"):
                    n += 1
            counts.append(n)

        body()
        assert counts == [0, 3]

    def test_same_label_at_two_call_sites_is_two_sections(self):
        @sections
        def body():
            section("same")
            section("same")

        body()
        assert last_result().pass_count == 3

    def test_early_return_counts_as_success(self):
        @sections
        def body():
            if section("first"):
                return
            section("second")

        body()
        assert last_result().combinations == [("first",), ("second",)]

    def test_locals_are_fresh_on_every_pass(self):
        sizes = []

        @sections
        def body():
            items: list[str] = []
            if section("one"):
                items.append("x")
            if section("two"):
                items.append("y")
            sizes.append(len(items))

        body()
        assert sizes == [0, 1, 1]

    def test_deterministic_sequence(self):
        @sections
        def body():
            if section("x"):
                section("x1")
                section("x2")
            section("y")

        body()
        first = last_result().combinations
        body()
        assert last_result().combinations == first


class TestRankOrdering:
    def test_three_levels_report_outermost_first(self):
        @sections
        def body():
            if section("outer"):
                if section("middle"):
                    if section("inner"):
                        raise ValueError("boom")

        with pytest.raises(ValueError):
            body()
        assert last_result().failed_pass.labels == ("outer", "middle", "inner")

    def test_conditionally_discovered_sibling_ranks_after_activator(self):
        # "late" sits at the top level but is only reached once "gate" is
        # entered, so it is reported after "gate".
        @sections
        def body():
            opened = bool(section("gate"))
            if opened and section("late"):
                if section("inner"):
                    raise ValueError("boom")

        with pytest.raises(ValueError):
            body()
        assert last_result().failed_pass.labels == ("gate", "late", "inner")


class TestFailureHandling:
    def test_exception_propagates_unchanged(self):
        error = KeyError("missing")

        @sections
        def body():
            if section("a"):
                raise error

        with pytest.raises(KeyError) as excinfo:
            body()
        assert excinfo.value is error

    def test_trace_attached_as_note(self):
        @sections
        def body():
            if section("a"):
                assert False, "fails"

        with pytest.raises(AssertionError) as excinfo:
            body()
        notes = excinfo.value.__notes__
        assert len(notes) == 1
        assert notes[0].startswith("---- the failure was inside these sections ----\n")
        assert '  0) "a" at ' in notes[0]

    def test_no_note_when_annotations_disabled(self):
        set_config(SectionTestingConfig(annotate_exceptions=False))

        @sections
        def body():
            if section("a"):
                raise RuntimeError("x")

        with pytest.raises(RuntimeError) as excinfo:
            body()
        assert not hasattr(excinfo.value, "__notes__")

    def test_failure_before_any_section_reports_nothing(self, capsys):
        @sections
        def body():
            raise RuntimeError("early")

        with pytest.raises(RuntimeError) as excinfo:
            body()
        assert capsys.readouterr().err == ""
        assert not hasattr(excinfo.value, "__notes__")

    def test_report_disabled(self, capsys):
        set_config(SectionTestingConfig(report_failures=False))

        @sections
        def body():
            if section("a"):
                raise RuntimeError("x")

        with pytest.raises(RuntimeError):
            body()
        assert capsys.readouterr().err == ""

    def test_report_to_stdout(self, capsys):
        set_config(SectionTestingConfig(report_stream="stdout"))

        @sections
        def body():
            if section("a"):
                raise RuntimeError("x")

        with pytest.raises(RuntimeError):
            body()
        captured = capsys.readouterr()
        assert captured.err == ""
        assert '"a"' in captured.out

    def test_engine_idle_after_failure(self):
        @sections
        def body():
            if section("a"):
                raise RuntimeError("x")

        with pytest.raises(RuntimeError):
            body()
        assert get_engine().is_running() is False
        assert get_engine().start() is True


class TestNesting:
    def test_nested_decorated_helper_joins_outer_run(self):
        @sections
        def helper(v: list[int]) -> int:
            if section("double"):
                v.extend(v)
            return len(v)

        lengths = []

        @sections
        def body():
            v = [1]
            if section("grow"):
                v.append(2)
            lengths.append(helper(v))

        body()
        # Sections discovered in the same pass are alternatives: "grow" and
        # "double" are never entered together.
        assert lengths == [1, 2, 2]
        assert last_result().name == body.__qualname__

    def test_helper_alone_drives_its_own_run(self):
        @sections
        def helper() -> int:
            section("x")
            return 5

        assert helper() is None
        assert last_result().pass_count == 2


class TestMisuse:
    def test_section_outside_run_raises(self):
        with pytest.raises(SectionMisuseError) as excinfo:
            section("stray")
        assert excinfo.value.error_code == ErrorCode.SECTION_OUTSIDE_RUN
        assert excinfo.value.context.section_label == "stray"
        assert "test_driver.py:" in excinfo.value.context.location

    def test_section_after_run_raises(self):
        @sections
        def body():
            section("a")

        body()
        with pytest.raises(SectionMisuseError):
            section("a")

    def test_non_string_label_raises(self):
        @sections
        def body():
            section(42)  # type: ignore[arg-type]

        with pytest.raises(InvalidSectionError) as excinfo:
            body()
        assert excinfo.value.error_code == ErrorCode.INVALID_SECTION
        assert excinfo.value.context.function_name == body.__qualname__
        assert excinfo.value.context.extra["label_type"] == "int"

    def test_coroutine_function_rejected(self):
        async def body():
            if section("a"):
                raise AssertionError("never reached")

        with pytest.raises(UnsupportedFunctionError) as excinfo:
            sections(body)
        assert excinfo.value.error_code == ErrorCode.UNSUPPORTED_FUNCTION
        assert excinfo.value.context.function_name == body.__qualname__
        assert excinfo.value.context.extra["function_kind"] == "coroutine"
        assert not get_engine().is_running()

    def test_generator_function_rejected(self):
        with pytest.raises(UnsupportedFunctionError) as excinfo:

            @sections
            def body():
                if section("a"):
                    yield 1

        assert excinfo.value.context.extra["function_kind"] == "generator"

    def test_async_generator_function_rejected(self):
        async def body():
            yield section("a")

        with pytest.raises(UnsupportedFunctionError):
            sections(body)


class TestStacklevel:
    def test_wrapper_uses_callers_location(self):
        def case(label: str) -> bool:
            return section(label, stacklevel=2)

        @sections
        def body():
            case("wrapped")  # site: wrapped

        body()
        entered = last_result().combinations
        assert entered == [("wrapped",)]
        active = last_result().passes[1].active[0]
        assert active.line == line_of("wrapped")
        assert active.file.endswith("test_driver.py")


class TestMaxPasses:
    def _body(self):
        @sections
        def body():
            if section("A"):
                section("a1")
            section("B")

        return body

    def test_truncates_when_limit_reached(self):
        set_config(SectionTestingConfig(max_passes=2))
        self._body()()
        result = last_result()
        assert result.pass_count == 2
        assert result.truncated_by_max_passes is True

    def test_limit_equal_to_total_is_not_truncated(self):
        set_config(SectionTestingConfig(max_passes=4))
        self._body()()
        result = last_result()
        assert result.pass_count == 4
        assert result.truncated_by_max_passes is False


def test_threads_explore_independently():
    barrier = threading.Barrier(2, timeout=10)
    results: dict[str, list[tuple[str, ...]]] = {}
    errors: list[BaseException] = []

    def worker(prefix: str) -> None:
        @sections
        def body():
            barrier.wait()
            if section(f"{prefix}-A"):
                section(f"{prefix}-a1")
                section(f"{prefix}-a2")
            section(f"{prefix}-B")

        try:
            body()
            results[prefix] = last_result().combinations
        except Exception as exc:
            errors.append(exc)

    threads = [threading.Thread(target=worker, args=(p,)) for p in ("t1", "t2")]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    for prefix in ("t1", "t2"):
        assert results[prefix] == [
            (f"{prefix}-A",),
            (f"{prefix}-B",),
            (f"{prefix}-A", f"{prefix}-a1"),
            (f"{prefix}-A", f"{prefix}-a2"),
        ]
