from __future__ import annotations

import concurrent.futures
import threading

import pytest

from rsync_analyse.analyser import AnalyserInput, RsyncOutputAnalyser
from rsync_analyse.models import AnalysisResult, RsyncOutputData

from conftest import mk_output


class CountingAnalyser(RsyncOutputAnalyser):
    def __init__(self) -> None:
        super().__init__()
        self.calls = 0
        self.calls_lock = threading.Lock()

    def analyze(self, output: AnalyserInput) -> AnalysisResult | None:
        with self.calls_lock:
            self.calls += 1
        return super().analyze(output)


class GatedAnalyser(CountingAnalyser):
    """Blocks every computation until ``release`` is set."""

    def __init__(self) -> None:
        super().__init__()
        self.started = threading.Event()
        self.release = threading.Event()

    def analyze(self, output: AnalyserInput) -> AnalysisResult | None:
        self.started.set()
        assert self.release.wait(timeout=5)
        return super().analyze(output)


def test_second_call_is_served_from_cache() -> None:
    analyser = CountingAnalyser()
    output = mk_output(".f..t....... cached.txt")

    first = analyser.analyze_cached(output)
    second = analyser.analyze_cached(output)

    assert first is not None
    assert first == second
    assert analyser.calls == 1
    assert analyser.cache_size == 1


def test_equal_content_shares_cache_entry_across_input_shapes() -> None:
    analyser = CountingAnalyser()
    output = mk_output(">f+++++++++ a.txt")

    analyser.analyze_cached(output)
    analyser.analyze_cached(output.splitlines())
    analyser.analyze_cached([RsyncOutputData(line) for line in output.splitlines()])

    assert analyser.calls == 1


def test_absent_results_are_cached() -> None:
    analyser = CountingAnalyser()

    assert analyser.analyze_cached("no rsync here") is None
    assert analyser.analyze_cached("no rsync here") is None
    assert analyser.calls == 1


def test_clear_cache_forces_recompute() -> None:
    analyser = CountingAnalyser()
    output = mk_output(".f..t....... cached.txt")

    analyser.analyze_cached(output)
    analyser.clear_cache()
    assert analyser.cache_size == 0
    third = analyser.analyze_cached(output)

    assert third is not None
    assert analyser.calls == 2


def test_different_inputs_get_separate_entries() -> None:
    analyser = CountingAnalyser()

    a = analyser.analyze_cached(mk_output(">f+++++++++ a.txt"))
    b = analyser.analyze_cached(mk_output(">f+++++++++ b.txt"))

    assert a.itemized_changes[0].path == "a.txt"
    assert b.itemized_changes[0].path == "b.txt"
    assert analyser.cache_size == 2


def test_concurrent_callers_share_one_computation() -> None:
    analyser = GatedAnalyser()
    output = mk_output(">f+++++++++ shared.txt")

    with concurrent.futures.ThreadPoolExecutor(max_workers=8) as pool:
        futures = [pool.submit(analyser.analyze_cached, output) for _ in range(8)]
        assert analyser.started.wait(timeout=5)
        analyser.release.set()
        results = [future.result(timeout=5) for future in futures]

    assert analyser.calls == 1
    assert all(result == results[0] for result in results)
    assert results[0].itemized_changes[0].path == "shared.txt"
    assert analyser.cache_size == 1


def test_stale_computation_does_not_repopulate_cleared_cache() -> None:
    analyser = GatedAnalyser()
    output = mk_output(">f+++++++++ stale.txt")

    with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
        stale = pool.submit(analyser.analyze_cached, output)
        assert analyser.started.wait(timeout=5)
        analyser.clear_cache()
        analyser.release.set()
        assert stale.result(timeout=5) is not None

    assert analyser.cache_size == 0
    assert analyser.analyze_cached(output) is not None
    assert analyser.calls == 2
    assert analyser.cache_size == 1


def test_failed_computation_is_not_cached() -> None:
    class FailingAnalyser(CountingAnalyser):
        def analyze(self, output: AnalyserInput) -> AnalysisResult | None:
            super().analyze(output)
            raise RuntimeError("boom")

    analyser = FailingAnalyser()

    for _ in range(2):
        with pytest.raises(RuntimeError):
            analyser.analyze_cached(mk_output())

    assert analyser.calls == 2
    assert analyser.cache_size == 0


def test_record_holding_newline_is_not_confused_with_two_lines() -> None:
    analyser = RsyncOutputAnalyser()
    text = ">f+++++++++ a.txt\nNumber of files: 1"
    single_record = [RsyncOutputData(record=text)]

    as_text = analyser.analyze_cached(text)
    as_record = analyser.analyze_cached(single_record)

    assert as_text == analyser.analyze(text)
    assert as_record == analyser.analyze(single_record)
    assert as_text is not None
    assert as_record is None
    assert analyser.cache_size == 2


class Interrupted(BaseException):
    pass


def test_interrupted_computation_does_not_block_later_calls() -> None:
    class InterruptOnceAnalyser(CountingAnalyser):
        def analyze(self, output: AnalyserInput) -> AnalysisResult | None:
            result = super().analyze(output)
            if self.calls == 1:
                raise Interrupted()
            return result

    analyser = InterruptOnceAnalyser()
    output = "Number of files: 1"

    with pytest.raises(Interrupted):
        analyser.analyze_cached(output)

    with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
        second = pool.submit(analyser.analyze_cached, output)
        result = second.result(timeout=5)

    assert result is not None
    assert result.statistics.total_files.total == 1
    assert analyser.calls == 2
    assert analyser.cache_size == 1
