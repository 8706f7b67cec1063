from __future__ import annotations

import concurrent.futures
import hashlib
import logging
import threading
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TypeAlias

from .config import MESSAGE_PREFIX, AnalyserConfig
from .models import (
    AnalysisResult,
    ChangeFlags,
    ChangeType,
    ItemizedChange,
    ParsedRecord,
    RsyncOutputData,
    Statistics,
)
from .record import parse_record
from .report import format_bytes, render_summary
from .statistics import StatisticsCollector

logger = logging.getLogger(__name__)

AnalyserInput: TypeAlias = str | Sequence[str] | Sequence[RsyncOutputData]


def input_lines(output: AnalyserInput) -> list[str]:
    if isinstance(output, str):
        return output.splitlines()
    return [
        item.record if isinstance(item, RsyncOutputData) else item for item in output
    ]


def _cache_key(lines: Sequence[str]) -> str:
    digest = hashlib.sha256()
    for line in lines:
        data = line.encode("utf-8", "surrogatepass")
        digest.update(len(data).to_bytes(8, "big"))
        digest.update(data)
    return digest.hexdigest()


def to_itemized_change(record: ParsedRecord) -> ItemizedChange:
    if record.is_message:
        change_type = ChangeType.DELETION if record.is_deletion else ChangeType.UNKNOWN
    else:
        change_type = ChangeType.from_entity(record.entity_type)
    return ItemizedChange(
        change_type=change_type,
        path=record.path,
        target=record.target,
        flags=ChangeFlags.from_record(record),
    )


@dataclass
class _InFlight:
    generation: int
    future: concurrent.futures.Future[AnalysisResult | None]


class RsyncOutputAnalyser:
    """Turns itemized rsync output into an :class:`AnalysisResult`.

    Safe to share between threads. ``analyze_cached`` memoizes by input
    content; at most one computation per distinct input is in flight and
    concurrent callers for the same input wait for it. ``clear_cache`` bumps a
    generation counter so computations started before the clear never write
    into the cleared cache.
    """

    def __init__(self, config: AnalyserConfig | None = None) -> None:
        self.config = config or AnalyserConfig()
        self._lock = threading.Lock()
        self._cache: dict[str, AnalysisResult | None] = {}
        self._in_flight: dict[str, _InFlight] = {}
        self._generation = 0

    def analyze(self, output: AnalyserInput) -> AnalysisResult | None:
        lines = input_lines(output)
        if not lines:
            return None

        collector = StatisticsCollector(self.config)
        changes: list[ItemizedChange] = []
        for raw in lines:
            line = raw.rstrip("\r\n")
            if not line.strip():
                continue
            if line.startswith(MESSAGE_PREFIX):
                record = parse_record(line, self.config.deletion_tags)
            elif collector.feed(line):
                continue
            else:
                record = parse_record(line, self.config.deletion_tags)
            if record is not None:
                changes.append(to_itemized_change(record))
            elif self.config.dry_run_marker in line:
                collector.mark_dry_run()

        if not collector.found:
            logger.debug(
                "No statistics block in %d lines (%d itemized)",
                len(lines),
                len(changes),
            )
            return None

        statistics = collector.build()
        return AnalysisResult(
            itemized_changes=tuple(changes),
            statistics=statistics,
            is_dry_run=collector.is_dry_run,
            errors=statistics.errors,
            warnings=statistics.warnings,
        )

    def analyze_cached(self, output: AnalyserInput) -> AnalysisResult | None:
        lines = input_lines(output)
        key = _cache_key(lines)

        with self._lock:
            if key in self._cache:
                logger.debug("Cache hit for %s", key[:12])
                return self._cache[key]
            pending = self._in_flight.get(key)
            if pending is None:
                pending = _InFlight(
                    generation=self._generation,
                    future=concurrent.futures.Future(),
                )
                self._in_flight[key] = pending
                owner = True
            else:
                owner = False

        if not owner:
            logger.debug("Waiting for in-flight analysis of %s", key[:12])
            return pending.future.result()

        logger.debug("Cache miss for %s", key[:12])
        try:
            result = self.analyze(lines)
        except BaseException as exc:
            with self._lock:
                if self._in_flight.get(key) is pending:
                    del self._in_flight[key]
            pending.future.set_exception(exc)
            raise

        with self._lock:
            if self._in_flight.get(key) is pending:
                del self._in_flight[key]
            if pending.generation == self._generation:
                self._cache[key] = result
            else:
                logger.debug("Discarding stale analysis of %s", key[:12])
        pending.future.set_result(result)
        return result

    def clear_cache(self) -> None:
        with self._lock:
            dropped = len(self._cache)
            self._cache.clear()
            self._in_flight.clear()
            self._generation += 1
        logger.info("Cleared analysis cache (%d entries)", dropped)

    @property
    def cache_size(self) -> int:
        with self._lock:
            return len(self._cache)

    def summary(self, result: AnalysisResult) -> str:
        return render_summary(result)

    def changes_by_type(self, result: AnalysisResult) -> dict[ChangeType, int]:
        counts: dict[ChangeType, int] = {}
        for change in result.itemized_changes:
            counts[change.change_type] = counts.get(change.change_type, 0) + 1
        return counts

    @staticmethod
    def format_bytes(value: int) -> str:
        return format_bytes(value)

    @staticmethod
    def efficiency_percentage(statistics: Statistics) -> float:
        return statistics.efficiency_percentage


def analyze(output: AnalyserInput) -> AnalysisResult | None:
    return RsyncOutputAnalyser().analyze(output)
