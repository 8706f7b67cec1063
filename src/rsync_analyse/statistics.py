from __future__ import annotations

import logging
import math
import re
from collections.abc import Callable, Iterable

from .config import AnalyserConfig
from .models import FileCount, Statistics

logger = logging.getLogger(__name__)

_COUNT_RE = re.compile(r"^\s*([\d,]+)")
_FILE_COUNT_PART_RE = re.compile(r"\b(reg|dir|link):\s*([\d,]+)")
_LEGACY_TRANSFER_RE = re.compile(
    r"^sent\s+([\d,]+)\s+bytes\s+received\s+([\d,]+)\s+bytes"
)
_LEGACY_TOTAL_SIZE_RE = re.compile(r"^total size is\s+([\d,]+)")
SPEEDUP_LABEL = "speedup is"


def _to_int(text: str) -> int:
    return int(text.replace(",", ""))


def parse_count(text: str) -> int:
    match = _COUNT_RE.match(text)
    if match is None:
        raise ValueError(f"no count in {text!r}")
    return _to_int(match.group(1))


def parse_file_count(text: str) -> FileCount:
    total = parse_count(text)
    parts: dict[str, int] = {}
    open_idx = text.find("(")
    if open_idx != -1:
        group, _sep, _rest = text[open_idx + 1 :].partition(")")
        for label, value in _FILE_COUNT_PART_RE.findall(group):
            parts[label] = _to_int(value)
    return FileCount(
        total=total,
        regular=parts.get("reg", 0),
        directories=parts.get("dir", 0),
        links=parts.get("link", 0),
    )


def parse_speedup(text: str) -> float:
    tokens = text.split()
    if not tokens:
        raise ValueError("missing speedup value")
    value = float(tokens[0].replace(",", ""))
    if not math.isfinite(value) or value < 0:
        raise ValueError(f"invalid speedup {tokens[0]!r}")
    return value


LABELS: tuple[tuple[str, str, Callable[[str], object]], ...] = (
    ("Number of files:", "total_files", parse_file_count),
    ("Number of created files:", "files_created", parse_file_count),
    ("Number of deleted files:", "files_deleted", parse_count),
    ("Number of regular files transferred:", "regular_files_transferred", parse_count),
    ("Total file size:", "total_file_size", parse_count),
    ("Total transferred file size:", "total_transferred_size", parse_count),
    ("Literal data:", "literal_data", parse_count),
    ("Matched data:", "matched_data", parse_count),
    ("Total bytes sent:", "bytes_sent", parse_count),
    ("Total bytes received:", "bytes_received", parse_count),
    (SPEEDUP_LABEL, "speedup", parse_speedup),
)

# Older tool versions; only used when the modern label is absent.
LEGACY_LABELS: tuple[tuple[str, str], ...] = (
    ("Number of files transferred:", "regular_files_transferred"),
)


class StatisticsCollector:
    """Accumulates the summary block of one rsync run, line by line.

    ``feed`` consumes labelled summary lines, error and warning lines and
    a bare dry-run marker. Values from the explicit ``Total ...`` labels take
    precedence over the legacy ``sent ... received ...`` and ``total size is``
    summary lines. The last valid occurrence of a label wins.
    """

    def __init__(self, config: AnalyserConfig | None = None) -> None:
        self.config = config or AnalyserConfig()
        self.found = False
        self.is_dry_run = False
        self.errors: list[str] = []
        self.warnings: list[str] = []
        self._values: dict[str, object] = {}
        self._fallbacks: dict[str, object] = {}

    def _store(
        self,
        target: dict[str, object],
        field_name: str,
        parser: Callable[[str], object],
        text: str,
    ) -> None:
        self.found = True
        try:
            target[field_name] = parser(text)
        except ValueError as exc:
            logger.debug("Ignoring malformed %s value: %s", field_name, exc)

    def _feed_legacy(self, line: str) -> bool:
        for label, field_name in LEGACY_LABELS:
            if line.startswith(label):
                self._store(self._fallbacks, field_name, parse_count, line[len(label) :])
                return True
        transfer = _LEGACY_TRANSFER_RE.match(line)
        if transfer is not None:
            self._store(self._fallbacks, "bytes_sent", _to_int, transfer.group(1))
            self._store(self._fallbacks, "bytes_received", _to_int, transfer.group(2))
            return True
        total_size = _LEGACY_TOTAL_SIZE_RE.match(line)
        if total_size is None:
            return False
        self._store(self._fallbacks, "total_file_size", _to_int, total_size.group(1))
        speedup_idx = line.find(SPEEDUP_LABEL)
        if speedup_idx != -1:
            text = line[speedup_idx + len(SPEEDUP_LABEL) :]
            self._store(self._values, "speedup", parse_speedup, text)
        return True

    def mark_dry_run(self) -> None:
        self.is_dry_run = True

    def feed(self, line: str) -> bool:
        text = line.strip()
        if not text:
            return False
        if text == self.config.dry_run_marker:
            self.mark_dry_run()
            return True
        if text.startswith(self.config.error_prefixes):
            self.errors.append(text)
            return True
        if text.startswith(self.config.warning_prefixes):
            self.warnings.append(text)
            return True

        for label, field_name, parser in LABELS:
            if text.startswith(label):
                self._store(self._values, field_name, parser, text[len(label) :])
                break
        else:
            if not self._feed_legacy(text):
                return False

        if self.config.dry_run_marker in text:
            self.mark_dry_run()
        return True

    def build(self) -> Statistics:
        values = {**self._fallbacks, **self._values}
        return Statistics(
            **values,
            errors=tuple(self.errors),
            warnings=tuple(self.warnings),
        )


def extract_statistics(
    lines: Iterable[str], config: AnalyserConfig | None = None
) -> Statistics | None:
    collector = StatisticsCollector(config)
    for line in lines:
        collector.feed(line)
    if not collector.found:
        return None
    return collector.build()
