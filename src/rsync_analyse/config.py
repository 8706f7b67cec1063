from __future__ import annotations

from dataclasses import dataclass

DRY_RUN_MARKER = "(DRY RUN)"
# Tool stderr merged into the output uses the lowercase "rsync ..." forms.
ERROR_PREFIXES = ("ERROR:", "rsync error:")
WARNING_PREFIXES = ("WARNING:", "rsync warning:")
MESSAGE_PREFIX = "*"
DELETION_TAGS = frozenset({"deleting"})
SYMLINK_SEPARATOR = " -> "

LOG_FORMAT = "%(name)s: %(message)s"


@dataclass(frozen=True)
class AnalyserConfig:
    dry_run_marker: str = DRY_RUN_MARKER
    error_prefixes: tuple[str, ...] = ERROR_PREFIXES
    warning_prefixes: tuple[str, ...] = WARNING_PREFIXES
    deletion_tags: frozenset[str] = DELETION_TAGS
