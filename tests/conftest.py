from __future__ import annotations

from rsync_analyse.models import FileCount, Statistics

STATS_BLOCK = (
    "Number of files: 10 (reg: 8, dir: 1, link: 1)",
    "Number of created files: 2 (reg: 2, dir: 0, link: 0)",
    "Number of deleted files: 1",
    "Number of regular files transferred: 3",
    "Total file size: 1,024 bytes",
    "Total transferred file size: 512 bytes",
    "Literal data: 256 bytes",
    "Matched data: 256 bytes",
    "Total bytes sent: 1024",
    "Total bytes received: 512",
    "speedup is 2.00",
)


def mk_output(*lines: str, stats: tuple[str, ...] = STATS_BLOCK) -> str:
    return "\n".join((*lines, *stats))


def mk_statistics(
    *,
    total_file_size: int = 0,
    total_transferred_size: int = 0,
    files_created: int = 0,
    files_deleted: int = 0,
    speedup: float = 1.0,
) -> Statistics:
    return Statistics(
        total_files=FileCount.zero(),
        files_created=FileCount(total=files_created, regular=files_created),
        files_deleted=files_deleted,
        total_file_size=total_file_size,
        total_transferred_size=total_transferred_size,
        speedup=speedup,
    )
