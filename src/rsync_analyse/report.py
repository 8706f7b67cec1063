from __future__ import annotations

from .models import AnalysisResult, Statistics

_BYTE_UNITS = ("KB", "MB", "GB", "TB", "PB")
SUMMARY_RULE = "=" * 28


def format_bytes(value: int) -> str:
    """Render a byte count with decimal units, e.g. ``1.0 MB`` for 1,048,576."""
    if abs(value) < 1000:
        return f"{value} B"
    scaled = float(value)
    unit = _BYTE_UNITS[0]
    for unit in _BYTE_UNITS:
        scaled /= 1000.0
        if abs(scaled) < 1000:
            break
    return f"{scaled:.1f} {unit}"


def describe_statistics(statistics: Statistics) -> str:
    lines = [
        "Statistics:",
        f"  Total files: {statistics.total_files}",
        f"  Created: {statistics.files_created}",
        f"  Deleted: {statistics.files_deleted}",
        f"  Transferred: {statistics.regular_files_transferred}",
        "",
        "Data transfer:",
        f"  Total size: {format_bytes(statistics.total_file_size)}",
        f"  Transferred: {format_bytes(statistics.total_transferred_size)}",
        f"  Efficiency: {statistics.efficiency_percentage:.2f}%",
        f"  Speedup: {statistics.speedup:.2f}x",
        "",
        "Transfer details:",
        f"  Literal data: {format_bytes(statistics.literal_data)}",
        f"  Matched data: {format_bytes(statistics.matched_data)}",
        f"  Sent: {format_bytes(statistics.bytes_sent)}",
        f"  Received: {format_bytes(statistics.bytes_received)}",
    ]
    if statistics.errors:
        lines.append(f"Errors: {len(statistics.errors)}")
    if statistics.warnings:
        lines.append(f"Warnings: {len(statistics.warnings)}")
    return "\n".join(lines)


def render_summary(result: AnalysisResult) -> str:
    statistics = result.statistics
    lines = [
        SUMMARY_RULE,
        "RSYNC ANALYSIS SUMMARY",
        SUMMARY_RULE,
        "",
        f"Run type: {'DRY RUN (simulation)' if result.is_dry_run else 'LIVE RUN'}",
    ]
    if result.is_dry_run:
        lines.append("No actual changes were made")
    lines.extend(
        [
            "",
            "Summary:",
            f"  Total items: {len(result.itemized_changes)}",
            f"  Files created: {statistics.files_created.total}",
            f"  Files deleted: {statistics.files_deleted}",
            f"  Data efficiency: {statistics.efficiency_percentage:.1f}%",
            f"  Transfer speedup: {statistics.speedup:.1f}x",
        ]
    )
    if result.errors:
        lines.append(f"Found {len(result.errors)} error(s)")
    if result.warnings:
        lines.append(f"Found {len(result.warnings)} warning(s)")
    return "\n".join(lines)
