"""Size-reduction statistics and their text rendering."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import typer

from image_optimizer.application.results import (
    BatchOutcome,
    RemovalSummary,
    RewriteSummary,
)

_UNITS = ("B", "kB", "MB", "GB", "TB", "PB")


def reduction_percent(original_size: int, converted_size: int) -> int:
    """Return the rounded size reduction; positive means the file shrank.

    Halves round up, so 12.5% reports 13. Zero-size originals always
    report ``0``.
    """
    if original_size <= 0:
        return 0
    return ((original_size - converted_size) * 200 + original_size) // (2 * original_size)


def format_bytes(size: int) -> str:
    """Format a byte count with decimal units (``1.5 kB``)."""
    sign = "-" if size < 0 else ""
    value = float(abs(size))
    if value < 1000:
        return f"{sign}{int(value)} B"
    for unit in _UNITS[1:]:
        value /= 1000
        if value < 1000 or unit == _UNITS[-1]:
            number = f"{value:.2f}".rstrip("0").rstrip(".")
            return f"{sign}{number} {unit}"
    return f"{sign}{int(abs(size))} B"


@dataclass(frozen=True)
class ReportRow:
    """One successfully converted file."""

    name: str
    original_size: int
    converted_size: int
    reduction: int


@dataclass(frozen=True)
class FailureRow:
    """One failed conversion."""

    source_path: Path
    error: str


@dataclass(frozen=True)
class OptimizationReport:
    """Aggregated statistics for a finished batch."""

    rows: tuple[ReportRow, ...]
    failures: tuple[FailureRow, ...]
    total_original: int
    total_converted: int
    warnings: int = 0
    rewrite: RewriteSummary | None = None
    removal: RemovalSummary | None = None

    @property
    def succeeded(self) -> int:
        return len(self.rows)

    @property
    def failed(self) -> int:
        return len(self.failures)

    @property
    def total_saved(self) -> int:
        return self.total_original - self.total_converted

    @property
    def total_reduction(self) -> int:
        return reduction_percent(self.total_original, self.total_converted)


def build_report(
    outcome: BatchOutcome,
    rewrite: RewriteSummary | None = None,
    removal: RemovalSummary | None = None,
) -> OptimizationReport:
    """Aggregate per-file and total statistics without touching ``outcome``."""
    rows: list[ReportRow] = []
    failures: list[FailureRow] = []
    total_original = 0
    total_converted = 0
    for result in outcome:
        if not result.success:
            failures.append(
                FailureRow(result.source_path, result.error or "unknown error")
            )
            continue
        converted = result.converted_size or 0
        rows.append(
            ReportRow(
                name=result.source_path.name,
                original_size=result.original_size,
                converted_size=converted,
                reduction=reduction_percent(result.original_size, converted),
            )
        )
        total_original += result.original_size
        total_converted += converted
    return OptimizationReport(
        rows=tuple(rows),
        failures=tuple(failures),
        total_original=total_original,
        total_converted=total_converted,
        warnings=outcome.warning_count,
        rewrite=rewrite,
        removal=removal,
    )


def _paint(text: str, color: str | None, enabled: bool) -> str:
    if not enabled or color is None:
        return text
    return typer.style(text, fg=color)


def _reduction_label(reduction: int) -> str:
    if reduction > 0:
        return f"-{reduction}%"
    if reduction < 0:
        return f"+{abs(reduction)}%"
    return "0%"


def _reduction_color(reduction: int) -> str | None:
    if reduction > 0:
        return typer.colors.GREEN
    if reduction < 0:
        return typer.colors.RED
    return None


def render_table(report: OptimizationReport, *, color: bool = False) -> list[str]:
    """Render the aligned per-file table for successful conversions."""
    if not report.rows:
        return []
    header_name = "File Name"
    header_reduction = "Reduction"
    header_size = "Size (Original → New)"
    sizes = [
        f"{format_bytes(row.original_size)} → {format_bytes(row.converted_size)}"
        for row in report.rows
    ]
    name_width = max(len(header_name), *(len(row.name) for row in report.rows))
    labels = [_reduction_label(row.reduction) for row in report.rows]
    reduction_width = max(len(header_reduction), *(len(label) for label in labels))
    size_width = max(len(header_size), *(len(size) for size in sizes))

    lines = [
        "",
        f"{header_name.ljust(name_width)}  "
        f"{header_reduction.rjust(reduction_width)}  "
        f"{header_size.ljust(size_width)}".rstrip(),
        f"{'-' * name_width}  {'-' * reduction_width}  {'-' * size_width}",
    ]
    for row, label, size in zip(report.rows, labels, sizes, strict=True):
        label = label.rjust(reduction_width)
        label = _paint(label, _reduction_color(row.reduction), color)
        lines.append(f"{row.name.ljust(name_width)}  {label}  {size}".rstrip())
    return lines


def render_totals(report: OptimizationReport, *, color: bool = False) -> list[str]:
    """Render the aggregate original/converted/saved block."""
    if not report.rows:
        return []
    saved = report.total_saved
    original = _paint(format_bytes(report.total_original), typer.colors.CYAN, color)
    converted = _paint(format_bytes(report.total_converted), typer.colors.CYAN, color)
    lines = ["", f"Original total:  {original}", f"Converted total: {converted}"]
    if saved > 0:
        amount = f"{format_bytes(saved)} ({report.total_reduction}%)"
        lines.append(f"Total saved:     {_paint(amount, typer.colors.GREEN, color)}")
    elif saved < 0:
        amount = f"{format_bytes(-saved)} ({-report.total_reduction}%)"
        lines.append(f"Total increase:  {_paint(amount, typer.colors.RED, color)}")
    else:
        lines.append("Total saved:     0 B (0%)")
    return lines


def render_failures(report: OptimizationReport, *, color: bool = False) -> list[str]:
    """Render the failure listing with causes."""
    if not report.failures:
        return []
    lines = ["", _paint(f"[ERROR] Failed: {report.failed}", typer.colors.RED, color)]
    for failure in report.failures:
        cause = _paint(failure.error, typer.colors.RED, color)
        lines.append(f"- {failure.source_path} - {cause}")
    return lines


def render_rewrite(summary: RewriteSummary | None, *, color: bool = False) -> list[str]:
    """Render changed files and errors of a reference-rewrite pass."""
    if summary is None:
        return []
    lines: list[str] = []
    changed = summary.changed
    if changed:
        tag = _paint("[SUCCESS]", typer.colors.GREEN, color)
        lines.append(
            f"{tag} Updated {summary.total_substitutions} reference(s) in "
            f"{len(changed)} file(s) to '{summary.replacement}'"
        )
        lines.extend(f"  - {report.path}" for report in changed)
    for failure in summary.failures:
        tag = _paint("[ERROR]", typer.colors.RED, color)
        lines.append(f"{tag} Reference rewrite failed: {failure.error}")
    return lines


def render_report(report: OptimizationReport, *, color: bool = False) -> list[str]:
    """Render the complete human-readable summary.

    Parameters
    ----------
    report : OptimizationReport
        Aggregated statistics from :func:`build_report`.
    color : bool, default=False
        Whether to emit ANSI styling via ``typer.style``.

    Returns
    -------
    list[str]
        Output lines, without trailing newlines.
    """
    lines = render_table(report, color=color)
    lines += render_totals(report, color=color)
    lines += render_failures(report, color=color)
    lines.append("")
    lines.append(f"Converted: {report.succeeded}, failed: {report.failed}")
    if report.removal is not None and report.removal.removed:
        lines.append(f"Removed {len(report.removal.removed)} original file(s)")
    lines += render_rewrite(report.rewrite, color=color)
    return lines


def render_completion(elapsed_seconds: float, *, color: bool = False) -> str:
    """Render the final line with the run duration."""
    tag = _paint("[SUCCESS]", typer.colors.GREEN, color)
    return f"{tag} All processing finished in {elapsed_seconds:.2f}s"
