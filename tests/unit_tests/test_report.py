"""Unit tests for report statistics and rendering."""

from __future__ import annotations

from pathlib import Path

import pytest

from image_optimizer.application.results import (
    BatchOutcome,
    ConversionResult,
    ReferenceRewriteReport,
    RemovalSummary,
    RewriteFailure,
    RewriteSummary,
)
from image_optimizer.report import (
    build_report,
    format_bytes,
    reduction_percent,
    render_completion,
    render_report,
)


def _outcome() -> BatchOutcome:
    return BatchOutcome(
        results=(
            ConversionResult.succeeded(Path("dist/a.png"), Path("dist/a.webp"), 2000, 500),
            ConversionResult.failed(
                Path("dist/b.jpg"), Path("dist/b.webp"), "RuntimeError: corrupt"
            ),
            ConversionResult.succeeded(Path("dist/c.png"), Path("dist/c.webp"), 100, 150),
        )
    )


@pytest.mark.parametrize(
    ("original", "converted", "expected"),
    [
        (1000, 250, 75),
        (100, 150, -50),
        (0, 10, 0),
        (3, 2, 33),
        (8, 7, 13),
        (200, 199, 1),
        (8, 9, -12),
    ],
)
def test_reduction_percent(original: int, converted: int, expected: int) -> None:
    assert reduction_percent(original, converted) == expected


@pytest.mark.parametrize(
    ("size", "expected"),
    [(0, "0 B"), (999, "999 B"), (1500, "1.5 kB"), (1000, "1 kB"), (2_345_678, "2.35 MB")],
)
def test_format_bytes(size: int, expected: str) -> None:
    assert format_bytes(size) == expected


def test_build_report_aggregates_successes_only() -> None:
    outcome = _outcome()
    report = build_report(outcome)

    assert report.succeeded == 2
    assert report.failed == 1
    assert report.total_original == 2100
    assert report.total_converted == 650
    assert report.total_saved == 1450
    assert report.total_reduction == 69
    assert [row.reduction for row in report.rows] == [75, -50]
    assert report.failures[0].error == "RuntimeError: corrupt"
    assert len(outcome) == 3


def test_render_report_plain_text() -> None:
    rewrite = RewriteSummary(
        replacement=".webp",
        scanned=2,
        reports=(ReferenceRewriteReport(Path("dist/index.html"), True, 2),),
        failures=(RewriteFailure(Path("dist/data.json"), "Cannot read"),),
    )
    report = build_report(
        _outcome(), rewrite=rewrite, removal=RemovalSummary(removed=(Path("dist/a.png"),))
    )

    text = "\n".join(render_report(report))

    assert "File Name" in text
    assert "Size (Original → New)" in text
    assert "-75%" in text
    assert "+50%" in text
    assert "2 kB → 500 B" in text
    assert "Total saved:     1.45 kB (69%)" in text
    assert "[ERROR] Failed: 1" in text
    assert "- dist/b.jpg - RuntimeError: corrupt" in text
    assert "Converted: 2, failed: 1" in text
    assert "Removed 1 original file(s)" in text
    assert "Updated 2 reference(s) in 1 file(s) to '.webp'" in text
    assert "Reference rewrite failed: Cannot read" in text
    assert "\x1b[" not in text


def test_render_report_reports_growth() -> None:
    outcome = BatchOutcome(
        results=(ConversionResult.succeeded(Path("a.png"), Path("a.webp"), 100, 300),)
    )
    text = "\n".join(render_report(build_report(outcome)))
    assert "Total increase:  200 B (200%)" in text


def test_zero_size_original_reports_zero_percent() -> None:
    outcome = BatchOutcome(
        results=(ConversionResult.succeeded(Path("a.png"), Path("a.webp"), 0, 0),)
    )
    report = build_report(outcome)
    assert report.rows[0].reduction == 0
    assert "Total saved:     0 B (0%)" in render_report(report)


def test_color_adds_ansi_styling() -> None:
    lines = render_report(build_report(_outcome()), color=True)
    assert any("\x1b[" in line for line in lines)


def test_render_completion() -> None:
    assert render_completion(1.234) == "[SUCCESS] All processing finished in 1.23s"
