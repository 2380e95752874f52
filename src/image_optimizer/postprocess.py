"""Post-conversion helpers: original removal and reference rewriting."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Sequence
from pathlib import Path

from image_optimizer.application.options import (
    DEFAULT_REWRITE_EXTENSIONS,
    FormatOptions,
)
from image_optimizer.application.results import (
    BatchOutcome,
    ReferenceRewriteReport,
    RemovalSummary,
    RewriteFailure,
    RewriteSummary,
)
from image_optimizer.errors import ReferenceRewriteError
from image_optimizer.locator import locate_assets

logger = logging.getLogger(__name__)


def remove_originals(outcome: BatchOutcome) -> RemovalSummary:
    """Delete the source of every successful conversion.

    Deletion is best-effort: failures are logged at DEBUG level and counted,
    never raised. Sources of failed conversions are always kept.
    """
    removed: list[Path] = []
    failures = 0
    for result in outcome.succeeded:
        source = result.source_path
        if not source.exists():
            continue
        try:
            source.unlink()
        except OSError as exc:
            failures += 1
            logger.debug("could not remove original %s: %s", source, exc)
            continue
        removed.append(source)
    return RemovalSummary(removed=tuple(removed), failures=failures)


def build_reference_pattern(extensions: Iterable[str]) -> re.Pattern[str]:
    """Compile ``\\.(ext1|ext2|...)`` for the given dot-prefixed extensions.

    Alternatives are ordered longest first so ``.tiff`` is never cut short by
    ``.tif``. Matching is case-sensitive.
    """
    bare = sorted(
        {ext.lstrip(".") for ext in extensions if ext.lstrip(".")},
        key=lambda ext: (-len(ext), ext),
    )
    if not bare:
        raise ValueError("at least one extension is required")
    return re.compile(r"\.(" + "|".join(re.escape(ext) for ext in bare) + ")")


def rewrite_file(
    path: Path, pattern: re.Pattern[str], replacement: str
) -> ReferenceRewriteReport:
    """Substitute every pattern match in one text file, writing only on change.

    Raises
    ------
    ReferenceRewriteError
        If the file cannot be decoded, read or written.
    """
    try:
        content = path.read_bytes().decode("utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ReferenceRewriteError(f"Cannot read {path}: {exc}") from exc

    updated, count = pattern.subn(lambda _match: replacement, content)
    if updated == content:
        return ReferenceRewriteReport(path=path, changed=False, substitutions=0)

    try:
        path.write_bytes(updated.encode("utf-8"))
    except OSError as exc:
        raise ReferenceRewriteError(f"Cannot write {path}: {exc}") from exc
    return ReferenceRewriteReport(path=path, changed=True, substitutions=count)


def rewrite_references(
    root: Path,
    source_extensions: Sequence[str],
    options: FormatOptions,
    text_extensions: Sequence[str] = DEFAULT_REWRITE_EXTENSIONS,
) -> RewriteSummary:
    """Rewrite image extension references in text files under ``root``.

    This is a plain find-and-replace over ``text_extensions`` files: any
    ``.<ext>`` token for an extension in ``source_extensions`` becomes the
    output format's extension, whether or not it names a converted image.
    Per-file errors are collected in the summary and do not stop the pass.
    """
    replacement = options.extension
    pattern = build_reference_pattern(source_extensions)
    files = locate_assets(root, text_extensions)

    reports: list[ReferenceRewriteReport] = []
    failures: list[RewriteFailure] = []
    for path in files:
        try:
            report = rewrite_file(path, pattern, replacement)
        except ReferenceRewriteError as exc:
            logger.error("reference rewrite failed: %s", exc)
            failures.append(RewriteFailure(path=path, error=str(exc)))
            continue
        if report.changed:
            logger.info("rewrote %d reference(s) in %s", report.substitutions, path)
            reports.append(report)

    return RewriteSummary(
        replacement=replacement,
        scanned=len(files),
        reports=tuple(reports),
        failures=tuple(failures),
    )
