"""Post-processing adapter implementation."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from image_optimizer.application.options import FormatOptions
from image_optimizer.application.results import (
    BatchOutcome,
    RemovalSummary,
    RewriteSummary,
)
from image_optimizer.postprocess import remove_originals, rewrite_references


class BuildPostProcessorImpl:
    """Default filesystem post-processing implementation."""

    def remove_originals(self, outcome: BatchOutcome) -> RemovalSummary:
        """Delete originals replaced by successful conversions.

        Parameters
        ----------
        outcome : BatchOutcome
            Results of the finished batch.

        Returns
        -------
        RemovalSummary
            Removed paths and the number of swallowed deletion failures.
        """
        return remove_originals(outcome)

    def rewrite_references(
        self,
        root: Path,
        source_extensions: Sequence[str],
        options: FormatOptions,
        text_extensions: Sequence[str],
    ) -> RewriteSummary:
        """Rewrite image references in text assets under ``root``.

        Parameters
        ----------
        root : Path
            Build directory to scan.
        source_extensions : Sequence[str]
            Extensions of the images that were transcoded.
        options : FormatOptions
            Output format, providing the replacement extension.
        text_extensions : Sequence[str]
            Allowlist of text file extensions to rewrite.

        Returns
        -------
        RewriteSummary
            Changed files, per-file failures and substitution totals.
        """
        return rewrite_references(root, source_extensions, options, text_extensions)
