"""Application ports for clean architecture boundaries."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Protocol

from image_optimizer.application.options import FormatOptions
from image_optimizer.application.results import (
    BatchOutcome,
    RemovalSummary,
    RewriteSummary,
)


class ImageCodec(Protocol):
    """Encode one image file into the requested output format."""

    def encode(self, source_path: Path, options: FormatOptions) -> bytes:
        """Return encoded bytes; raise on any decode/encode failure."""


class AssetLocator(Protocol):
    """Enumerate candidate files under a build root."""

    def locate(self, root: Path, extensions: Sequence[str]) -> list[Path]:
        """Return matching regular files in a deterministic order."""


class BuildPostProcessor(Protocol):
    """Apply post-conversion cleanup and reference rewriting."""

    def remove_originals(self, outcome: BatchOutcome) -> RemovalSummary:
        """Delete originals of successful results."""

    def rewrite_references(
        self,
        root: Path,
        source_extensions: Sequence[str],
        options: FormatOptions,
        text_extensions: Sequence[str],
    ) -> RewriteSummary:
        """Rewrite extension references in text files under root."""
