"""Recursive discovery of asset files under a build root."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable
from pathlib import Path

from image_optimizer.errors import AssetLocatorError

logger = logging.getLogger(__name__)


def locate_assets(root: Path, extensions: Iterable[str]) -> list[Path]:
    """Find every regular file below ``root`` whose suffix is in ``extensions``.

    Parameters
    ----------
    root : Path
        Directory to scan. A missing directory yields an empty list.
    extensions : Iterable[str]
        Dot-prefixed suffixes, matched case-sensitively.

    Returns
    -------
    list[Path]
        Matching files, sorted by path.

    Raises
    ------
    AssetLocatorError
        If ``root`` exists but is not a directory or cannot be listed.
    """
    wanted = frozenset(extensions)
    if not wanted:
        raise ValueError("at least one extension is required")
    if not root.exists():
        logger.info("build root %s does not exist; nothing to scan", root)
        return []
    if not root.is_dir():
        raise AssetLocatorError(f"Build root is not a directory: {root}")

    def _on_error(exc: OSError) -> None:
        if Path(exc.filename or "") == root:
            raise AssetLocatorError(f"Cannot read build root {root}: {exc}") from exc
        logger.warning("skipping unreadable directory %s: %s", exc.filename, exc)

    found: list[Path] = []
    for dirpath, _dirnames, filenames in os.walk(root, onerror=_on_error):
        base = Path(dirpath)
        for name in filenames:
            path = base / name
            if path.suffix in wanted and path.is_file():
                found.append(path)
    return sorted(found)


class FilesystemAssetLocator:
    """Default :class:`AssetLocator` backed by the local filesystem."""

    def locate(self, root: Path, extensions: Iterable[str]) -> list[Path]:
        """Delegate to :func:`locate_assets`."""
        return locate_assets(root, extensions)
