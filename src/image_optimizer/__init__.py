"""Post-build image optimization: transcode assets and rewrite references."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from image_optimizer.application.results import OptimizationRun

__version__ = "0.1.0"


def optimize_images(build_dir: Path | None = None, **kwargs: Any) -> OptimizationRun:
    """Optimize a build directory.

    Parameters
    ----------
    build_dir : Path | None, default=None
        Root of the static asset tree; defaults to the configured ``dist``.
    **kwargs : Any
        Forwarded to :func:`image_optimizer.api.optimize_images`.

    Returns
    -------
    OptimizationRun
        Structured outcome of the run.
    """
    from .api import optimize_images as _impl

    return _impl(build_dir, **kwargs)


__all__ = ["__version__", "optimize_images"]
