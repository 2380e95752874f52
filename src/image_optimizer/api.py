"""Public build-optimization API (delegates to application use-cases)."""

from __future__ import annotations

from pathlib import Path
from typing import Any
from typing import Mapping
from typing import Optional

from image_optimizer.application.ports import ImageCodec
from image_optimizer.application.results import OptimizationRun
from image_optimizer.application.use_cases import build_optimizer_options
from image_optimizer.application.use_cases import optimize_build
from image_optimizer.batch import ResultCallback
from image_optimizer.types import OutputFormatName


def optimize_images(
    build_dir: Optional[Path] = None,
    output_format: Optional[OutputFormatName] = None,
    target_extensions: Optional[tuple[str, ...]] = None,
    format_options: Optional[Mapping[str, Mapping[str, Any]]] = None,
    remove_original: Optional[bool] = None,
    concurrency: Optional[int] = None,
    rewrite_references: Optional[bool] = None,
    rewrite_extensions: Optional[tuple[str, ...]] = None,
    config_path: Optional[Path] = None,
    codec: Optional[ImageCodec] = None,
    on_result: Optional[ResultCallback] = None,
) -> OptimizationRun:
    """Transcode every target image under ``build_dir`` and rewrite references.

    Arguments left as ``None`` fall back to ``config_path`` settings, then to
    the built-in defaults. ``format_options`` is keyed by format name, e.g.
    ``{"webp": {"quality": 70}}``.
    """
    candidates: dict[str, Any] = {
        "build_dir": build_dir,
        "output_format": output_format,
        "target_extensions": target_extensions,
        "format_options": format_options,
        "remove_original": remove_original,
        "concurrency": concurrency,
        "rewrite_references": rewrite_references,
        "rewrite_extensions": rewrite_extensions,
    }
    overrides = {key: value for key, value in candidates.items() if value is not None}
    options = build_optimizer_options(config_path=config_path, overrides=overrides)
    return optimize_build(options, codec=codec, on_result=on_result)
