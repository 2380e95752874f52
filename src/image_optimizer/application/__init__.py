"""Application-layer use-cases and option objects."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any

from image_optimizer.application.options import (
    AvifOptions,
    ConversionTask,
    FormatOptions,
    JpegOptions,
    OptimizerOptions,
    PngOptions,
    WebpOptions,
)
from image_optimizer.application.ports import (
    AssetLocator,
    BuildPostProcessor,
    ImageCodec,
)
from image_optimizer.application.results import (
    BatchOutcome,
    ConversionResult,
    OptimizationRun,
    ReferenceRewriteReport,
    RemovalSummary,
    RewriteSummary,
    RunState,
)

if TYPE_CHECKING:
    from image_optimizer.batch import ResultCallback


def build_optimizer_options(
    *,
    config_path: Path | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> OptimizerOptions:
    """Build typed run options via lazy use-case import."""
    from image_optimizer.application.use_cases import build_optimizer_options as _impl

    return _impl(config_path=config_path, overrides=overrides)


def optimize_build(
    options: OptimizerOptions,
    *,
    codec: ImageCodec | None = None,
    locator: AssetLocator | None = None,
    postprocessor: BuildPostProcessor | None = None,
    on_result: ResultCallback | None = None,
) -> OptimizationRun:
    """Optimize a build tree via lazy use-case import."""
    from image_optimizer.application.use_cases import optimize_build as _impl

    return _impl(
        options,
        codec=codec,
        locator=locator,
        postprocessor=postprocessor,
        on_result=on_result,
    )


__all__ = [
    "AvifOptions",
    "BatchOutcome",
    "ConversionResult",
    "ConversionTask",
    "FormatOptions",
    "JpegOptions",
    "OptimizationRun",
    "OptimizerOptions",
    "PngOptions",
    "ReferenceRewriteReport",
    "RemovalSummary",
    "RewriteSummary",
    "RunState",
    "WebpOptions",
    "build_optimizer_options",
    "optimize_build",
]
