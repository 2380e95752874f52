"""Application use-cases orchestrating optimization workflows."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from image_optimizer.adapters.codecs import PillowImageCodec
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
    OptimizationRun,
    RewriteFailure,
    RewriteSummary,
    RunState,
)
from image_optimizer.batch import ResultCallback, run_batch
from image_optimizer.infrastructure.postprocessing import BuildPostProcessorImpl
from image_optimizer.locator import FilesystemAssetLocator
from image_optimizer.schemas import OptimizerConfig, load_config

logger = logging.getLogger(__name__)


def build_format_options(config: OptimizerConfig) -> FormatOptions:
    """Select and freeze the encoder settings for the configured format."""
    table = config.format_options
    match config.output_format:
        case "webp":
            return WebpOptions(**table.webp.model_dump())
        case "avif":
            return AvifOptions(**table.avif.model_dump())
        case "jpeg":
            return JpegOptions(**table.jpeg.model_dump())
        case "png":
            return PngOptions(**table.png.model_dump())
    raise AssertionError(f"unhandled output format: {config.output_format}")


def build_optimizer_options(
    config: OptimizerConfig | None = None,
    *,
    config_path: Path | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> OptimizerOptions:
    """Build the typed run options from a config object or raw settings."""
    if config is None:
        config = load_config(config_path, overrides)
    return OptimizerOptions(
        build_dir=config.build_dir,
        target_extensions=config.target_extensions,
        format=build_format_options(config),
        remove_original=config.remove_original,
        concurrency=config.concurrency,
        rewrite_references=config.rewrite_references,
        rewrite_extensions=config.rewrite_extensions,
    )


def optimize_build(
    options: OptimizerOptions,
    *,
    codec: ImageCodec | None = None,
    locator: AssetLocator | None = None,
    postprocessor: BuildPostProcessor | None = None,
    on_result: ResultCallback | None = None,
) -> OptimizationRun:
    """Use-case: transcode a build tree's images and update references.

    Runs ``Locate -> Execute -> Report -> PostProcess``. A run that finds no
    images, or in which every conversion fails, stops before touching any
    file. Per-image failures are data in the returned run; only locate
    faults raise.
    """
    codec = codec or PillowImageCodec()
    locator = locator or FilesystemAssetLocator()
    postprocessor = postprocessor or BuildPostProcessorImpl()
    states = [RunState.INIT, RunState.LOCATE]

    sources = locator.locate(options.build_dir, options.target_extensions)
    if not sources:
        logger.info("no target images found under %s", options.build_dir)
        states += [RunState.EMPTY, RunState.DONE]
        return OptimizationRun(
            build_dir=options.build_dir, located=0, states=tuple(states)
        )

    states.append(RunState.EXECUTE)
    tasks = [ConversionTask(source_path=path, options=options.format) for path in sources]
    outcome = run_batch(tasks, codec, options.concurrency, on_result=on_result)
    states.append(RunState.REPORT)
    logger.info("converted %d of %d image(s)", len(outcome.succeeded), len(outcome))

    if not outcome.any_succeeded:
        states += [RunState.NO_SUCCESSES, RunState.DONE]
        return OptimizationRun(
            build_dir=options.build_dir,
            located=len(sources),
            outcome=outcome,
            states=tuple(states),
        )

    states.append(RunState.POST_PROCESS)
    removal = None
    if options.remove_original:
        removal = postprocessor.remove_originals(outcome)
    rewrite = None
    if options.rewrite_references:
        rewrite = _rewrite_or_report(postprocessor, options)

    states.append(RunState.DONE)
    return OptimizationRun(
        build_dir=options.build_dir,
        located=len(sources),
        outcome=outcome,
        removal=removal,
        rewrite=rewrite,
        states=tuple(states),
    )


def _rewrite_or_report(
    postprocessor: BuildPostProcessor, options: OptimizerOptions
) -> RewriteSummary:
    try:
        return postprocessor.rewrite_references(
            options.build_dir,
            options.target_extensions,
            options.format,
            options.rewrite_extensions,
        )
    except Exception as exc:
        logger.exception("unexpected error during reference rewrite")
        return RewriteSummary(
            replacement=options.format.extension,
            failures=(
                RewriteFailure(path=None, error=f"{type(exc).__name__}: {exc}"),
            ),
        )
