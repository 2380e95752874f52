"""Single-image transcoding around an opaque codec."""

from __future__ import annotations

import logging
from pathlib import Path

from image_optimizer.application.options import ConversionTask
from image_optimizer.application.ports import ImageCodec
from image_optimizer.application.results import ConversionResult
from image_optimizer.errors import SameFileError

logger = logging.getLogger(__name__)


def _size_or_zero(path: Path, label: str, warnings: list[str]) -> int:
    try:
        return path.stat().st_size
    except OSError as exc:
        message = f"could not read {label} size of {path}: {exc}"
        logger.warning(message)
        warnings.append(message)
        return 0


def transcode(task: ConversionTask, codec: ImageCodec) -> ConversionResult:
    """Convert one image and capture the outcome as data.

    Never raises for per-item problems: codec errors, write errors and
    unsupported formats all produce a failed :class:`ConversionResult`.
    The source file is never modified.
    """
    source = task.source_path
    output = task.output_path
    warnings: list[str] = []
    original_size = _size_or_zero(source, "original", warnings)

    if output == source:
        return ConversionResult.failed(
            source,
            output,
            SameFileError(f"{source.name} already uses the {output.suffix} extension"),
            original_size=original_size,
            warnings=warnings,
        )

    try:
        payload = codec.encode(source, task.options)
    except Exception as exc:
        logger.debug("codec failed for %s", source, exc_info=True)
        return ConversionResult.failed(
            source, output, exc, original_size=original_size, warnings=warnings
        )

    try:
        output.write_bytes(payload)
    except Exception as exc:
        logger.debug("could not write %s", output, exc_info=True)
        try:
            output.unlink(missing_ok=True)
        except OSError:
            logger.debug("could not remove partial output %s", output)
        return ConversionResult.failed(
            source, output, exc, original_size=original_size, warnings=warnings
        )

    converted_size = _size_or_zero(output, "converted", warnings)
    logger.info("converted %s -> %s", source, output.name)
    return ConversionResult.succeeded(
        source,
        output,
        original_size=original_size,
        converted_size=converted_size,
        warnings=warnings,
    )
