"""Typed option objects shared across optimization use-cases."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import ClassVar, TypeAlias

from image_optimizer.types import OutputFormatName, canonical_extension

DEFAULT_TARGET_EXTENSIONS: tuple[str, ...] = (".png", ".jpg", ".jpeg")
DEFAULT_REWRITE_EXTENSIONS: tuple[str, ...] = (
    ".html",
    ".css",
    ".js",
    ".json",
    ".xml",
    ".svg",
)


@dataclass(frozen=True)
class WebpOptions:
    """WebP encoder settings."""

    format_name: ClassVar[OutputFormatName] = "webp"

    quality: int = 80
    lossless: bool = False
    effort: int = 4

    @property
    def extension(self) -> str:
        return canonical_extension(self.format_name)


@dataclass(frozen=True)
class AvifOptions:
    """AVIF encoder settings."""

    format_name: ClassVar[OutputFormatName] = "avif"

    quality: int = 50
    lossless: bool = False
    effort: int = 4

    @property
    def extension(self) -> str:
        return canonical_extension(self.format_name)


@dataclass(frozen=True)
class JpegOptions:
    """JPEG encoder settings."""

    format_name: ClassVar[OutputFormatName] = "jpeg"

    quality: int = 80
    progressive: bool = True
    optimize: bool = True

    @property
    def extension(self) -> str:
        return canonical_extension(self.format_name)


@dataclass(frozen=True)
class PngOptions:
    """PNG encoder settings."""

    format_name: ClassVar[OutputFormatName] = "png"

    compression_level: int = 6
    palette: bool = False
    colors: int = 256

    @property
    def extension(self) -> str:
        return canonical_extension(self.format_name)


FormatOptions: TypeAlias = WebpOptions | AvifOptions | JpegOptions | PngOptions


@dataclass(frozen=True)
class ConversionTask:
    """One image scheduled for transcoding."""

    source_path: Path
    options: FormatOptions

    @property
    def output_path(self) -> Path:
        """Same directory and stem as the source, with the output extension."""
        return self.source_path.with_suffix(self.options.extension)


@dataclass(frozen=True)
class OptimizerOptions:
    """Run-level configuration passed through the optimization pipeline."""

    build_dir: Path = Path("dist")
    target_extensions: tuple[str, ...] = DEFAULT_TARGET_EXTENSIONS
    format: FormatOptions = WebpOptions()
    remove_original: bool = True
    concurrency: int = 4
    rewrite_references: bool = True
    rewrite_extensions: tuple[str, ...] = DEFAULT_REWRITE_EXTENSIONS
