"""Pillow-backed image codec implementing the application port."""

from __future__ import annotations

import io
from pathlib import Path
from typing import assert_never

from PIL import Image, features

from image_optimizer.application.options import (
    AvifOptions,
    FormatOptions,
    JpegOptions,
    PngOptions,
    WebpOptions,
)
from image_optimizer.errors import UnsupportedFormatError

_FEATURE_FLAGS = {"webp": "webp", "avif": "avif", "jpeg": "jpg", "png": "zlib"}


def supported_formats() -> dict[str, bool]:
    """Report which output formats the installed Pillow can encode."""
    report: dict[str, bool] = {}
    for name, feature in _FEATURE_FLAGS.items():
        try:
            report[name] = bool(features.check(feature))
        except ValueError:
            report[name] = False
    return report


def _flatten_alpha(image: Image.Image) -> Image.Image:
    """Composite transparent images onto white for formats without alpha."""
    if image.mode in {"RGBA", "LA"} or (image.mode == "P" and "transparency" in image.info):
        rgba = image.convert("RGBA")
        background = Image.new("RGB", rgba.size, (255, 255, 255))
        background.paste(rgba, mask=rgba.split()[-1])
        return background
    return image.convert("RGB") if image.mode != "RGB" else image


def _webp_kwargs(options: WebpOptions) -> dict[str, object]:
    return {
        "quality": max(0, min(100, options.quality)),
        "lossless": options.lossless,
        "method": max(0, min(6, options.effort)),
    }


def _avif_kwargs(options: AvifOptions) -> dict[str, object]:
    # Pillow's AVIF speed runs opposite to effort: 0 is slowest, 10 fastest.
    speed = max(0, min(10, 9 - options.effort))
    if options.lossless:
        return {"quality": 100, "subsampling": "4:4:4", "speed": speed}
    return {"quality": max(0, min(100, options.quality)), "speed": speed}


def _jpeg_kwargs(options: JpegOptions) -> dict[str, object]:
    return {
        "quality": max(1, min(100, options.quality)),
        "progressive": options.progressive,
        "optimize": options.optimize,
    }


def _quantize(image: Image.Image, colors: int) -> Image.Image:
    fast_octree = 2
    median_cut = 0
    if image.mode in {"RGBA", "LA"}:
        return image.convert("RGBA").quantize(colors=colors, method=fast_octree)
    return image.convert("RGB").quantize(colors=colors, method=median_cut)


class PillowImageCodec:
    """Encode images with Pillow's built-in WebP, AVIF, JPEG and PNG writers."""

    def encode(self, source_path: Path, options: FormatOptions) -> bytes:
        """Decode ``source_path`` and re-encode it according to ``options``.

        Parameters
        ----------
        source_path : Path
            Image file readable by Pillow.
        options : FormatOptions
            Output variant and its encoder settings.

        Returns
        -------
        bytes
            Encoded image payload.

        Raises
        ------
        UnsupportedFormatError
            If the installed Pillow lacks an encoder for the variant.
        OSError
            If the source cannot be decoded.
        """
        if not supported_formats().get(options.format_name, False):
            raise UnsupportedFormatError(
                f"Pillow was built without {options.format_name} support"
            )

        buffer = io.BytesIO()
        with Image.open(source_path) as image:
            image.load()
            match options:
                case WebpOptions():
                    image.save(buffer, format="WEBP", **_webp_kwargs(options))
                case AvifOptions():
                    image.save(buffer, format="AVIF", **_avif_kwargs(options))
                case JpegOptions():
                    _flatten_alpha(image).save(
                        buffer, format="JPEG", **_jpeg_kwargs(options)
                    )
                case PngOptions():
                    target = (
                        _quantize(image, max(2, min(256, options.colors)))
                        if options.palette
                        else image
                    )
                    target.save(
                        buffer,
                        format="PNG",
                        optimize=False,
                        compress_level=max(0, min(9, options.compression_level)),
                    )
                case _:
                    assert_never(options)
        return buffer.getvalue()
