"""Shared type aliases for optimizer modules."""

from __future__ import annotations

from typing import Literal, TypeAlias

OutputFormatName: TypeAlias = Literal["webp", "avif", "jpeg", "png"]

OUTPUT_FORMATS: tuple[OutputFormatName, ...] = ("webp", "avif", "jpeg", "png")


def canonical_extension(format_name: str) -> str:
    """Return the file extension written for an output format name."""
    lowered = format_name.lower()
    return ".jpg" if lowered == "jpeg" else f".{lowered}"
