"""Pydantic schemas for runtime validation of optimizer configuration."""

from __future__ import annotations

import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from image_optimizer.application.options import (
    DEFAULT_REWRITE_EXTENSIONS,
    DEFAULT_TARGET_EXTENSIONS,
)
from image_optimizer.errors import ConfigError
from image_optimizer.types import OutputFormatName

CONFIG_TABLE = "image-optimizer"


class WebpOptionsConfig(BaseModel):
    """Validated WebP encoder settings."""

    model_config = ConfigDict(extra="forbid")

    quality: int = Field(default=80, ge=0, le=100)
    lossless: bool = False
    effort: int = Field(default=4, ge=0, le=6)


class AvifOptionsConfig(BaseModel):
    """Validated AVIF encoder settings."""

    model_config = ConfigDict(extra="forbid")

    quality: int = Field(default=50, ge=0, le=100)
    lossless: bool = False
    effort: int = Field(default=4, ge=0, le=9)


class JpegOptionsConfig(BaseModel):
    """Validated JPEG encoder settings."""

    model_config = ConfigDict(extra="forbid")

    quality: int = Field(default=80, ge=1, le=100)
    progressive: bool = True
    optimize: bool = True


class PngOptionsConfig(BaseModel):
    """Validated PNG encoder settings."""

    model_config = ConfigDict(extra="forbid")

    compression_level: int = Field(default=6, ge=0, le=9)
    palette: bool = False
    colors: int = Field(default=256, ge=2, le=256)


class FormatOptionsConfig(BaseModel):
    """Per-format encoder settings; only the selected format is used."""

    model_config = ConfigDict(extra="forbid")

    webp: WebpOptionsConfig = Field(default_factory=WebpOptionsConfig)
    avif: AvifOptionsConfig = Field(default_factory=AvifOptionsConfig)
    jpeg: JpegOptionsConfig = Field(default_factory=JpegOptionsConfig)
    png: PngOptionsConfig = Field(default_factory=PngOptionsConfig)


def _normalize_extensions(value: object) -> tuple[str, ...]:
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple, set, frozenset)):
        raise ValueError("extensions must be a list of strings.")
    normalized: list[str] = []
    for item in value:
        text = str(item).strip()
        if not text.startswith(".") or len(text) < 2:
            raise ValueError(f"extension '{text}' must be dot-prefixed, e.g. '.png'.")
        if text not in normalized:
            normalized.append(text)
    if not normalized:
        raise ValueError("at least one extension is required.")
    return tuple(normalized)


class OptimizerConfig(BaseModel):
    """Validated input for one optimization run."""

    model_config = ConfigDict(extra="forbid")

    build_dir: Path = Path("dist")
    target_extensions: tuple[str, ...] = DEFAULT_TARGET_EXTENSIONS
    output_format: OutputFormatName = "webp"
    format_options: FormatOptionsConfig = Field(default_factory=FormatOptionsConfig)
    remove_original: bool = True
    concurrency: int = Field(default=4, ge=1)
    rewrite_references: bool = True
    rewrite_extensions: tuple[str, ...] = DEFAULT_REWRITE_EXTENSIONS

    @field_validator("target_extensions", "rewrite_extensions", mode="before")
    @classmethod
    def _validate_extensions(cls, value: object) -> tuple[str, ...]:
        return _normalize_extensions(value)

    @field_validator("output_format", mode="before")
    @classmethod
    def _lower_output_format(cls, value: object) -> object:
        return value.strip().lower() if isinstance(value, str) else value


def _merge(base: dict[str, Any], overrides: Mapping[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in overrides.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), Mapping):
            merged[key] = _merge(dict(merged[key]), value)
        else:
            merged[key] = value
    return merged


def read_config_file(path: Path) -> dict[str, Any]:
    """Read raw settings from a TOML file.

    Settings may sit at the top level or under ``[tool.image-optimizer]``
    (so a project's ``pyproject.toml`` can be used directly).

    Raises
    ------
    ConfigError
        If the file cannot be read or is not valid TOML.
    """
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigError(f"Cannot read config file {path}: {exc}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid TOML in {path}: {exc}") from exc
    tool = data.get("tool")
    if isinstance(tool, dict) and isinstance(tool.get(CONFIG_TABLE), dict):
        return dict(tool[CONFIG_TABLE])
    data.pop("tool", None)
    return data


def load_config(
    path: Path | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> OptimizerConfig:
    """Build a validated config from defaults, an optional file and overrides.

    Parameters
    ----------
    path : Path | None, default=None
        Optional TOML config file.
    overrides : Mapping[str, Any] | None, default=None
        Values taking precedence over the file (typically CLI flags).
        Nested mappings such as ``format_options`` are merged key by key.

    Raises
    ------
    ConfigError
        If the file is unreadable or any value fails validation.
    """
    raw: dict[str, Any] = read_config_file(path) if path is not None else {}
    if overrides:
        raw = _merge(raw, overrides)
    try:
        return OptimizerConfig.model_validate(raw)
    except ValidationError as exc:
        raise ConfigError(f"Invalid optimizer configuration: {exc}") from exc
