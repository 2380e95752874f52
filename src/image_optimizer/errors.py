"""Exception hierarchy for the image optimizer."""

from __future__ import annotations


class OptimizerError(Exception):
    """Base error for optimization failures."""

    exit_code = 1


class ConfigError(OptimizerError):
    """Invalid or unreadable optimizer configuration."""

    exit_code = 2


class AssetLocatorError(OptimizerError):
    """Build root exists but cannot be traversed."""


class TranscodeError(OptimizerError):
    """Per-item transcode failure."""


class UnsupportedFormatError(TranscodeError):
    """Codec cannot encode the requested output format."""


class SameFileError(TranscodeError):
    """Source image already has the output extension."""


class OutputCollisionError(TranscodeError):
    """Output path already claimed by an earlier task in the batch."""


class ReferenceRewriteError(OptimizerError):
    """Text file could not be read or written during reference rewrite."""
