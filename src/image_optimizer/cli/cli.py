#!/usr/bin/env python3
"""
image_optimizer.cli.cli

Typer-based CLI for the post-build image optimization pass.

Examples
--------
Convert every PNG/JPEG under ``dist`` to WebP and update references:

    optimize-images run dist

Produce AVIF with a project config file, keeping the originals:

    optimize-images run --config optimizer.toml --format avif --keep-original
"""

from __future__ import annotations

import logging
import sys
import time
import traceback
from pathlib import Path
from typing import Any

import typer

from image_optimizer.errors import OptimizerError
from image_optimizer.types import OUTPUT_FORMATS

app = typer.Typer(
    name="optimize-images",
    help="Transcode build-tree images and rewrite references to them.",
    no_args_is_help=True,
)

EXT_HELP = "Source image extension to transcode, dot-prefixed (repeatable)."
REWRITE_EXT_HELP = "Text file extension whose references are rewritten (repeatable)."


# -----------------------------
# Utilities
# -----------------------------
def _configure_logging(verbose: bool, debug: bool) -> None:
    """Route library logging to stderr at the requested verbosity."""
    level = logging.WARNING
    if verbose:
        level = logging.INFO
    if debug:
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
        force=True,
    )


def _print_error(exc: Exception, debug: bool) -> int:
    """Print a user-friendly error.

    Parameters
    ----------
    exc : Exception
        Exception raised during the run.
    debug : bool
        Whether to include traceback details.

    Returns
    -------
    int
        Process exit code.
    """
    label = typer.style("[ERROR]", fg=typer.colors.RED)
    typer.echo(f"{label} {type(exc).__name__}: {exc}", err=True)
    if debug:
        typer.echo("\nTraceback:", err=True)
        typer.echo(
            "".join(traceback.format_exception(type(exc), exc, exc.__traceback__)),
            err=True,
        )
    code = getattr(exc, "exit_code", None)
    if isinstance(code, int) and code > 0:
        return code
    return 1


def _tag(label: str, color: str, enabled: bool) -> str:
    return typer.style(label, fg=color) if enabled else label


def _collect_overrides(
    build_dir: Path | None,
    output_format: str | None,
    extensions: list[str] | None,
    remove_original: bool | None,
    concurrency: int | None,
    rewrite_extensions: list[str] | None,
    no_rewrite: bool,
) -> dict[str, Any]:
    """Map explicitly given CLI flags onto config keys."""
    overrides: dict[str, Any] = {}
    if build_dir is not None:
        overrides["build_dir"] = build_dir
    if output_format is not None:
        overrides["output_format"] = output_format
    if extensions:
        overrides["target_extensions"] = extensions
    if remove_original is not None:
        overrides["remove_original"] = remove_original
    if concurrency is not None:
        overrides["concurrency"] = concurrency
    if rewrite_extensions:
        overrides["rewrite_extensions"] = rewrite_extensions
    if no_rewrite:
        overrides["rewrite_references"] = False
    return overrides


def _encoder_overrides(
    output_format: str,
    quality: int | None,
    lossless: bool | None,
    effort: int | None,
) -> dict[str, Any]:
    """Map encoder flags onto the selected format's option table."""
    settings: dict[str, Any] = {}
    if quality is not None:
        settings["quality"] = quality
    if lossless is not None:
        if output_format not in {"webp", "avif"}:
            raise typer.BadParameter(f"--lossless is not available for {output_format}.")
        settings["lossless"] = lossless
    if effort is not None:
        if output_format == "png":
            settings["compression_level"] = effort
        elif output_format == "jpeg":
            raise typer.BadParameter("--effort is not available for jpeg.")
        else:
            settings["effort"] = effort
    if quality is not None and output_format == "png":
        raise typer.BadParameter("--quality is not available for png.")
    return {"format_options": {output_format: settings}} if settings else {}


# -----------------------------
# Global options
# -----------------------------
@app.callback()
def _main(
    ctx: typer.Context,
    debug: bool = typer.Option(False, "--debug", help="Show full tracebacks on error."),
) -> None:
    """Initialize shared CLI state.

    Parameters
    ----------
    ctx : typer.Context
        Typer context object used to store shared state.
    debug : bool, default=False
        Whether to enable debug output.
    """
    ctx.obj = {"debug": debug}


# -----------------------------
# Commands
# -----------------------------
@app.command("run")
def run_cmd(
    ctx: typer.Context,
    build_dir: Path | None = typer.Argument(
        None, help="Build directory to optimize (default: dist)."
    ),
    config: Path | None = typer.Option(
        None,
        "--config",
        exists=True,
        dir_okay=False,
        readable=True,
        help="TOML config file (top-level keys or [tool.image-optimizer]).",
    ),
    output_format: str | None = typer.Option(
        None,
        "--format",
        help=f"Output format: {', '.join(OUTPUT_FORMATS)}.",
    ),
    extensions: list[str] | None = typer.Option(None, "--ext", help=EXT_HELP),
    quality: int | None = typer.Option(
        None, "--quality", min=0, max=100, help="Encoder quality 0-100."
    ),
    lossless: bool | None = typer.Option(
        None, "--lossless/--lossy", help="Lossless encoding (webp, avif)."
    ),
    effort: int | None = typer.Option(
        None,
        "--effort",
        min=0,
        help="Encoder effort (webp 0-6, avif 0-9, png compression level 0-9).",
    ),
    remove_original: bool | None = typer.Option(
        None,
        "--remove-original/--keep-original",
        help="Delete originals that were converted successfully.",
    ),
    concurrency: int | None = typer.Option(
        None, "--concurrency", min=1, help="Images converted simultaneously."
    ),
    rewrite_extensions: list[str] | None = typer.Option(
        None, "--rewrite-ext", help=REWRITE_EXT_HELP
    ),
    no_rewrite: bool = typer.Option(
        False, "--no-rewrite", help="Skip rewriting references in text files."
    ),
    color: bool | None = typer.Option(
        None, "--color/--no-color", help="Force or disable colored output."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log each file."),
) -> None:
    """Transcode images in a build directory and rewrite references.

    Parameters
    ----------
    ctx : typer.Context
        Typer context containing global options.
    build_dir : Path | None
        Root directory to scan; overrides the config file.
    config : Path | None
        Optional TOML configuration file.
    output_format : str | None
        One of ``webp``, ``avif``, ``jpeg``, ``png``.

    Notes
    -----
    - Individual image failures are listed in the summary but do not change
      the exit status.
    - Reference rewriting is a plain text substitution of the configured
      extensions inside html/css/js/json/xml/svg files.
    """
    started = time.perf_counter()
    debug: bool = bool(ctx.obj.get("debug", False))
    use_color = sys.stdout.isatty() if color is None else color
    _configure_logging(verbose, debug)

    try:
        from image_optimizer.application.use_cases import (
            build_optimizer_options,
            optimize_build,
        )
        from image_optimizer.report import build_report, render_completion, render_report
        from image_optimizer.schemas import load_config

        overrides = _collect_overrides(
            build_dir,
            output_format,
            extensions,
            remove_original,
            concurrency,
            rewrite_extensions,
            no_rewrite,
        )
        settings = load_config(config, overrides)
        encoder = _encoder_overrides(settings.output_format, quality, lossless, effort)
        if encoder:
            settings = load_config(config, {**overrides, **encoder})
        options = build_optimizer_options(settings)

        info = _tag("[INFO]", typer.colors.CYAN, use_color)
        typer.echo("")
        typer.echo(
            f"{info} Starting image optimization (output format: {settings.output_format})"
        )
        typer.echo(f"{info} Build directory: {options.build_dir.resolve()}")

        run = optimize_build(options)
        if run.nothing_found:
            warning = _tag("[WARNING]", typer.colors.YELLOW, use_color)
            typer.echo(f"{warning} No target images found. Nothing to do.")
            return

        report = build_report(run.outcome, rewrite=run.rewrite, removal=run.removal)
        for line in render_report(report, color=use_color):
            typer.echo(line)
        typer.echo(render_completion(time.perf_counter() - started, color=use_color))
    except typer.BadParameter:
        raise
    except OptimizerError as exc:
        raise typer.Exit(code=_print_error(exc, debug))
    except Exception as exc:
        raise typer.Exit(code=_print_error(exc, debug))


@app.command("doctor")
def doctor_cmd() -> None:
    """Print installed toolchain versions and encoder availability."""
    import importlib.metadata as metadata

    from image_optimizer.adapters.codecs import supported_formats

    typer.echo(f"Python: {sys.version.split()[0]}")
    for module in ("pillow", "pydantic", "typer"):
        try:
            version = metadata.version(module)
            typer.echo(f"{module}: {version}")
        except metadata.PackageNotFoundError:
            typer.echo(f"{module}: <not installed>")

    for name, available in supported_formats().items():
        typer.echo(f"encoder {name}: {'yes' if available else 'no'}")
    if not supported_formats().get("avif", False):
        typer.echo("Note: AVIF output needs a Pillow build with libavif (Pillow >= 11.3 wheels).")


def main() -> None:
    """Console-script entry point."""
    app()


if __name__ == "__main__":
    main()
