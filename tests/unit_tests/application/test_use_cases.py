"""Unit tests for the optimization use-case state machine."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from pathlib import Path

import pytest

from image_optimizer.application.options import (
    AvifOptions,
    FormatOptions,
    JpegOptions,
    OptimizerOptions,
    PngOptions,
    WebpOptions,
)
from image_optimizer.application.results import (
    BatchOutcome,
    RemovalSummary,
    RewriteSummary,
    RunState,
)
from image_optimizer.application.use_cases import (
    build_format_options,
    build_optimizer_options,
    optimize_build,
)
from image_optimizer.errors import AssetLocatorError
from image_optimizer.schemas import load_config


class _Locator:
    def __init__(self, paths: list[Path]) -> None:
        self.paths = paths
        self.calls: list[tuple[Path, tuple[str, ...]]] = []

    def locate(self, root: Path, extensions: Sequence[str]) -> list[Path]:
        self.calls.append((root, tuple(extensions)))
        return list(self.paths)


class _PostProcessor:
    def __init__(self, rewrite_error: Exception | None = None) -> None:
        self.rewrite_error = rewrite_error
        self.removed: list[BatchOutcome] = []
        self.rewrites: list[tuple[Path, tuple[str, ...], FormatOptions]] = []

    def remove_originals(self, outcome: BatchOutcome) -> RemovalSummary:
        self.removed.append(outcome)
        return RemovalSummary(removed=tuple(r.source_path for r in outcome.succeeded))

    def rewrite_references(
        self,
        root: Path,
        source_extensions: Sequence[str],
        options: FormatOptions,
        text_extensions: Sequence[str],
    ) -> RewriteSummary:
        del text_extensions
        if self.rewrite_error is not None:
            raise self.rewrite_error
        self.rewrites.append((root, tuple(source_extensions), options))
        return RewriteSummary(replacement=options.extension)


@pytest.mark.parametrize(
    ("name", "expected"),
    [("webp", WebpOptions), ("avif", AvifOptions), ("jpeg", JpegOptions), ("png", PngOptions)],
)
def test_build_format_options_selects_variant(name: str, expected: type) -> None:
    options = build_format_options(load_config(overrides={"output_format": name}))
    assert isinstance(options, expected)


def test_build_optimizer_options_from_overrides() -> None:
    options = build_optimizer_options(
        overrides={
            "build_dir": "public",
            "output_format": "webp",
            "format_options": {"webp": {"quality": 70, "lossless": True}},
            "concurrency": 2,
        }
    )
    assert options.build_dir == Path("public")
    assert options.format == WebpOptions(quality=70, lossless=True, effort=4)
    assert options.concurrency == 2


def test_empty_tree_stops_before_execution(tmp_path: Path, fake_codec: object) -> None:
    post = _PostProcessor()
    run = optimize_build(
        OptimizerOptions(build_dir=tmp_path),
        codec=fake_codec,  # type: ignore[arg-type]
        locator=_Locator([]),
        postprocessor=post,
    )

    assert run.nothing_found
    assert run.states == (RunState.INIT, RunState.LOCATE, RunState.EMPTY, RunState.DONE)
    assert fake_codec.calls == []  # type: ignore[attr-defined]
    assert post.removed == [] and post.rewrites == []


def test_all_failures_skip_post_processing(
    tmp_path: Path, make_file: Callable[..., Path], codec_factory: type
) -> None:
    paths = [make_file("a.png"), make_file("b.jpg")]
    post = _PostProcessor()

    run = optimize_build(
        OptimizerOptions(build_dir=tmp_path),
        codec=codec_factory(fail_for={"a.png", "b.jpg"}),
        locator=_Locator(paths),
        postprocessor=post,
    )

    assert run.state is RunState.DONE
    assert RunState.NO_SUCCESSES in run.states
    assert RunState.POST_PROCESS not in run.states
    assert len(run.outcome.failed) == 2
    assert post.removed == [] and post.rewrites == []
    assert all(path.exists() for path in paths)


def test_successful_run_post_processes(
    tmp_path: Path, make_file: Callable[..., Path], fake_codec: object
) -> None:
    paths = [make_file("a.png"), make_file("b.jpg")]
    post = _PostProcessor()
    options = OptimizerOptions(build_dir=tmp_path, format=AvifOptions(), concurrency=1)

    run = optimize_build(
        options,
        codec=fake_codec,  # type: ignore[arg-type]
        locator=_Locator(paths),
        postprocessor=post,
    )

    assert run.states == (
        RunState.INIT,
        RunState.LOCATE,
        RunState.EXECUTE,
        RunState.REPORT,
        RunState.POST_PROCESS,
        RunState.DONE,
    )
    assert run.located == 2
    assert run.removal is not None and len(run.removal.removed) == 2
    assert post.rewrites == [(tmp_path, options.target_extensions, AvifOptions())]
    assert run.rewrite is not None and run.rewrite.replacement == ".avif"


def test_keep_originals_and_skip_rewrite(
    tmp_path: Path, make_file: Callable[..., Path], fake_codec: object
) -> None:
    post = _PostProcessor()
    run = optimize_build(
        OptimizerOptions(
            build_dir=tmp_path, remove_original=False, rewrite_references=False
        ),
        codec=fake_codec,  # type: ignore[arg-type]
        locator=_Locator([make_file("a.png")]),
        postprocessor=post,
    )

    assert run.removal is None and run.rewrite is None
    assert post.removed == [] and post.rewrites == []


def test_unexpected_rewrite_fault_is_reported(
    tmp_path: Path, make_file: Callable[..., Path], fake_codec: object
) -> None:
    run = optimize_build(
        OptimizerOptions(build_dir=tmp_path),
        codec=fake_codec,  # type: ignore[arg-type]
        locator=_Locator([make_file("a.png")]),
        postprocessor=_PostProcessor(rewrite_error=RuntimeError("scan failed")),
    )

    assert run.state is RunState.DONE
    assert run.rewrite is not None
    assert run.rewrite.failures[0].path is None
    assert run.rewrite.failures[0].error == "RuntimeError: scan failed"


def test_locate_faults_propagate(tmp_path: Path, fake_codec: object) -> None:
    class _Broken:
        def locate(self, root: Path, extensions: Sequence[str]) -> list[Path]:
            raise AssetLocatorError(f"Cannot read build root {root}")

    with pytest.raises(AssetLocatorError):
        optimize_build(
            OptimizerOptions(build_dir=tmp_path),
            codec=fake_codec,  # type: ignore[arg-type]
            locator=_Broken(),
        )


def test_lazy_wrapper_forwards_progress_callback(
    tmp_path: Path, make_file: Callable[..., Path], fake_codec: object
) -> None:
    from image_optimizer import application

    seen: list[int] = []
    run = application.optimize_build(
        OptimizerOptions(build_dir=tmp_path, rewrite_references=False),
        codec=fake_codec,  # type: ignore[arg-type]
        locator=_Locator([make_file("a.png"), make_file("b.png")]),
        postprocessor=_PostProcessor(),
        on_result=lambda done, total, result: seen.append(done),
    )

    assert run.state is RunState.DONE
    assert seen == [1, 2]
