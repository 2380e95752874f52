"""Application-layer result objects."""

from __future__ import annotations

import enum
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class ConversionResult:
    """Outcome of transcoding one image.

    Exactly one of ``converted_size`` and ``error`` is populated, matching
    ``success``. Use :meth:`succeeded` and :meth:`failed` to construct.
    """

    source_path: Path
    output_path: Path
    success: bool
    original_size: int = 0
    converted_size: int | None = None
    error: str | None = None
    warnings: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.success and (self.converted_size is None or self.error is not None):
            raise ValueError("successful result requires converted_size and no error")
        if not self.success and (self.error is None or self.converted_size is not None):
            raise ValueError("failed result requires error and no converted_size")

    @classmethod
    def succeeded(
        cls,
        source_path: Path,
        output_path: Path,
        original_size: int,
        converted_size: int,
        warnings: Sequence[str] = (),
    ) -> ConversionResult:
        return cls(
            source_path=source_path,
            output_path=output_path,
            success=True,
            original_size=original_size,
            converted_size=converted_size,
            warnings=tuple(warnings),
        )

    @classmethod
    def failed(
        cls,
        source_path: Path,
        output_path: Path,
        error: BaseException | str,
        original_size: int = 0,
        warnings: Sequence[str] = (),
    ) -> ConversionResult:
        cause = error if isinstance(error, str) else _describe(error)
        return cls(
            source_path=source_path,
            output_path=output_path,
            success=False,
            original_size=original_size,
            error=cause,
            warnings=tuple(warnings),
        )


def _describe(exc: BaseException) -> str:
    message = str(exc).strip()
    return f"{type(exc).__name__}: {message}" if message else type(exc).__name__


@dataclass(frozen=True)
class BatchOutcome:
    """Ordered results of one batch, one entry per submitted task."""

    results: tuple[ConversionResult, ...] = ()

    def __iter__(self) -> Iterator[ConversionResult]:
        return iter(self.results)

    def __len__(self) -> int:
        return len(self.results)

    def __getitem__(self, index: int) -> ConversionResult:
        return self.results[index]

    @property
    def succeeded(self) -> tuple[ConversionResult, ...]:
        return tuple(result for result in self.results if result.success)

    @property
    def failed(self) -> tuple[ConversionResult, ...]:
        return tuple(result for result in self.results if not result.success)

    @property
    def any_succeeded(self) -> bool:
        return any(result.success for result in self.results)

    @property
    def warning_count(self) -> int:
        return sum(len(result.warnings) for result in self.results)


@dataclass(frozen=True)
class ReferenceRewriteReport:
    """Substitutions applied to one text file."""

    path: Path
    changed: bool
    substitutions: int


@dataclass(frozen=True)
class RewriteFailure:
    """Text file that could not be rewritten."""

    path: Path | None
    error: str


@dataclass(frozen=True)
class RewriteSummary:
    """Aggregate of one reference-rewrite pass."""

    replacement: str
    scanned: int = 0
    reports: tuple[ReferenceRewriteReport, ...] = ()
    failures: tuple[RewriteFailure, ...] = ()

    @property
    def changed(self) -> tuple[ReferenceRewriteReport, ...]:
        return tuple(report for report in self.reports if report.changed)

    @property
    def total_substitutions(self) -> int:
        return sum(report.substitutions for report in self.changed)


@dataclass(frozen=True)
class RemovalSummary:
    """Originals deleted after successful conversion."""

    removed: tuple[Path, ...] = ()
    failures: int = 0


class RunState(enum.Enum):
    """Orchestrator states; every run ends in ``DONE``."""

    INIT = "init"
    LOCATE = "locate"
    EMPTY = "empty"
    EXECUTE = "execute"
    REPORT = "report"
    NO_SUCCESSES = "no_successes"
    POST_PROCESS = "post_process"
    DONE = "done"


@dataclass(frozen=True)
class OptimizationRun:
    """Structured outcome of a whole optimization run."""

    build_dir: Path
    located: int
    outcome: BatchOutcome = BatchOutcome()
    removal: RemovalSummary | None = None
    rewrite: RewriteSummary | None = None
    states: tuple[RunState, ...] = (RunState.INIT,)

    @property
    def state(self) -> RunState:
        return self.states[-1]

    @property
    def nothing_found(self) -> bool:
        return RunState.EMPTY in self.states
