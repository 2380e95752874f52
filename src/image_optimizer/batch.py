"""Bounded-window batch execution of transcode tasks."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import TypeVar

from image_optimizer.application.options import ConversionTask
from image_optimizer.application.ports import ImageCodec
from image_optimizer.application.results import BatchOutcome, ConversionResult
from image_optimizer.errors import OutputCollisionError
from image_optimizer.transcoder import transcode

logger = logging.getLogger(__name__)

T = TypeVar("T")

ResultCallback = Callable[[int, int, ConversionResult], None]


def window(items: Sequence[T], size: int) -> list[Sequence[T]]:
    """Split items into consecutive groups of ``size`` (last may be shorter)."""
    return [items[start : start + size] for start in range(0, len(items), size)]


def find_collisions(tasks: Sequence[ConversionTask]) -> dict[int, Path]:
    """Map task index to the earlier source that already claimed its output."""
    claimed: dict[Path, Path] = {}
    collisions: dict[int, Path] = {}
    for index, task in enumerate(tasks):
        owner = claimed.get(task.output_path)
        if owner is not None:
            collisions[index] = owner
        else:
            claimed[task.output_path] = task.source_path
    return collisions


def run_batch(
    tasks: Sequence[ConversionTask],
    codec: ImageCodec,
    concurrency: int = 4,
    on_result: ResultCallback | None = None,
) -> BatchOutcome:
    """Transcode ``tasks`` at most ``concurrency`` at a time.

    Groups of ``concurrency`` consecutive tasks run in parallel on worker
    threads; the next group starts only after every member of the current
    one has finished. Each task is attempted once and its failure never
    affects siblings. Results keep task order.

    Parameters
    ----------
    tasks : Sequence[ConversionTask]
        Tasks in discovery order.
    codec : ImageCodec
        Codec invoked by every task.
    concurrency : int, default=4
        Maximum number of simultaneous codec invocations.
    on_result : ResultCallback | None, default=None
        Called as ``on_result(done, total, result)`` after each task.

    Returns
    -------
    BatchOutcome
        One result per task, in input order.
    """
    if concurrency < 1:
        raise ValueError("concurrency must be a positive integer")
    total = len(tasks)
    if total == 0:
        return BatchOutcome()

    collisions = find_collisions(tasks)
    results: list[ConversionResult | None] = [None] * total

    def _run(index: int) -> ConversionResult:
        task = tasks[index]
        owner = collisions.get(index)
        if owner is not None:
            return ConversionResult.failed(
                task.source_path,
                task.output_path,
                OutputCollisionError(
                    f"{task.output_path.name} is already produced from {owner.name}"
                ),
            )
        return transcode(task, codec)

    done = 0
    with ThreadPoolExecutor(max_workers=concurrency, thread_name_prefix="transcode") as pool:
        for group in window(range(total), concurrency):
            logger.debug("dispatching tasks %d-%d of %d", group[0] + 1, group[-1] + 1, total)
            for index, result in zip(group, pool.map(_run, group), strict=True):
                results[index] = result
                done += 1
                if on_result is not None:
                    on_result(done, total, result)

    return BatchOutcome(results=tuple(r for r in results if r is not None))
