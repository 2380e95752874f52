"""Shared pytest fixtures and suite marker assignment."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from pathlib import Path

import pytest

from image_optimizer.application.options import FormatOptions


def pytest_collection_modifyitems(
    config: pytest.Config, items: list[pytest.Item]
) -> None:
    """Mark each test by the suite directory it lives in."""
    del config
    markers = {
        "e2e_tests": pytest.mark.e2e,
        "integration_tests": pytest.mark.integration,
        "unit_tests": pytest.mark.unit,
    }
    for item in items:
        parts = set(item.path.parts)
        for directory, marker in markers.items():
            if directory in parts:
                item.add_marker(marker)
                break


class FakeCodec:
    """Codec returning a fixed-size payload, failing for selected file names."""

    def __init__(self, payload_size: int = 10, fail_for: Iterable[str] = ()) -> None:
        self.payload_size = payload_size
        self.fail_for = set(fail_for)
        self.calls: list[Path] = []

    def encode(self, source_path: Path, options: FormatOptions) -> bytes:
        del options
        self.calls.append(source_path)
        if source_path.name in self.fail_for:
            raise RuntimeError("corrupt image")
        return b"x" * self.payload_size


@pytest.fixture
def fake_codec() -> FakeCodec:
    return FakeCodec()


@pytest.fixture
def codec_factory() -> type[FakeCodec]:
    """Expose the fake codec class for tests needing custom behavior."""
    return FakeCodec


@pytest.fixture
def make_file(tmp_path: Path) -> Callable[[str, int], Path]:
    """Create ``tmp_path/<relative>`` holding ``size`` bytes."""

    def _make(relative: str, size: int = 100) -> Path:
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(b"\0" * size)
        return path

    return _make
