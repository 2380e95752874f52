"""Integration tests for CLI commands backed by Pillow."""

from __future__ import annotations

from pathlib import Path

import pytest
from PIL import Image
from typer.testing import CliRunner

from image_optimizer.adapters.codecs import supported_formats
from image_optimizer.cli import cli as cli_module

runner = CliRunner()


def test_doctor_command_reports_encoders() -> None:
    result = runner.invoke(cli_module.app, ["doctor"])

    assert result.exit_code == 0
    assert "Python:" in result.output
    assert "pillow:" in result.output
    assert "encoder webp:" in result.output
    assert "encoder avif:" in result.output


@pytest.mark.skipif(not supported_formats()["webp"], reason="Pillow built without WebP")
def test_run_converts_real_images(tmp_path: Path) -> None:
    dist = tmp_path / "dist"
    dist.mkdir()
    Image.new("RGB", (32, 32), (250, 250, 250)).save(dist / "hero.jpg", format="JPEG")
    (dist / "app.css").write_text(".hero{background:url(hero.jpg)}", encoding="utf-8")

    result = runner.invoke(
        cli_module.app,
        ["run", str(dist), "--quality", "60", "--effort", "6", "--no-color"],
    )

    assert result.exit_code == 0, result.output
    assert "hero.jpg" in result.output
    assert "Converted: 1, failed: 0" in result.output
    assert (dist / "hero.webp").exists()
    assert not (dist / "hero.jpg").exists()
    assert (dist / "app.css").read_text(encoding="utf-8") == (
        ".hero{background:url(hero.webp)}"
    )
