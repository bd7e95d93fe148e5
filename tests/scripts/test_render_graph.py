"""Tests for the graph render command line utility."""

from __future__ import annotations

from pathlib import Path

import pytest
from PIL import Image

from backend.app.config import load_config
from backend.app.graph import Theme
from scripts import render_graph

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


@pytest.fixture(autouse=True)
def _isolated_config(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("RADIANT_ENV_FILE", str(tmp_path / "missing.env"))
    monkeypatch.delenv("RADIANT_DEFAULT_THEME", raising=False)
    monkeypatch.delenv("RADIANT_ALLOWED_ORIGINS", raising=False)
    load_config.cache_clear()
    yield
    load_config.cache_clear()


def test_render_graph_writes_png(tmp_path: Path) -> None:
    output = tmp_path / "frames" / "graph.png"
    path = render_graph.render_graph("transformers", output, ticks=50, theme=Theme.DARK)
    assert path == output
    assert output.read_bytes().startswith(PNG_SIGNATURE)
    with Image.open(output) as image:
        assert image.size == (1200, 600)
        assert image.getpixel((0, 0))[:3] == (10, 10, 10)


def test_main_reports_success(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    output = tmp_path / "graph.png"
    exit_code = render_graph.main(["nlp", "--output", str(output), "--ticks", "5", "--zoom", "1.5"])
    assert exit_code == 0
    assert output.exists()
    assert "Graph rendered" in capsys.readouterr().out


def test_main_rejects_blank_query(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = render_graph.main(["  ", "--output", str(tmp_path / "graph.png")])
    assert exit_code == 1
    assert "Graph rendering failed" in capsys.readouterr().err
    assert not (tmp_path / "graph.png").exists()


def test_main_reports_missing_config(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = render_graph.main(["nlp", "--config", str(tmp_path / "absent.yaml")])
    assert exit_code == 1
    assert "Graph rendering failed" in capsys.readouterr().err


@pytest.mark.parametrize("zoom", ["0", "-2"])
def test_main_rejects_non_positive_zoom(
    zoom: str, tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    output = tmp_path / "graph.png"
    exit_code = render_graph.main(["ai", "--output", str(output), "--ticks", "1", "--zoom", zoom])
    assert exit_code == 1
    assert "Zoom must be greater than zero" in capsys.readouterr().err
    assert not output.exists()
