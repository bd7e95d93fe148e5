from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from backend.app.config import AppConfig, ConfigError, load_config


def _write_config(tmp_path: Path, **overrides: object) -> Path:
    raw = yaml.safe_load(AppConfig.default_path().read_text(encoding="utf-8"))
    for dotted, value in overrides.items():
        section, key = dotted.split("__", 1)
        raw[section][key] = value
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump(raw), encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch):
    monkeypatch.setenv("RADIANT_ENV_FILE", str(Path("/nonexistent/radiant.env")))
    monkeypatch.delenv("RADIANT_DEFAULT_THEME", raising=False)
    monkeypatch.delenv("RADIANT_ALLOWED_ORIGINS", raising=False)
    load_config.cache_clear()
    yield
    load_config.cache_clear()


def test_config_loads_expected_structure() -> None:
    config = load_config()
    assert isinstance(config, AppConfig)
    assert config.pipeline.version == "1.0.0"
    assert config.simulation.width == 1200
    assert config.simulation.height == 600
    assert config.simulation.centre == (600.0, 300.0)
    assert config.simulation.initial_radius == 200
    assert config.simulation.repulsion == 50000
    assert config.simulation.spring_stiffness == 0.01
    assert config.simulation.centering == 0.001
    assert config.simulation.damping == 0.8
    assert config.render.node_radius == 25
    assert config.render.redraw_interval_seconds == 0.05
    assert config.render.node_colors == {
        "paper": "#4A90E2",
        "author": "#50C878",
        "institution": "#E27A4A",
        "code": "#F39C12",
    }
    assert config.interaction.hit_radius == 25
    assert config.interaction.zoom_step == 1.2
    assert config.interaction.min_zoom == 0.3
    assert config.interaction.max_zoom == 3.0
    assert config.ui.default_theme == "light"


def test_config_matches_yaml_values() -> None:
    raw = yaml.safe_load(AppConfig.default_path().read_text(encoding="utf-8"))
    config = load_config()
    assert raw["simulation"]["tick_interval_seconds"] == config.simulation.tick_interval_seconds
    assert raw["render"]["arrow_offset"] == config.render.arrow_offset
    assert raw["ui"]["allowed_origins"] == config.ui.allowed_origins


def test_missing_config_file_raises(tmp_path: Path) -> None:
    with pytest.raises(ConfigError):
        load_config(tmp_path / "missing.yaml")


def test_invalid_yaml_raises(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("simulation: [unclosed", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(path)


def test_damping_must_be_below_one(tmp_path: Path) -> None:
    path = _write_config(tmp_path, simulation__damping=1.0)
    with pytest.raises(ConfigError):
        load_config(path)


def test_node_colors_must_cover_every_kind(tmp_path: Path) -> None:
    path = _write_config(tmp_path, render__node_colors={"paper": "#4A90E2"})
    with pytest.raises(ConfigError):
        load_config(path)


def test_zoom_bounds_are_validated(tmp_path: Path) -> None:
    path = _write_config(tmp_path, interaction__min_zoom=2.0)
    with pytest.raises(ConfigError):
        load_config(path)


def test_theme_override_from_env(monkeypatch) -> None:
    monkeypatch.setenv("RADIANT_DEFAULT_THEME", "Dark")
    config = load_config()
    assert config.ui.default_theme == "dark"


def test_allowed_origins_override_from_env(monkeypatch) -> None:
    monkeypatch.setenv(
        "RADIANT_ALLOWED_ORIGINS",
        "https://radiant.example.org, https://beta.radiant.example.org https://radiant.example.org",
    )
    config = load_config()
    assert config.ui.allowed_origins == [
        "https://radiant.example.org",
        "https://beta.radiant.example.org",
    ]


def test_theme_loaded_from_env_file(monkeypatch, tmp_path: Path) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text(
        "# Sample .env file\nexport RADIANT_DEFAULT_THEME='dark'  \n",
        encoding="utf-8",
    )
    monkeypatch.setenv("RADIANT_ENV_FILE", str(env_file))
    monkeypatch.setenv("RADIANT_DEFAULT_THEME", "")
    config = load_config()
    assert config.ui.default_theme == "dark"
