"""Configuration loader for the Radiant graph viewer backend."""
from __future__ import annotations

import logging
import os
import re
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional

from typing_extensions import Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from backend.app.contracts import NodeKind

LOGGER = logging.getLogger(__name__)

REPO_ROOT = Path(__file__).resolve().parents[2]
DEFAULT_ENV_FILE = REPO_ROOT / ".env"

THEME_ENV_VAR = "RADIANT_DEFAULT_THEME"
ALLOWED_ORIGINS_ENV_VAR = "RADIANT_ALLOWED_ORIGINS"


class ConfigError(RuntimeError):
    """Raised when configuration cannot be loaded."""


class _FrozenModel(BaseModel):
    """Base model enforcing immutability for config sections."""

    model_config = ConfigDict(frozen=True)


class PipelineConfig(_FrozenModel):
    """Release metadata surfaced by the health probe."""

    version: str = Field(..., min_length=1)


class SimulationConfig(_FrozenModel):
    """Force simulation constants and canvas geometry."""

    width: int = Field(..., ge=1)
    height: int = Field(..., ge=1)
    initial_radius: float = Field(..., ge=0.0)
    repulsion: float = Field(..., ge=0.0)
    spring_stiffness: float = Field(..., ge=0.0)
    centering: float = Field(..., ge=0.0)
    damping: float = Field(..., gt=0.0, lt=1.0)
    tick_interval_seconds: float = Field(..., gt=0)

    @property
    def centre(self) -> tuple[float, float]:
        """Return the canvas centre in graph coordinates."""

        return self.width / 2.0, self.height / 2.0


class RenderConfig(_FrozenModel):
    """Visual encoding used by the render pass."""

    node_radius: float = Field(..., gt=0)
    hover_scale: float = Field(..., ge=1.0)
    halo_scale: float = Field(..., ge=1.0)
    halo_alpha: float = Field(..., ge=0.0, le=1.0)
    outline_width: float = Field(..., ge=0.0)
    edge_width: float = Field(..., gt=0)
    arrow_length: float = Field(..., ge=0.0)
    arrow_offset: float = Field(..., ge=0.0)
    label_font_size: int = Field(..., ge=1)
    label_gap: float = Field(..., ge=0.0)
    label_padding: float = Field(..., ge=0.0)
    redraw_interval_seconds: float = Field(..., gt=0)
    node_colors: Dict[str, str] = Field(default_factory=dict)

    @field_validator("node_colors")
    @classmethod
    def _validate_node_colors(cls, values: Dict[str, str]) -> Dict[str, str]:
        """Ensure every node kind has a colour assigned."""

        normalized = {str(key).strip().lower(): str(value).strip() for key, value in values.items()}
        missing = [kind.value for kind in NodeKind if kind.value not in normalized]
        if missing:
            msg = "render.node_colors is missing colours for: %s" % ", ".join(missing)
            raise ValueError(msg)
        return normalized

    def color_for(self, kind: NodeKind) -> str:
        """Return the fill colour configured for ``kind``."""

        return self.node_colors[kind.value]


class InteractionConfig(_FrozenModel):
    """Pointer hit testing and zoom limits."""

    hit_radius: float = Field(..., gt=0)
    zoom_step: float = Field(..., gt=1.0)
    min_zoom: float = Field(..., gt=0)
    max_zoom: float = Field(..., gt=0)

    @model_validator(mode="after")
    def _validate_zoom_bounds(self) -> "InteractionConfig":
        if self.min_zoom >= self.max_zoom:
            msg = "interaction.min_zoom must be smaller than interaction.max_zoom"
            raise ValueError(msg)
        if not self.min_zoom <= 1.0 <= self.max_zoom:
            msg = "interaction zoom bounds must include the identity zoom of 1.0"
            raise ValueError(msg)
        return self


class UIConfig(_FrozenModel):
    """UI-specific configuration values."""

    default_theme: Literal["light", "dark"] = Field("light")
    allowed_origins: List[str] = Field(default_factory=list)

    @field_validator("default_theme", mode="before")
    @classmethod
    def _normalize_theme(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().lower()
        return value


class AppConfig(_FrozenModel):
    """Top-level application configuration composed from config.yaml."""

    pipeline: PipelineConfig
    simulation: SimulationConfig
    render: RenderConfig
    interaction: InteractionConfig
    ui: UIConfig

    @staticmethod
    def default_path() -> Path:
        """Return the default location of the configuration file.

        Returns:
            Path: Absolute path to config.yaml at the repository root.
        """
        return Path(__file__).resolve().parents[2] / "config.yaml"


def _determine_env_file_path() -> Optional[Path]:
    """Return the path to the environment file if one should be loaded."""

    override = os.getenv("RADIANT_ENV_FILE")
    if override:
        candidate = Path(override).expanduser()
        if candidate.exists():
            return candidate
        LOGGER.warning("Configured environment file override does not exist: %s", candidate)
        return None
    if DEFAULT_ENV_FILE.exists():
        return DEFAULT_ENV_FILE
    return None


def _strip_inline_comment(value: str) -> str:
    """Remove inline comments from an environment value when unquoted."""

    comment_index = value.find("#")
    if comment_index == -1:
        return value
    return value[:comment_index].rstrip()


def _load_env_file(path: Path) -> None:
    """Populate ``os.environ`` with values read from a ``.env`` file."""

    try:
        with path.open("r", encoding="utf-8") as handle:
            for raw_line in handle:
                line = raw_line.strip()
                if not line or line.startswith("#"):
                    continue
                if line.lower().startswith("export "):
                    line = line[7:].lstrip()
                if "=" not in line:
                    continue
                key, raw_value = line.split("=", 1)
                key = key.strip()
                if not key:
                    continue
                existing_value = os.environ.get(key)
                if existing_value is not None and existing_value.strip() != "":
                    continue
                value = raw_value.strip()
                if not value:
                    os.environ[key] = ""
                    continue
                if value[0] in {'"', "'"} and value[-1] == value[0]:
                    os.environ[key] = value[1:-1]
                    continue
                os.environ[key] = _strip_inline_comment(value)
    except OSError:
        LOGGER.warning("Unable to read environment file at %s", path)


def _parse_origins(value: str) -> List[str]:
    """Parse an environment variable value into unique CORS origins.

    Args:
        value: Raw string read from an environment variable.

    Returns:
        List[str]: Ordered, de-duplicated list of origins.
    """

    candidates = [item.strip() for item in re.split(r"[,\s]+", value) if item and item.strip()]
    unique: List[str] = []
    for candidate in candidates:
        if candidate not in unique:
            unique.append(candidate)
    return unique


def _apply_environment_overrides(raw_content: Dict[str, Any]) -> Dict[str, Any]:
    """Merge environment-based overrides into the raw configuration mapping.

    Args:
        raw_content: Parsed YAML configuration prior to Pydantic validation.

    Returns:
        Dict[str, Any]: Configuration mapping with environment overrides applied.
    """

    env_file_path = _determine_env_file_path()
    if env_file_path is not None:
        _load_env_file(env_file_path)

    theme = os.getenv(THEME_ENV_VAR)
    if theme and theme.strip():
        ui_section = raw_content.setdefault("ui", {})
        ui_section["default_theme"] = theme.strip()
        LOGGER.info("UI default theme overridden from environment (%s)", theme.strip())

    raw_origins = os.getenv(ALLOWED_ORIGINS_ENV_VAR)
    if raw_origins:
        origins = _parse_origins(raw_origins)
        if origins:
            ui_section = raw_content.setdefault("ui", {})
            ui_section["allowed_origins"] = origins
            LOGGER.info("UI allowed origins overridden from environment (count=%d)", len(origins))
    return raw_content


def _read_yaml(path: Path) -> Dict[str, Any]:
    """Read YAML content from disk.

    Args:
        path: Location of the YAML file.

    Returns:
        Dict[str, Any]: Parsed YAML content.

    Raises:
        ConfigError: If the file cannot be read or parsed.
    """
    try:
        with path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle)
    except FileNotFoundError as exc:
        LOGGER.error("Configuration file missing at %s", path)
        raise ConfigError("Configuration file not found") from exc
    except yaml.YAMLError as exc:
        LOGGER.error("Invalid YAML syntax in %s", path)
        raise ConfigError("Invalid YAML syntax") from exc
    if not isinstance(data, dict):
        LOGGER.error("Configuration root must be a mapping: %s", path)
        raise ConfigError("Configuration root must be a mapping")
    return data


@lru_cache(maxsize=1)
def load_config(path: Optional[Path] = None) -> AppConfig:
    """Load application configuration from YAML.

    Args:
        path: Optional override path to the YAML file.

    Returns:
        AppConfig: Parsed configuration object.

    Raises:
        ConfigError: If the configuration cannot be loaded or validated.
    """
    config_path = path or AppConfig.default_path()
    raw_content = _read_yaml(config_path)
    raw_content = _apply_environment_overrides(raw_content)
    try:
        return AppConfig(**raw_content)
    except ValidationError as exc:
        LOGGER.error("Invalid configuration values: %s", exc)
        raise ConfigError("Configuration validation failed") from exc
