"""Configuration loader for the bias network visualization."""
from __future__ import annotations

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional

from typing_extensions import Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

LOGGER = logging.getLogger(__name__)

REPO_ROOT = Path(__file__).resolve().parents[1]
CONFIG_PATH_ENV_VAR = "BIASNET_CONFIG_PATH"
DATA_PATH_ENV_VAR = "BIASNET_DATA_PATH"


class ConfigError(RuntimeError):
    """Raised when configuration cannot be loaded."""


class _FrozenModel(BaseModel):
    """Base model enforcing immutability for config sections."""

    model_config = ConfigDict(frozen=True)


class ClassifierConfig(_FrozenModel):
    """Category inference settings."""

    placeholder_categories: List[str] = Field(default_factory=lambda: ["cognitive bias"])

    @field_validator("placeholder_categories")
    @classmethod
    def _normalise_placeholders(cls, values: List[str]) -> List[str]:
        """Lowercase and strip placeholder terms, dropping blanks."""

        return [value.strip().lower() for value in values if value and value.strip()]


class LayoutConfig(_FrozenModel):
    """Force-directed layout parameters."""

    name: Literal["cose"] = "cose"
    fit: bool = True
    padding: float = Field(30.0, ge=0.0)
    node_repulsion: float = Field(8000.0, gt=0.0)
    node_overlap: float = Field(8.0, ge=0.0)
    ideal_edge_length: float = Field(80.0, gt=0.0)
    gravity: float = Field(0.25, ge=0.0)
    iterations: int = Field(300, ge=1)
    seed: int = 7


class CameraConfig(_FrozenModel):
    """Camera focus animation bounds."""

    min_zoom: float = Field(0.8, gt=0.0)
    max_zoom: float = Field(1.2, gt=0.0)
    duration_ms: int = Field(450, ge=0, le=5000)
    easing: Literal["linear", "ease-in", "ease-out", "ease-in-out"] = "ease-in-out"
    surface_min_zoom: float = Field(0.1, gt=0.0)
    surface_max_zoom: float = Field(4.0, gt=0.0)

    @model_validator(mode="after")
    def _validate_bounds(self) -> "CameraConfig":
        if self.min_zoom > self.max_zoom:
            raise ValueError("camera.min_zoom cannot exceed camera.max_zoom")
        if self.surface_min_zoom > self.surface_max_zoom:
            raise ValueError("camera.surface_min_zoom cannot exceed camera.surface_max_zoom")
        return self


class StyleConfig(_FrozenModel):
    """Visual styling values keyed by interaction state."""

    transition_ms: int = Field(250, ge=0)
    transition_easing: str = Field("ease-in-out", min_length=1)
    node_size: float = Field(26.0, gt=0.0)
    hovered_size: float = Field(34.0, gt=0.0)
    selected_size: float = Field(38.0, gt=0.0)
    border_width: float = Field(2.0, ge=0.0)
    active_border_width: float = Field(3.0, ge=0.0)
    border_color: str = Field("#ffffff", min_length=1)
    label_color: str = Field("#1f2937", min_length=1)
    font_size_px: int = Field(10, ge=1)
    neighbor_opacity: float = Field(0.9, ge=0.0, le=1.0)
    dimmed_node_opacity: float = Field(0.25, ge=0.0, le=1.0)
    edge_color: str = Field("#94a3b8", min_length=1)
    edge_width: float = Field(2.0, gt=0.0)
    edge_opacity: float = Field(0.35, ge=0.0, le=1.0)
    edge_highlight_color: str = Field("#0ea5e9", min_length=1)
    edge_highlight_width: float = Field(3.0, gt=0.0)
    edge_highlight_opacity: float = Field(0.9, ge=0.0, le=1.0)
    dimmed_edge_opacity: float = Field(0.1, ge=0.0, le=1.0)


class TooltipConfig(_FrozenModel):
    """Hover tooltip presentation settings."""

    placement: Literal["top", "bottom", "left", "right"] = "top"
    theme: str = Field("light-border", min_length=1)


class ViewportConfig(_FrozenModel):
    """Default canvas dimensions in CSS pixels."""

    width: int = Field(960, ge=1)
    height: int = Field(640, ge=1)


class DatasetConfig(_FrozenModel):
    """Location of the bias data set."""

    path: str = Field("data/biases.json", min_length=1)


class ExportConfig(_FrozenModel):
    """Standalone HTML viewer settings."""

    visualization_limit: int = Field(200, ge=1)
    title: str = Field("Cognitive Bias Network", min_length=1)


class AppConfig(_FrozenModel):
    """Top-level configuration composed from config.yaml."""

    classifier: ClassifierConfig = Field(default_factory=ClassifierConfig)
    layout: LayoutConfig = Field(default_factory=LayoutConfig)
    camera: CameraConfig = Field(default_factory=CameraConfig)
    style: StyleConfig = Field(default_factory=StyleConfig)
    tooltip: TooltipConfig = Field(default_factory=TooltipConfig)
    viewport: ViewportConfig = Field(default_factory=ViewportConfig)
    dataset: DatasetConfig = Field(default_factory=DatasetConfig)
    export: ExportConfig = Field(default_factory=ExportConfig)

    @staticmethod
    def default_path() -> Path:
        """Return the default configuration path.

        Returns:
            Path: Absolute path to config.yaml at the repository root, unless
            ``BIASNET_CONFIG_PATH`` points elsewhere.
        """

        override = os.getenv(CONFIG_PATH_ENV_VAR)
        if override:
            return Path(override).expanduser()
        return REPO_ROOT / "config.yaml"

    def resolve_dataset_path(self) -> Path:
        """Return the dataset path, resolving relative paths against the repository root."""

        candidate = Path(self.dataset.path).expanduser()
        if candidate.is_absolute():
            return candidate
        return REPO_ROOT / candidate


def _apply_environment_overrides(raw_content: Dict[str, Any]) -> Dict[str, Any]:
    """Apply supported environment overrides to the raw configuration.

    Args:
        raw_content: Parsed YAML configuration prior to Pydantic validation.

    Returns:
        Dict[str, Any]: Configuration mapping with environment overrides applied.
    """

    data_path = os.getenv(DATA_PATH_ENV_VAR)
    if data_path and data_path.strip():
        dataset_section = raw_content.setdefault("dataset", {})
        if not isinstance(dataset_section, dict):
            raise ConfigError("dataset section must be a mapping")
        dataset_section["path"] = data_path.strip()
        LOGGER.info("Dataset path overridden from environment: %s", data_path.strip())
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
    if data is None:
        return {}
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
