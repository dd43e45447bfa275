"""
Configuration management for the YOLO detection system.

Provides a layered configuration system with the following precedence
(highest to lowest):

    CLI overrides > Environment variables > YAML config file > Defaults

Design constraints:
    - The system MUST run with zero configuration (safe defaults only).
    - Missing or invalid values fail early and loudly.
    - Thresholds and the label list are passed explicitly to the
      decoding engine; nothing here is process-wide state.

Non-goals:
    - No dynamic reloading.
    - No database-backed or remote configuration.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml

from yolodet.errors import ConfigurationError

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Project root resolution
# ---------------------------------------------------------------------------
# Resolved relative to this file's location: yolodet/config.py → repo root
_PROJECT_ROOT = Path(__file__).resolve().parent.parent


def resolve_path(path: str) -> Path:
    """Resolve a possibly relative path against the project root."""
    resolved = Path(path)
    if not resolved.is_absolute():
        resolved = _PROJECT_ROOT / resolved
    return resolved


# ---------------------------------------------------------------------------
# Configuration dataclasses
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ModelConfig:
    """Model-related configuration.

    Attributes:
        config_path: Darknet .cfg network definition (relative to project root).
        weights_path: Darknet .weights file (relative to project root).
        labels_path: Class label file, one label per line (index = class id).
        backend: Compute backend, 'cpu' or 'cuda'.
        input_size: Spatial dimensions (width, height) for the DNN input blob.
        scale_factor: Pixel value scale factor applied during blob creation.
        swap_rb: Swap the red and blue channels (YOLO expects RGB input).
    """

    config_path: str = "models/yolov4.cfg"
    weights_path: str = "models/yolov4.weights"
    labels_path: str = "models/coco.names"
    backend: str = "cpu"
    input_size: Tuple[int, int] = (416, 416)
    scale_factor: float = 1.0 / 255
    swap_rb: bool = True


@dataclass(frozen=True)
class DetectionConfig:
    """Detection thresholds.

    Attributes:
        confidence_threshold: A row is kept only if its best class score is
            strictly greater than this value.
        overlap_threshold: A candidate is suppressed when its intersection
            with an accepted box exceeds this fraction of its own area.
        score_offset: Index of the first class-score column in each output
            row. Darknet layers carry objectness in column 4, so class
            scores start at column 5.
    """

    confidence_threshold: float = 0.5
    overlap_threshold: float = 0.4
    score_offset: int = 5


@dataclass(frozen=True)
class InputConfig:
    """Input source configuration.

    Attributes:
        source: Input source: file path, directory path, video path,
                or integer device index (as string or int).
    """

    source: str = "0"


@dataclass(frozen=True)
class OutputConfig:
    """Output behavior configuration.

    Attributes:
        mode: Output mode(s). Supports multiple comma-separated values:
              'report', 'save_image', 'save_json', 'save_csv'.
              Example: "report,save_json"
        save_path: Directory where output artifacts are written.
    """

    mode: str = "report"
    save_path: str = "output/"


@dataclass(frozen=True)
class VisualizationConfig:
    """Visualization rendering parameters.

    Attributes:
        box_color: BGR color of the bounding box outline.
        label_color: BGR color of the filled label background.
        text_color: BGR color of the label text.
        thickness: Box outline thickness in pixels.
        font_scale: Label font scale.
        show_labels: Whether to render the class name above each box.
    """

    box_color: Tuple[int, int, int] = (0, 255, 0)
    label_color: Tuple[int, int, int] = (127, 0, 0)
    text_color: Tuple[int, int, int] = (255, 255, 255)
    thickness: int = 1
    font_scale: float = 0.6
    show_labels: bool = True


@dataclass(frozen=True)
class AppConfig:
    """Top-level application configuration.

    Aggregates all sub-configurations into a single, frozen object.
    """

    model: ModelConfig = field(default_factory=ModelConfig)
    detection: DetectionConfig = field(default_factory=DetectionConfig)
    input: InputConfig = field(default_factory=InputConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    visualization: VisualizationConfig = field(default_factory=VisualizationConfig)


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

_VALID_BACKENDS = {"cpu", "cuda"}
VALID_OUTPUT_MODES = {"report", "save_image", "save_json", "save_csv"}


def validate_confidence_threshold(value: float) -> None:
    """Raise ConfigurationError unless value is in [0.0, 1.0)."""
    if not (0.0 <= value < 1.0):
        raise ConfigurationError(
            f"detection.confidence_threshold must be in [0.0, 1.0), got {value}."
        )


def validate_overlap_threshold(value: float) -> None:
    """Raise ConfigurationError unless value is in [0.0, 1.0]."""
    if not (0.0 <= value <= 1.0):
        raise ConfigurationError(
            f"detection.overlap_threshold must be in [0.0, 1.0], got {value}."
        )


def parse_output_modes(mode: str) -> set:
    """Split a comma-separated mode string into a set of mode names."""
    return {m.strip() for m in mode.split(",") if m.strip()}


def _validate(config: AppConfig) -> None:
    """Validate configuration values. Raises ConfigurationError on invalid state."""

    if config.model.backend not in _VALID_BACKENDS:
        raise ConfigurationError(
            f"Invalid model.backend: '{config.model.backend}'. "
            f"Must be one of {_VALID_BACKENDS}."
        )

    modes = parse_output_modes(config.output.mode)
    invalid_modes = modes - VALID_OUTPUT_MODES
    if invalid_modes:
        raise ConfigurationError(
            f"Invalid output.mode(s): {invalid_modes}. "
            f"Valid modes: {VALID_OUTPUT_MODES}. "
            f"Use comma-separated values for multiple outputs."
        )

    validate_confidence_threshold(config.detection.confidence_threshold)
    validate_overlap_threshold(config.detection.overlap_threshold)

    if config.detection.score_offset < 4:
        raise ConfigurationError(
            f"detection.score_offset must be at least 4 (after the box columns), "
            f"got {config.detection.score_offset}."
        )

    if len(config.model.input_size) != 2:
        raise ConfigurationError(
            f"model.input_size must be a (width, height) tuple, "
            f"got {config.model.input_size}."
        )

    if any(d <= 0 for d in config.model.input_size):
        raise ConfigurationError(
            f"model.input_size dimensions must be positive, "
            f"got {config.model.input_size}."
        )

    if config.model.scale_factor <= 0:
        raise ConfigurationError(
            f"model.scale_factor must be positive, "
            f"got {config.model.scale_factor}."
        )

    if config.visualization.thickness <= 0:
        raise ConfigurationError(
            f"visualization.thickness must be positive, "
            f"got {config.visualization.thickness}."
        )


# ---------------------------------------------------------------------------
# YAML loading
# ---------------------------------------------------------------------------

def _parse_tuple(value, expected_len: int, cast_type=float):
    """Convert a list from YAML into a tuple of the expected type and length."""
    if isinstance(value, (list, tuple)):
        if len(value) != expected_len:
            raise ConfigurationError(
                f"Expected {expected_len} values, got {len(value)}: {value}"
            )
        return tuple(cast_type(v) for v in value)
    return value


def _parse_bool(value) -> bool:
    """Accept real booleans from YAML and 'true'/'false' strings from the environment."""
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


def _build_model_config(raw: dict) -> ModelConfig:
    """Build ModelConfig from a raw YAML dict."""
    kwargs = {}
    for key in ("config_path", "weights_path", "labels_path"):
        if key in raw:
            kwargs[key] = str(raw[key])
    if "backend" in raw:
        kwargs["backend"] = str(raw["backend"]).lower()
    if "input_size" in raw:
        kwargs["input_size"] = _parse_tuple(raw["input_size"], 2, int)
    if "scale_factor" in raw:
        kwargs["scale_factor"] = float(raw["scale_factor"])
    if "swap_rb" in raw:
        kwargs["swap_rb"] = _parse_bool(raw["swap_rb"])
    return ModelConfig(**kwargs)


def _build_detection_config(raw: dict) -> DetectionConfig:
    """Build DetectionConfig from a raw YAML dict."""
    kwargs = {}
    if "confidence_threshold" in raw:
        kwargs["confidence_threshold"] = float(raw["confidence_threshold"])
    if "overlap_threshold" in raw:
        kwargs["overlap_threshold"] = float(raw["overlap_threshold"])
    if "score_offset" in raw:
        kwargs["score_offset"] = int(raw["score_offset"])
    return DetectionConfig(**kwargs)


def _build_input_config(raw: dict) -> InputConfig:
    """Build InputConfig from a raw YAML dict."""
    if "source" in raw:
        return InputConfig(source=str(raw["source"]))
    return InputConfig()


def _build_output_config(raw: dict) -> OutputConfig:
    """Build OutputConfig from a raw YAML dict."""
    kwargs = {}
    if "mode" in raw:
        kwargs["mode"] = str(raw["mode"]).lower()
    if "save_path" in raw:
        kwargs["save_path"] = str(raw["save_path"])
    return OutputConfig(**kwargs)


def _build_visualization_config(raw: dict) -> VisualizationConfig:
    """Build VisualizationConfig from a raw YAML dict."""
    kwargs = {}
    for key in ("box_color", "label_color", "text_color"):
        if key in raw:
            kwargs[key] = _parse_tuple(raw[key], 3, int)
    if "thickness" in raw:
        kwargs["thickness"] = int(raw["thickness"])
    if "font_scale" in raw:
        kwargs["font_scale"] = float(raw["font_scale"])
    if "show_labels" in raw:
        kwargs["show_labels"] = _parse_bool(raw["show_labels"])
    return VisualizationConfig(**kwargs)


# ---------------------------------------------------------------------------
# Environment variable overrides
# ---------------------------------------------------------------------------

_ENV_PREFIX = "YOLO_DETECT_"


def _apply_env_overrides(raw: dict) -> dict:
    """Apply environment variable overrides to the raw config dict.

    Environment variables follow the pattern:
        YOLO_DETECT_MODEL_BACKEND=cuda
        YOLO_DETECT_DETECTION_OVERLAP_THRESHOLD=0.3
    """
    env_map = {
        f"{_ENV_PREFIX}MODEL_BACKEND": ("model", "backend"),
        f"{_ENV_PREFIX}MODEL_CONFIG_PATH": ("model", "config_path"),
        f"{_ENV_PREFIX}MODEL_WEIGHTS_PATH": ("model", "weights_path"),
        f"{_ENV_PREFIX}MODEL_LABELS_PATH": ("model", "labels_path"),
        f"{_ENV_PREFIX}DETECTION_CONFIDENCE_THRESHOLD": ("detection", "confidence_threshold"),
        f"{_ENV_PREFIX}DETECTION_OVERLAP_THRESHOLD": ("detection", "overlap_threshold"),
        f"{_ENV_PREFIX}DETECTION_SCORE_OFFSET": ("detection", "score_offset"),
        f"{_ENV_PREFIX}INPUT_SOURCE": ("input", "source"),
        f"{_ENV_PREFIX}OUTPUT_MODE": ("output", "mode"),
        f"{_ENV_PREFIX}OUTPUT_SAVE_PATH": ("output", "save_path"),
    }

    for env_var, (section, key) in env_map.items():
        value = os.environ.get(env_var)
        if value is not None:
            raw.setdefault(section, {})[key] = value
            logger.debug("Config override from env: %s=%s", env_var, value)

    return raw


def _apply_overrides(raw: dict, overrides: Dict[str, Dict[str, Any]]) -> dict:
    """Merge explicit (CLI) overrides into the raw config dict. None values are ignored."""
    for section, values in overrides.items():
        for key, value in values.items():
            if value is not None:
                raw.setdefault(section, {})[key] = value
                logger.debug("Config override from CLI: %s.%s=%s", section, key, value)
    return raw


# ---------------------------------------------------------------------------
# Public loader
# ---------------------------------------------------------------------------

def load_config(
    config_path: Optional[str] = None,
    overrides: Optional[Dict[str, Dict[str, Any]]] = None,
) -> AppConfig:
    """Load and validate application configuration.

    Precedence (highest → lowest):
        overrides > Environment variables > YAML file > Hard-coded defaults

    Args:
        config_path: Path to a YAML configuration file. If None,
                     the system runs entirely on defaults (safe for
                     programmatic usage).
        overrides: Nested mapping ``{section: {key: value}}``, typically
                   built from CLI arguments. ``None`` values are skipped.

    Returns:
        A validated, frozen AppConfig instance.

    Raises:
        FileNotFoundError: If config_path is provided but does not exist.
        ConfigurationError: If any configuration value is invalid.
        yaml.YAMLError: If the YAML file is malformed.
    """
    raw: dict = {}

    # --- Layer 1: YAML file ---
    if config_path is not None:
        resolved = resolve_path(config_path)

        if not resolved.is_file():
            raise FileNotFoundError(
                f"Configuration file not found: {resolved}. "
                f"Provide a valid path or omit to use defaults."
            )

        logger.info("Loading config from: %s", resolved)
        with open(resolved, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}

    # --- Layer 2: Environment variable overrides ---
    raw = _apply_env_overrides(raw)

    # --- Layer 3: Explicit overrides ---
    if overrides:
        raw = _apply_overrides(raw, overrides)

    # --- Build typed configs ---
    try:
        config = AppConfig(
            model=_build_model_config(raw.get("model") or {}),
            detection=_build_detection_config(raw.get("detection") or {}),
            input=_build_input_config(raw.get("input") or {}),
            output=_build_output_config(raw.get("output") or {}),
            visualization=_build_visualization_config(raw.get("visualization") or {}),
        )
    except ConfigurationError:
        raise
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Malformed configuration value: {e}") from e

    # --- Validate ---
    _validate(config)

    logger.debug("Configuration loaded: %s", config)
    return config
