"""
Configuration management for the Bookmap watcher.

Provides a layered configuration system with the following precedence
(highest to lowest):

    CLI arguments > Environment variables > YAML config file > Defaults

Design constraints:
    - The watcher MUST run with zero configuration (safe defaults only).
    - Missing or invalid values fail early and loudly.
    - The resulting AppConfig is frozen and passed explicitly to every
      component; nothing reads configuration from module globals.

Non-goals:
    - No runtime reconfiguration or reloading.
    - No adaptive or self-tuning thresholds.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Configuration dataclasses
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class DetectionConfig:
    """Detection thresholds and poll timing.

    Attributes:
        poll_interval_s: Seconds to sleep between two detection cycles.
        red_min_r: Minimum red channel for a line-colored pixel.
        red_max_g: Maximum green channel for a line-colored pixel. Kept
                   loose on purpose so orange/yellow lines also match.
        red_max_b: Maximum blue channel for a line-colored pixel.
        min_red_pixels_per_row: Line-colored pixels a row needs to count
                                as a line. Depends on screen size.
        max_distance_bubble_to_line: Rows above/below the line searched
                                     for the marker.
        bubble_bright_threshold: r+g+b at or above which a pixel is bright.
        bubble_min_bright_pixels: Bright pixels needed to confirm a marker.
        roi_margin_percent: Fraction of width/height cut from every side.
        marker_search_fraction: Rightmost fraction of the ROI width
                                searched for the marker.
    """

    poll_interval_s: float = 10.0
    red_min_r: int = 180
    red_max_g: int = 120
    red_max_b: int = 120
    min_red_pixels_per_row: int = 500
    max_distance_bubble_to_line: int = 10
    bubble_bright_threshold: int = 600
    bubble_min_bright_pixels: int = 150
    roi_margin_percent: float = 0.10
    marker_search_fraction: float = 0.2


@dataclass(frozen=True)
class CaptureConfig:
    """Frame source configuration.

    Attributes:
        source: 'screen' to grab a monitor, or a path to an image file or
                directory of images to replay offline.
        monitor_index: mss monitor index (1 is the primary display).
        timeout_s: Seconds to wait for one screen grab. None blocks until
                   the grab returns.
    """

    source: str = "screen"
    monitor_index: int = 1
    timeout_s: Optional[float] = None


@dataclass(frozen=True)
class SnapshotConfig:
    """Snapshot persistence.

    Attributes:
        enabled: Whether each captured frame is written to disk.
        path: PNG path, overwritten every cycle.
    """

    enabled: bool = True
    path: str = "current_screenshot.png"


@dataclass(frozen=True)
class ClassifierConfig:
    """Remote classification service.

    Attributes:
        enabled: Whether the service is called every cycle.
        endpoint: URL receiving the PNG as the POST body.
        timeout_s: Request timeout in seconds. None blocks until the
                   service answers.
    """

    enabled: bool = True
    endpoint: str = "http://localhost:8000/api/detect-stock-price"
    timeout_s: Optional[float] = None


@dataclass(frozen=True)
class AlertConfig:
    """Alert presentation.

    Attributes:
        title: Notification title.
        beep_frequency_hz: Beep pitch.
        beep_duration_ms: Beep length.
    """

    title: str = "Bookmap alert"
    beep_frequency_hz: int = 880
    beep_duration_ms: int = 500


@dataclass(frozen=True)
class AppConfig:
    """Top-level application configuration.

    Aggregates all sub-configurations into a single, frozen object.
    """

    detection: DetectionConfig = field(default_factory=DetectionConfig)
    capture: CaptureConfig = field(default_factory=CaptureConfig)
    snapshot: SnapshotConfig = field(default_factory=SnapshotConfig)
    classifier: ClassifierConfig = field(default_factory=ClassifierConfig)
    alert: AlertConfig = field(default_factory=AlertConfig)


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

def _validate(config: AppConfig) -> None:
    """Validate configuration values. Raises ValueError on invalid state."""
    det = config.detection

    if det.poll_interval_s <= 0:
        raise ValueError(
            f"detection.poll_interval_s must be positive, got {det.poll_interval_s}."
        )

    for name in ("red_min_r", "red_max_g", "red_max_b"):
        value = getattr(det, name)
        if not (0 <= value <= 255):
            raise ValueError(f"detection.{name} must be in [0, 255], got {value}.")

    if not (0 <= det.bubble_bright_threshold <= 765):
        raise ValueError(
            f"detection.bubble_bright_threshold must be in [0, 765], "
            f"got {det.bubble_bright_threshold}."
        )

    for name in (
        "min_red_pixels_per_row",
        "max_distance_bubble_to_line",
        "bubble_min_bright_pixels",
    ):
        value = getattr(det, name)
        if value < 0:
            raise ValueError(f"detection.{name} must be non-negative, got {value}.")

    if not (0.0 <= det.roi_margin_percent < 1.0):
        raise ValueError(
            f"detection.roi_margin_percent must be in [0.0, 1.0), "
            f"got {det.roi_margin_percent}."
        )

    if not (0.0 < det.marker_search_fraction <= 1.0):
        raise ValueError(
            f"detection.marker_search_fraction must be in (0.0, 1.0], "
            f"got {det.marker_search_fraction}."
        )

    if not config.capture.source.strip():
        raise ValueError("capture.source must not be empty.")

    if config.capture.monitor_index < 0:
        raise ValueError(
            f"capture.monitor_index must be non-negative, "
            f"got {config.capture.monitor_index}."
        )

    if config.capture.timeout_s is not None and config.capture.timeout_s <= 0:
        raise ValueError(
            f"capture.timeout_s must be positive or None, "
            f"got {config.capture.timeout_s}."
        )

    if config.classifier.timeout_s is not None and config.classifier.timeout_s <= 0:
        raise ValueError(
            f"classifier.timeout_s must be positive or None, "
            f"got {config.classifier.timeout_s}."
        )

    if config.classifier.enabled and not config.classifier.endpoint:
        raise ValueError("classifier.endpoint is required when the classifier is enabled.")

    if config.alert.beep_frequency_hz <= 0 or config.alert.beep_duration_ms <= 0:
        raise ValueError(
            f"alert.beep_frequency_hz and alert.beep_duration_ms must be positive, "
            f"got {config.alert.beep_frequency_hz} and {config.alert.beep_duration_ms}."
        )


# ---------------------------------------------------------------------------
# YAML loading
# ---------------------------------------------------------------------------

def _parse_bool(value) -> bool:
    """Interpret YAML booleans and env-style strings ('true', '0', 'no')."""
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in ("1", "true", "yes", "on"):
        return True
    if text in ("0", "false", "no", "off"):
        return False
    raise ValueError(f"Expected a boolean value, got {value!r}.")


def _parse_optional_float(value) -> Optional[float]:
    if value is None or str(value).strip().lower() in ("", "none", "null"):
        return None
    return float(value)


_DETECTION_FIELDS = {
    "poll_interval_s": float,
    "red_min_r": int,
    "red_max_g": int,
    "red_max_b": int,
    "min_red_pixels_per_row": int,
    "max_distance_bubble_to_line": int,
    "bubble_bright_threshold": int,
    "bubble_min_bright_pixels": int,
    "roi_margin_percent": float,
    "marker_search_fraction": float,
}


def _build_detection_config(raw: dict) -> DetectionConfig:
    """Build DetectionConfig from a raw YAML dict."""
    kwargs = {}
    for key, cast in _DETECTION_FIELDS.items():
        if key in raw:
            kwargs[key] = cast(raw[key])
    return DetectionConfig(**kwargs)


def _build_capture_config(raw: dict) -> CaptureConfig:
    """Build CaptureConfig from a raw YAML dict."""
    kwargs = {}
    if "source" in raw:
        kwargs["source"] = str(raw["source"])
    if "monitor_index" in raw:
        kwargs["monitor_index"] = int(raw["monitor_index"])
    if "timeout_s" in raw:
        kwargs["timeout_s"] = _parse_optional_float(raw["timeout_s"])
    return CaptureConfig(**kwargs)


def _build_snapshot_config(raw: dict) -> SnapshotConfig:
    """Build SnapshotConfig from a raw YAML dict."""
    kwargs = {}
    if "enabled" in raw:
        kwargs["enabled"] = _parse_bool(raw["enabled"])
    if "path" in raw:
        kwargs["path"] = str(raw["path"])
    return SnapshotConfig(**kwargs)


def _build_classifier_config(raw: dict) -> ClassifierConfig:
    """Build ClassifierConfig from a raw YAML dict."""
    kwargs = {}
    if "enabled" in raw:
        kwargs["enabled"] = _parse_bool(raw["enabled"])
    if "endpoint" in raw:
        kwargs["endpoint"] = str(raw["endpoint"])
    if "timeout_s" in raw:
        kwargs["timeout_s"] = _parse_optional_float(raw["timeout_s"])
    return ClassifierConfig(**kwargs)


def _build_alert_config(raw: dict) -> AlertConfig:
    """Build AlertConfig from a raw YAML dict."""
    kwargs = {}
    if "title" in raw:
        kwargs["title"] = str(raw["title"])
    if "beep_frequency_hz" in raw:
        kwargs["beep_frequency_hz"] = int(raw["beep_frequency_hz"])
    if "beep_duration_ms" in raw:
        kwargs["beep_duration_ms"] = int(raw["beep_duration_ms"])
    return AlertConfig(**kwargs)


# ---------------------------------------------------------------------------
# Environment variable overrides
# ---------------------------------------------------------------------------

_ENV_PREFIX = "BOOKMAP_WATCH_"


def _apply_env_overrides(raw: dict) -> dict:
    """Apply environment variable overrides to the raw config dict.

    Environment variables follow the pattern:
        BOOKMAP_WATCH_DETECTION_POLL_INTERVAL_S=5
        BOOKMAP_WATCH_CLASSIFIER_ENDPOINT=http://host:8000/api/detect

    The section name comes first, the field name follows verbatim.
    """
    env_map = {
        f"{_ENV_PREFIX}DETECTION_{key.upper()}": ("detection", key)
        for key in _DETECTION_FIELDS
    }
    env_map.update({
        f"{_ENV_PREFIX}CAPTURE_SOURCE": ("capture", "source"),
        f"{_ENV_PREFIX}CAPTURE_MONITOR_INDEX": ("capture", "monitor_index"),
        f"{_ENV_PREFIX}CAPTURE_TIMEOUT_S": ("capture", "timeout_s"),
        f"{_ENV_PREFIX}SNAPSHOT_ENABLED": ("snapshot", "enabled"),
        f"{_ENV_PREFIX}SNAPSHOT_PATH": ("snapshot", "path"),
        f"{_ENV_PREFIX}CLASSIFIER_ENABLED": ("classifier", "enabled"),
        f"{_ENV_PREFIX}CLASSIFIER_ENDPOINT": ("classifier", "endpoint"),
        f"{_ENV_PREFIX}CLASSIFIER_TIMEOUT_S": ("classifier", "timeout_s"),
    })

    for env_var, (section, key) in env_map.items():
        value = os.environ.get(env_var)
        if value is not None:
            raw.setdefault(section, {})[key] = value
            logger.debug("Config override from env: %s=%s", env_var, value)

    return raw


# ---------------------------------------------------------------------------
# Public loader
# ---------------------------------------------------------------------------

def load_config(config_path: Optional[str] = None) -> AppConfig:
    """Load and validate application configuration.

    Precedence (highest → lowest):
        Environment variables > YAML file > Hard-coded defaults

    Args:
        config_path: Path to a YAML configuration file. If None,
                     the watcher runs entirely on defaults.

    Returns:
        A validated, frozen AppConfig instance.

    Raises:
        FileNotFoundError: If config_path is provided but does not exist.
        ValueError: If any configuration value is invalid.
        yaml.YAMLError: If the YAML file is malformed.
    """
    raw: dict = {}

    # --- Layer 1: YAML file ---
    if config_path is not None:
        resolved = Path(config_path)
        if not resolved.is_absolute():
            resolved = Path.cwd() / resolved

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

    # --- Build typed configs ---
    config = AppConfig(
        detection=_build_detection_config(raw.get("detection") or {}),
        capture=_build_capture_config(raw.get("capture") or {}),
        snapshot=_build_snapshot_config(raw.get("snapshot") or {}),
        classifier=_build_classifier_config(raw.get("classifier") or {}),
        alert=_build_alert_config(raw.get("alert") or {}),
    )

    # --- Validate ---
    _validate(config)

    logger.debug("Configuration loaded: %s", config)
    return config


def validate_config(config: AppConfig) -> AppConfig:
    """Validate a programmatically built or CLI-overridden config and return it."""
    _validate(config)
    return config
