"""
Tests for the configuration module.
"""

import pytest

from bookmap_watcher.config import (
    AppConfig,
    ClassifierConfig,
    DetectionConfig,
    _validate,
    load_config,
)


def test_load_defaults():
    """Test loading configuration without any file."""
    config = load_config(None)
    assert isinstance(config, AppConfig)
    assert config.detection.poll_interval_s == 10.0
    assert config.detection.red_min_r == 180
    assert config.detection.min_red_pixels_per_row == 500
    assert config.detection.roi_margin_percent == pytest.approx(0.10)
    assert config.capture.source == "screen"
    assert config.classifier.timeout_s is None


def test_config_is_frozen():
    """Test that configuration cannot be mutated after construction."""
    config = load_config(None)
    with pytest.raises(Exception):
        config.detection.red_min_r = 0


def test_validation_failure():
    """Test fail-fast validation."""
    with pytest.raises(ValueError, match="red_min_r"):
        _validate(AppConfig(detection=DetectionConfig(red_min_r=300)))

    with pytest.raises(ValueError, match="roi_margin_percent"):
        _validate(AppConfig(detection=DetectionConfig(roi_margin_percent=1.0)))

    with pytest.raises(ValueError, match="poll_interval_s"):
        _validate(AppConfig(detection=DetectionConfig(poll_interval_s=0)))

    with pytest.raises(ValueError, match="timeout_s"):
        _validate(AppConfig(classifier=ClassifierConfig(timeout_s=-1.0)))


def test_env_override(monkeypatch):
    """Test environment variable overrides."""
    monkeypatch.setenv("BOOKMAP_WATCH_DETECTION_MIN_RED_PIXELS_PER_ROW", "250")
    monkeypatch.setenv("BOOKMAP_WATCH_CLASSIFIER_ENABLED", "false")
    monkeypatch.setenv("BOOKMAP_WATCH_CLASSIFIER_TIMEOUT_S", "2.5")

    config = load_config(None)

    assert config.detection.min_red_pixels_per_row == 250
    assert config.classifier.enabled is False
    assert config.classifier.timeout_s == 2.5


def test_yaml_file(tmp_path):
    """Test loading values from a YAML file."""
    path = tmp_path / "watcher.yaml"
    path.write_text(
        "detection:\n"
        "  poll_interval_s: 2\n"
        "  bubble_min_bright_pixels: 40\n"
        "capture:\n"
        "  monitor_index: 2\n"
        "snapshot:\n"
        "  enabled: no\n",
        encoding="utf-8",
    )

    config = load_config(str(path))

    assert config.detection.poll_interval_s == 2.0
    assert config.detection.bubble_min_bright_pixels == 40
    assert config.capture.monitor_index == 2
    assert config.snapshot.enabled is False
    # untouched sections keep their defaults
    assert config.alert.beep_frequency_hz == 880


def test_missing_yaml_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / "nope.yaml"))


def test_relative_yaml_path_resolves_against_cwd(tmp_path, monkeypatch):
    """Test that a relative --config path is looked up in the working directory."""
    (tmp_path / "watcher.yaml").write_text("capture:\n  monitor_index: 3\n", encoding="utf-8")
    monkeypatch.chdir(tmp_path)

    config = load_config("watcher.yaml")

    assert config.capture.monitor_index == 3


def test_capture_timeout(monkeypatch):
    """Test the opt-in capture timeout: off by default, settable, validated."""
    from bookmap_watcher.config import CaptureConfig

    assert load_config(None).capture.timeout_s is None

    monkeypatch.setenv("BOOKMAP_WATCH_CAPTURE_TIMEOUT_S", "3")
    assert load_config(None).capture.timeout_s == 3.0

    with pytest.raises(ValueError, match="capture.timeout_s"):
        _validate(AppConfig(capture=CaptureConfig(timeout_s=0)))
