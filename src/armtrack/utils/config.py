"""
Configuration loading.
Reads a YAML file, deep-merges it over built-in defaults and checks the
types of the fields the application relies on.
"""

import copy
import logging
from typing import Optional

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = {
    "camera": {
        "device_id": 0,
        "width": 640,
        "height": 480,
        "fps": 30,
        "threaded": True,
        "flip_horizontal": False,
    },
    "hands": {
        "model_path": "",
        "max_num_hands": 2,
        "min_detection_confidence": 0.5,
        "min_tracking_confidence": 0.5,
        "min_presence_confidence": 0.5,
        "running_mode": "VIDEO",
    },
    "pose": {
        "model_path": "",
        "min_detection_confidence": 0.5,
        "min_tracking_confidence": 0.5,
        "min_presence_confidence": 0.5,
        "running_mode": "VIDEO",
    },
    "recording": {
        "tick_hz": 60.0,
        "gate_on_state": False,
    },
    "chart": {
        "output_dir": "recordings",
        "save": True,
        "show_window": True,
        "dpi": 100,
        "width": 10.0,
        "height": 5.0,
    },
    "visualization": {
        "show_hands": True,
        "show_pose": True,
        "show_status": True,
    },
    "logging": {
        "level": "INFO",
        "file": None,
    },
}

# Schema: section -> field -> expected type
_CONFIG_SCHEMA = {
    "camera": {
        "device_id": int,
        "width": int,
        "height": int,
        "fps": int,
    },
    "hands": {
        "max_num_hands": int,
        "min_detection_confidence": float,
        "min_tracking_confidence": float,
        "running_mode": str,
    },
    "pose": {
        "min_detection_confidence": float,
        "min_tracking_confidence": float,
        "running_mode": str,
    },
    "recording": {
        "tick_hz": float,
        "gate_on_state": bool,
    },
    "chart": {
        "output_dir": str,
        "show_window": bool,
        "dpi": int,
    },
}

_RUNNING_MODES = ("IMAGE", "VIDEO", "LIVE_STREAM")


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge override into base dict."""
    merged = base.copy()
    for key, value in override.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def validate_config(data: dict) -> list:
    """Return a list of human-readable problems (empty when valid)."""
    warnings = []
    for section_name, fields in _CONFIG_SCHEMA.items():
        section = data.get(section_name)
        if not isinstance(section, dict):
            warnings.append(f"Section '{section_name}' should be a dict, got {type(section).__name__}")
            continue
        for field_name, expected_type in fields.items():
            if field_name not in section:
                continue
            value = section[field_name]
            # Allow int where float is expected
            if expected_type is float and isinstance(value, (int, float)) and not isinstance(value, bool):
                continue
            if expected_type is int and isinstance(value, bool):
                warnings.append(f"{section_name}.{field_name}: expected int, got bool ({value!r})")
                continue
            if not isinstance(value, expected_type):
                warnings.append(
                    f"{section_name}.{field_name}: expected {expected_type.__name__}, "
                    f"got {type(value).__name__} ({value!r})"
                )

    for section_name in ("hands", "pose"):
        mode = data.get(section_name, {}).get("running_mode") if isinstance(data.get(section_name), dict) else None
        if isinstance(mode, str) and mode not in _RUNNING_MODES:
            warnings.append(f"{section_name}.running_mode: unknown mode {mode!r}, VIDEO will be used")

    recording = data.get("recording")
    tick_hz = recording.get("tick_hz") if isinstance(recording, dict) else None
    if isinstance(tick_hz, (int, float)) and not isinstance(tick_hz, bool) and tick_hz <= 0:
        warnings.append(f"recording.tick_hz: must be positive, got {tick_hz!r}; 60 will be used")

    return warnings


def load_config(config_path: Optional[str] = None) -> dict:
    """
    Load configuration from YAML, merged over DEFAULT_CONFIG.

    A missing or unreadable file is logged and the defaults are used.
    """
    data = {}
    if config_path:
        try:
            with open(config_path, "r") as f:
                data = yaml.safe_load(f) or {}
            logger.info("Loaded config from %s", config_path)
        except FileNotFoundError:
            logger.warning("Config file not found: %s, using defaults", config_path)
        except yaml.YAMLError as e:
            logger.warning("Config file %s is not valid YAML (%s), using defaults", config_path, e)

    if not isinstance(data, dict):
        logger.warning("Config root should be a mapping, got %s; using defaults", type(data).__name__)
        data = {}

    merged = _deep_merge(copy.deepcopy(DEFAULT_CONFIG), data)

    problems = validate_config(merged)
    for problem in problems:
        logger.warning("Config validation: %s", problem)
    if not problems:
        logger.debug("Config validation passed")

    return merged
