# -*- coding: utf-8 -*-
"""Configuration: built-in defaults <- packaged config.default.yaml <- user config.yaml."""

import copy
import os
from pathlib import Path
from typing import Optional

import yaml

from .log import log_debug, log_warn

APP_NAME = "chat-exporter"

DEFAULT_CONFIG = {
    "profile": None,
    "export": {
        "prefix": "DeepSeek",
        "dir": ".",
        "title_max_length": 30,
    },
    "headers": {
        "user": "User",
        "assistant": "Assistant",
        "thoughts": "Thought Process",
    },
    "math": {"display_style": "inline"},
    "clip": {"enabled": False},
    "browser": {
        "engine": "chromium",
        "headless": False,
        "user_data_dir": None,
        "wait_timeout": 0,
    },
    "image": {"width": 800, "scale": 2, "settle_ms": 300},
    "print": {"settle_ms": 500},
}


def get_config_dir() -> Path:
    """Folder for the user config and the persisted preferences."""
    appdata = os.environ.get("APPDATA")
    if appdata:
        return Path(appdata) / APP_NAME
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / APP_NAME
    return Path.home() / ".config" / APP_NAME


def get_config_paths(explicit: Optional[Path] = None) -> dict:
    """Get candidate paths for config.yaml."""
    base_dir = Path(__file__).resolve().parent
    return {
        "explicit": Path(explicit) if explicit else None,
        "local": Path.cwd() / "config.yaml",
        "user": get_config_dir() / "config.yaml",
        "default": base_dir / "config.default.yaml",
    }


def deep_merge(target: dict, source: dict) -> dict:
    for k, v in source.items():
        if k in target and isinstance(target[k], dict) and isinstance(v, dict):
            deep_merge(target[k], v)
        else:
            target[k] = v
    return target


def normalize_bools(d):
    """Turn "true"/"false" strings from hand-edited YAML into booleans."""
    if isinstance(d, dict):
        return {k: normalize_bools(v) for k, v in d.items()}
    if isinstance(d, list):
        return [normalize_bools(i) for i in d]
    if isinstance(d, str) and d.lower() in ("true", "false"):
        return d.lower() == "true"
    return d


def load_file(path: Optional[Path]) -> dict:
    if not path or not path.exists(): return {}
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as e:
        log_warn(f"Failed to load {path.name}: {e}")
        return {}
    if not isinstance(data, dict):
        log_warn(f"Ignoring {path.name}: top level is not a mapping")
        return {}
    return normalize_bools(data)


def load_config(explicit: Optional[Path] = None) -> dict:
    """Load configuration, merging the packaged defaults with the first user file found."""
    paths = get_config_paths(explicit)
    config = copy.deepcopy(DEFAULT_CONFIG)

    # 1. Packaged defaults
    deep_merge(config, load_file(paths["default"]))

    # 2. User overrides (Priority: explicit > local > user dir)
    for key in ("explicit", "local", "user"):
        path = paths[key]
        if path and path.exists():
            log_debug(f"Using config file {path}")
            deep_merge(config, load_file(path))
            break
    else:
        if paths["explicit"]:
            log_warn(f"Config file not found: {paths['explicit']}")

    return config
