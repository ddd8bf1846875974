# -*- coding: utf-8 -*-
"""Loads the workshop configuration from YAML.

The packaged ``configs/default.yaml`` holds the data paths, CRS choices, analysis parameters and map palettes the
lessons use. A user file passed to :func:`load_config` is deep-merged on top of it, and ``${ENV_VAR}`` references in
string values are expanded from the environment (unset variables expand to an empty string).

Usage:
    from phenospatial.config import load_config
    cfg = load_config()                       # packaged defaults
    cfg = load_config("my_workshop.yaml")     # defaults + overrides
    cfg["crs"]["projected"]
"""

import os
import re
from pathlib import Path

import yaml

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent / "configs" / "default.yaml"

_ENV_PATTERN = re.compile(r"\$\{(\w+)\}")

_cached_config = None
_cached_path = None


def _expand_env_vars(value):
    """Expand ${ENV_VAR} references in string values."""
    if not isinstance(value, str):
        return value

    return _ENV_PATTERN.sub(lambda match: os.environ.get(match.group(1), ""), value)


def _expand_recursive(obj):
    """Recursively expand environment variables in a config dict."""
    if isinstance(obj, dict):
        return {k: _expand_recursive(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [_expand_recursive(item) for item in obj]
    return _expand_env_vars(obj)


def _deep_merge(base, override):
    """Deep merge override dict into base dict."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _read_yaml(path):
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def load_config(config_path=None, use_cache=True):
    """Load configuration from YAML.

    Parameters:
    -----------
    config_path : str or Path, optional
        Override file merged on top of the packaged defaults.
    use_cache : bool
        Return the previously loaded configuration when the same path is requested again.

    Returns:
    --------
    config : dict
        Configuration dictionary with environment variables expanded
    """
    global _cached_config, _cached_path

    key = str(config_path) if config_path is not None else None
    if use_cache and _cached_config is not None and _cached_path == key:
        return _cached_config

    config = _read_yaml(DEFAULT_CONFIG_PATH)

    if config_path is not None:
        override_path = Path(config_path)
        if not override_path.exists():
            raise ValueError(f"Config file not found: {override_path}")
        config = _deep_merge(config, _read_yaml(override_path))

    config = _expand_recursive(config)

    _cached_config = config
    _cached_path = key

    return config


def get_path(config, key, default=None):
    """Get a path from ``config['paths']``; empty values fall back to ``default``."""
    value = config.get("paths", {}).get(key) or default
    if value is None:
        return None
    return str(Path(value).expanduser())
