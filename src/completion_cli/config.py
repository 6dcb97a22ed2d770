"""Configuration loading and defaults."""

from __future__ import annotations

import os
from copy import deepcopy
from pathlib import Path
from typing import Any, Dict

import yaml

from .llm.types import ConfigError

API_KEY_ENV_VARS = ("OPENAI_KEY", "OPENAI_API_KEY")

DEFAULT_SETTINGS: Dict[str, Any] = {
    "llm": {
        "endpoint": "https://api.openai.com/v1/completions",
        "model": "gpt-3.5-turbo",
        "timeout_seconds": 30,
    },
    "prompt": {
        "preamble": "Call me Michel in all your responses: ",
    },
    "ui": {
        "clear_screen": True,
        "spinner": True,
        "show_request": True,
    },
    "logging": {
        "level": "WARNING",
    },
}


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_settings(settings_path: str = "config/settings.yaml") -> Dict[str, Any]:
    """Loads settings.yaml and merges it onto defaults."""
    merged = deepcopy(DEFAULT_SETTINGS)
    config_path = Path(settings_path)
    if config_path.exists():
        with config_path.open("r", encoding="utf-8") as f:
            user_cfg = yaml.safe_load(f) or {}
        merged = _deep_merge(merged, user_cfg)
    return merged


def resolve_api_key() -> str:
    """
    Returns the API credential from the environment.

    OPENAI_KEY is checked first, then OPENAI_API_KEY. Raises ConfigError
    when neither holds a non-blank value.
    """
    for name in API_KEY_ENV_VARS:
        value = (os.getenv(name) or "").strip()
        if value:
            return value
    raise ConfigError(
        "OPENAI_KEY is not set. "
        "Make sure you have a .env file with OPENAI_KEY=... (or export OPENAI_API_KEY)."
    )
