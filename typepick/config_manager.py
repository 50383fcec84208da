"""Read and write the typepick TOML configuration file."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict

import toml

logger = logging.getLogger(__name__)

BASE_DIR = Path(os.environ.get("TYPEPICK_HOME", str(Path.home() / ".typepick"))).expanduser()
CONFIG_FILE = BASE_DIR / "config.toml"

DEFAULT_PICKER_CONFIG: Dict[str, Any] = {
    "signature_limit": 5,
    "property_limit": 25,
    "declaration_limit": 10,
    "snippet_max_length": 160,
}


def load_full_config() -> Dict[str, Any]:
    """Load the entire TOML config (all sections); empty when absent or unreadable."""
    if not CONFIG_FILE.exists():
        return {}
    try:
        with open(CONFIG_FILE, "r") as f:
            return toml.load(f)
    except (OSError, toml.TomlDecodeError) as exc:
        logger.warning("Ignoring unreadable config %s: %s", CONFIG_FILE, exc)
        return {}


def _save_full_config(config: Dict[str, Any]) -> bool:
    """Write entire config dict to TOML file, preserving all sections."""
    CONFIG_FILE.parent.mkdir(parents=True, exist_ok=True)
    try:
        with open(CONFIG_FILE, "w") as f:
            toml.dump(config, f)
        return True
    except OSError as exc:
        logger.warning("Could not write config %s: %s", CONFIG_FILE, exc)
        return False


def load_picker_config() -> Dict[str, Any]:
    """Result bounds from the ``[picker]`` section, over the defaults.

    Only positive integers are accepted; anything else keeps the default.
    """
    picker = dict(DEFAULT_PICKER_CONFIG)
    section = load_full_config().get("picker", {})
    if not isinstance(section, dict):
        return picker
    for key, value in section.items():
        if key not in DEFAULT_PICKER_CONFIG:
            continue
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            logger.warning(
                "Ignoring [picker] %s = %r in %s: expected a positive integer",
                key, value, CONFIG_FILE,
            )
            continue
        picker[key] = value
    return picker


def load_checker_config() -> Dict[str, Any]:
    """The ``[checker]`` section (``factory = "module:callable"``)."""
    section = load_full_config().get("checker", {})
    return dict(section) if isinstance(section, dict) else {}


def save_checker_config(factory: str) -> bool:
    """Store the oracle factory import path, keeping other sections."""
    config = load_full_config()
    config["checker"] = {"factory": factory}
    return _save_full_config(config)
