"""Settings for typepick, from the environment and ~/.typepick/config.toml."""

from __future__ import annotations

import os

from .config_manager import BASE_DIR, CONFIG_FILE, load_checker_config, load_picker_config

_picker_config = load_picker_config()
_checker_config = load_checker_config()

# Result bounds; override in the [picker] section of config.toml
SIGNATURE_LIMIT = _picker_config["signature_limit"]
PROPERTY_LIMIT = _picker_config["property_limit"]
DECLARATION_LIMIT = _picker_config["declaration_limit"]
SNIPPET_MAX_LENGTH = _picker_config["snippet_max_length"]

# "package.module:callable" building a Program; set via `tpick set-checker`
CHECKER_FACTORY = os.environ.get("TYPEPICK_CHECKER") or _checker_config.get("factory", "")

__all__ = [
    "BASE_DIR",
    "CONFIG_FILE",
    "SIGNATURE_LIMIT",
    "PROPERTY_LIMIT",
    "DECLARATION_LIMIT",
    "SNIPPET_MAX_LENGTH",
    "CHECKER_FACTORY",
]
