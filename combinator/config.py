"""
Runtime defaults for the combinator command line.

The core functions take every setting as an explicit argument; this module
only supplies the defaults the CLI passes in.
"""

import codecs
import logging
import os
from typing import Any, Dict


ENV_PREFIX = "COMBINATOR_"


# Default configuration - all required keys with correct types
CONFIG = {
    # Literal path suffix used to select input files (no dot normalisation).
    "DEFAULT_EXTENSION": "txt",

    # Charset used for reading inputs and writing the merge output.
    "DEFAULT_CHARSET": "UTF-8",

    # Logging
    "LOG_LEVEL": "INFO",
    "LOG_DIR": "logs",

    # Interactive shell
    "SHELL_PROMPT": "combinator> ",
}

_DEFAULTS = dict(CONFIG)


# Required keys and their expected types
_REQUIRED_KEYS = {
    "DEFAULT_EXTENSION": str,
    "DEFAULT_CHARSET": str,
    "LOG_LEVEL": str,
    "LOG_DIR": str,
    "SHELL_PROMPT": str,
}

# Keys that can be overridden by environment variables (COMBINATOR_<KEY>)
_ENV_OVERRIDABLE = {
    "DEFAULT_EXTENSION",
    "DEFAULT_CHARSET",
    "LOG_LEVEL",
    "LOG_DIR",
}


def validate_config(cfg: Dict[str, Any]) -> None:
    """
    Ensure all required keys exist with correct types/values.
    Raise NotImplementedError("<reason>") on any violation.
    No return value on success.
    """
    missing_keys = set(_REQUIRED_KEYS.keys()) - set(cfg.keys())
    if missing_keys:
        raise NotImplementedError(f"CONFIG missing required keys: {', '.join(sorted(missing_keys))}")

    for key, expected_type in _REQUIRED_KEYS.items():
        value = cfg[key]
        if not isinstance(value, expected_type):
            raise NotImplementedError(f"CONFIG[{key}] must be {expected_type.__name__}, got {type(value).__name__}")

    if not cfg["DEFAULT_EXTENSION"]:
        raise NotImplementedError("CONFIG[DEFAULT_EXTENSION] must be non-empty string")

    try:
        "".encode(cfg["DEFAULT_CHARSET"])
        codecs.lookup(cfg["DEFAULT_CHARSET"])
    except LookupError:
        raise NotImplementedError(f"CONFIG[DEFAULT_CHARSET] must be a known text encoding, got {cfg['DEFAULT_CHARSET']!r}")

    level = cfg["LOG_LEVEL"].upper()
    if not isinstance(logging.getLevelName(level), int):
        raise NotImplementedError(f"CONFIG[LOG_LEVEL] must be a logging level name, got {cfg['LOG_LEVEL']!r}")

    if not cfg["LOG_DIR"]:
        raise NotImplementedError("CONFIG[LOG_DIR] must be non-empty string")


def _apply_env_overrides(cfg: Dict[str, Any]) -> Dict[str, Any]:
    """Apply environment variable overrides to config."""
    result = cfg.copy()

    for key in _ENV_OVERRIDABLE:
        env_var = ENV_PREFIX + key
        if env_var in os.environ:
            env_value = os.environ[env_var]
            expected_type = _REQUIRED_KEYS[key]
            if expected_type == str:
                result[key] = str(env_value)
            else:
                raise NotImplementedError(f"Unsupported type for env override: {expected_type}")

    return result


def load_config() -> Dict[str, Any]:
    """Return a validated copy of CONFIG with environment overrides applied."""
    cfg = _apply_env_overrides(_DEFAULTS)
    validate_config(cfg)
    return cfg


# Apply environment overrides and validate
CONFIG = load_config()
