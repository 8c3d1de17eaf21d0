"""
config.py - Application settings for the IMA to DICOM converter.

Loads settings from config.yaml with sensible defaults so that file
extensions and logging setup are not hard-coded inside a module.  These
are tool settings; the DICOM attributes written into each file come from
the JSON conversion configuration (see ``loader.py``).

Set ``IMA2DICOM_SETTINGS`` to point at a different YAML file.
"""

import logging
import os
from typing import Any, Optional

import yaml

_REPO_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
_CONFIG_PATH = os.environ.get("IMA2DICOM_SETTINGS", os.path.join(_REPO_ROOT, "config.yaml"))

_DEFAULTS: dict[str, Any] = {
    "conversion": {
        "input_extension": ".ima",
        "output_extension": ".dcm",
    },
    "logging": {
        "level": "INFO",
        "format": "%(levelname)-8s %(message)s",
    },
}


def _merge_section(name: str, defaults: dict, overrides: Any) -> dict:
    """Overlay one YAML section on its defaults; unknown keys are kept."""
    if overrides is None:
        return dict(defaults)
    if not isinstance(overrides, dict):
        raise ValueError(
            f"settings section '{name}' must be a mapping, got {type(overrides).__name__}"
        )
    return {**defaults, **overrides}


def _check_extension(key: str, value: Any) -> str:
    if not isinstance(value, str) or len(value) < 2 or not value.startswith("."):
        raise ValueError(f"conversion.{key} must look like '.ext', got {value!r}")
    if os.sep in value or (os.altsep and os.altsep in value):
        raise ValueError(f"conversion.{key} must not contain a path separator, got {value!r}")
    return value


def _check_level(value: Any) -> str:
    level = str(value).upper()
    if not isinstance(logging.getLevelName(level), int):
        raise ValueError(f"logging.level is not a known logging level: {value!r}")
    return level


def load_config(config_path: Optional[str] = None) -> dict[str, Any]:
    """
    Load the YAML settings file and validate it against the defaults.

    Parameters
    ----------
    config_path : str, optional
        Path to a settings file. Defaults to ``IMA2DICOM_SETTINGS`` or
        the repo-root config.yaml.  A missing file means all defaults.

    Returns
    -------
    dict
        Settings with both sections present.  The logging level is
        upper-cased.

    Raises
    ------
    ValueError
        If a section is not a mapping, an extension is not of the form
        ``.ext``, or the logging level is unknown.
    """
    config_path = config_path or _CONFIG_PATH
    user_config: Any = {}
    if os.path.exists(config_path):
        with open(config_path, "r") as f:
            user_config = yaml.safe_load(f) or {}
    if not isinstance(user_config, dict):
        raise ValueError(f"{config_path}: settings must be a mapping at the top level")

    settings = dict(user_config)
    for name, defaults in _DEFAULTS.items():
        settings[name] = _merge_section(name, defaults, user_config.get(name))

    conversion = settings["conversion"]
    for key in ("input_extension", "output_extension"):
        conversion[key] = _check_extension(key, conversion[key])
    settings["logging"]["level"] = _check_level(settings["logging"]["level"])
    return settings


# Module-level singleton so callers can just do `from ima2dicom.config import CONFIG`
CONFIG = load_config()
