"""
loader.py - Read ConversionParameters from relaxed JSON.

The configuration dialect is JSON with ``//`` and ``/* */`` comments and
trailing commas allowed, parsed with json5.  A missing key and an
explicit ``null`` both leave the field unset; any type or range mismatch
fails the whole load.

The default configuration ships inside the package
(``ima2dicom/resources/default-config.json``) and is either loaded
directly or copied verbatim to disk by ``--genconf``.
"""

import logging
import os
from importlib.resources import as_file, files
from pathlib import Path
from typing import Optional, Union

import json5
from pydantic import ValidationError

from ima2dicom.errors import ConfigGenerateError, ConfigNotFoundError, ConfigParseError
from ima2dicom.parameters import ConversionParameters

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_NAME = "default-config.json"

_DEFAULT_CONFIG = files("ima2dicom.resources") / DEFAULT_CONFIG_NAME


def parse_parameters(text: str) -> ConversionParameters:
    """
    Parse configuration text into a ConversionParameters instance.

    Parameters
    ----------
    text : str
        Relaxed JSON document whose top level is an object.

    Returns
    -------
    ConversionParameters
        Validated, immutable parameters.

    Raises
    ------
    ConfigParseError
        If the text is not valid relaxed JSON, the top level is not an
        object, or any field has the wrong type or is out of range.
    """
    try:
        document = json5.loads(text)
    except ValueError as exc:
        raise ConfigParseError(str(exc)) from exc

    if not isinstance(document, dict):
        raise ConfigParseError(
            f"expected a JSON object at the top level, got {type(document).__name__}"
        )

    try:
        return ConversionParameters.model_validate(document)
    except ValidationError as exc:
        raise ConfigParseError(str(exc)) from exc


def load_parameters(path: Union[str, Path]) -> ConversionParameters:
    """Load parameters from a configuration file on disk."""
    path = Path(path)
    if not path.is_file():
        raise ConfigNotFoundError(str(path))

    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigParseError(str(exc), path=str(path)) from exc

    try:
        parameters = parse_parameters(text)
    except ConfigParseError as exc:
        raise ConfigParseError(exc.cause, path=str(path)) from exc

    logger.debug("Loaded %d parameter(s) from %s", len(parameters.present()), path)
    return parameters


def load_default_parameters() -> ConversionParameters:
    """Load the configuration bundled with the package."""
    # as_file() hands back a real path, extracting to a temp file if the
    # package is not on the file system (e.g. zipped).
    with as_file(_DEFAULT_CONFIG) as path:
        return load_parameters(path)


def generate_default_config(directory: Optional[Union[str, Path]] = None) -> Path:
    """
    Copy the bundled default configuration into *directory*.

    Parameters
    ----------
    directory : str or Path, optional
        Target directory.  Empty or None means the current directory.

    Returns
    -------
    Path
        Full path of the written ``default-config.json``.

    Raises
    ------
    ConfigGenerateError
        If the target file already exists or cannot be written.
    """
    target_dir = Path(directory) if directory else Path(os.getcwd())
    target = target_dir / DEFAULT_CONFIG_NAME

    try:
        content = _DEFAULT_CONFIG.read_bytes()
        # "xb" fails if the target already exists.
        with open(target, "xb") as f:
            f.write(content)
    except FileExistsError as exc:
        raise ConfigGenerateError(f"Configuration file already exists: {target}") from exc
    except OSError as exc:
        raise ConfigGenerateError(f"Cannot write configuration file {target}: {exc}") from exc

    logger.info("Wrote default configuration to %s", target)
    return target
