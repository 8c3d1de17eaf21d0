"""
arguments.py - Turn raw command-line tokens into a ResolvedRequest.

Resolution happens in two stages:

1. **Collection** - every token must look like ``--name`` or
   ``--name=value``; the result is a plain ``{name: value}`` mapping
   (a bare flag maps to ``""``).
2. **Interpretation** - input directory, output directory and
   configuration are resolved in that fixed order.  The first failure
   propagates and the remaining steps are not attempted.
"""

import errno
import logging
import os
import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterable, Optional, Union

from ima2dicom.errors import ArgumentFormatError, DirectoryCreateError, DirectoryNotFoundError
from ima2dicom.loader import load_default_parameters, load_parameters
from ima2dicom.parameters import ConversionParameters

logger = logging.getLogger(__name__)

# Extra leading dashes are dropped: "---in=x" is read as "--in=x".
_TOKEN_RE = re.compile(r"--+(?P<name>[^=-][^=]*)(?:=(?P<value>.*))?", re.DOTALL)


class Argument(str, Enum):
    """Command-line flags understood by the converter."""
    IN = "in"
    OUT = "out"
    CONFIG = "config"
    GENCONF = "genconf"
    HELP = "help"
    VERBOSE = "verbose"

    @property
    def cli(self) -> str:
        return f"--{self.value}"


@dataclass(frozen=True)
class ResolvedRequest:
    """Everything a batch run needs, fully validated."""
    input_dir: Path
    output_dir: Path
    parameters: ConversionParameters


# ---------------------------------------------------------------------------
# Stage 1 - collection
# ---------------------------------------------------------------------------

def collect_arguments(tokens: Iterable[str]) -> dict[str, str]:
    """
    Parse ``--name[=value]`` tokens into a mapping.

    Raises
    ------
    ArgumentFormatError
        On the first token that does not match, or on a flag given twice.
    """
    lookup: dict[str, str] = {}
    for token in tokens:
        match = _TOKEN_RE.fullmatch(token)
        if match is None:
            raise ArgumentFormatError(token)
        name = match.group("name")
        if name in lookup:
            raise ArgumentFormatError(token, f"Argument given more than once: --{name}")
        lookup[name] = match.group("value") or ""
    return lookup


# ---------------------------------------------------------------------------
# Stage 2 - interpretation
# ---------------------------------------------------------------------------

def resolve_input_directory(lookup: dict[str, str], cwd: Optional[str] = None) -> Path:
    """Explicit ``--in`` or the working directory; it must already exist."""
    path = lookup.get(Argument.IN.value) or cwd or os.getcwd()
    if not os.path.isdir(path):
        raise DirectoryNotFoundError(path)
    return Path(path)


def resolve_output_directory(lookup: dict[str, str], cwd: Optional[str] = None) -> Path:
    """Explicit ``--out`` or the working directory, created if missing."""
    path = lookup.get(Argument.OUT.value) or cwd or os.getcwd()
    if os.path.isdir(path):
        return Path(path)

    try:
        os.makedirs(path)
    except PermissionError as exc:
        raise DirectoryCreateError(
            path, f"Access denied when creating output directory '{path}': {exc}"
        ) from exc
    except FileExistsError as exc:
        raise DirectoryCreateError(
            path, f"Cannot create output directory '{path}', a file is in the way: {exc}"
        ) from exc
    except ValueError as exc:
        # os.makedirs raises ValueError for embedded NUL characters.
        raise DirectoryCreateError(
            path, f"The output directory path contains invalid characters '{path}': {exc}"
        ) from exc
    except OSError as exc:
        if exc.errno == errno.ENAMETOOLONG:
            reason = f"The output directory path is too long '{path}': {exc}"
        else:
            reason = f"I/O error when creating output directory '{path}': {exc}"
        raise DirectoryCreateError(path, reason) from exc

    logger.info("Created output directory %s", path)
    return Path(path)


def resolve_parameters(lookup: dict[str, str]) -> ConversionParameters:
    """Explicit ``--config`` file, or the configuration bundled with the package."""
    config_path = lookup.get(Argument.CONFIG.value)
    if config_path:
        return load_parameters(config_path)
    logger.debug("No --config given, using the bundled default configuration")
    return load_default_parameters()


def interpret_arguments(lookup: dict[str, str], cwd: Optional[str] = None) -> ResolvedRequest:
    """Resolve input dir, output dir and configuration, in that order."""
    input_dir = resolve_input_directory(lookup, cwd)
    output_dir = resolve_output_directory(lookup, cwd)
    parameters = resolve_parameters(lookup)
    return ResolvedRequest(input_dir=input_dir, output_dir=output_dir, parameters=parameters)


def resolve_request(tokens: Iterable[str], cwd: Optional[Union[str, Path]] = None) -> ResolvedRequest:
    """Collect then interpret *tokens*."""
    return interpret_arguments(collect_arguments(tokens), str(cwd) if cwd else None)
