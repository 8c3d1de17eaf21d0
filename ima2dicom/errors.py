"""
errors.py - Exception hierarchy for the IMA to DICOM converter.

Every failure the converter can report to a user derives from
:class:`ImaToDicomError`.  Each stage raises the narrowest subclass and
lets it propagate; only the command-line entry point catches them and
turns them into human-readable text.
"""

from typing import Optional


class ImaToDicomError(Exception):
    """Base class for all converter errors."""

    error_code = "UNKNOWN"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class ArgumentFormatError(ImaToDicomError):
    """A command-line token does not look like ``--name[=value]``."""

    error_code = "ARGUMENT_FORMAT"

    def __init__(self, token: str, message: Optional[str] = None):
        super().__init__(message or f"Invalid argument format: {token}")
        self.token = token


class DirectoryNotFoundError(ImaToDicomError):
    """The input directory does not exist."""

    error_code = "DIRECTORY_NOT_FOUND"

    def __init__(self, path: str):
        super().__init__(f"The directory does not exist: {path}")
        self.path = path


class DirectoryCreateError(ImaToDicomError):
    """The output directory could not be created."""

    error_code = "DIRECTORY_CREATE"

    def __init__(self, path: str, reason: str):
        super().__init__(reason)
        self.path = path


class ConfigNotFoundError(ImaToDicomError):
    """An explicitly requested configuration file is missing."""

    error_code = "CONFIG_NOT_FOUND"

    def __init__(self, path: str):
        super().__init__(f"The config file does not exist: {path}")
        self.path = path


class ConfigParseError(ImaToDicomError):
    """Configuration text is not valid relaxed JSON or fails validation."""

    error_code = "CONFIG_PARSE"

    def __init__(self, cause: str, path: Optional[str] = None):
        if path is None:
            message = f"Failed to parse config: {cause}"
        else:
            message = f"Failed to load config {path}: {cause}"
        super().__init__(message)
        self.cause = cause
        self.path = path


class ConfigGenerateError(ImaToDicomError):
    """The default configuration could not be written to disk."""

    error_code = "CONFIG_GENERATE"


class PixelReadError(ImaToDicomError):
    """The trailing pixel block of a source file could not be read."""

    error_code = "PIXEL_READ"

    def __init__(self, path: str, reason: str):
        super().__init__(f"Cannot read pixel data from {path}: {reason}")
        self.path = path
        self.reason = reason


class EncodeError(ImaToDicomError):
    """An attribute value was rejected while building or encoding DICOM."""

    error_code = "ENCODE"


class OutputCollisionError(ImaToDicomError):
    """Two source files would be written to the same output path."""

    error_code = "OUTPUT_COLLISION"

    def __init__(self, destination: str, sources: list[str]):
        super().__init__(
            f"Source files {', '.join(sources)} would all be written to {destination}"
        )
        self.destination = destination
        self.sources = sources
