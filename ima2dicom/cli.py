"""Command-line entry point for the IMA to DICOM converter."""

import logging
import sys
from typing import Optional, Sequence

from ima2dicom.arguments import Argument, collect_arguments, interpret_arguments
from ima2dicom.config import CONFIG
from ima2dicom.errors import ImaToDicomError
from ima2dicom.loader import DEFAULT_CONFIG_NAME, generate_default_config
from ima2dicom.pipeline import convert_folder

PROG = "ima2dicom"


def setup_logging(verbose: bool) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else CONFIG["logging"]["level"]
    logging.basicConfig(level=level, format=CONFIG["logging"]["format"])


def usage() -> str:
    return "\n".join([
        f"Usage: {PROG} {Argument.IN.cli}=<input_directory> "
        f"{Argument.OUT.cli}=<output_directory> {Argument.CONFIG.cli}=<config_file>",
        "Options:",
        f"  {Argument.IN.cli}=<dir>        Directory containing .ima files to convert (default: current directory).",
        f"  {Argument.OUT.cli}=<dir>       Directory to save converted DICOM files; created if missing (default: current directory).",
        f"  {Argument.CONFIG.cli}=<file>   Path to the configuration file (default: bundled configuration).",
        f"  {Argument.GENCONF.cli}[=<dir>] Write {DEFAULT_CONFIG_NAME} to <dir> (default: current directory) and exit.",
        f"  {Argument.VERBOSE.cli}         Show debug logging.",
        f"  {Argument.HELP.cli}            Show this help message.",
    ])


def _fail(error: Exception) -> int:
    print(f"Error: {error}")
    print(usage())
    return 1


def main(argv: Optional[Sequence[str]] = None) -> int:
    tokens = list(sys.argv[1:] if argv is None else argv)

    # Help wins over everything, even malformed tokens.
    if not tokens or Argument.HELP.cli in tokens:
        print(usage())
        return 0

    try:
        lookup = collect_arguments(tokens)
    except ImaToDicomError as e:
        return _fail(e)

    if Argument.HELP.value in lookup:
        print(usage())
        return 0

    setup_logging(Argument.VERBOSE.value in lookup)

    if Argument.GENCONF.value in lookup:
        try:
            path = generate_default_config(lookup[Argument.GENCONF.value] or None)
        except ImaToDicomError as e:
            return _fail(e)
        print(f"Default configuration written to: {path}")
        return 0

    try:
        request = interpret_arguments(lookup)
        print(f"Input Directory: {request.input_dir}")
        print(f"Output Directory: {request.output_dir}")
        print(f"Configuration: {request.parameters.model_dump_json(by_alias=True, exclude_none=True)}")

        report = convert_folder(request)
    except (ImaToDicomError, OSError) as e:
        # Files converted before the failure stay in the output directory.
        return _fail(e)

    print(report.summary())
    print("Converted successfully.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
