"""
pipeline.py - Batch IMA to DICOM conversion.

Converts every IMA file in the resolved input directory, one at a time,
writing ``<stem>.dcm`` files into the output directory.  All files in a
run share one study/series identity.

The batch is fail-fast: the first file that cannot be read, built or
encoded aborts the run and its error propagates to the caller.  Output
files written before the failure are left in place.
"""

import logging
import os
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from ima2dicom.arguments import ResolvedRequest
from ima2dicom.config import CONFIG
from ima2dicom.converter import ConversionIdentity, convert_file
from ima2dicom.errors import OutputCollisionError

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------

@dataclass
class PipelineReport:
    """Aggregate report produced at the end of a successful batch run."""
    total_files: int = 0
    outputs: list[Path] = field(default_factory=list)
    elapsed_s: float = 0.0
    identity: Optional[ConversionIdentity] = None

    @property
    def converted(self) -> int:
        return len(self.outputs)

    def summary(self) -> str:
        lines = [
            "=" * 50,
            "CONVERSION SUMMARY",
            "=" * 50,
            f"Total files found : {self.total_files}",
            f"Converted         : {self.converted}",
            f"Total time        : {self.elapsed_s:.2f}s",
        ]
        if self.identity is not None:
            lines.append(f"StudyInstanceUID  : {self.identity.study_uid}")
            lines.append(f"SeriesInstanceUID : {self.identity.series_uid}")
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# File discovery
# ---------------------------------------------------------------------------

def find_ima_files(input_dir: Path, extension: Optional[str] = None) -> list[Path]:
    """Return IMA files directly inside *input_dir*, sorted by name."""
    extension = (extension or CONFIG["conversion"]["input_extension"]).lower()
    return sorted(
        entry for entry in Path(input_dir).iterdir()
        if entry.is_file() and entry.suffix.lower() == extension
    )


def output_path_for(source: Path, output_dir: Path, extension: Optional[str] = None) -> Path:
    """Same base name as *source*, DICOM extension, inside *output_dir*."""
    extension = extension or CONFIG["conversion"]["output_extension"]
    return Path(output_dir) / (source.stem + extension)


def plan_outputs(sources: list[Path], output_dir: Path) -> list[tuple[Path, Path]]:
    """
    Pair every source with its output path.

    Raises
    ------
    OutputCollisionError
        If two sources map to the same output, e.g. ``a.ima`` and
        ``a.IMA``.  Nothing has been written when this is raised.
    """
    claimed: dict[Path, list[Path]] = {}
    for source in sources:
        claimed.setdefault(output_path_for(source, output_dir), []).append(source)

    for destination, owners in claimed.items():
        if len(owners) > 1:
            raise OutputCollisionError(str(destination), [p.name for p in owners])

    return [(source, output_path_for(source, output_dir)) for source in sources]


# ---------------------------------------------------------------------------
# Core pipeline
# ---------------------------------------------------------------------------

def convert_folder(
    request: ResolvedRequest,
    identity: Optional[ConversionIdentity] = None,
    show_progress: bool = True,
) -> PipelineReport:
    """
    Convert all IMA files described by *request*.

    Parameters
    ----------
    request : ResolvedRequest
        Validated input/output directories and conversion parameters.
    identity : ConversionIdentity, optional
        Study/series UIDs to stamp on every file.  A new pair is
        generated when omitted.
    show_progress : bool
        Print one ``[i/n]`` line per converted file.

    Returns
    -------
    PipelineReport
        Summary of the batch run.

    Raises
    ------
    ImaToDicomError
        The first per-file failure (PixelReadError, EncodeError), or
        OutputCollisionError before any file is converted.
    OSError
        If the input directory cannot be listed or an output cannot be
        written.
    """
    identity = identity or ConversionIdentity.generate()
    report = PipelineReport(identity=identity)
    batch_start = time.time()

    files = find_ima_files(request.input_dir)
    report.total_files = len(files)
    jobs = plan_outputs(files, request.output_dir)
    logger.info("Starting conversion: %d file(s) in %s", report.total_files, request.input_dir)

    for i, (source, destination) in enumerate(jobs, start=1):
        convert_file(source, destination, request.parameters, identity)
        report.outputs.append(destination)
        if show_progress:
            print(f"[{i}/{report.total_files}] {source.name} -> {os.fspath(destination)}")

    report.elapsed_s = time.time() - batch_start
    logger.debug(report.summary())
    return report
