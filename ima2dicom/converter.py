"""
converter.py - Build and encode one DICOM file from IMA pixel data.

A small fixed block of attributes is always written: the CT Image
Storage SOP class, a fresh SOP instance UID, the run's study and series
UIDs, and the pixel data.  Everything else comes from
ConversionParameters and is written only when the field is set, so the
output may carry a partial attribute set.

The study/series UID pair lives in a ConversionIdentity that the batch
driver creates once and passes into every call.  Regenerating it per
file would split one input directory across many studies.
"""

import io
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Union

import pydicom
from pydicom.dataset import Dataset, FileDataset, FileMetaDataset
from pydicom.uid import CTImageStorage, ExplicitVRLittleEndian, generate_uid
from pydicom.valuerep import DSfloat

from ima2dicom.errors import EncodeError
from ima2dicom.parameters import ConversionParameters
from ima2dicom.pixels import extract_pixels

logger = logging.getLogger(__name__)

PIXEL_SPACING_EXAMPLE = "0.48828125,0.48828125"

# Decimal String attributes need their floats formatted to fit 16 chars.
_DECIMAL_STRING_KEYWORDS = {
    "RescaleSlope",
    "RescaleIntercept",
    "WindowCenter",
    "WindowWidth",
    "SliceThickness",
    "SpacingBetweenSlices",
}


@dataclass(frozen=True)
class ConversionIdentity:
    """Study and series UIDs shared by every file converted in one run."""
    study_uid: str
    series_uid: str

    @classmethod
    def generate(cls) -> "ConversionIdentity":
        return cls(study_uid=generate_uid(), series_uid=generate_uid())


def parse_pixel_spacing(text: str) -> tuple[float, float]:
    """
    Split ``"row,col"`` into two floats.

    Raises
    ------
    EncodeError
        If the text does not contain exactly two numeric components.
    """
    parts = text.split(",")
    if len(parts) == 2:
        try:
            return float(parts[0].strip()), float(parts[1].strip())
        except ValueError:
            pass
    raise EncodeError(
        f"Invalid PixelSpacing format: '{text}'. Expected format: '{PIXEL_SPACING_EXAMPLE}'"
    )


def _attribute_value(keyword: str, value: Any) -> Any:
    if keyword == "PixelSpacing":
        row, col = parse_pixel_spacing(value)
        return [DSfloat(row, auto_format=True), DSfloat(col, auto_format=True)]
    if keyword in _DECIMAL_STRING_KEYWORDS:
        return DSfloat(value, auto_format=True)
    return value


def build_dataset(
    pixel_data: bytes,
    parameters: ConversionParameters,
    identity: ConversionIdentity,
) -> FileDataset:
    """
    Assemble a DICOM dataset for one converted image.

    Parameters
    ----------
    pixel_data : bytes
        Pixel block, already in little-endian sample order.
    parameters : ConversionParameters
        Optional attributes; only the fields that are set are written.
    identity : ConversionIdentity
        Study/series UIDs for the current run.

    Returns
    -------
    FileDataset
        Dataset with file meta information for Explicit VR Little Endian.

    Raises
    ------
    EncodeError
        If pixel spacing is malformed or pydicom rejects a value.
    """
    instance_uid = generate_uid()

    file_meta = FileMetaDataset()
    file_meta.MediaStorageSOPClassUID = CTImageStorage
    file_meta.MediaStorageSOPInstanceUID = instance_uid
    file_meta.TransferSyntaxUID = ExplicitVRLittleEndian

    ds = FileDataset(None, Dataset(), file_meta=file_meta, preamble=b"\0" * 128)

    # ---- identity (always written) ----
    ds.SOPClassUID = CTImageStorage
    ds.SOPInstanceUID = instance_uid
    ds.StudyInstanceUID = identity.study_uid
    ds.SeriesInstanceUID = identity.series_uid

    # ---- configurable attributes ----
    for keyword, value in parameters.present().items():
        try:
            setattr(ds, keyword, _attribute_value(keyword, value))
        except (ValueError, TypeError, OverflowError) as exc:
            raise EncodeError(f"Invalid value for {keyword}: {value!r} ({exc})") from exc

    # ---- pixel data (always written) ----
    # OW explicitly: samples are 16-bit and BitsAllocated may be absent.
    ds.add_new(0x7FE00010, "OW", pixel_data)

    return ds


def encode_dataset(ds: FileDataset) -> bytes:
    """Encode *ds* as a complete DICOM file (preamble, meta, dataset) in memory."""
    buffer = io.BytesIO()
    try:
        pydicom.dcmwrite(buffer, ds, enforce_file_format=True)
    except (ValueError, TypeError, AttributeError, OverflowError) as exc:
        raise EncodeError(f"DICOM encoding failed: {exc}") from exc
    return buffer.getvalue()


def convert_file(
    source: Union[str, Path],
    destination: Union[str, Path],
    parameters: ConversionParameters,
    identity: ConversionIdentity,
) -> Path:
    """Convert one IMA file and write the DICOM result to *destination*."""
    pixel_data = extract_pixels(source)
    ds = build_dataset(pixel_data, parameters, identity)
    encoded = encode_dataset(ds)

    destination = Path(destination)
    destination.write_bytes(encoded)
    logger.debug(
        "Wrote %s (%d bytes, SOPInstanceUID=%s)", destination, len(encoded), ds.SOPInstanceUID
    )
    return destination
