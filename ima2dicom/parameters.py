"""
parameters.py - The set of descriptive DICOM attributes a run may emit.

Each field maps one-to-one onto a DICOM keyword (the JSON key in the
configuration file is the keyword itself).  Every field is independently
optional: ``None`` means "do not write this attribute", and the model
never substitutes a default of its own.

Geometry here is purely descriptive.  Nothing checks that Rows x Columns
matches the pixel block actually read from the IMA file.
"""

import math
from typing import Annotated, Any, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, StrictInt, StrictStr

# ---------------------------------------------------------------------------
# Field types
# ---------------------------------------------------------------------------

UInt16 = Annotated[StrictInt, Field(ge=0, le=65535)]


def _require_number(value: Any) -> Any:
    # JSON true/false are ints in Python; reject them along with strings.
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"expected a number, got {type(value).__name__}")
    if isinstance(value, float) and not math.isfinite(value):
        raise ValueError(f"expected a finite number, got {value}")
    return value


Double = Annotated[float, BeforeValidator(_require_number)]


class ConversionParameters(BaseModel):
    """Optional descriptive attributes, keyed by DICOM keyword."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    # ---- geometry ----
    rows: Optional[UInt16] = Field(None, alias="Rows")
    columns: Optional[UInt16] = Field(None, alias="Columns")

    # ---- pixel format ----
    samples_per_pixel: Optional[UInt16] = Field(None, alias="SamplesPerPixel")
    photometric_interpretation: Optional[StrictStr] = Field(None, alias="PhotometricInterpretation")
    bits_allocated: Optional[UInt16] = Field(None, alias="BitsAllocated")
    bits_stored: Optional[UInt16] = Field(None, alias="BitsStored")
    high_bit: Optional[UInt16] = Field(None, alias="HighBit")
    pixel_representation: Optional[UInt16] = Field(None, alias="PixelRepresentation")

    # ---- CT scaling ----
    rescale_slope: Optional[Double] = Field(None, alias="RescaleSlope")
    rescale_intercept: Optional[Double] = Field(None, alias="RescaleIntercept")

    # ---- display window ----
    window_center: Optional[Double] = Field(None, alias="WindowCenter")
    window_width: Optional[Double] = Field(None, alias="WindowWidth")

    # ---- spacing ----
    slice_thickness: Optional[Double] = Field(None, alias="SliceThickness")
    spacing_between_slices: Optional[Double] = Field(None, alias="SpacingBetweenSlices")
    # "row,col" text; split into two numbers only at conversion time.
    pixel_spacing: Optional[StrictStr] = Field(None, alias="PixelSpacing")

    # ---- modality ----
    modality: Optional[StrictStr] = Field(None, alias="Modality")

    def present(self) -> dict[str, Any]:
        """Return ``{DICOM keyword: value}`` for every field that is set."""
        return {
            info.alias: getattr(self, name)
            for name, info in type(self).model_fields.items()
            if getattr(self, name) is not None
        }
