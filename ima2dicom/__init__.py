"""Convert legacy Siemens IMA CT images into DICOM files."""

from ima2dicom.arguments import ResolvedRequest, resolve_request
from ima2dicom.converter import ConversionIdentity, build_dataset, convert_file
from ima2dicom.loader import load_parameters, parse_parameters
from ima2dicom.parameters import ConversionParameters
from ima2dicom.pipeline import PipelineReport, convert_folder

__version__ = "1.0.0"

__all__ = [
    "__version__",
    "ConversionIdentity",
    "ConversionParameters",
    "PipelineReport",
    "ResolvedRequest",
    "build_dataset",
    "convert_file",
    "convert_folder",
    "load_parameters",
    "parse_parameters",
    "resolve_request",
]
