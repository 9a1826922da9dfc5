"""Image transform module."""

from ocrcast.preprocessing.pipeline import TransformPipeline
from ocrcast.preprocessing.operations import (
    Operation,
    Invert,
    Binarize,
    OtsuBinarize,
    Crop,
    DrawFilledRectangle,
    GaussianBlur,
    parse_operations,
)

__all__ = [
    "TransformPipeline",
    "Operation",
    "Invert",
    "Binarize",
    "OtsuBinarize",
    "Crop",
    "DrawFilledRectangle",
    "GaussianBlur",
    "parse_operations",
]
