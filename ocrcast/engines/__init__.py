"""Recognition engines."""

from ocrcast.engines.base import OcrEngineSelector, TextRecognizer
from ocrcast.engines.tesseract import TesseractEngine, TesseractHandle, TesserocrHandle

__all__ = [
    "OcrEngineSelector",
    "TextRecognizer",
    "TesseractEngine",
    "TesseractHandle",
    "TesserocrHandle",
]
