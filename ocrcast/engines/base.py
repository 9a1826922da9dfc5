"""
Recognition engine interface.
"""

from abc import ABC, abstractmethod
from enum import Enum

from PIL import Image


class OcrEngineSelector(str, Enum):
    """Engine requested by the caller, by its wire name."""

    LOCAL = "tesseract"
    REMOTE = "googleLens"


class TextRecognizer(ABC):
    """
    Extracts raw text from an image.

    Implementations receive an 8-bit RGB image they may consume freely.
    """

    name: str = "unknown"

    @abstractmethod
    async def recognize_text(self, image: Image.Image) -> str:
        """
        Recognize the text in an image.

        Raises:
            EngineError: If recognition fails for this image
        """

    async def aclose(self):
        """Release engine resources."""
        return None
