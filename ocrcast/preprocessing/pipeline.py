"""
Image transform pipeline.
"""

import io
import time
from typing import Callable, Dict, Sequence, Type

from PIL import Image, UnidentifiedImageError
import structlog

from ocrcast.errors import InvalidImageError
from ocrcast.preprocessing import transforms
from ocrcast.preprocessing.operations import (
    Binarize,
    Crop,
    DrawFilledRectangle,
    GaussianBlur,
    Invert,
    Operation,
    OtsuBinarize,
)

logger = structlog.get_logger(__name__)


def _apply_crop(image: Image.Image, op: Crop) -> Image.Image:
    return transforms.crop(image, op.x, op.y, op.width, op.height)


def _apply_rectangle(image: Image.Image, op: DrawFilledRectangle) -> Image.Image:
    return transforms.draw_filled_rectangle(image, op.x, op.y, op.width, op.height, op.color)


class TransformPipeline:
    """
    Applies an ordered list of operations to an image.

    Operations run strictly in input order. The pipeline holds no state
    between calls, so a single instance can be shared by concurrent requests.
    """

    SUPPORTED_FORMATS = {"PNG", "JPEG", "TIFF", "BMP", "GIF", "WEBP"}

    _STEPS: Dict[Type, Callable[[Image.Image, Operation], Image.Image]] = {
        Invert: lambda image, op: transforms.invert(image),
        Binarize: lambda image, op: transforms.binarize(image, op.threshold),
        OtsuBinarize: lambda image, op: transforms.otsu_binarize(image, op.invert_threshold),
        Crop: _apply_crop,
        DrawFilledRectangle: _apply_rectangle,
        GaussianBlur: lambda image, op: transforms.gaussian_blur(image, op.sigma),
    }

    def apply(self, image: Image.Image, operations: Sequence[Operation]) -> Image.Image:
        """
        Run every operation against the image.

        Args:
            image: Decoded PIL Image
            operations: Operations in the order they must be applied

        Returns:
            The transformed image

        Raises:
            InvalidOperationError: If any operation cannot be applied; no
                partially transformed image is returned
        """
        current = transforms.normalize_mode(image)

        for index, op in enumerate(operations):
            step = self._STEPS.get(type(op))
            if step is None:
                raise TypeError(f"Unsupported operation type: {type(op).__name__}")
            current = step(current, op)
            logger.debug(
                "pipeline_step_applied",
                step=index,
                operation=op.type,
                mode=current.mode,
                size=current.size
            )

        return current

    def timed_apply(self, image: Image.Image, operations: Sequence[Operation]):
        """Like apply(), also returning the elapsed seconds."""
        start = time.perf_counter()
        result = self.apply(image, operations)
        return result, time.perf_counter() - start

    @classmethod
    def load_image(cls, source) -> Image.Image:
        """
        Decode an image from bytes, a file path or a file-like object.

        Raises:
            InvalidImageError: If the data is not a decodable image
        """
        try:
            if isinstance(source, (bytes, bytearray)):
                image = Image.open(io.BytesIO(source))
            else:
                image = Image.open(source)
            image.load()
        except (
            UnidentifiedImageError,
            Image.DecompressionBombError,
            OSError,
            ValueError,
            SyntaxError,
        ) as e:
            raise InvalidImageError(f"Failed to load image: {e}")

        if image.format and image.format.upper() not in cls.SUPPORTED_FORMATS:
            logger.warning("unsupported_format", format=image.format)

        return image

    @staticmethod
    def image_to_bytes(image: Image.Image, format: str = "PNG") -> bytes:
        """Convert PIL Image to bytes."""
        buffer = io.BytesIO()
        image.save(buffer, format=format)
        return buffer.getvalue()

    @staticmethod
    def to_rgb(image: Image.Image) -> Image.Image:
        """Flatten to 8-bit RGB, the layout both engines receive."""
        if image.mode == "RGB":
            return image
        return image.convert("RGB")
