"""
Pixel transforms applied by the pipeline.

Every function takes a PIL Image in mode ``L``, ``RGB`` or ``RGBA`` and
returns a new image; the input is never modified.
"""

import math

import cv2
import numpy as np
from PIL import Image
import structlog

from ocrcast.errors import InvalidOperationError

logger = structlog.get_logger(__name__)

SUPPORTED_MODES = ("L", "RGB", "RGBA")


def normalize_mode(image: Image.Image) -> Image.Image:
    """Bring a decoded image into one of the supported color models."""
    if image.mode in SUPPORTED_MODES:
        return image
    if image.mode in ("1", "I", "I;16", "I;16B", "I;16L", "F"):
        return image.convert("L")
    if image.mode in ("LA", "PA"):
        return image.convert("RGBA")
    if image.mode == "P":
        return image.convert("RGBA" if "transparency" in image.info else "RGB")
    return image.convert("RGB")


def to_grayscale(image: Image.Image) -> Image.Image:
    """
    Convert to 8-bit grayscale, dropping color and alpha.

    Uses Rec. 709 luma in integer arithmetic, truncating:
    (2126 * r + 7152 * g + 722 * b) // 10000.
    """
    if image.mode == "L":
        return image
    rgb = np.asarray(image.convert("RGB") if image.mode != "RGBA" else image, dtype=np.uint32)
    luma = (2126 * rgb[..., 0] + 7152 * rgb[..., 1] + 722 * rgb[..., 2]) // 10000
    return Image.fromarray(luma.astype(np.uint8))


def invert(image: Image.Image) -> Image.Image:
    """Replace every color channel value v with 255 - v. Alpha is kept."""
    pixels = np.array(image, dtype=np.uint8)
    if image.mode == "RGBA":
        pixels[..., :3] = 255 - pixels[..., :3]
    else:
        pixels = 255 - pixels
    return Image.fromarray(pixels)


def binarize(image: Image.Image, threshold: int) -> Image.Image:
    """
    Threshold a grayscale copy of the image.

    Intensities <= threshold become 0 (background), everything else 255.
    """
    gray = np.asarray(to_grayscale(image))
    # THRESH_BINARY keeps src > thresh as maxval, so the threshold is inclusive on the background side
    _, binary = cv2.threshold(gray, int(threshold), 255, cv2.THRESH_BINARY)
    return Image.fromarray(binary)


def otsu_level(image: Image.Image) -> int:
    """
    Find the intensity that maximizes inter-class variance.

    The background class holds intensities <= the returned level. Ties keep
    the lowest level; an image with a single intensity yields 0.
    """
    gray = np.asarray(to_grayscale(image))
    hist = np.bincount(gray.ravel(), minlength=256).astype(np.float64)
    levels = np.arange(256, dtype=np.float64)

    background_weight = np.cumsum(hist)
    background_sum = np.cumsum(hist * levels)
    total_weight = background_weight[-1]
    total_sum = background_sum[-1]
    foreground_weight = total_weight - background_weight

    valid = (background_weight > 0) & (foreground_weight > 0)
    variance = np.zeros(256, dtype=np.float64)
    with np.errstate(divide="ignore", invalid="ignore"):
        background_mean = background_sum / background_weight
        foreground_mean = (total_sum - background_sum) / foreground_weight
        between = background_weight * foreground_weight * (background_mean - foreground_mean) ** 2
    variance[valid] = between[valid]

    if not variance.any():
        return 0
    return int(np.argmax(variance))


def otsu_binarize(image: Image.Image, invert_threshold: bool = False) -> Image.Image:
    """
    Binarize with an automatically selected threshold.

    Args:
        image: PIL Image
        invert_threshold: Use 255 - otsu_level; useful after the image
            colors have been inverted
    """
    gray = to_grayscale(image)
    level = otsu_level(gray)
    threshold = 255 - level if invert_threshold else level
    logger.debug("otsu_level_computed", otsu_level=level, threshold=threshold)
    return binarize(gray, threshold)


def crop(image: Image.Image, x: int, y: int, width: int, height: int) -> Image.Image:
    """
    Extract a sub-image.

    Raises:
        InvalidOperationError: If the rectangle is empty or not fully inside
            the image
    """
    image_width, image_height = image.size
    if width == 0 or height == 0:
        raise InvalidOperationError(
            "crop",
            "Crop rectangle must have a non-zero width and height",
            {"width": width, "height": height}
        )
    if x + width > image_width or y + height > image_height:
        raise InvalidOperationError(
            "crop",
            f"Crop rectangle ({x}, {y}, {width}x{height}) exceeds image bounds "
            f"{image_width}x{image_height}",
            {
                "x": x, "y": y, "width": width, "height": height,
                "image_width": image_width, "image_height": image_height,
            }
        )
    return image.crop((x, y, x + width, y + height))


def draw_filled_rectangle(
    image: Image.Image,
    x: int,
    y: int,
    width: int,
    height: int,
    color: tuple
) -> Image.Image:
    """
    Paint a solid RGBA rectangle, clipped to the canvas.

    The result is always RGBA. Pixels inside the rectangle are replaced by
    ``color``, not blended.
    """
    if width == 0 or height == 0:
        raise InvalidOperationError(
            "drawFilledRectangle",
            "Rectangle must have a non-zero width and height",
            {"width": width, "height": height}
        )
    pixels = np.array(image.convert("RGBA"), dtype=np.uint8)
    canvas_height, canvas_width = pixels.shape[:2]

    left, top = max(x, 0), max(y, 0)
    right, bottom = min(x + width, canvas_width), min(y + height, canvas_height)
    if left < right and top < bottom:
        pixels[top:bottom, left:right] = color
    else:
        logger.debug("rectangle_outside_canvas", x=x, y=y, width=width, height=height)

    return Image.fromarray(pixels)


def gaussian_kernel(sigma: float) -> np.ndarray:
    """Normalized 1-D float32 Gaussian kernel with radius ceil(2 * sigma)."""
    radius = int(math.ceil(2.0 * sigma))
    return cv2.getGaussianKernel(2 * radius + 1, sigma, cv2.CV_32F)


def gaussian_blur(image: Image.Image, sigma: float) -> Image.Image:
    """
    Blur a grayscale copy of the image.

    The convolution is separable and runs in float32; edges replicate the
    border pixels.

    Raises:
        InvalidOperationError: If sigma is not a positive finite number
    """
    if not (sigma > 0) or math.isinf(sigma):
        raise InvalidOperationError(
            "gaussianBlur",
            f"sigma must be > 0, got {sigma}",
            {"sigma": sigma}
        )
    gray = np.asarray(to_grayscale(image)).astype(np.float32)
    kernel = gaussian_kernel(sigma)
    blurred = cv2.sepFilter2D(
        gray, cv2.CV_32F, kernel, kernel, borderType=cv2.BORDER_REPLICATE
    )
    return Image.fromarray(np.clip(np.rint(blurred), 0, 255).astype(np.uint8))
