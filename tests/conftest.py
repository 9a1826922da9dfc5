"""Common fixtures."""

import io
import threading
import time
from typing import List

import pytest
from PIL import Image

from ocrcast.engines import OcrEngineSelector, TextRecognizer


class StubEngine(TextRecognizer):
    """Returns fixed text and remembers the images it was given."""

    def __init__(self, text: str = "ABC", name: str = "stub"):
        self.text = text
        self.name = name
        self.images: List[Image.Image] = []
        self.closed = False

    async def recognize_text(self, image: Image.Image) -> str:
        self.images.append(image.copy())
        return self.text

    async def aclose(self):
        self.closed = True


class FakeTesseractHandle:
    """Non-reentrant stand-in for the native handle; fails on overlapping use."""

    def __init__(
        self,
        text: str = "テスト 文字\n",
        delay: float = 0.0,
        fail_on_text: bool = False,
        fail_on_clear: bool = False
    ):
        self.text = text
        self.delay = delay
        self.fail_on_text = fail_on_text
        self.fail_on_clear = fail_on_clear
        self.calls = []
        self.active = 0
        self.max_active = 0
        self.overlapped = False
        self.cleared = 0
        self.closed = False
        self._guard = threading.Lock()

    def set_image(self, data, width, height, bytes_per_pixel, bytes_per_line):
        with self._guard:
            self.active += 1
            self.max_active = max(self.max_active, self.active)
            if self.active > 1:
                self.overlapped = True
        self.calls.append((len(data), width, height, bytes_per_pixel, bytes_per_line))

    def get_utf8_text(self):
        if self.delay:
            time.sleep(self.delay)
        if self.fail_on_text:
            raise RuntimeError("recognition failed")
        return self.text

    def clear(self):
        with self._guard:
            self.active = max(self.active - 1, 0)
        self.cleared += 1
        if self.fail_on_clear:
            raise RuntimeError("clear failed")

    def close(self):
        self.closed = True


def png_bytes(image: Image.Image) -> bytes:
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def red_image():
    """A 10x10 solid red RGB image."""
    return Image.new("RGB", (10, 10), color=(255, 0, 0))


@pytest.fixture
def gradient_image():
    """A 64x32 grayscale horizontal gradient."""
    return Image.frombytes("L", (64, 32), bytes((x * 4) % 256 for _ in range(32) for x in range(64)))


@pytest.fixture
def two_tone_image():
    """Left half dark (40), right half light (200)."""
    image = Image.new("L", (20, 10), color=40)
    image.paste(200, (10, 0, 20, 10))
    return image


@pytest.fixture
def stub_engines():
    return {
        OcrEngineSelector.LOCAL: StubEngine("ABC", name="tesseract"),
        OcrEngineSelector.REMOTE: StubEngine("word1 word2\nword3 word4\n", name="googleLens"),
    }
