"""
Local Tesseract engine with a single persistent, non-reentrant handle.
"""

import asyncio
import threading
import time
from pathlib import Path
from typing import Protocol

from PIL import Image
import structlog

from ocrcast.config import TesseractSettings, get_settings
from ocrcast.engines.base import TextRecognizer
from ocrcast.errors import EngineInitError, LocalEngineError
from ocrcast.observability.metrics import get_metrics

logger = structlog.get_logger(__name__)


class TesseractHandle(Protocol):
    """The subset of the native Tesseract API the engine drives."""

    def set_image(
        self,
        data: bytes,
        width: int,
        height: int,
        bytes_per_pixel: int,
        bytes_per_line: int
    ) -> None: ...

    def get_utf8_text(self) -> str: ...

    def clear(self) -> None: ...

    def close(self) -> None: ...


class TesserocrHandle:
    """TesseractHandle backed by tesserocr's PyTessBaseAPI."""

    def __init__(self, api):
        self._api = api

    @classmethod
    def open(cls, data_dir: str, language: str) -> "TesserocrHandle":
        """
        Initialize Tesseract with an LSTM-only model.

        Raises:
            EngineInitError: If the data directory or language model cannot
                be loaded
        """
        if not Path(data_dir).is_dir():
            raise EngineInitError(
                f"Tesseract data directory not found: {data_dir}",
                {"data_dir": data_dir}
            )

        import tesserocr

        try:
            api = tesserocr.PyTessBaseAPI(
                path=data_dir,
                lang=language,
                oem=tesserocr.OEM.LSTM_ONLY
            )
        except RuntimeError as e:
            raise EngineInitError(
                f"Failed to initialize Tesseract: {e}",
                {"data_dir": data_dir, "language": language}
            ) from e
        return cls(api)

    def set_image(self, data, width, height, bytes_per_pixel, bytes_per_line):
        self._api.SetImageBytes(data, width, height, bytes_per_pixel, bytes_per_line)

    def get_utf8_text(self) -> str:
        return self._api.GetUTF8Text()

    def clear(self):
        self._api.Clear()

    def close(self):
        self._api.End()


class TesseractEngine(TextRecognizer):
    """
    Serializes every recognition through one lock.

    The native handle keeps state between calls and must never be entered
    by two threads at once. The lock spans set-image through text
    extraction and the clear that follows, so a later call never sees the
    previous call's image or results. Waiting callers queue on the lock;
    a call that has started runs to completion even if its caller goes away.
    """

    name = "tesseract"

    def __init__(self, handle: TesseractHandle):
        self._handle = handle
        self._lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings: TesseractSettings = None) -> "TesseractEngine":
        settings = settings or get_settings().tesseract
        logger.info(
            "tesseract_initializing",
            data_dir=settings.data_dir,
            language=settings.language
        )
        handle = TesserocrHandle.open(settings.data_dir, settings.language)
        logger.info("tesseract_initialized")
        return cls(handle)

    def recognize_text_sync(self, image: Image.Image) -> str:
        """Blocking recognition; safe to call from any thread."""
        rgb = image if image.mode == "RGB" else image.convert("RGB")
        width, height = rgb.size
        data = rgb.tobytes()

        queued_at = time.perf_counter()
        with self._lock:
            get_metrics().local_lock_wait.observe(time.perf_counter() - queued_at)
            logger.debug("local_engine_lock_acquired", width=width, height=height)
            failed = True
            try:
                self._handle.set_image(data, width, height, 3, 3 * width)
                text = self._handle.get_utf8_text()
                failed = False
            except (RuntimeError, ValueError, TypeError) as e:
                logger.error("tesseract_recognition_failed", error=str(e))
                raise LocalEngineError(
                    f"Tesseract recognition failed: {e}",
                    {"width": width, "height": height}
                ) from e
            finally:
                # A failed reset must not mask the recognition error
                self._clear_handle(suppress_errors=failed)

        if text is None:
            raise LocalEngineError("Tesseract returned no text")
        return text

    def _clear_handle(self, suppress_errors: bool = False):
        try:
            self._handle.clear()
        except (RuntimeError, ValueError, TypeError) as e:
            logger.error("tesseract_clear_failed", error=str(e))
            if not suppress_errors:
                raise LocalEngineError(f"Failed to reset Tesseract handle: {e}") from e

    async def recognize_text(self, image: Image.Image) -> str:
        return await asyncio.to_thread(self.recognize_text_sync, image)

    async def aclose(self):
        with self._lock:
            self._handle.close()
        logger.info("tesseract_closed")
