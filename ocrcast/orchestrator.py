"""
OCR orchestration: transform, recognize, normalize, deliver.
"""

import asyncio
import time
from typing import Mapping, Optional, Sequence

from PIL import Image
import structlog

from ocrcast.config import Settings, get_settings
from ocrcast.delivery import MessageSink
from ocrcast.engines import OcrEngineSelector, TesseractEngine, TextRecognizer
from ocrcast.errors import EngineError
from ocrcast.lens import LensClient, LensWebClient
from ocrcast.normalization import normalize_text
from ocrcast.observability.metrics import get_metrics
from ocrcast.preprocessing import Operation, TransformPipeline

logger = structlog.get_logger(__name__)


def build_engines(settings: Settings = None) -> dict:
    """
    Create both engines from settings.

    Raises:
        EngineInitError: If the local engine cannot load its model
    """
    settings = settings or get_settings()
    remote_cls = LensWebClient if settings.lens.backend == "web" else LensClient
    return {
        OcrEngineSelector.LOCAL: TesseractEngine.from_settings(settings.tesseract),
        OcrEngineSelector.REMOTE: remote_cls(settings.lens),
    }


class OCROrchestrator:
    """
    Routes each request to the selected engine.

    The engines are chosen once, at construction; the pipeline and the
    normalizer never see which one ran.
    """

    def __init__(
        self,
        engines: Mapping[OcrEngineSelector, TextRecognizer],
        sink: Optional[MessageSink] = None,
        pipeline: Optional[TransformPipeline] = None,
        strip_whitespace: bool = True,
        debug_output_path: Optional[str] = None
    ):
        self._engines = dict(engines)
        self._sink = sink
        self._pipeline = pipeline or TransformPipeline()
        self.strip_whitespace = strip_whitespace
        self.debug_output_path = debug_output_path

    @classmethod
    def from_settings(
        cls,
        settings: Settings = None,
        sink: Optional[MessageSink] = None,
        engines: Optional[Mapping[OcrEngineSelector, TextRecognizer]] = None
    ) -> "OCROrchestrator":
        settings = settings or get_settings()
        return cls(
            engines if engines is not None else build_engines(settings),
            sink=sink,
            strip_whitespace=settings.normalization.strip_whitespace,
            debug_output_path=settings.debug_output_path,
        )

    @property
    def engines(self) -> dict:
        return dict(self._engines)

    async def ocr(self, selector: OcrEngineSelector, image: Image.Image) -> str:
        """
        Recognize and normalize the text of an already transformed image.

        Raises:
            EngineError: If the selected engine is unavailable or fails
        """
        engine = self._engines.get(OcrEngineSelector(selector))
        if engine is None:
            raise EngineError(f"OCR engine '{selector}' is not configured")

        start_time = time.perf_counter()
        raw_text = await engine.recognize_text(image)
        get_metrics().record_engine_call(engine.name, time.perf_counter() - start_time)

        text = normalize_text(raw_text, strip_whitespace=self.strip_whitespace)
        logger.info(
            "ocr_complete",
            engine=engine.name,
            raw_length=len(raw_text),
            length=len(text)
        )
        return text

    async def process(
        self,
        image: Image.Image,
        selector: OcrEngineSelector,
        operations: Sequence[Operation] = ()
    ) -> str:
        """
        Run the full request: transform, recognize, normalize, deliver.

        Validation errors from the pipeline surface before any engine is
        called. The normalized text is handed to the sink and returned.
        """
        metrics = get_metrics()
        transformed, elapsed = await asyncio.to_thread(
            self._pipeline.timed_apply, image, operations
        )
        metrics.pipeline_duration.observe(elapsed)
        logger.info(
            "pipeline_complete",
            operations=len(operations),
            mode=transformed.mode,
            size=transformed.size
        )

        transformed = self._pipeline.to_rgb(transformed)
        if self.debug_output_path:
            await asyncio.to_thread(transformed.save, self.debug_output_path)

        text = await self.ocr(selector, transformed)

        if self._sink is not None:
            self._sink.send_message(text)
            metrics.record_delivery(len(text))
        return text

    async def aclose(self):
        for engine in self._engines.values():
            await engine.aclose()
