"""Tests for request orchestration."""

import threading
from unittest.mock import MagicMock

import pytest
from PIL import Image

from ocrcast.config import Settings
from ocrcast.engines import OcrEngineSelector
from ocrcast.errors import EngineError, EngineInitError, InvalidOperationError
from ocrcast.lens import LensClient, LensWebClient
from ocrcast.orchestrator import OCROrchestrator, build_engines
from ocrcast.preprocessing import Crop, DrawFilledRectangle, GaussianBlur, Invert

from tests.conftest import StubEngine


class TestOCROrchestrator:
    @pytest.mark.asyncio
    async def test_end_to_end_invert(self, red_image, stub_engines):
        sink = MagicMock()
        orchestrator = OCROrchestrator(stub_engines, sink=sink)

        text = await orchestrator.process(red_image, OcrEngineSelector.LOCAL, [Invert()])

        assert text == "ABC"
        sink.send_message.assert_called_once_with("ABC")
        seen = stub_engines[OcrEngineSelector.LOCAL].images[0]
        assert seen.mode == "RGB"
        assert seen.getpixel((5, 5)) == (0, 255, 255)

    @pytest.mark.asyncio
    async def test_remote_output_normalized(self, red_image, stub_engines):
        sink = MagicMock()
        orchestrator = OCROrchestrator(stub_engines, sink=sink)

        text = await orchestrator.process(red_image, OcrEngineSelector.REMOTE)

        assert text == "word1word2\nword3word4"
        sink.send_message.assert_called_once_with("word1word2\nword3word4")
        assert stub_engines[OcrEngineSelector.LOCAL].images == []

    @pytest.mark.asyncio
    async def test_engine_receives_rgb_after_rectangle(self, red_image, stub_engines):
        orchestrator = OCROrchestrator(stub_engines)
        rectangle = DrawFilledRectangle(x=0, y=0, width=2, height=2, r=0, g=0, b=255, a=255)

        await orchestrator.process(red_image, OcrEngineSelector.LOCAL, [rectangle])

        seen = stub_engines[OcrEngineSelector.LOCAL].images[0]
        assert seen.mode == "RGB"
        assert seen.getpixel((0, 0)) == (0, 0, 255)

    @pytest.mark.asyncio
    async def test_invalid_operation_skips_engine_and_delivery(self, red_image, stub_engines):
        sink = MagicMock()
        orchestrator = OCROrchestrator(stub_engines, sink=sink)

        with pytest.raises(InvalidOperationError):
            await orchestrator.process(
                red_image, OcrEngineSelector.LOCAL, [Crop(x=0, y=0, width=20, height=20)]
            )

        assert stub_engines[OcrEngineSelector.LOCAL].images == []
        sink.send_message.assert_not_called()

    @pytest.mark.asyncio
    async def test_blur_sigma_checked_at_apply_time(self, red_image, stub_engines):
        orchestrator = OCROrchestrator(stub_engines)

        with pytest.raises(InvalidOperationError):
            await orchestrator.process(red_image, OcrEngineSelector.LOCAL, [GaussianBlur(sigma=-1)])

    @pytest.mark.asyncio
    async def test_missing_engine(self, red_image):
        orchestrator = OCROrchestrator({OcrEngineSelector.LOCAL: StubEngine()})

        with pytest.raises(EngineError):
            await orchestrator.ocr(OcrEngineSelector.REMOTE, red_image)

    @pytest.mark.asyncio
    async def test_whitespace_kept_when_disabled(self, red_image, stub_engines):
        orchestrator = OCROrchestrator(stub_engines, strip_whitespace=False)

        text = await orchestrator.process(red_image, OcrEngineSelector.REMOTE)

        assert text == "word1 word2\nword3 word4\n"

    @pytest.mark.asyncio
    async def test_debug_output_saved(self, red_image, stub_engines, tmp_path):
        path = tmp_path / "debug.png"
        orchestrator = OCROrchestrator(stub_engines, debug_output_path=str(path))

        await orchestrator.process(red_image, OcrEngineSelector.LOCAL, [Invert()])

        assert Image.open(path).getpixel((0, 0)) == (0, 255, 255)

    @pytest.mark.asyncio
    async def test_debug_output_saved_off_event_loop(self, red_image, stub_engines, tmp_path, monkeypatch):
        path = tmp_path / "debug.png"
        loop_thread = threading.get_ident()
        save_threads = []
        original_save = Image.Image.save

        def recording_save(image, *args, **kwargs):
            save_threads.append(threading.get_ident())
            return original_save(image, *args, **kwargs)

        monkeypatch.setattr(Image.Image, "save", recording_save)
        orchestrator = OCROrchestrator(stub_engines, debug_output_path=str(path))

        await orchestrator.process(red_image, OcrEngineSelector.LOCAL)

        assert path.exists()
        assert len(save_threads) == 1
        assert save_threads[0] != loop_thread

    @pytest.mark.asyncio
    async def test_aclose_closes_engines(self, stub_engines):
        orchestrator = OCROrchestrator(stub_engines)

        await orchestrator.aclose()

        assert all(engine.closed for engine in stub_engines.values())

    def test_from_settings_uses_given_engines(self, stub_engines):
        settings = Settings(normalization={"strip_whitespace": False})

        orchestrator = OCROrchestrator.from_settings(settings, engines=stub_engines)

        assert orchestrator.strip_whitespace is False
        assert set(orchestrator.engines) == set(stub_engines)


class TestBuildEngines:
    def test_missing_tessdata_aborts(self, tmp_path):
        settings = Settings(tesseract={"data_dir": str(tmp_path / "missing")})

        with pytest.raises(EngineInitError):
            build_engines(settings)

    @pytest.mark.parametrize("backend, expected", [("protobuf", LensClient), ("web", LensWebClient)])
    def test_remote_backend_selected(self, monkeypatch, backend, expected):
        monkeypatch.setattr(
            "ocrcast.orchestrator.TesseractEngine.from_settings",
            lambda settings: StubEngine(name="tesseract")
        )
        settings = Settings(lens={"backend": backend})

        engines = build_engines(settings)

        assert isinstance(engines[OcrEngineSelector.REMOTE], expected)
