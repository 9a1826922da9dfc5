"""Tests for the local Tesseract engine."""

import asyncio

import pytest
from PIL import Image

from ocrcast.config import TesseractSettings
from ocrcast.engines import TesseractEngine, TesserocrHandle
from ocrcast.errors import EngineInitError, LocalEngineError

from tests.conftest import FakeTesseractHandle


class TestTesseractEngine:
    def test_passes_rgb_buffer(self):
        handle = FakeTesseractHandle()
        engine = TesseractEngine(handle)

        text = engine.recognize_text_sync(Image.new("L", (7, 5), color=0))

        assert text == "テスト 文字\n"
        assert handle.calls == [(7 * 5 * 3, 7, 5, 3, 21)]

    def test_clears_after_each_call(self):
        handle = FakeTesseractHandle()
        engine = TesseractEngine(handle)

        engine.recognize_text_sync(Image.new("RGB", (2, 2)))
        engine.recognize_text_sync(Image.new("RGB", (2, 2)))

        assert handle.cleared == 2

    def test_failure_wrapped_and_handle_cleared(self):
        handle = FakeTesseractHandle(fail_on_text=True)
        engine = TesseractEngine(handle)

        with pytest.raises(LocalEngineError):
            engine.recognize_text_sync(Image.new("RGB", (2, 2)))

        assert handle.cleared == 1

    def test_clear_failure_keeps_recognition_error(self):
        handle = FakeTesseractHandle(fail_on_text=True, fail_on_clear=True)
        engine = TesseractEngine(handle)

        with pytest.raises(LocalEngineError, match="recognition failed") as exc_info:
            engine.recognize_text_sync(Image.new("RGB", (2, 2)))

        assert "Failed to reset" not in str(exc_info.value)
        assert handle.cleared == 1

    def test_clear_failure_after_success_is_error(self):
        handle = FakeTesseractHandle(fail_on_clear=True)
        engine = TesseractEngine(handle)

        with pytest.raises(LocalEngineError, match="Failed to reset"):
            engine.recognize_text_sync(Image.new("RGB", (2, 2)))

    def test_no_text_is_error(self):
        handle = FakeTesseractHandle(text=None)
        engine = TesseractEngine(handle)

        with pytest.raises(LocalEngineError):
            engine.recognize_text_sync(Image.new("RGB", (2, 2)))

    @pytest.mark.asyncio
    async def test_concurrent_calls_never_overlap(self):
        handle = FakeTesseractHandle(delay=0.01)
        engine = TesseractEngine(handle)

        results = await asyncio.gather(*[
            engine.recognize_text(Image.new("RGB", (4, 4))) for _ in range(8)
        ])

        assert results == ["テスト 文字\n"] * 8
        assert handle.overlapped is False
        assert handle.max_active == 1
        assert len(handle.calls) == 8

    @pytest.mark.asyncio
    async def test_aclose_closes_handle(self):
        handle = FakeTesseractHandle()
        engine = TesseractEngine(handle)

        await engine.aclose()

        assert handle.closed is True


class TestTesserocrHandle:
    def test_missing_data_dir(self, tmp_path):
        with pytest.raises(EngineInitError):
            TesserocrHandle.open(str(tmp_path / "missing"), "jpn")

    def test_from_settings_missing_model(self, tmp_path):
        pytest.importorskip("tesserocr")

        with pytest.raises(EngineInitError):
            TesseractEngine.from_settings(
                TesseractSettings(data_dir=str(tmp_path), language="no_such_language")
            )

    def test_from_settings_missing_data_dir(self, tmp_path):
        with pytest.raises(EngineInitError, match="data directory not found"):
            TesseractEngine.from_settings(
                TesseractSettings(data_dir=str(tmp_path / "missing"), language="jpn")
            )
