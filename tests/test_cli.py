"""Tests for the command-line tools."""

import json

import pytest
from click.testing import CliRunner
from PIL import Image

from ocrcast.cli.main import cli


class TestTransformCommand:
    def test_invert_file_to_file(self, tmp_path, red_image):
        source = tmp_path / "in.png"
        target = tmp_path / "out.png"
        red_image.save(source)

        result = CliRunner().invoke(cli, [
            "transform",
            "--operation", json.dumps({"type": "invert"}),
            "--input", str(source),
            "--output", str(target),
        ])

        assert result.exit_code == 0, result.output
        output = Image.open(target)
        assert output.format == "PNG"
        assert output.getpixel((0, 0)) == (0, 255, 255)

    def test_operations_chained_in_order(self, tmp_path, gradient_image):
        source = tmp_path / "in.png"
        target = tmp_path / "out.png"
        gradient_image.save(source)

        result = CliRunner().invoke(cli, [
            "transform",
            "--operation", json.dumps({"type": "crop", "x": 0, "y": 0, "width": 8, "height": 4}),
            "--operation", json.dumps({"type": "binarize", "threshold": 10}),
            "--input", str(source),
            "--output", str(target),
        ])

        assert result.exit_code == 0, result.output
        assert Image.open(target).size == (8, 4)

    def test_keeps_jpeg_format(self, tmp_path, red_image):
        source = tmp_path / "in.jpg"
        target = tmp_path / "out.jpg"
        red_image.save(source, format="JPEG")

        result = CliRunner().invoke(cli, [
            "transform",
            "--operation", json.dumps({
                "type": "drawFilledRectangle", "x": 0, "y": 0, "width": 2, "height": 2,
                "r": 0, "g": 0, "b": 0, "a": 255
            }),
            "--input", str(source),
            "--output", str(target),
        ])

        assert result.exit_code == 0, result.output
        assert Image.open(target).format == "JPEG"

    def test_invalid_operation_fails(self, tmp_path, red_image):
        source = tmp_path / "in.png"
        red_image.save(source)

        result = CliRunner().invoke(cli, [
            "transform",
            "--operation", json.dumps({"type": "crop", "x": 0, "y": 0, "width": 50, "height": 50}),
            "--input", str(source),
            "--output", str(tmp_path / "out.png"),
        ])

        assert result.exit_code == 1
        assert not (tmp_path / "out.png").exists()


class TestOcrCommand:
    def test_unknown_operation_fails(self, tmp_path, red_image):
        source = tmp_path / "in.png"
        red_image.save(source)

        result = CliRunner().invoke(cli, [
            "ocr", "google-lens",
            "--input", str(source),
            "--operations", json.dumps([{"type": "sharpen"}]),
        ])

        assert result.exit_code == 1

    def test_missing_tessdata_fails(self, tmp_path, red_image):
        pytest.importorskip("tesserocr")
        source = tmp_path / "in.png"
        red_image.save(source)

        result = CliRunner().invoke(cli, [
            "ocr", "tesseract",
            "--input", str(source),
            "--tessdata-dir", str(tmp_path / "missing"),
        ])

        assert result.exit_code == 1
