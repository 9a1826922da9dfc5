"""
Command-line interface for ocrcast.
"""

import asyncio
import sys
from typing import Optional

import click
from dotenv import load_dotenv
from rich.console import Console
from rich.panel import Panel

from ocrcast import __version__

# stdout carries image bytes and recognized text
console = Console(stderr=True)


def _setup_logging(debug: bool):
    from ocrcast.observability.logging import setup_logging

    setup_logging(
        log_level="DEBUG" if debug else "WARNING",
        log_format="console",
        stream=sys.stderr
    )


def _read_input(path: Optional[str]) -> bytes:
    if path:
        with open(path, "rb") as f:
            return f.read()
    return sys.stdin.buffer.read()


def _write_output(path: Optional[str], content: bytes):
    if path:
        with open(path, "wb") as f:
            f.write(content)
        console.print(f"[green]✓[/green] Output saved to {path}")
    else:
        sys.stdout.buffer.write(content)
        sys.stdout.buffer.flush()


def _parse_operations(values) -> list:
    """Each value is one JSON operation object or a JSON array of them."""
    from ocrcast.preprocessing import parse_operations

    operations = []
    for value in values:
        stripped = value.strip()
        operations.extend(parse_operations(stripped if stripped.startswith("[") else f"[{stripped}]"))
    return operations


def _fail(exc):
    console.print(f"[red]✗[/red] {exc.message}")
    if exc.details:
        console.print(exc.details)
    sys.exit(1)


@click.group()
@click.version_option(version=__version__)
def cli():
    """ocrcast - image OCR with live delivery to subscribers."""
    load_dotenv()


@cli.command()
@click.option(
    "--operation",
    "operation_json",
    multiple=True,
    required=True,
    help='Operation as JSON, e.g. \'{"type": "binarize", "threshold": 128}\' (repeatable)'
)
@click.option(
    "--input", "-i",
    "input_path",
    type=click.Path(exists=True, dir_okay=False),
    help="Input image path (default: stdin)"
)
@click.option(
    "--output", "-o",
    "output_path",
    type=click.Path(dir_okay=False),
    help="Output image path (default: stdout)"
)
@click.option("--debug", is_flag=True, help="Enable debug logging")
def transform(operation_json: tuple, input_path: Optional[str], output_path: Optional[str], debug: bool):
    """
    Apply transform operations to an image.

    The output keeps the input's format (PNG or JPEG).
    """
    from ocrcast.errors import OCRError
    from ocrcast.preprocessing import TransformPipeline

    _setup_logging(debug)

    try:
        operations = _parse_operations(operation_json)
        image = TransformPipeline.load_image(_read_input(input_path))
        output_format = "JPEG" if image.format == "JPEG" else "PNG"
        result = TransformPipeline().apply(image, operations)
    except OCRError as e:
        _fail(e)

    if output_format == "JPEG" and result.mode == "RGBA":
        result = result.convert("RGB")
    _write_output(output_path, TransformPipeline.image_to_bytes(result, format=output_format))


@cli.command()
@click.argument("engine", type=click.Choice(["tesseract", "google-lens"]))
@click.option(
    "--input", "-i",
    "input_path",
    type=click.Path(exists=True, dir_okay=False),
    help="Input image path (default: stdin)"
)
@click.option(
    "--output", "-o",
    "output_path",
    type=click.Path(dir_okay=False),
    help="Output text path (default: stdout)"
)
@click.option("--tessdata-dir", default=None, help="Tesseract model directory (tesseract only)")
@click.option("--language", "-l", default=None, help="Tesseract language model (tesseract only)")
@click.option("--operations", "operations_json", default=None, help="JSON array of operations to apply first")
@click.option("--debug", is_flag=True, help="Enable debug logging")
def ocr(
    engine: str,
    input_path: Optional[str],
    output_path: Optional[str],
    tessdata_dir: Optional[str],
    language: Optional[str],
    operations_json: Optional[str],
    debug: bool
):
    """Recognize the text of one image and write the engine's raw output."""
    from ocrcast.config import get_settings
    from ocrcast.errors import OCRError
    from ocrcast.preprocessing import TransformPipeline

    _setup_logging(debug)
    settings = get_settings()

    try:
        operations = _parse_operations([operations_json]) if operations_json else []
        pipeline = TransformPipeline()
        image = pipeline.apply(TransformPipeline.load_image(_read_input(input_path)), operations)
        image = pipeline.to_rgb(image)

        if engine == "tesseract":
            from ocrcast.engines import TesseractEngine, TesserocrHandle

            recognizer = TesseractEngine(TesserocrHandle.open(
                tessdata_dir or settings.tesseract.data_dir,
                language or settings.tesseract.language
            ))
        else:
            from ocrcast.lens import LensClient, LensWebClient

            remote_cls = LensWebClient if settings.lens.backend == "web" else LensClient
            recognizer = remote_cls(settings.lens)

        text = asyncio.run(_recognize(recognizer, image))
    except OCRError as e:
        _fail(e)

    _write_output(output_path, text.encode("utf-8"))


async def _recognize(recognizer, image) -> str:
    try:
        return await recognizer.recognize_text(image)
    finally:
        await recognizer.aclose()


@cli.command()
@click.option(
    "--host", "-h",
    default=None,
    help="Host to bind to"
)
@click.option(
    "--port", "-p",
    default=None,
    type=int,
    help="Port to bind to (default: 9090)"
)
@click.option(
    "--reload",
    is_flag=True,
    help="Enable auto-reload for development"
)
def serve(host: Optional[str], port: Optional[int], reload: bool):
    """Start the OCR API server."""
    import uvicorn
    from ocrcast.config import get_settings

    settings = get_settings()
    host = host or settings.api_host
    port = port or settings.api_port

    console.print(Panel(
        f"Starting ocrcast API\n"
        f"[cyan]URL:[/cyan] http://{host}:{port}\n"
        f"[cyan]Subscribe:[/cyan] ws://{host}:{port}/ws\n"
        f"[cyan]Docs:[/cyan] http://{host}:{port}/docs",
        title="Server Starting"
    ))

    uvicorn.run(
        "ocrcast.api.main:app",
        host=host,
        port=port,
        reload=reload,
        log_level="info"
    )


if __name__ == "__main__":
    cli()
