"""
OCR API routes.
"""

import time
from typing import Optional
from fastapi import APIRouter, Form, Request, Response, UploadFile, File
from fastapi.responses import PlainTextResponse

from ocrcast.observability.logging import get_logger
from ocrcast.observability.metrics import get_metrics
from ocrcast.preprocessing import TransformPipeline
from ocrcast.api.schemas import ErrorResponse, OcrRequest
from ocrcast.errors import EngineError, ImageTooLargeError, InvalidImageError

router = APIRouter()
logger = get_logger(__name__)


@router.post(
    "/ocr",
    responses={
        400: {"model": ErrorResponse},
        413: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
    },
    summary="Recognize and broadcast",
    description=(
        "Transform the uploaded image, recognize its text with the selected "
        "engine and deliver the normalized text to every connected subscriber."
    )
)
async def ocr_image(
    request: Request,
    image: Optional[UploadFile] = File(None, description="Image file to process"),
    request_json: Optional[str] = Form(
        None,
        alias="request",
        description='JSON such as {"ocrEngine": "tesseract", "operations": []}'
    )
):
    """
    Process a single image.

    - **image**: Image file (PNG, JPEG, TIFF, BMP, GIF, WEBP)
    - **request**: Engine selector and ordered transform operations
    """
    settings = request.app.state.settings
    orchestrator = request.app.state.orchestrator
    metrics = get_metrics()
    start_time = time.time()

    engine = "unknown"

    try:
        if image is None:
            raise InvalidImageError("image is missing")

        ocr_request = OcrRequest.parse(request_json)
        engine = ocr_request.ocr_engine.value

        content = await image.read()

        if len(content) > settings.max_image_size_bytes:
            raise ImageTooLargeError(len(content), settings.max_image_size_bytes)

        if not content:
            raise InvalidImageError("Empty file uploaded")

        decoded = TransformPipeline.load_image(content)
        text = await orchestrator.process(decoded, ocr_request.ocr_engine, ocr_request.operations)

    except EngineError:
        metrics.record_request(engine, "error", time.time() - start_time)
        raise
    except Exception:
        metrics.record_request(engine, "rejected", time.time() - start_time)
        raise

    processing_time = time.time() - start_time
    metrics.record_request(engine, "success", processing_time)
    logger.info(
        "ocr_request_complete",
        engine=engine,
        operations=len(ocr_request.operations),
        chars=len(text),
        time_ms=round(processing_time * 1000, 2)
    )

    if settings.echo_text_in_response:
        return PlainTextResponse(content=text)
    return Response(status_code=200)
