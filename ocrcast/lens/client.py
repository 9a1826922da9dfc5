"""
Google Lens client speaking the binary overlay protocol.
"""

import asyncio
import io
import secrets
import time
from typing import Optional

import aiohttp
from PIL import Image
import structlog

from ocrcast.config import LensSettings, get_settings
from ocrcast.engines.base import TextRecognizer
from ocrcast.errors import RemoteTransportError
from ocrcast.lens import messages
from ocrcast.lens.response_parser import parse_server_response

logger = structlog.get_logger(__name__)


def encode_png(image: Image.Image) -> bytes:
    """Encode an image as PNG bytes."""
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


class LensHTTPEngine(TextRecognizer):
    """
    Shared HTTP plumbing for the Lens backends.

    Calls share one aiohttp session (and its connection pool) but no other
    state, so any number may run concurrently. Nothing is retried.
    """

    name = "googleLens"

    def __init__(
        self,
        settings: LensSettings = None,
        session: Optional[aiohttp.ClientSession] = None
    ):
        self.settings = settings or get_settings().lens
        self._session = session
        self._owns_session = session is None

    @property
    def session(self) -> aiohttp.ClientSession:
        """Lazy-create the HTTP session inside the running loop."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                connector=aiohttp.TCPConnector(limit=self.settings.max_connections),
                timeout=aiohttp.ClientTimeout(total=self.settings.timeout_seconds),
            )
            self._owns_session = True
        return self._session

    async def _post(self, url: str, **kwargs) -> bytes:
        """
        POST and return the body of a 2xx response.

        Raises:
            RemoteTransportError: On a non-2xx status or a network failure
        """
        try:
            async with self.session.post(url, **kwargs) as response:
                body = await response.read()
                if not 200 <= response.status < 300:
                    logger.error(
                        "lens_request_failed",
                        url=url,
                        status_code=response.status
                    )
                    raise RemoteTransportError(
                        f"Lens request failed with status {response.status}",
                        status_code=response.status,
                        body=body.decode("utf-8", errors="replace")
                    )
                return body
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error("lens_request_error", url=url, error=str(e), error_type=type(e).__name__)
            raise RemoteTransportError(f"Failed to reach Lens: {e}", cause=e) from e

    async def aclose(self):
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
            logger.info("lens_session_closed")


class LensClient(LensHTTPEngine):
    """Recognizes text with the protobuf ``crupload`` endpoint."""

    def new_request_id(self) -> messages.LensOverlayRequestId:
        """A fresh request id; never reused across calls."""
        return messages.LensOverlayRequestId(
            uuid=secrets.randbits(64),
            sequence_id=1,
            image_sequence_id=1,
            analytics_id=secrets.token_bytes(16),
            long_context_id=1,
        )

    def client_context(self) -> messages.LensOverlayClientContext:
        return messages.LensOverlayClientContext(
            platform=messages.Platform.PLATFORM_WEB,
            surface=messages.Surface.SURFACE_CHROMIUM,
            locale_context=messages.LocaleContext(
                language=self.settings.language,
                region=self.settings.region,
                time_zone=self.settings.time_zone,
            ),
            app_id=self.settings.app_id,
            client_filters=messages.AppliedFilters(
                filter=[messages.AppliedFilter(filter_type=messages.LensOverlayFilterType.AUTO_FILTER)]
            ),
        )

    def build_request(self, png_bytes: bytes, width: int, height: int) -> messages.LensOverlayServerRequest:
        """Assemble the request envelope for one PNG image."""
        encode_data = messages.LensOverlayPhaseLatenciesMetadata.Phase.ImageEncodeData(
            original_image_type=messages.LensOverlayPhaseLatenciesMetadata.ImageType.PNG,
            encoded_image_size_bytes=len(png_bytes),
        )
        return messages.LensOverlayServerRequest(
            objects_request=messages.LensOverlayObjectsRequest(
                request_context=messages.LensOverlayRequestContext(
                    request_id=self.new_request_id(),
                    client_context=self.client_context(),
                ),
                image_data=messages.ImageData(
                    payload=messages.ImagePayload(image_bytes=png_bytes),
                    image_metadata=messages.ImageMetadata(width=width, height=height),
                ),
            ),
            client_logs=messages.LensOverlayClientLogs(
                phase_latencies_metadata=messages.LensOverlayPhaseLatenciesMetadata(
                    phase=[
                        messages.LensOverlayPhaseLatenciesMetadata.Phase(image_encode_data=encode_data)
                    ]
                )
            ),
        )

    def headers(self) -> dict:
        headers = {"Content-Type": self.settings.content_type}
        if self.settings.api_key:
            headers[self.settings.api_key_header] = self.settings.api_key
        return headers

    async def recognize_text(self, image: Image.Image) -> str:
        png_bytes = encode_png(image)
        width, height = image.size
        request = self.build_request(png_bytes, width, height)
        payload = messages.LensOverlayServerRequest.serialize(request)

        logger.info(
            "lens_request",
            endpoint=self.settings.endpoint,
            image_bytes=len(png_bytes),
            width=width,
            height=height
        )
        start_time = time.perf_counter()
        body = await self._post(self.settings.endpoint, data=payload, headers=self.headers())
        text = parse_server_response(body)

        logger.info(
            "lens_response",
            elapsed_seconds=round(time.perf_counter() - start_time, 3),
            text_length=len(text)
        )
        return text
