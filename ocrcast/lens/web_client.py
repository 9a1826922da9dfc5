"""
Google Lens client for the HTML upload page.

Kept for compatibility with the public ``v3/upload`` service, which embeds
its results in a script callback instead of returning a typed response.
"""

import aiohttp
from PIL import Image
import structlog

from ocrcast.lens.client import LensHTTPEngine, encode_png
from ocrcast.lens.response_parser import parse_web_response

logger = structlog.get_logger(__name__)


class LensWebClient(LensHTTPEngine):
    """Recognizes text by uploading the image as a multipart form."""

    async def recognize_text(self, image: Image.Image) -> str:
        form = aiohttp.FormData()
        form.add_field(
            "encoded_image",
            encode_png(image),
            filename="image.png",
            content_type="image/png"
        )

        logger.info("lens_web_request", url=self.settings.web_upload_url)
        body = await self._post(self.settings.web_upload_url, data=form)
        return parse_web_response(
            body.decode("utf-8", errors="replace"),
            self.settings.web_response_pattern
        )
