"""Google Lens module."""

from ocrcast.lens.client import LensClient, LensHTTPEngine
from ocrcast.lens.web_client import LensWebClient
from ocrcast.lens.response_parser import (
    parse_server_response,
    parse_web_response,
    text_from_layout,
)

__all__ = [
    "LensClient",
    "LensHTTPEngine",
    "LensWebClient",
    "parse_server_response",
    "parse_web_response",
    "text_from_layout",
]
