"""
Turn Google Lens responses into plain text.
"""

import re

import json5
from google.protobuf.message import DecodeError

from ocrcast.errors import RemoteDecodeError
from ocrcast.lens.messages import LensOverlayServerResponse, TextLayout

# Index path from the decoded web payload to its paragraph arrays
WEB_DATA_PATH = ("data", 3, 4, 0)


def text_from_layout(layout: TextLayout) -> str:
    """
    Flatten a text layout.

    Each word contributes its text followed by its separator; every
    paragraph ends with a newline.
    """
    parts = []
    for paragraph in layout.paragraphs:
        for line in paragraph.lines:
            for word in line.words:
                parts.append(word.plain_text)
                parts.append(word.text_separator)
        parts.append("\n")
    return "".join(parts)


def parse_server_response(payload: bytes) -> str:
    """
    Decode a binary LensOverlayServerResponse and extract its text.

    Raises:
        RemoteDecodeError: If the payload is not a valid response, carries a
            server error, or has no objects response
    """
    try:
        response = LensOverlayServerResponse.deserialize(payload)
    except DecodeError as e:
        raise RemoteDecodeError(
            f"Malformed Lens response: {e}",
            {"payload_bytes": len(payload)}
        ) from e

    if response.error.error_type:
        raise RemoteDecodeError(
            "Lens returned a server error",
            {"error_type": int(response.error.error_type)}
        )
    if "objects_response" not in response:
        raise RemoteDecodeError(
            "Lens response has no objects response",
            {"payload_bytes": len(payload)}
        )

    return text_from_layout(response.objects_response.text.text_layout)


def parse_web_response(html: str, pattern: str) -> str:
    """
    Extract text from the data blob embedded in a Lens upload page.

    The blob is located with ``pattern`` (its first group), decoded as JSON5
    and walked along WEB_DATA_PATH to a list of paragraphs, each a list of
    line strings.

    Raises:
        RemoteDecodeError: If any step does not find what it expects
    """
    match = re.search(pattern, html)
    if match is None:
        raise RemoteDecodeError("Lens page does not contain the OCR data callback")

    try:
        value = json5.loads(match.group(1))
    except ValueError as e:
        raise RemoteDecodeError(f"Lens data callback is not valid JSON5: {e}") from e

    data = value
    try:
        for key in WEB_DATA_PATH:
            data = data[key]
    except (KeyError, IndexError, TypeError) as e:
        raise RemoteDecodeError(
            "Lens data callback has an unexpected structure",
            {"path": list(WEB_DATA_PATH), "error": str(e)}
        ) from e

    if not isinstance(data, list):
        raise RemoteDecodeError("Lens paragraph data is not a list")

    parts = []
    for paragraph in data:
        if not isinstance(paragraph, list) or not all(isinstance(line, str) for line in paragraph):
            raise RemoteDecodeError("Lens paragraph is not a list of strings")
        parts.extend(paragraph)
        parts.append("\n")
    return "".join(parts)
