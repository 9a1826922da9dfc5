"""
Google Lens overlay wire schema.

A subset of the ``lens`` protobuf package: only the fields this client sets
on requests or reads from responses. Unknown response fields are skipped by
the protobuf parser.
"""

from typing import MutableSequence

import proto

__protobuf__ = proto.module(
    package="lens",
    manifest={
        "Platform",
        "Surface",
        "LensOverlayFilterType",
        "LensOverlayRoutingInfo",
        "LensOverlayRequestId",
        "LocaleContext",
        "AppliedFilter",
        "AppliedFilters",
        "LensOverlayClientContext",
        "LensOverlayRequestContext",
        "ImagePayload",
        "ImageMetadata",
        "ImageData",
        "LensOverlayObjectsRequest",
        "LensOverlayPhaseLatenciesMetadata",
        "LensOverlayClientLogs",
        "LensOverlayServerRequest",
        "TextLayout",
        "Text",
        "LensOverlayObjectsResponse",
        "LensOverlayServerError",
        "LensOverlayServerResponse",
    },
)


class Platform(proto.Enum):
    PLATFORM_UNSPECIFIED = 0
    PLATFORM_WEB = 3
    PLATFORM_LENS_OVERLAY = 6


class Surface(proto.Enum):
    SURFACE_UNSPECIFIED = 0
    SURFACE_CHROMIUM = 4
    SURFACE_LENS_OVERLAY = 42


class LensOverlayFilterType(proto.Enum):
    UNKNOWN_FILTER_TYPE = 0
    TRANSLATE = 2
    AUTO_FILTER = 7


# Request


class LensOverlayRoutingInfo(proto.Message):
    server_address: str = proto.Field(proto.STRING, number=1)
    blade_target: str = proto.Field(proto.STRING, number=2)
    cell_address: str = proto.Field(proto.STRING, number=3)


class LensOverlayRequestId(proto.Message):
    r"""Request sequencing identifiers.

    Attributes:
        uuid (int):
            Identifies a sequence of related requests.
        sequence_id (int):
            Order of this request within the sequence, from 1.
        image_sequence_id (int):
            Order of the image payload within the sequence, from 1.
        analytics_id (bytes):
            Random analytics bytes, fresh per interaction.
        long_context_id (int):
            Order of contextual document payloads, from 1.
    """

    uuid: int = proto.Field(proto.UINT64, number=1)
    sequence_id: int = proto.Field(proto.INT32, number=2)
    image_sequence_id: int = proto.Field(proto.INT32, number=3)
    analytics_id: bytes = proto.Field(proto.BYTES, number=4)
    routing_info: "LensOverlayRoutingInfo" = proto.Field(
        proto.MESSAGE, number=6, message="LensOverlayRoutingInfo"
    )
    long_context_id: int = proto.Field(proto.INT32, number=9)


class LocaleContext(proto.Message):
    language: str = proto.Field(proto.STRING, number=1)
    region: str = proto.Field(proto.STRING, number=2)
    time_zone: str = proto.Field(proto.STRING, number=3)


class AppliedFilter(proto.Message):
    filter_type: "LensOverlayFilterType" = proto.Field(
        proto.ENUM, number=1, enum="LensOverlayFilterType"
    )


class AppliedFilters(proto.Message):
    filter: MutableSequence["AppliedFilter"] = proto.RepeatedField(
        proto.MESSAGE, number=1, message="AppliedFilter"
    )


class LensOverlayClientContext(proto.Message):
    platform: "Platform" = proto.Field(proto.ENUM, number=1, enum="Platform")
    surface: "Surface" = proto.Field(proto.ENUM, number=2, enum="Surface")
    locale_context: "LocaleContext" = proto.Field(
        proto.MESSAGE, number=4, message="LocaleContext"
    )
    app_id: str = proto.Field(proto.STRING, number=6)
    client_filters: "AppliedFilters" = proto.Field(
        proto.MESSAGE, number=17, message="AppliedFilters"
    )


class LensOverlayRequestContext(proto.Message):
    request_id: "LensOverlayRequestId" = proto.Field(
        proto.MESSAGE, number=3, message="LensOverlayRequestId"
    )
    client_context: "LensOverlayClientContext" = proto.Field(
        proto.MESSAGE, number=4, message="LensOverlayClientContext"
    )


class ImagePayload(proto.Message):
    image_bytes: bytes = proto.Field(proto.BYTES, number=1)


class ImageMetadata(proto.Message):
    width: int = proto.Field(proto.INT32, number=1)
    height: int = proto.Field(proto.INT32, number=2)


class ImageData(proto.Message):
    payload: "ImagePayload" = proto.Field(proto.MESSAGE, number=1, message="ImagePayload")
    image_metadata: "ImageMetadata" = proto.Field(
        proto.MESSAGE, number=3, message="ImageMetadata"
    )


class LensOverlayObjectsRequest(proto.Message):
    request_context: "LensOverlayRequestContext" = proto.Field(
        proto.MESSAGE, number=1, message="LensOverlayRequestContext"
    )
    image_data: "ImageData" = proto.Field(proto.MESSAGE, number=3, message="ImageData")


class LensOverlayPhaseLatenciesMetadata(proto.Message):
    """Client-side image preprocessing facts sent alongside a request."""

    class ImageType(proto.Enum):
        UNKNOWN = 0
        JPEG = 1
        PNG = 2
        WEBP = 3

    class Phase(proto.Message):
        class ImageEncodeData(proto.Message):
            original_image_type: "LensOverlayPhaseLatenciesMetadata.ImageType" = proto.Field(
                proto.ENUM, number=1, enum="LensOverlayPhaseLatenciesMetadata.ImageType"
            )
            encoded_image_size_bytes: int = proto.Field(proto.INT64, number=2)

        image_encode_data: "LensOverlayPhaseLatenciesMetadata.Phase.ImageEncodeData" = proto.Field(
            proto.MESSAGE,
            number=4,
            oneof="phase_data",
            message="LensOverlayPhaseLatenciesMetadata.Phase.ImageEncodeData",
        )

    phase: MutableSequence["LensOverlayPhaseLatenciesMetadata.Phase"] = proto.RepeatedField(
        proto.MESSAGE, number=1, message="LensOverlayPhaseLatenciesMetadata.Phase"
    )


class LensOverlayClientLogs(proto.Message):
    phase_latencies_metadata: "LensOverlayPhaseLatenciesMetadata" = proto.Field(
        proto.MESSAGE, number=1, message="LensOverlayPhaseLatenciesMetadata"
    )


class LensOverlayServerRequest(proto.Message):
    objects_request: "LensOverlayObjectsRequest" = proto.Field(
        proto.MESSAGE, number=1, message="LensOverlayObjectsRequest"
    )
    client_logs: "LensOverlayClientLogs" = proto.Field(
        proto.MESSAGE, number=3, message="LensOverlayClientLogs"
    )


# Response


class TextLayout(proto.Message):
    r"""Recognized text split into paragraphs, lines and words.

    Attributes:
        paragraphs (MutableSequence[TextLayout.Paragraph]):
            Paragraphs in reading order.
    """

    class Word(proto.Message):
        r"""A single word.

        Attributes:
            plain_text (str):
                The word's text.
            text_separator (str):
                Text that follows the word, usually a space. Unset when the
                word is followed by nothing.
        """

        plain_text: str = proto.Field(proto.STRING, number=2)
        text_separator: str = proto.Field(proto.STRING, number=3, optional=True)

    class Line(proto.Message):
        words: MutableSequence["TextLayout.Word"] = proto.RepeatedField(
            proto.MESSAGE, number=1, message="TextLayout.Word"
        )

    class Paragraph(proto.Message):
        lines: MutableSequence["TextLayout.Line"] = proto.RepeatedField(
            proto.MESSAGE, number=2, message="TextLayout.Line"
        )
        content_language: str = proto.Field(proto.STRING, number=5)

    paragraphs: MutableSequence["TextLayout.Paragraph"] = proto.RepeatedField(
        proto.MESSAGE, number=1, message="TextLayout.Paragraph"
    )


class Text(proto.Message):
    text_layout: "TextLayout" = proto.Field(proto.MESSAGE, number=1, message="TextLayout")
    content_language: str = proto.Field(proto.STRING, number=2)


class LensOverlayObjectsResponse(proto.Message):
    text: "Text" = proto.Field(proto.MESSAGE, number=3, message="Text")


class LensOverlayServerError(proto.Message):
    class ErrorType(proto.Enum):
        UNKNOWN_TYPE = 0
        MISSING_REQUEST = 1

    error_type: "LensOverlayServerError.ErrorType" = proto.Field(
        proto.ENUM, number=1, enum="LensOverlayServerError.ErrorType"
    )


class LensOverlayServerResponse(proto.Message):
    error: "LensOverlayServerError" = proto.Field(
        proto.MESSAGE, number=1, message="LensOverlayServerError"
    )
    objects_response: "LensOverlayObjectsResponse" = proto.Field(
        proto.MESSAGE, number=2, message="LensOverlayObjectsResponse"
    )
