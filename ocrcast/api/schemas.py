"""
Pydantic schemas for API request/response validation.
"""

from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ocrcast.engines import OcrEngineSelector
from ocrcast.errors import InvalidRequestError
from ocrcast.preprocessing import Operation


# Request schemas
class OcrRequest(BaseModel):
    """OCR request carried in the ``request`` form field."""

    model_config = ConfigDict(populate_by_name=True)

    ocr_engine: OcrEngineSelector = Field(alias="ocrEngine")
    operations: List[Operation]

    @classmethod
    def parse(cls, raw: Optional[Union[str, bytes]]) -> "OcrRequest":
        """
        Decode the JSON request field.

        A missing or blank field selects the local engine with no operations.

        Raises:
            InvalidRequestError: On malformed JSON, an unknown engine or an
                unknown or malformed operation
        """
        if raw is None or not raw.strip():
            return cls(ocr_engine=OcrEngineSelector.LOCAL, operations=[])
        try:
            return cls.model_validate_json(raw)
        except ValidationError as e:
            raise InvalidRequestError(
                "Malformed OCR request",
                {"errors": e.errors(include_url=False, include_context=False)}
            )


# Response schemas
class ErrorResponse(BaseModel):
    """Error response."""
    success: bool = False
    error: str
    error_type: str
    details: Optional[dict] = None


class HealthResponse(BaseModel):
    """Health check response."""
    status: Literal["healthy", "degraded", "unhealthy"]
    version: str
    components: dict = Field(default_factory=dict)
