"""
Pixel transform operations accepted in an OCR request.

Each operation is a tagged object keyed by ``type``. Unknown tags and
out-of-range fields are rejected when the list is decoded.
"""

from typing import Annotated, List, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from ocrcast.errors import InvalidRequestError

U8 = Annotated[int, Field(ge=0, le=255)]
U32 = Annotated[int, Field(ge=0, le=2**32 - 1)]
I32 = Annotated[int, Field(ge=-(2**31), le=2**31 - 1)]


class _Operation(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class Invert(_Operation):
    """Invert every color channel, keeping alpha."""
    type: Literal["invert"] = "invert"


class Binarize(_Operation):
    """Pixels with intensity equal to the threshold are assigned to the background."""
    type: Literal["binarize"] = "binarize"
    threshold: U8


class OtsuBinarize(_Operation):
    """Binarize with a threshold chosen by Otsu's method."""
    type: Literal["otsuBinarize"] = "otsuBinarize"
    invert_threshold: bool = Field(default=False, alias="invertThreshold")


class Crop(_Operation):
    type: Literal["crop"] = "crop"
    x: U32
    y: U32
    width: U32
    height: U32


class DrawFilledRectangle(_Operation):
    type: Literal["drawFilledRectangle"] = "drawFilledRectangle"
    x: I32
    y: I32
    width: U32
    height: U32
    r: U8
    g: U8
    b: U8
    a: U8

    @property
    def color(self) -> tuple:
        return (self.r, self.g, self.b, self.a)


class GaussianBlur(_Operation):
    """Blur with a Gaussian of standard deviation sigma (must be > 0)."""
    type: Literal["gaussianBlur"] = "gaussianBlur"
    sigma: float


Operation = Annotated[
    Union[Invert, Binarize, OtsuBinarize, Crop, DrawFilledRectangle, GaussianBlur],
    Field(discriminator="type"),
]

_operation_list = TypeAdapter(List[Operation])


def parse_operations(data) -> List[Operation]:
    """
    Decode a list of operations from parsed JSON or a JSON string.

    Raises:
        InvalidRequestError: On unknown tags, missing or out-of-range fields
    """
    try:
        if isinstance(data, (str, bytes)):
            return _operation_list.validate_json(data)
        return _operation_list.validate_python(data)
    except ValidationError as e:
        raise InvalidRequestError(
            "Invalid operations",
            {"errors": e.errors(include_url=False, include_context=False)}
        )
