"""Input models for Rehab Analyzer requests.

Pydantic models for the property address, photos, finish level and purchase
price supplied by the user.
"""

import re
from base64 import b64encode
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from config.errors import ValidationError
from models.estimation import Estimation


_NUMERIC_PRICE = re.compile(r"^\d+(\.\d+)?$")


class FinishLevel(str, Enum):
    """Target renovation quality tier."""

    BASIC = "Basic"
    INTERMEDIATE = "Intermediate"
    LUXURY = "Luxury"

    @property
    def display_name(self) -> str:
        return FINISH_LEVEL_NAMES[self]


FINISH_LEVEL_NAMES = {
    FinishLevel.BASIC: "Basic (Investor/Rental Grade)",
    FinishLevel.INTERMEDIATE: "Intermediate (Market Standard)",
    FinishLevel.LUXURY: "Luxury (High-End Finishes)",
}


class UploadedPhoto(BaseModel):
    """A property photo as sent to the model.

    Never mutated after creation; the identifier is derived from the file
    name and its modification time.
    """

    id: str = Field(..., description="'{name}-{last_modified}' identifier")
    name: str = Field(..., description="Display name")
    mime_type: str = Field(..., alias="type", description="MIME type, e.g. image/jpeg")
    base64: str = Field(..., description="Base64-encoded payload")
    url: Optional[str] = Field(
        default=None,
        description="Local preview reference"
    )

    class Config:
        populate_by_name = True
        frozen = True

    @property
    def data_uri(self) -> str:
        """Inline data URI for multimodal model calls."""
        return f"data:{self.mime_type};base64,{self.base64}"

    @property
    def preview_url(self) -> str:
        return self.url or self.data_uri

    @classmethod
    def from_bytes(
        cls,
        name: str,
        data: bytes,
        mime_type: str,
        last_modified: int = 0,
        url: Optional[str] = None
    ) -> "UploadedPhoto":
        """Build a photo from raw file contents.

        Args:
            name: Original file name.
            data: File bytes.
            mime_type: MIME type of the image.
            last_modified: Modification timestamp (ms since epoch).
            url: Optional preview reference.
        """
        return cls(
            id=f"{name}-{last_modified}",
            name=name,
            type=mime_type,
            base64=b64encode(data).decode("ascii"),
            url=url,
        )


def _strip_text(value):
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value.strip() if isinstance(value, str) else value


class RehabEstimateRequest(BaseModel):
    """Everything needed to request a rehab estimate."""

    address: str = Field(default="", description="Property address")
    photos: List[UploadedPhoto] = Field(default_factory=list)
    finish_level: FinishLevel = Field(
        default=FinishLevel.INTERMEDIATE,
        alias="finishLevel"
    )
    purchase_price: str = Field(default="", alias="purchasePrice", description="Bare numeric string")

    class Config:
        populate_by_name = True

    @field_validator("address", "purchase_price", mode="before")
    @classmethod
    def strip_text(cls, value):
        return _strip_text(value)

    def validate_for_submission(self) -> None:
        """Check the request is complete before calling the model.

        Raises:
            ValidationError: If the address, photos or price are missing.
        """
        if not self.address or not self.photos:
            raise ValidationError(
                message="Please provide a property address and at least one photo.",
                field="address" if not self.address else "photos"
            )
        _require_numeric_price(self.purchase_price)


class InvestmentAnalysisRequest(BaseModel):
    """Inputs for an investment analysis of an already estimated property."""

    address: str = Field(default="", description="Property address")
    estimation: Estimation
    purchase_price: str = Field(default="", alias="purchasePrice")

    class Config:
        populate_by_name = True

    @field_validator("address", "purchase_price", mode="before")
    @classmethod
    def strip_text(cls, value):
        return _strip_text(value)

    def validate_for_submission(self) -> None:
        """Raises ValidationError when the address or price is unusable."""
        if not self.address:
            raise ValidationError(message="Please provide a property address.", field="address")
        _require_numeric_price(self.purchase_price)


def _require_numeric_price(purchase_price: str) -> None:
    if not _NUMERIC_PRICE.match(purchase_price or ""):
        raise ValidationError(
            message="Please provide a numeric purchase price.",
            field="purchasePrice",
            details={"value": purchase_price}
        )
