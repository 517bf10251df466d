"""Pydantic schemas for buyer inquiries.

Inquiry payloads are snake_case on the wire, apart from the propertyId
input field.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from estatehub.schemas.common import EMAIL_PATTERN

INQUIRY_STATUS_PATTERN = r"^(new|contacted|scheduled|closed)$"


class InquiryCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    property_id: uuid.UUID = Field(..., alias="propertyId")
    name: str = Field(..., min_length=2, max_length=255)
    email: str = Field(..., max_length=255, pattern=EMAIL_PATTERN)
    phone: Optional[str] = Field(None, max_length=50)
    message: str = Field(..., min_length=10, max_length=2000)


class InquiryStatusUpdate(BaseModel):
    status: str = Field(..., pattern=INQUIRY_STATUS_PATTERN)


class PropertyBrief(BaseModel):
    """Just enough of the listing to show next to a lead."""
    title: str
    city: str
    state: str
    location: str

    model_config = {"from_attributes": True}


class InquiryRead(BaseModel):
    id: uuid.UUID
    property_id: uuid.UUID
    name: str
    email: str
    phone: Optional[str]
    message: str
    status: str
    created_at: datetime
    updated_at: datetime
    property: Optional[PropertyBrief] = None

    model_config = {"from_attributes": True}


class InquiryEnvelope(BaseModel):
    message: str
    inquiry: InquiryRead


class InquiryList(BaseModel):
    inquiries: list[InquiryRead]
    total: int


class InquiryStats(BaseModel):
    total_inquiries: int
    new_inquiries: int
    contacted_inquiries: int
    scheduled_inquiries: int
    closed_inquiries: int
