"""Pydantic schemas for property listings.

- PropertyCreate: what an agent POSTs (status defaults to draft)
- PropertyUpdate: PUT body, every field optional; only supplied fields change
- PropertyRead: what the API returns, with the listing agent's contact card
"""

import uuid
from datetime import date, datetime
from typing import Annotated, Optional

from pydantic import AfterValidator, BaseModel, Field

from estatehub.schemas.common import CamelModel

PROPERTY_TYPE_PATTERN = r"^(house|penthouse|villa|estate|loft)$"
PROPERTY_STATUS_PATTERN = r"^(draft|active|pending|sold)$"


def _check_year_built(value: int) -> int:
    if value > date.today().year:
        raise ValueError("Year built cannot be in the future")
    return value


YearBuilt = Annotated[int, Field(ge=1800), AfterValidator(_check_year_built)]


class PropertyCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    location: str = Field(..., min_length=1, max_length=255)
    city: str = Field(..., min_length=1, max_length=100)
    state: str = Field(..., min_length=1, max_length=100)
    price: float = Field(..., gt=0)
    beds: int = Field(..., gt=0)
    baths: int = Field(..., gt=0)
    sqft: int = Field(..., gt=0)
    property_type: str = Field(..., pattern=PROPERTY_TYPE_PATTERN)
    year_built: YearBuilt
    status: str = Field(default="draft", pattern=PROPERTY_STATUS_PATTERN)
    featured: bool = False
    amenities: list[str] = Field(default_factory=list)
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    address: Optional[str] = Field(None, max_length=255)
    zip_code: Optional[str] = Field(None, max_length=20)


class PropertyUpdate(CamelModel):
    """Partial update: only supplied, non-null fields are applied."""
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    location: Optional[str] = Field(None, min_length=1, max_length=255)
    city: Optional[str] = Field(None, min_length=1, max_length=100)
    state: Optional[str] = Field(None, min_length=1, max_length=100)
    price: Optional[float] = Field(None, gt=0)
    beds: Optional[int] = Field(None, gt=0)
    baths: Optional[int] = Field(None, gt=0)
    sqft: Optional[int] = Field(None, gt=0)
    property_type: Optional[str] = Field(None, pattern=PROPERTY_TYPE_PATTERN)
    year_built: Optional[YearBuilt] = None
    status: Optional[str] = Field(None, pattern=PROPERTY_STATUS_PATTERN)
    featured: Optional[bool] = None
    amenities: Optional[list[str]] = None
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    address: Optional[str] = Field(None, max_length=255)
    zip_code: Optional[str] = Field(None, max_length=20)

    def changes(self) -> dict:
        """Supplied fields, keyed by column name."""
        return {
            k: v
            for k, v in self.model_dump(exclude_unset=True).items()
            if v is not None
        }


class AgentSummary(CamelModel):
    id: uuid.UUID
    first_name: str
    last_name: str
    email: str
    phone: Optional[str] = None
    avatar_url: Optional[str] = None


class PropertyRead(CamelModel):
    id: uuid.UUID
    agent_id: uuid.UUID
    title: str
    description: Optional[str]
    location: str
    city: str
    state: str
    price: float
    beds: int
    baths: int
    sqft: int
    property_type: str
    year_built: int
    status: str
    featured: bool
    images: list[str]
    amenities: list[str]
    latitude: Optional[float]
    longitude: Optional[float]
    address: Optional[str]
    zip_code: Optional[str]
    created_at: datetime
    updated_at: datetime
    agent: Optional[AgentSummary] = None


class PropertyEnvelope(BaseModel):
    property: PropertyRead


class PropertyMessageEnvelope(BaseModel):
    message: str
    property: PropertyRead


class PropertyList(BaseModel):
    properties: list[PropertyRead]
    count: int
    limit: int
    offset: int


class AgentPropertyList(BaseModel):
    properties: list[PropertyRead]
    count: int


class ImageDelete(CamelModel):
    image_url: str = Field(..., min_length=1)


class ImagesResponse(CamelModel):
    message: str
    images: list[str]
    uploaded_count: Optional[int] = None
