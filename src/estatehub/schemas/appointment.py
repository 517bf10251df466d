"""Pydantic schemas for viewing appointments."""

import uuid
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from estatehub.schemas.common import EMAIL_PATTERN
from estatehub.schemas.inquiry import PropertyBrief

APPOINTMENT_STATUS_PATTERN = r"^(pending|confirmed|cancelled|completed)$"


class AppointmentCreate(BaseModel):
    """Public booking request. The date check against today lives in the service."""
    model_config = ConfigDict(populate_by_name=True)

    property_id: uuid.UUID = Field(..., alias="propertyId")
    name: str = Field(..., min_length=2, max_length=255)
    email: str = Field(..., max_length=255, pattern=EMAIL_PATTERN)
    phone: Optional[str] = Field(None, max_length=50)
    preferred_date: date
    preferred_time: str = Field(..., pattern=r"^([01]\d|2[0-3]):[0-5]\d$")
    message: Optional[str] = Field(None, max_length=2000)


class AppointmentStatusUpdate(BaseModel):
    status: str = Field(..., pattern=APPOINTMENT_STATUS_PATTERN)


class AppointmentRead(BaseModel):
    id: uuid.UUID
    property_id: uuid.UUID
    name: str
    email: str
    phone: Optional[str]
    preferred_date: date
    preferred_time: str
    message: Optional[str]
    status: str
    created_at: datetime
    updated_at: datetime
    property: Optional[PropertyBrief] = None

    model_config = {"from_attributes": True}


class AppointmentEnvelope(BaseModel):
    message: str
    appointment: AppointmentRead


class AppointmentList(BaseModel):
    appointments: list[AppointmentRead]
    total: int


class AppointmentStats(BaseModel):
    total_appointments: int
    pending_appointments: int
    confirmed_appointments: int
    cancelled_appointments: int
    completed_appointments: int
    upcoming_appointments: int
