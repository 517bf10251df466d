"""Viewing appointment API routes.

POST is public (anyone can request a viewing). The rest is for agents and
admins: auth gate, then role gate, then ownership inside the service.
"""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from estatehub.auth.dependencies import CurrentIdentity, get_current_user, require_agent
from estatehub.db.engine import get_db
from estatehub.schemas.appointment import (
    APPOINTMENT_STATUS_PATTERN,
    AppointmentCreate,
    AppointmentEnvelope,
    AppointmentList,
    AppointmentRead,
    AppointmentStats,
    AppointmentStatusUpdate,
)
from estatehub.schemas.common import MessageResponse
from estatehub.services.appointment_service import AppointmentService

router = APIRouter(prefix="/appointments")

_agent_only = [Depends(get_current_user)]


def _appointment_svc(db: AsyncSession = Depends(get_db)) -> AppointmentService:
    return AppointmentService(db)


# ─── Public ──────────────────────────────────────────────


@router.post("", response_model=AppointmentEnvelope, status_code=201)
async def create_appointment(
    body: AppointmentCreate,
    svc: AppointmentService = Depends(_appointment_svc),
):
    """Request a viewing. Dates before today are rejected with 400."""
    appointment = await svc.create_appointment(
        property_id=body.property_id,
        name=body.name,
        email=body.email,
        preferred_date=body.preferred_date,
        preferred_time=body.preferred_time,
        phone=body.phone,
        message=body.message,
    )
    return AppointmentEnvelope(
        message="Appointment request submitted successfully",
        appointment=AppointmentRead.model_validate(appointment),
    )


# ─── Agent / admin ───────────────────────────────────────


@router.get("", response_model=AppointmentList, dependencies=_agent_only)
async def list_appointments(
    status: Optional[str] = Query(None, pattern=APPOINTMENT_STATUS_PATTERN),
    property_id: Optional[uuid.UUID] = Query(None, alias="propertyId"),
    identity: CurrentIdentity = Depends(require_agent),
    svc: AppointmentService = Depends(_appointment_svc),
):
    """Appointments on the caller's listings, soonest first."""
    appointments = await svc.list_appointments(
        identity.user_uuid, status=status, property_id=property_id
    )
    return AppointmentList(
        appointments=[AppointmentRead.model_validate(a) for a in appointments],
        total=len(appointments),
    )


@router.get("/stats", response_model=AppointmentStats, dependencies=_agent_only)
async def appointment_stats(
    identity: CurrentIdentity = Depends(require_agent),
    svc: AppointmentService = Depends(_appointment_svc),
):
    return AppointmentStats(**await svc.stats(identity.user_uuid))


@router.get("/{appointment_id}", response_model=AppointmentRead, dependencies=_agent_only)
async def get_appointment(
    appointment_id: uuid.UUID,
    identity: CurrentIdentity = Depends(require_agent),
    svc: AppointmentService = Depends(_appointment_svc),
):
    appointment = await svc.get_appointment(identity, appointment_id)
    return AppointmentRead.model_validate(appointment)


@router.put(
    "/{appointment_id}/status",
    response_model=AppointmentEnvelope,
    dependencies=_agent_only,
)
async def update_appointment_status(
    appointment_id: uuid.UUID,
    body: AppointmentStatusUpdate,
    identity: CurrentIdentity = Depends(require_agent),
    svc: AppointmentService = Depends(_appointment_svc),
):
    appointment = await svc.update_status(identity, appointment_id, body.status)
    return AppointmentEnvelope(
        message="Appointment status updated successfully",
        appointment=AppointmentRead.model_validate(appointment),
    )


@router.delete("/{appointment_id}", response_model=MessageResponse, dependencies=_agent_only)
async def delete_appointment(
    appointment_id: uuid.UUID,
    identity: CurrentIdentity = Depends(require_agent),
    svc: AppointmentService = Depends(_appointment_svc),
):
    await svc.delete_appointment(identity, appointment_id)
    return MessageResponse(message="Appointment deleted successfully")
