"""Appointment service: viewing requests for a listing.

Booking is public, but the requested date must be today or later (a
plain calendar-date comparison, time of day is irrelevant) and the
listing must exist. Reads and changes are scoped like inquiries.
"""

import uuid
from datetime import date
from typing import Optional

import structlog
from sqlalchemy import and_, case, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from estatehub.auth.dependencies import CurrentIdentity
from estatehub.auth.ownership import authorize_resource
from estatehub.db.models import Appointment, Property, utcnow
from estatehub.errors import InvalidDate, NotFound

logger = structlog.get_logger()

APPOINTMENT_STATUSES = ("pending", "confirmed", "cancelled", "completed")


class AppointmentService:
    """Business logic for appointments."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _load(self, appointment_id: uuid.UUID) -> Optional[Appointment]:
        result = await self.db.execute(
            select(Appointment)
            .where(Appointment.id == appointment_id)
            .options(selectinload(Appointment.property))
            .execution_options(populate_existing=True)
        )
        return result.scalars().first()

    async def create_appointment(
        self,
        property_id: uuid.UUID,
        name: str,
        email: str,
        preferred_date: date,
        preferred_time: str,
        phone: Optional[str] = None,
        message: Optional[str] = None,
        today: Optional[date] = None,
    ) -> Appointment:
        """Book a viewing in 'pending' status.

        Raises:
            InvalidDate: preferred_date is before today
            NotFound: the listing doesn't exist
        """
        today = today or date.today()
        if preferred_date < today:
            raise InvalidDate("Appointment date must be today or later")

        if await self.db.get(Property, property_id) is None:
            raise NotFound("The requested property does not exist", error="Property not found")

        appointment = Appointment(
            property_id=property_id,
            name=name,
            email=email,
            phone=phone,
            preferred_date=preferred_date,
            preferred_time=preferred_time,
            message=message,
            status="pending",
        )
        self.db.add(appointment)
        await self.db.commit()

        logger.info(
            "appointment.created",
            appointment_id=str(appointment.id),
            property_id=str(property_id),
            preferred_date=preferred_date.isoformat(),
        )
        return await self._load(appointment.id)

    async def list_appointments(
        self,
        agent_id: uuid.UUID,
        status: Optional[str] = None,
        property_id: Optional[uuid.UUID] = None,
    ) -> list[Appointment]:
        """Appointments on the agent's listings, soonest first."""
        query = (
            select(Appointment)
            .join(Property, Appointment.property_id == Property.id)
            .where(Property.agent_id == agent_id)
            .options(selectinload(Appointment.property))
            .order_by(Appointment.preferred_date.asc(), Appointment.preferred_time.asc())
        )
        if status:
            query = query.where(Appointment.status == status)
        if property_id:
            query = query.where(Appointment.property_id == property_id)

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_appointment(
        self, identity: CurrentIdentity, appointment_id: uuid.UUID
    ) -> Appointment:
        await authorize_resource(self.db, identity, Appointment, appointment_id, action="view")
        return await self._load(appointment_id)

    async def update_status(
        self,
        identity: CurrentIdentity,
        appointment_id: uuid.UUID,
        status: str,
    ) -> Appointment:
        await authorize_resource(self.db, identity, Appointment, appointment_id, action="update")
        appointment = await self._load(appointment_id)
        old_status = appointment.status
        appointment.status = status
        appointment.updated_at = utcnow()
        await self.db.commit()

        logger.info(
            "appointment.status_changed",
            appointment_id=str(appointment_id),
            old=old_status,
            new=status,
        )
        return await self._load(appointment_id)

    async def delete_appointment(
        self, identity: CurrentIdentity, appointment_id: uuid.UUID
    ) -> None:
        await authorize_resource(self.db, identity, Appointment, appointment_id, action="delete")
        appointment = await self._load(appointment_id)
        await self.db.delete(appointment)
        await self.db.commit()
        logger.info("appointment.deleted", appointment_id=str(appointment_id))

    async def stats(self, agent_id: uuid.UUID, today: Optional[date] = None) -> dict:
        """Counts per status, plus confirmed appointments from today on."""
        today = today or date.today()
        columns = [func.count(Appointment.id).label("total_appointments")]
        for status in APPOINTMENT_STATUSES:
            columns.append(
                func.count(case((Appointment.status == status, 1))).label(f"{status}_appointments")
            )
        columns.append(
            func.count(
                case(
                    (
                        and_(
                            Appointment.status == "confirmed",
                            Appointment.preferred_date >= today,
                        ),
                        1,
                    )
                )
            ).label("upcoming_appointments")
        )
        result = await self.db.execute(
            select(*columns)
            .select_from(Appointment)
            .join(Property, Appointment.property_id == Property.id)
            .where(Property.agent_id == agent_id)
        )
        row = result.mappings().one()
        return {key: int(value or 0) for key, value in row.items()}
