"""Inquiry service: buyer questions about a listing.

Creation is public. Everything else is scoped to the agent who owns the
listing the inquiry points at (or an admin): single-resource operations
go through the ownership policy, lists are filtered by agent id in SQL.
"""

import uuid
from typing import Optional

import structlog
from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from estatehub.auth.dependencies import CurrentIdentity
from estatehub.auth.ownership import authorize_resource
from estatehub.db.models import Inquiry, Property, utcnow
from estatehub.errors import NotFound

logger = structlog.get_logger()

INQUIRY_STATUSES = ("new", "contacted", "scheduled", "closed")


class InquiryService:
    """Business logic for inquiries."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _load(self, inquiry_id: uuid.UUID) -> Optional[Inquiry]:
        result = await self.db.execute(
            select(Inquiry)
            .where(Inquiry.id == inquiry_id)
            .options(selectinload(Inquiry.property))
            .execution_options(populate_existing=True)
        )
        return result.scalars().first()

    async def create_inquiry(
        self,
        property_id: uuid.UUID,
        name: str,
        email: str,
        message: str,
        phone: Optional[str] = None,
    ) -> Inquiry:
        """Record a new inquiry in 'new' status. The listing must exist."""
        if await self.db.get(Property, property_id) is None:
            raise NotFound("The requested property does not exist", error="Property not found")

        inquiry = Inquiry(
            property_id=property_id,
            name=name,
            email=email,
            phone=phone,
            message=message,
            status="new",
        )
        self.db.add(inquiry)
        await self.db.commit()

        logger.info("inquiry.created", inquiry_id=str(inquiry.id), property_id=str(property_id))
        return await self._load(inquiry.id)

    async def list_inquiries(
        self,
        agent_id: uuid.UUID,
        status: Optional[str] = None,
        property_id: Optional[uuid.UUID] = None,
    ) -> list[Inquiry]:
        """Inquiries on the agent's listings, newest first."""
        query = (
            select(Inquiry)
            .join(Property, Inquiry.property_id == Property.id)
            .where(Property.agent_id == agent_id)
            .options(selectinload(Inquiry.property))
            .order_by(Inquiry.created_at.desc(), Inquiry.id)
        )
        if status:
            query = query.where(Inquiry.status == status)
        if property_id:
            query = query.where(Inquiry.property_id == property_id)

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_inquiry(self, identity: CurrentIdentity, inquiry_id: uuid.UUID) -> Inquiry:
        await authorize_resource(self.db, identity, Inquiry, inquiry_id, action="view")
        return await self._load(inquiry_id)

    async def update_status(
        self,
        identity: CurrentIdentity,
        inquiry_id: uuid.UUID,
        status: str,
    ) -> Inquiry:
        await authorize_resource(self.db, identity, Inquiry, inquiry_id, action="update")
        inquiry = await self._load(inquiry_id)
        old_status = inquiry.status
        inquiry.status = status
        inquiry.updated_at = utcnow()
        await self.db.commit()

        logger.info(
            "inquiry.status_changed",
            inquiry_id=str(inquiry_id),
            old=old_status,
            new=status,
        )
        return await self._load(inquiry_id)

    async def delete_inquiry(self, identity: CurrentIdentity, inquiry_id: uuid.UUID) -> None:
        await authorize_resource(self.db, identity, Inquiry, inquiry_id, action="delete")
        inquiry = await self._load(inquiry_id)
        await self.db.delete(inquiry)
        await self.db.commit()
        logger.info("inquiry.deleted", inquiry_id=str(inquiry_id))

    async def stats(self, agent_id: uuid.UUID) -> dict:
        """Counts per status across the agent's listings."""
        columns = [func.count(Inquiry.id).label("total_inquiries")]
        for status in INQUIRY_STATUSES:
            columns.append(
                func.count(case((Inquiry.status == status, 1))).label(f"{status}_inquiries")
            )
        result = await self.db.execute(
            select(*columns)
            .select_from(Inquiry)
            .join(Property, Inquiry.property_id == Property.id)
            .where(Property.agent_id == agent_id)
        )
        row = result.mappings().one()
        return {key: int(value or 0) for key, value in row.items()}
