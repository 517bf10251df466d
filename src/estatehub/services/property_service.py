"""Property service: listings CRUD and image management.

Service layer separates business logic from HTTP routing. Routes call
services, services call the database, and every protected operation goes
through the ownership policy before it mutates anything.

Every Property returned from here has its agent relationship loaded, so
callers can serialize it without triggering a lazy load.
"""

import uuid
from typing import Optional

import structlog
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from starlette.concurrency import run_in_threadpool

from estatehub.auth.dependencies import CurrentIdentity
from estatehub.auth.ownership import authorize_resource
from estatehub.db.models import Property, utcnow
from estatehub.errors import NoOpUpdate, NotFound
from estatehub.services.storage import ImageStorage, IncomingImage

logger = structlog.get_logger()


class PropertyService:
    """Business logic for property listings."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ─── Read ────────────────────────────────────────────

    async def get_property(self, property_id: uuid.UUID) -> Optional[Property]:
        result = await self.db.execute(
            select(Property)
            .where(Property.id == property_id)
            .options(selectinload(Property.agent))
            .execution_options(populate_existing=True)
        )
        return result.scalars().first()

    async def require_property(self, property_id: uuid.UUID) -> Property:
        prop = await self.get_property(property_id)
        if not prop:
            raise NotFound(
                "The requested property does not exist",
                error="Property not found",
            )
        return prop

    async def list_properties(
        self,
        city: Optional[str] = None,
        state: Optional[str] = None,
        property_type: Optional[str] = None,
        min_price: Optional[float] = None,
        max_price: Optional[float] = None,
        min_beds: Optional[int] = None,
        status: Optional[str] = "active",
        featured: Optional[bool] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[Property]:
        """Public search. Filters apply only when given; status "" disables the status filter."""
        query = (
            select(Property)
            .options(selectinload(Property.agent))
            .order_by(Property.created_at.desc(), Property.id)
            .limit(limit)
            .offset(offset)
        )
        if status:
            query = query.where(Property.status == status)
        if city:
            query = query.where(func.lower(Property.city) == city.lower())
        if state:
            query = query.where(func.lower(Property.state) == state.lower())
        if property_type:
            query = query.where(Property.property_type == property_type)
        if min_price is not None:
            query = query.where(Property.price >= min_price)
        if max_price is not None:
            query = query.where(Property.price <= max_price)
        if min_beds is not None:
            query = query.where(Property.beds >= min_beds)
        if featured is not None:
            query = query.where(Property.featured == featured)

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def list_agent_properties(self, agent_id: uuid.UUID) -> list[Property]:
        """An agent's own listings, filtered in SQL rather than per-row policy checks."""
        result = await self.db.execute(
            select(Property)
            .where(Property.agent_id == agent_id)
            .options(selectinload(Property.agent))
            .order_by(Property.created_at.desc(), Property.id)
        )
        return list(result.scalars().all())

    # ─── Create ──────────────────────────────────────────

    async def create_property(self, agent_id: uuid.UUID, fields: dict) -> Property:
        prop = Property(agent_id=agent_id, **fields)
        self.db.add(prop)
        await self.db.commit()

        logger.info("property.created", property_id=str(prop.id), agent_id=str(agent_id))
        return await self.require_property(prop.id)

    # ─── Update / delete (ownership enforced) ────────────

    async def update_property(
        self,
        identity: CurrentIdentity,
        property_id: uuid.UUID,
        changes: dict,
    ) -> Property:
        """Apply a partial update. Fields not in `changes` are left untouched."""
        await authorize_resource(self.db, identity, Property, property_id, action="update")
        if not changes:
            raise NoOpUpdate("No valid fields to update")

        prop = await self.require_property(property_id)
        for field, value in changes.items():
            setattr(prop, field, value)
        prop.updated_at = utcnow()
        await self.db.commit()

        logger.info(
            "property.updated",
            property_id=str(property_id),
            fields=sorted(changes),
        )
        return await self.require_property(property_id)

    async def delete_property(self, identity: CurrentIdentity, property_id: uuid.UUID) -> None:
        await authorize_resource(self.db, identity, Property, property_id, action="delete")
        prop = await self.require_property(property_id)
        await self.db.delete(prop)
        await self.db.commit()
        logger.info("property.deleted", property_id=str(property_id))

    # ─── Images ──────────────────────────────────────────

    async def add_images(
        self,
        identity: CurrentIdentity,
        property_id: uuid.UUID,
        images: list[IncomingImage],
        storage: ImageStorage,
    ) -> tuple[list[str], int]:
        """Store the files, then append their URLs to the listing."""
        await authorize_resource(self.db, identity, Property, property_id, action="update")
        urls = await run_in_threadpool(storage.save, images)

        prop = await self.require_property(property_id)
        prop.images = [*(prop.images or []), *urls]
        prop.updated_at = utcnow()
        await self.db.commit()
        return list(prop.images), len(urls)

    async def remove_image(
        self,
        identity: CurrentIdentity,
        property_id: uuid.UUID,
        image_url: str,
        storage: ImageStorage,
    ) -> list[str]:
        """Drop an image URL from the listing and delete the file if we stored it."""
        await authorize_resource(self.db, identity, Property, property_id, action="update")

        prop = await self.require_property(property_id)
        current = list(prop.images or [])
        remaining = [img for img in current if img != image_url]
        prop.images = remaining
        prop.updated_at = utcnow()
        await self.db.commit()

        if len(remaining) != len(current):
            await run_in_threadpool(storage.delete, image_url)
        return remaining
