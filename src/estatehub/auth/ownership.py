"""Ownership policy.

Every mutating or single-resource read on a property, inquiry or
appointment goes through authorize_resource(). Owner resolution follows
the ownership chain in one query:

  Property                → properties.agent_id
  Inquiry / Appointment   → property_id → properties.agent_id

A chain that cannot be resolved is a 404, never a 403: the caller learns
whether the resource exists, but not who owns it. Existence is checked
before ownership.
"""

import uuid
from typing import Optional, Union

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from estatehub.auth.dependencies import CurrentIdentity
from estatehub.db.models import Appointment, Inquiry, Property
from estatehub.errors import Forbidden, NotFound

OwnedModel = Union[type[Property], type[Inquiry], type[Appointment]]

_LABELS = {
    Property: "Property",
    Inquiry: "Inquiry",
    Appointment: "Appointment",
}


def authorize(identity: CurrentIdentity, owner_id: Union[uuid.UUID, str]) -> bool:
    """Permit iff the identity is an admin or the owning agent."""
    if identity.is_admin:
        return True
    return str(identity.user_id) == str(owner_id)


async def resolve_owner(
    db: AsyncSession,
    model: OwnedModel,
    resource_id: uuid.UUID,
) -> Optional[uuid.UUID]:
    """Return the owning agent id for a resource, or None if the chain is broken."""
    if model is Property:
        query = select(Property.agent_id).where(Property.id == resource_id)
    else:
        query = (
            select(Property.agent_id)
            .join(model, model.property_id == Property.id)
            .where(model.id == resource_id)
        )
    result = await db.execute(query)
    return result.scalars().first()


async def authorize_resource(
    db: AsyncSession,
    identity: CurrentIdentity,
    model: OwnedModel,
    resource_id: uuid.UUID,
    action: str = "access",
) -> uuid.UUID:
    """Raise NotFound / Forbidden unless the identity may touch the resource.

    Returns the resolved owner id.
    """
    label = _LABELS[model]
    owner_id = await resolve_owner(db, model, resource_id)
    if owner_id is None:
        raise NotFound(
            f"The requested {label.lower()} does not exist",
            error=f"{label} not found",
        )
    if not authorize(identity, owner_id):
        raise Forbidden(f"You do not have permission to {action} this {label.lower()}")
    return owner_id
