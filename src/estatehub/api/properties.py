"""Property API routes.

Public:    GET /properties, GET /properties/{id}
Agent:     POST /properties, GET /properties/agent/my-properties
Owner:     PUT/DELETE /properties/{id}, POST/DELETE /properties/{id}/images

"Agent" routes run the auth gate then the role gate (agent or admin).
"Owner" routes add the ownership policy inside the service, after the
existence check, so a missing listing is 404 and someone else's is 403.

/agent/my-properties is declared before /{property_id} so the literal
path wins.
"""

import uuid
from typing import Optional

from fastapi import APIRouter, Body, Depends, File, Query, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from estatehub.auth.dependencies import (
    CurrentIdentity,
    get_current_user,
    get_settings,
    require_agent,
)
from estatehub.config import Settings
from estatehub.db.engine import get_db
from estatehub.schemas.common import MessageResponse
from estatehub.schemas.property import (
    AgentPropertyList,
    ImageDelete,
    ImagesResponse,
    PropertyCreate,
    PropertyEnvelope,
    PropertyList,
    PropertyMessageEnvelope,
    PropertyRead,
    PropertyUpdate,
)
from estatehub.services.property_service import PropertyService
from estatehub.services.storage import ImageStorage, IncomingImage

router = APIRouter(prefix="/properties")

# Auth gate first, role gate reads what it leaves on request.state
_agent_only = [Depends(get_current_user)]


def _property_svc(db: AsyncSession = Depends(get_db)) -> PropertyService:
    return PropertyService(db)


def _storage(settings: Settings = Depends(get_settings)) -> ImageStorage:
    return ImageStorage(
        upload_dir=settings.upload_dir,
        max_bytes=settings.max_upload_bytes,
        max_files=settings.max_upload_files,
    )


# ═══════════════════════════════════════════════════════════
# Agent listing (must precede /{property_id})
# ═══════════════════════════════════════════════════════════


@router.get(
    "/agent/my-properties",
    response_model=AgentPropertyList,
    dependencies=_agent_only,
)
async def list_my_properties(
    identity: CurrentIdentity = Depends(require_agent),
    svc: PropertyService = Depends(_property_svc),
):
    """The caller's own listings, newest first."""
    properties = await svc.list_agent_properties(identity.user_uuid)
    return AgentPropertyList(
        properties=[PropertyRead.model_validate(p) for p in properties],
        count=len(properties),
    )


# ═══════════════════════════════════════════════════════════
# Public reads
# ═══════════════════════════════════════════════════════════


@router.get("", response_model=PropertyList)
async def list_properties(
    city: Optional[str] = Query(None),
    state: Optional[str] = Query(None),
    property_type: Optional[str] = Query(
        None, alias="propertyType", pattern=r"^(house|penthouse|villa|estate|loft)$"
    ),
    min_price: Optional[float] = Query(None, alias="minPrice", ge=0),
    max_price: Optional[float] = Query(None, alias="maxPrice", ge=0),
    min_beds: Optional[int] = Query(None, alias="minBeds", ge=0),
    status: str = Query("active", pattern=r"^(draft|active|pending|sold)?$"),
    featured: Optional[bool] = Query(None),
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    svc: PropertyService = Depends(_property_svc),
):
    """Search listings. Defaults to active listings; status= (empty) lists every status."""
    properties = await svc.list_properties(
        city=city,
        state=state,
        property_type=property_type,
        min_price=min_price,
        max_price=max_price,
        min_beds=min_beds,
        status=status,
        featured=featured,
        limit=limit,
        offset=offset,
    )
    return PropertyList(
        properties=[PropertyRead.model_validate(p) for p in properties],
        count=len(properties),
        limit=limit,
        offset=offset,
    )


@router.get("/{property_id}", response_model=PropertyEnvelope)
async def get_property(
    property_id: uuid.UUID,
    svc: PropertyService = Depends(_property_svc),
):
    """Get a single listing, with its agent's contact details."""
    prop = await svc.require_property(property_id)
    return PropertyEnvelope(property=PropertyRead.model_validate(prop))


# ═══════════════════════════════════════════════════════════
# Agent / owner mutations
# ═══════════════════════════════════════════════════════════


@router.post(
    "",
    response_model=PropertyMessageEnvelope,
    status_code=201,
    dependencies=_agent_only,
)
async def create_property(
    body: PropertyCreate,
    identity: CurrentIdentity = Depends(require_agent),
    svc: PropertyService = Depends(_property_svc),
):
    """Create a listing owned by the caller."""
    prop = await svc.create_property(identity.user_uuid, body.model_dump())
    return PropertyMessageEnvelope(
        message="Property created successfully",
        property=PropertyRead.model_validate(prop),
    )


@router.put(
    "/{property_id}",
    response_model=PropertyMessageEnvelope,
    dependencies=_agent_only,
)
async def update_property(
    property_id: uuid.UUID,
    body: PropertyUpdate,
    identity: CurrentIdentity = Depends(require_agent),
    svc: PropertyService = Depends(_property_svc),
):
    """Partially update a listing. An empty body is rejected with 400."""
    prop = await svc.update_property(identity, property_id, body.changes())
    return PropertyMessageEnvelope(
        message="Property updated successfully",
        property=PropertyRead.model_validate(prop),
    )


@router.delete(
    "/{property_id}",
    response_model=MessageResponse,
    dependencies=_agent_only,
)
async def delete_property(
    property_id: uuid.UUID,
    identity: CurrentIdentity = Depends(require_agent),
    svc: PropertyService = Depends(_property_svc),
):
    """Delete a listing and, through the foreign keys, its inquiries and appointments."""
    await svc.delete_property(identity, property_id)
    return MessageResponse(message="Property deleted successfully")


# ═══════════════════════════════════════════════════════════
# Images
# ═══════════════════════════════════════════════════════════


@router.post(
    "/{property_id}/images",
    response_model=ImagesResponse,
    dependencies=_agent_only,
)
async def upload_images(
    property_id: uuid.UUID,
    images: Optional[list[UploadFile]] = File(None),
    identity: CurrentIdentity = Depends(require_agent),
    svc: PropertyService = Depends(_property_svc),
    storage: ImageStorage = Depends(_storage),
):
    """Upload up to 10 images (multipart field "images", 5MB each)."""
    incoming = []
    for upload in images or []:
        # Read one byte past the cap so oversize files are detectable
        data = await upload.read(storage.max_bytes + 1)
        incoming.append(
            IncomingImage(
                filename=upload.filename or "image",
                content_type=upload.content_type,
                data=data,
            )
        )

    all_images, uploaded = await svc.add_images(identity, property_id, incoming, storage)
    return ImagesResponse(
        message="Images uploaded successfully",
        images=all_images,
        uploaded_count=uploaded,
    )


@router.delete(
    "/{property_id}/images",
    response_model=ImagesResponse,
    response_model_exclude_none=True,
    dependencies=_agent_only,
)
async def delete_image(
    property_id: uuid.UUID,
    body: ImageDelete = Body(...),
    identity: CurrentIdentity = Depends(require_agent),
    svc: PropertyService = Depends(_property_svc),
    storage: ImageStorage = Depends(_storage),
):
    """Remove one image (body: {"imageUrl": ...}) from a listing."""
    remaining = await svc.remove_image(identity, property_id, body.image_url, storage)
    return ImagesResponse(message="Image deleted successfully", images=remaining)
