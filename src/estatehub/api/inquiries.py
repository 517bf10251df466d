"""Inquiry API routes.

Buyers submit inquiries without an account. Everything else needs a
bearer token and only reaches inquiries on the caller's own listings
(admins may act on any single inquiry).
"""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from estatehub.auth.dependencies import CurrentIdentity, get_current_user
from estatehub.db.engine import get_db
from estatehub.schemas.common import MessageResponse
from estatehub.schemas.inquiry import (
    INQUIRY_STATUS_PATTERN,
    InquiryCreate,
    InquiryEnvelope,
    InquiryList,
    InquiryRead,
    InquiryStats,
    InquiryStatusUpdate,
)
from estatehub.services.inquiry_service import InquiryService

router = APIRouter(prefix="/inquiries")


def _inquiry_svc(db: AsyncSession = Depends(get_db)) -> InquiryService:
    return InquiryService(db)


@router.post("", response_model=InquiryEnvelope, status_code=201)
async def create_inquiry(
    body: InquiryCreate,
    svc: InquiryService = Depends(_inquiry_svc),
):
    """Public: ask about a listing."""
    inquiry = await svc.create_inquiry(
        property_id=body.property_id,
        name=body.name,
        email=body.email,
        message=body.message,
        phone=body.phone,
    )
    return InquiryEnvelope(
        message="Inquiry submitted successfully",
        inquiry=InquiryRead.model_validate(inquiry),
    )


@router.get("", response_model=InquiryList)
async def list_inquiries(
    status: Optional[str] = Query(None, pattern=INQUIRY_STATUS_PATTERN),
    property_id: Optional[uuid.UUID] = Query(None, alias="propertyId"),
    identity: CurrentIdentity = Depends(get_current_user),
    svc: InquiryService = Depends(_inquiry_svc),
):
    inquiries = await svc.list_inquiries(
        identity.user_uuid, status=status, property_id=property_id
    )
    return InquiryList(
        inquiries=[InquiryRead.model_validate(i) for i in inquiries],
        total=len(inquiries),
    )


@router.get("/stats", response_model=InquiryStats)
async def inquiry_stats(
    identity: CurrentIdentity = Depends(get_current_user),
    svc: InquiryService = Depends(_inquiry_svc),
):
    return InquiryStats(**await svc.stats(identity.user_uuid))


@router.get("/{inquiry_id}", response_model=InquiryRead)
async def get_inquiry(
    inquiry_id: uuid.UUID,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: InquiryService = Depends(_inquiry_svc),
):
    inquiry = await svc.get_inquiry(identity, inquiry_id)
    return InquiryRead.model_validate(inquiry)


@router.put("/{inquiry_id}/status", response_model=InquiryEnvelope)
async def update_inquiry_status(
    inquiry_id: uuid.UUID,
    body: InquiryStatusUpdate,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: InquiryService = Depends(_inquiry_svc),
):
    inquiry = await svc.update_status(identity, inquiry_id, body.status)
    return InquiryEnvelope(
        message="Inquiry status updated successfully",
        inquiry=InquiryRead.model_validate(inquiry),
    )


@router.delete("/{inquiry_id}", response_model=MessageResponse)
async def delete_inquiry(
    inquiry_id: uuid.UUID,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: InquiryService = Depends(_inquiry_svc),
):
    await svc.delete_inquiry(identity, inquiry_id)
    return MessageResponse(message="Inquiry deleted successfully")
