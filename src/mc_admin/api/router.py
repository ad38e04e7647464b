# src/mc_admin/api/router.py
"""Admin REST API."""
from typing import Annotated

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, field_validator
from sqlalchemy.ext.asyncio import AsyncSession

from src.mc_admin.application.service import AdminService
from src.mc_common.database import get_db_session
from src.mc_common.response import ApiResponse, respond
from src.mc_gateway.auth.dependencies import require_admin
from src.mc_gateway.user.db_models import UserModel
from src.mc_listing.application.schemas import UpdateExpirationRequest

router = APIRouter(prefix="/admin", tags=["admin"])
_service = AdminService()


class FeaturedRequest(BaseModel):
    is_featured: bool

    @field_validator("is_featured", mode="before")
    @classmethod
    def strict_bool(cls, v: object) -> object:
        if not isinstance(v, bool):
            raise ValueError("is_featured must be a boolean")
        return v


@router.patch("/listings/{listing_id}/expiration")
async def update_listing_expiration(
    listing_id: int,
    body: UpdateExpirationRequest,
    request: Request,
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.update_expiration(db, listing_id, body.expiration_date)
    return respond(request, result.model_dump(), "Expiration date updated successfully")


@router.patch("/listings/{listing_id}/featured")
async def set_listing_featured(
    listing_id: int,
    body: FeaturedRequest,
    request: Request,
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.set_featured(db, listing_id, body.is_featured)
    message = "Listing featured successfully" if body.is_featured else "Listing unfeatured successfully"
    return respond(request, result.model_dump(), message)
