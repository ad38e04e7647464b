"""mc_listing REST endpoints.

GET    /listings                      — marketplace list/search, boosted first
GET    /listings/seller/{seller_id}   — all listings of one seller
GET    /listings/{listing_id}         — detail incl. boost projection
POST   /listings                      — create (seller = caller)
DELETE /listings/{listing_id}         — owner or admin
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.mc_common.database import get_db_session
from src.mc_common.response import ApiResponse, respond
from src.mc_gateway.auth.dependencies import get_current_user
from src.mc_gateway.user.db_models import UserModel
from src.mc_listing.application.schemas import CreateListingRequest
from src.mc_listing.application.service import ListingApplicationService
from src.mc_listing.domain.models import ListingFilters

router = APIRouter(prefix="/listings", tags=["listings"])

_service = ListingApplicationService()


@router.get("")
async def search_listings(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    q: str | None = Query(None, description="Free text over make/model/description"),
    make: str | None = Query(None),
    model: str | None = Query(None),
    min_price: int | None = Query(None, ge=0),
    max_price: int | None = Query(None, ge=0),
    fuel_type: str | None = Query(None),
    transmission: str | None = Query(None),
    min_year: int | None = Query(None),
    max_year: int | None = Query(None),
    location: str | None = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
) -> ApiResponse:
    filters = ListingFilters(
        q=q,
        make=make,
        model=model,
        min_price=min_price,
        max_price=max_price,
        fuel_type=fuel_type,
        transmission=transmission,
        min_year=min_year,
        max_year=max_year,
        location=location,
    )
    result = await _service.search(db, filters, page, limit)
    return respond(request, result.model_dump())


@router.get("/seller/{seller_id}")
async def list_seller_listings(
    seller_id: str,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.list_by_seller(db, seller_id)
    return respond(request, [item.model_dump() for item in result])


@router.get("/{listing_id}")
async def get_listing(
    listing_id: int,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.get_listing(db, listing_id)
    return respond(request, result.model_dump())


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_listing(
    body: CreateListingRequest,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.create_listing(
        db, str(current_user.id), current_user.name, body
    )
    return respond(request, result.model_dump(), "Listing created successfully")


@router.delete("/{listing_id}")
async def delete_listing(
    listing_id: int,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    await _service.delete_listing(
        db, listing_id, str(current_user.id), is_admin=current_user.is_admin
    )
    return respond(request, {"listing_id": listing_id}, "Listing deleted successfully")
