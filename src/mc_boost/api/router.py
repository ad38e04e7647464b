"""mc_boost REST endpoints.

POST   /boost/create                      — owner opens a pending order
POST   /boost/process-payment/{order_id}  — charge + activate
GET    /boost/user-orders                 — caller's order history
GET    /boost/check-status/{listing_id}   — {is_boosted}
GET    /boost/active                      — admin: live boosts
DELETE /boost/cancel/{order_id}           — admin: cancel pending/active
POST   /boost/cleanup                     — admin: expire lapsed boosts now
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.mc_boost.application.schemas import (
    BoostOrderOut,
    BoostOrderWithListingOut,
    BoostStatusOut,
    CleanupOut,
    CreateBoostRequest,
)
from src.mc_boost.application.service import BoostLedgerService
from src.mc_common.database import get_db_session
from src.mc_common.response import ApiResponse, respond
from src.mc_gateway.auth.dependencies import get_current_user, require_admin
from src.mc_gateway.user.db_models import UserModel

router = APIRouter(prefix="/boost", tags=["boost"])

ledger = BoostLedgerService()


def get_ledger() -> BoostLedgerService:
    """Overridable in tests via app.dependency_overrides."""
    return ledger


@router.post("/create", status_code=status.HTTP_201_CREATED)
async def create_boost_order(
    body: CreateBoostRequest,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    svc: Annotated[BoostLedgerService, Depends(get_ledger)],
) -> ApiResponse:
    order = await svc.create_order(db, str(current_user.id), body.listing_id)
    return respond(
        request,
        BoostOrderOut.from_domain(order).model_dump(),
        "Boost order created successfully",
    )


@router.post("/process-payment/{order_id}")
async def process_payment(
    order_id: str,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    svc: Annotated[BoostLedgerService, Depends(get_ledger)],
) -> ApiResponse:
    order = await svc.activate_order(db, order_id)
    return respond(
        request,
        BoostOrderOut.from_domain(order).model_dump(),
        "Payment processed successfully",
    )


@router.get("/user-orders")
async def user_orders(
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    svc: Annotated[BoostLedgerService, Depends(get_ledger)],
) -> ApiResponse:
    items = await svc.list_user_orders(db, str(current_user.id))
    return respond(
        request, [BoostOrderWithListingOut.from_joined(i).model_dump() for i in items]
    )


@router.get("/check-status/{listing_id}")
async def check_status(
    listing_id: int,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    svc: Annotated[BoostLedgerService, Depends(get_ledger)],
) -> ApiResponse:
    boosted = await svc.is_boosted(db, listing_id)
    return respond(
        request, BoostStatusOut(listing_id=listing_id, is_boosted=boosted).model_dump()
    )


@router.get("/active")
async def active_boosts(
    request: Request,
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    svc: Annotated[BoostLedgerService, Depends(get_ledger)],
) -> ApiResponse:
    items = await svc.list_all_active(db)
    return respond(
        request, [BoostOrderWithListingOut.from_joined(i).model_dump() for i in items]
    )


@router.delete("/cancel/{order_id}")
async def cancel_boost(
    order_id: str,
    request: Request,
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    svc: Annotated[BoostLedgerService, Depends(get_ledger)],
) -> ApiResponse:
    order = await svc.cancel_order(db, order_id)
    return respond(
        request,
        BoostOrderOut.from_domain(order).model_dump(),
        "Boost cancelled successfully",
    )


@router.post("/cleanup")
async def cleanup_expired(
    request: Request,
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    svc: Annotated[BoostLedgerService, Depends(get_ledger)],
) -> ApiResponse:
    count = await svc.sweep_expired(db)
    return respond(
        request,
        CleanupOut(cleaned_count=count).model_dump(),
        "Expired boosts cleaned up successfully",
    )
