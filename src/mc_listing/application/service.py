"""ListingApplicationService — thin composition over ListingRepository.

Reads need no transaction; create/delete/update_expiration commit here and
roll back on any error.
"""

from datetime import datetime, timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.mc_common.datetime_utils import Clock, utc_now
from src.mc_common.errors import ListingNotFoundError, ListingNotOwnedError
from src.mc_listing.application.schemas import (
    CreateListingRequest,
    ListingOut,
    ListingPage,
)
from src.mc_listing.domain.models import ListingFilters, NewListing
from src.mc_listing.domain.repository import ListingRepositoryProtocol
from src.mc_listing.infrastructure.persistence import ListingRepository


class ListingApplicationService:
    def __init__(
        self,
        repo: ListingRepositoryProtocol | None = None,
        clock: Clock = utc_now,
    ) -> None:
        self._repo: ListingRepositoryProtocol = repo or ListingRepository()
        self._clock = clock

    async def search(
        self,
        db: AsyncSession,
        filters: ListingFilters,
        page: int,
        limit: int,
    ) -> ListingPage:
        # Fetch limit+1 to detect has_more without COUNT(*)
        listings = await self._repo.search(
            db, filters, self._clock(), limit + 1, (page - 1) * limit
        )
        has_more = len(listings) > limit
        return ListingPage(
            items=[ListingOut.from_domain(item) for item in listings[:limit]],
            page=page,
            limit=limit,
            has_more=has_more,
        )

    async def get_listing(self, db: AsyncSession, listing_id: int) -> ListingOut:
        listing = await self._repo.get_by_id(db, listing_id, self._clock())
        if listing is None:
            raise ListingNotFoundError(listing_id)
        return ListingOut.from_domain(listing)

    async def list_by_seller(self, db: AsyncSession, seller_id: str) -> list[ListingOut]:
        listings = await self._repo.list_by_seller(db, seller_id, self._clock())
        return [ListingOut.from_domain(item) for item in listings]

    async def create_listing(
        self,
        db: AsyncSession,
        seller_id: str,
        seller_name: str,
        req: CreateListingRequest,
    ) -> ListingOut:
        new = NewListing(
            make=req.make,
            model=req.model,
            year=req.year,
            price=req.price,
            seller_id=seller_id,
            seller_name=seller_name,
            expiration_date=self._clock() + timedelta(days=settings.LISTING_TTL_DAYS),
            fuel_type=req.fuel_type,
            description=req.description,
            images=req.images,
            location=req.location,
            mileage=req.mileage,
            transmission=req.transmission,
            color=req.color,
        )
        try:
            listing = await self._repo.insert(db, new)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return ListingOut.from_domain(listing)

    async def delete_listing(
        self,
        db: AsyncSession,
        listing_id: int,
        requester_id: str,
        is_admin: bool = False,
    ) -> None:
        """Owner (or admin) deletes a listing; its boost orders cascade."""
        try:
            listing = await self._repo.get_by_id(db, listing_id, self._clock())
            if listing is None:
                raise ListingNotFoundError(listing_id)
            if listing.seller_id != requester_id and not is_admin:
                raise ListingNotOwnedError(listing_id)
            await self._repo.delete(db, listing_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

    async def update_expiration(
        self, db: AsyncSession, listing_id: int, expiration_date: datetime
    ) -> ListingOut:
        try:
            if not await self._repo.update_expiration(db, listing_id, expiration_date):
                raise ListingNotFoundError(listing_id)
            listing = await self._repo.get_by_id(db, listing_id, self._clock())
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return ListingOut.from_domain(listing)
