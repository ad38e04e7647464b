# src/mc_admin/application/service.py
"""Admin application service: listing moderation over the listing and boost services."""

import logging
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from src.mc_boost.application.service import BoostLedgerService
from src.mc_listing.application.schemas import ListingOut
from src.mc_listing.application.service import ListingApplicationService

logger = logging.getLogger(__name__)


class AdminService:
    def __init__(
        self,
        listings: ListingApplicationService | None = None,
        ledger: BoostLedgerService | None = None,
    ) -> None:
        self._listings = listings or ListingApplicationService()
        self._ledger = ledger or BoostLedgerService()

    async def update_expiration(
        self, db: AsyncSession, listing_id: int, expiration_date: datetime
    ) -> ListingOut:
        listing = await self._listings.update_expiration(db, listing_id, expiration_date)
        logger.info(
            "Listing %s expiration set to %s", listing_id, expiration_date.isoformat()
        )
        return listing

    async def set_featured(
        self, db: AsyncSession, listing_id: int, is_featured: bool
    ) -> ListingOut:
        """Toggle a free boost on a listing.

        Featuring replaces any pending or active order with a complimentary
        active one; un-featuring cancels whatever is open.
        """
        if is_featured:
            await self._ledger.grant_complimentary(db, listing_id)
        else:
            await self._ledger.revoke(db, listing_id)
        return await self._listings.get_listing(db, listing_id)
