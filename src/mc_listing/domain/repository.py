# src/mc_listing/domain/repository.py
"""Repository Protocol — dependency inversion for testability.

Unit tests inject a mock that conforms to this Protocol.
"""

from datetime import datetime
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.mc_listing.domain.models import Listing, ListingFilters, NewListing


class ListingRepositoryProtocol(Protocol):
    async def get_by_id(
        self, db: AsyncSession, listing_id: int, now: datetime
    ) -> Listing | None: ...

    async def search(
        self,
        db: AsyncSession,
        filters: ListingFilters,
        now: datetime,
        limit: int,
        offset: int,
    ) -> list[Listing]: ...

    async def list_by_seller(
        self, db: AsyncSession, seller_id: str, now: datetime
    ) -> list[Listing]: ...

    async def insert(self, db: AsyncSession, listing: NewListing) -> Listing: ...

    async def delete(self, db: AsyncSession, listing_id: int) -> bool: ...

    async def update_expiration(
        self, db: AsyncSession, listing_id: int, expiration_date: datetime
    ) -> bool: ...
