# src/mc_boost/domain/repository.py
"""BoostOrderRepository Protocol — interface contract for persistence layer."""

from datetime import datetime
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.mc_boost.domain.models import BoostOrder, BoostOrderWithListing


class BoostOrderRepositoryProtocol(Protocol):
    async def lock_listing_owner(
        self, db: AsyncSession, listing_id: int
    ) -> str | None: ...

    async def list_open_for_listing(
        self, db: AsyncSession, listing_id: int
    ) -> list[BoostOrder]: ...

    async def insert(self, db: AsyncSession, order: BoostOrder) -> BoostOrder: ...

    async def get_by_order_id(
        self, db: AsyncSession, order_id: str, for_update: bool = False
    ) -> BoostOrder | None: ...

    async def activate(
        self,
        db: AsyncSession,
        order_id: str,
        boost_start: datetime,
        boost_end: datetime,
    ) -> BoostOrder | None: ...

    async def cancel(self, db: AsyncSession, order_id: str) -> BoostOrder | None: ...

    async def cancel_open_for_listing(self, db: AsyncSession, listing_id: int) -> int: ...

    async def expire_due(self, db: AsyncSession, now: datetime) -> int: ...

    async def expire_due_for_listing(
        self, db: AsyncSession, listing_id: int, now: datetime
    ) -> int: ...

    async def list_by_user(
        self, db: AsyncSession, user_id: str
    ) -> list[BoostOrderWithListing]: ...

    async def list_active(
        self, db: AsyncSession, now: datetime
    ) -> list[BoostOrderWithListing]: ...
