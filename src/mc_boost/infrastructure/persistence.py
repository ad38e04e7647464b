# src/mc_boost/infrastructure/persistence.py
"""BoostOrderRepository — raw SQL persistence implementation.

Every state change is a guarded UPDATE (``WHERE status = ...``) so a row can
only move along the lifecycle, never backwards, even if two requests race.
"""

import json
from datetime import datetime
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.mc_boost.domain.models import BoostOrder, BoostOrderWithListing, ListingSummary

# ---------------------------------------------------------------------------
# SQL statements
# ---------------------------------------------------------------------------

_ORDER_COLUMNS = """
    id, order_id, user_id, listing_id, amount, status,
    boost_start, boost_end, created_at
"""

_JOINED_COLUMNS = """
    bo.id, bo.order_id, bo.user_id, bo.listing_id, bo.amount, bo.status,
    bo.boost_start, bo.boost_end, bo.created_at,
    l.make, l.model, l.year, l.price, l.images, l.seller_name
"""

_LOCK_LISTING_SQL = text("""
    SELECT seller_id FROM listings WHERE id = :listing_id FOR UPDATE
""")

_LIST_OPEN_FOR_LISTING_SQL = text(f"""
    SELECT {_ORDER_COLUMNS}
    FROM boost_orders
    WHERE listing_id = :listing_id AND status IN ('pending', 'active')
""")

_INSERT_ORDER_SQL = text(f"""
    INSERT INTO boost_orders (order_id, user_id, listing_id, amount, status,
        boost_start, boost_end)
    VALUES (:order_id, :user_id, :listing_id, :amount, :status,
        :boost_start, :boost_end)
    RETURNING {_ORDER_COLUMNS}
""")

_GET_ORDER_SQL = text(f"""
    SELECT {_ORDER_COLUMNS} FROM boost_orders WHERE order_id = :order_id
""")

_GET_ORDER_FOR_UPDATE_SQL = text(f"""
    SELECT {_ORDER_COLUMNS} FROM boost_orders WHERE order_id = :order_id
    FOR UPDATE
""")

_ACTIVATE_ORDER_SQL = text(f"""
    UPDATE boost_orders
    SET status = 'active', boost_start = :boost_start, boost_end = :boost_end
    WHERE order_id = :order_id AND status = 'pending'
    RETURNING {_ORDER_COLUMNS}
""")

_CANCEL_ORDER_SQL = text(f"""
    UPDATE boost_orders
    SET status = 'cancelled'
    WHERE order_id = :order_id AND status IN ('pending', 'active')
    RETURNING {_ORDER_COLUMNS}
""")

_CANCEL_OPEN_FOR_LISTING_SQL = text("""
    UPDATE boost_orders
    SET status = 'cancelled'
    WHERE listing_id = :listing_id AND status IN ('pending', 'active')
""")

# Served by idx_boost_orders_active_end (status, boost_end)
_EXPIRE_DUE_SQL = text("""
    UPDATE boost_orders
    SET status = 'expired'
    WHERE status = 'active' AND boost_end <= :now
""")

_EXPIRE_DUE_FOR_LISTING_SQL = text("""
    UPDATE boost_orders
    SET status = 'expired'
    WHERE listing_id = :listing_id AND status = 'active' AND boost_end <= :now
""")

_LIST_BY_USER_SQL = text(f"""
    SELECT {_JOINED_COLUMNS}
    FROM boost_orders bo
    JOIN listings l ON l.id = bo.listing_id
    WHERE bo.user_id = :user_id
    ORDER BY bo.created_at DESC, bo.id DESC
""")

_LIST_ACTIVE_SQL = text(f"""
    SELECT {_JOINED_COLUMNS}
    FROM boost_orders bo
    JOIN listings l ON l.id = bo.listing_id
    WHERE bo.status = 'active' AND bo.boost_end > :now
    ORDER BY bo.boost_start DESC, bo.id DESC
""")


# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------


def _row_to_order(row: Any) -> BoostOrder:
    return BoostOrder(
        id=row.id,
        order_id=row.order_id,
        user_id=row.user_id,
        listing_id=row.listing_id,
        amount=row.amount,
        status=row.status,
        boost_start=row.boost_start,
        boost_end=row.boost_end,
        created_at=row.created_at,
    )


def _row_to_joined(row: Any) -> BoostOrderWithListing:
    images = row.images
    if isinstance(images, str):
        images = json.loads(images)
    return BoostOrderWithListing(
        order=_row_to_order(row),
        listing=ListingSummary(
            make=row.make,
            model=row.model,
            year=row.year,
            price=row.price,
            images=list(images or []),
            seller_name=row.seller_name,
        ),
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class BoostOrderRepository:
    """Concrete implementation of BoostOrderRepositoryProtocol using raw SQL."""

    async def lock_listing_owner(
        self, db: AsyncSession, listing_id: int
    ) -> str | None:
        """Row-lock the listing for the rest of the transaction; return its seller."""
        result = await db.execute(_LOCK_LISTING_SQL, {"listing_id": listing_id})
        row = result.fetchone()
        return row.seller_id if row else None

    async def list_open_for_listing(
        self, db: AsyncSession, listing_id: int
    ) -> list[BoostOrder]:
        result = await db.execute(
            _LIST_OPEN_FOR_LISTING_SQL, {"listing_id": listing_id}
        )
        return [_row_to_order(row) for row in result.fetchall()]

    async def insert(self, db: AsyncSession, order: BoostOrder) -> BoostOrder:
        result = await db.execute(
            _INSERT_ORDER_SQL,
            {
                "order_id": order.order_id,
                "user_id": order.user_id,
                "listing_id": order.listing_id,
                "amount": order.amount,
                "status": order.status,
                "boost_start": order.boost_start,
                "boost_end": order.boost_end,
            },
        )
        return _row_to_order(result.fetchone())

    async def get_by_order_id(
        self, db: AsyncSession, order_id: str, for_update: bool = False
    ) -> BoostOrder | None:
        sql = _GET_ORDER_FOR_UPDATE_SQL if for_update else _GET_ORDER_SQL
        result = await db.execute(sql, {"order_id": order_id})
        row = result.fetchone()
        return _row_to_order(row) if row else None

    async def activate(
        self,
        db: AsyncSession,
        order_id: str,
        boost_start: datetime,
        boost_end: datetime,
    ) -> BoostOrder | None:
        result = await db.execute(
            _ACTIVATE_ORDER_SQL,
            {"order_id": order_id, "boost_start": boost_start, "boost_end": boost_end},
        )
        row = result.fetchone()
        return _row_to_order(row) if row else None

    async def cancel(self, db: AsyncSession, order_id: str) -> BoostOrder | None:
        result = await db.execute(_CANCEL_ORDER_SQL, {"order_id": order_id})
        row = result.fetchone()
        return _row_to_order(row) if row else None

    async def cancel_open_for_listing(self, db: AsyncSession, listing_id: int) -> int:
        result = await db.execute(
            _CANCEL_OPEN_FOR_LISTING_SQL, {"listing_id": listing_id}
        )
        return int(result.rowcount)

    async def expire_due(self, db: AsyncSession, now: datetime) -> int:
        result = await db.execute(_EXPIRE_DUE_SQL, {"now": now})
        return int(result.rowcount)

    async def expire_due_for_listing(
        self, db: AsyncSession, listing_id: int, now: datetime
    ) -> int:
        result = await db.execute(
            _EXPIRE_DUE_FOR_LISTING_SQL, {"listing_id": listing_id, "now": now}
        )
        return int(result.rowcount)

    async def list_by_user(
        self, db: AsyncSession, user_id: str
    ) -> list[BoostOrderWithListing]:
        result = await db.execute(_LIST_BY_USER_SQL, {"user_id": user_id})
        return [_row_to_joined(row) for row in result.fetchall()]

    async def list_active(
        self, db: AsyncSession, now: datetime
    ) -> list[BoostOrderWithListing]:
        result = await db.execute(_LIST_ACTIVE_SQL, {"now": now})
        return [_row_to_joined(row) for row in result.fetchall()]
