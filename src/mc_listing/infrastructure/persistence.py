"""ListingRepository — concrete implementation of ListingRepositoryProtocol.

All queries use raw text() SQL (no ORM).
asyncpg NULL parameter pattern: CAST(:param AS TYPE) IS NULL required for None values.
"""

import json
from datetime import datetime
from typing import Any

from sqlalchemy import bindparam, text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.ext.asyncio import AsyncSession

from src.mc_boost.infrastructure.projector import (
    ACTIVE_BOOST_JOIN,
    BOOST_PROJECTION_COLUMNS,
    BOOSTED_FIRST_ORDER,
)
from src.mc_listing.domain.models import Listing, ListingFilters, NewListing

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

_LISTING_COLUMNS = """
    l.id, l.make, l.model, l.year, l.price, l.fuel_type, l.description,
    l.images, l.seller_id, l.seller_name, l.location, l.mileage,
    l.transmission, l.color, l.created_at, l.expiration_date
"""

_GET_LISTING_SQL = text(f"""
    SELECT {_LISTING_COLUMNS}, {BOOST_PROJECTION_COLUMNS}
    FROM listings l
    {ACTIVE_BOOST_JOIN}
    WHERE l.id = :listing_id
""")

_SEARCH_LISTINGS_SQL = text(f"""
    SELECT {_LISTING_COLUMNS}, {BOOST_PROJECTION_COLUMNS}
    FROM listings l
    {ACTIVE_BOOST_JOIN}
    WHERE l.expiration_date > :now
      AND (
          CAST(:q AS TEXT) IS NULL
          OR l.make ILIKE CAST(:q AS TEXT)
          OR l.model ILIKE CAST(:q AS TEXT)
          OR l.description ILIKE CAST(:q AS TEXT)
      )
      AND (CAST(:make AS TEXT) IS NULL OR l.make ILIKE CAST(:make AS TEXT))
      AND (CAST(:model AS TEXT) IS NULL OR l.model ILIKE CAST(:model AS TEXT))
      AND (CAST(:min_price AS BIGINT) IS NULL OR l.price >= CAST(:min_price AS BIGINT))
      AND (CAST(:max_price AS BIGINT) IS NULL OR l.price <= CAST(:max_price AS BIGINT))
      AND (CAST(:fuel_type AS TEXT) IS NULL OR l.fuel_type = CAST(:fuel_type AS TEXT))
      AND (
          CAST(:transmission AS TEXT) IS NULL
          OR l.transmission = CAST(:transmission AS TEXT)
      )
      AND (CAST(:min_year AS INT) IS NULL OR l.year >= CAST(:min_year AS INT))
      AND (CAST(:max_year AS INT) IS NULL OR l.year <= CAST(:max_year AS INT))
      AND (CAST(:location AS TEXT) IS NULL OR l.location ILIKE CAST(:location AS TEXT))
    ORDER BY {BOOSTED_FIRST_ORDER}
    LIMIT :limit OFFSET :offset
""")

# Sellers see their own listings even after they stop being displayed
_LIST_BY_SELLER_SQL = text(f"""
    SELECT {_LISTING_COLUMNS}, {BOOST_PROJECTION_COLUMNS}
    FROM listings l
    {ACTIVE_BOOST_JOIN}
    WHERE l.seller_id = :seller_id
    ORDER BY {BOOSTED_FIRST_ORDER}
""")

_INSERT_LISTING_SQL = text("""
    INSERT INTO listings (make, model, year, price, fuel_type, description,
        images, seller_id, seller_name, location, mileage, transmission,
        color, expiration_date)
    VALUES (:make, :model, :year, :price, :fuel_type, :description,
        :images, :seller_id, :seller_name, :location, :mileage, :transmission,
        :color, :expiration_date)
    RETURNING id, make, model, year, price, fuel_type, description,
        images, seller_id, seller_name, location, mileage, transmission,
        color, created_at, expiration_date
""").bindparams(bindparam("images", type_=JSONB))

_DELETE_LISTING_SQL = text("DELETE FROM listings WHERE id = :listing_id")

_UPDATE_EXPIRATION_SQL = text("""
    UPDATE listings SET expiration_date = :expiration_date
    WHERE id = :listing_id
""")

# ---------------------------------------------------------------------------
# Row mapper
# ---------------------------------------------------------------------------


def _images(raw: Any) -> list[str]:
    if raw is None:
        return []
    if isinstance(raw, str):
        raw = json.loads(raw)
    return [str(i) for i in raw]


def _row_to_listing(row: Any) -> Listing:
    mapping = row._mapping
    return Listing(
        id=row.id,
        make=row.make,
        model=row.model,
        year=row.year,
        price=row.price,
        fuel_type=row.fuel_type,
        description=row.description or "",
        images=_images(row.images),
        seller_id=row.seller_id,
        seller_name=row.seller_name,
        location=row.location,
        mileage=row.mileage,
        transmission=row.transmission,
        color=row.color,
        created_at=row.created_at,
        expiration_date=row.expiration_date,
        # INSERT ... RETURNING rows carry no projection columns
        is_boosted=bool(mapping.get("is_boosted", False)),
        boost_start=mapping.get("boost_start"),
        boost_end=mapping.get("boost_end"),
    )


def _like(value: str | None) -> str | None:
    return f"%{value}%" if value else None


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class ListingRepository:
    async def get_by_id(
        self, db: AsyncSession, listing_id: int, now: datetime
    ) -> Listing | None:
        result = await db.execute(
            _GET_LISTING_SQL, {"listing_id": listing_id, "now": now}
        )
        row = result.fetchone()
        return _row_to_listing(row) if row else None

    async def search(
        self,
        db: AsyncSession,
        filters: ListingFilters,
        now: datetime,
        limit: int,
        offset: int,
    ) -> list[Listing]:
        result = await db.execute(
            _SEARCH_LISTINGS_SQL,
            {
                "now": now,
                "q": _like(filters.q),
                "make": _like(filters.make),
                "model": _like(filters.model),
                "min_price": filters.min_price,
                "max_price": filters.max_price,
                "fuel_type": filters.fuel_type,
                "transmission": filters.transmission,
                "min_year": filters.min_year,
                "max_year": filters.max_year,
                "location": _like(filters.location),
                "limit": limit,
                "offset": offset,
            },
        )
        return [_row_to_listing(row) for row in result.fetchall()]

    async def list_by_seller(
        self, db: AsyncSession, seller_id: str, now: datetime
    ) -> list[Listing]:
        result = await db.execute(
            _LIST_BY_SELLER_SQL, {"seller_id": seller_id, "now": now}
        )
        return [_row_to_listing(row) for row in result.fetchall()]

    async def insert(self, db: AsyncSession, listing: NewListing) -> Listing:
        result = await db.execute(
            _INSERT_LISTING_SQL,
            {
                "make": listing.make,
                "model": listing.model,
                "year": listing.year,
                "price": listing.price,
                "fuel_type": listing.fuel_type,
                "description": listing.description,
                "images": listing.images,
                "seller_id": listing.seller_id,
                "seller_name": listing.seller_name,
                "location": listing.location,
                "mileage": listing.mileage,
                "transmission": listing.transmission,
                "color": listing.color,
                "expiration_date": listing.expiration_date,
            },
        )
        return _row_to_listing(result.fetchone())

    async def delete(self, db: AsyncSession, listing_id: int) -> bool:
        result = await db.execute(_DELETE_LISTING_SQL, {"listing_id": listing_id})
        return result.rowcount > 0

    async def update_expiration(
        self, db: AsyncSession, listing_id: int, expiration_date: datetime
    ) -> bool:
        result = await db.execute(
            _UPDATE_EXPIRATION_SQL,
            {"listing_id": listing_id, "expiration_date": expiration_date},
        )
        return result.rowcount > 0
