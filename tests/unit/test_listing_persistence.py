# tests/unit/test_listing_persistence.py
"""Unit tests for ListingRepository using MagicMock AsyncSession."""
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.mc_listing.domain.models import ListingFilters, NewListing
from src.mc_listing.infrastructure.persistence import ListingRepository

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


def _make_listing_row(boosted: bool | None = None, **kwargs):
    """Mock row; boosted=None mimics INSERT ... RETURNING (no projection columns)."""
    row = MagicMock()
    row.id = kwargs.get("id", 42)
    row.make = kwargs.get("make", "Toyota")
    row.model = kwargs.get("model", "Corolla")
    row.year = kwargs.get("year", 2019)
    row.price = kwargs.get("price", 15000)
    row.fuel_type = kwargs.get("fuel_type", "petrol")
    row.description = kwargs.get("description")
    row.images = kwargs.get("images", ["a.jpg", "b.jpg"])
    row.seller_id = kwargs.get("seller_id", "u1")
    row.seller_name = kwargs.get("seller_name", "Alice")
    row.location = "Lyon"
    row.mileage = 42000
    row.transmission = "manual"
    row.color = "red"
    row.created_at = NOW - timedelta(days=1)
    row.expiration_date = NOW + timedelta(days=59)
    mapping = {}
    if boosted is not None:
        mapping = {
            "is_boosted": boosted,
            "boost_start": NOW if boosted else None,
            "boost_end": NOW + timedelta(days=30) if boosted else None,
        }
    row._mapping = mapping
    return row


@pytest.fixture
def db():
    return MagicMock()


def _returning(db, *, one=None, all_=None, rowcount=None):
    result = MagicMock()
    result.fetchone.return_value = one
    result.fetchall.return_value = all_ or []
    result.rowcount = rowcount
    db.execute = AsyncMock(return_value=result)


class TestGetById:
    async def test_maps_boost_projection(self, db):
        _returning(db, one=_make_listing_row(boosted=True))

        listing = await ListingRepository().get_by_id(db, 42, NOW)

        assert listing.is_boosted is True
        assert listing.boost_end == NOW + timedelta(days=30)
        params = db.execute.call_args.args[1]
        assert params == {"listing_id": 42, "now": NOW}

    async def test_returns_none_when_missing(self, db):
        _returning(db, one=None)
        assert await ListingRepository().get_by_id(db, 999, NOW) is None

    async def test_null_description_becomes_empty(self, db):
        _returning(db, one=_make_listing_row(boosted=False, description=None))
        listing = await ListingRepository().get_by_id(db, 42, NOW)
        assert listing.description == ""
        assert listing.is_boosted is False

    async def test_images_json_string_is_decoded(self, db):
        _returning(db, one=_make_listing_row(boosted=False, images='["x.jpg"]'))
        listing = await ListingRepository().get_by_id(db, 42, NOW)
        assert listing.images == ["x.jpg"]


class TestSearch:
    async def test_text_filters_are_wrapped_for_ilike(self, db):
        _returning(db, all_=[_make_listing_row(boosted=True), _make_listing_row(boosted=False, id=7)])

        listings = await ListingRepository().search(
            db, ListingFilters(q="toy", location="lyon", min_price=1000), NOW, 21, 0
        )

        assert [item.id for item in listings] == [42, 7]
        params = db.execute.call_args.args[1]
        assert params["q"] == "%toy%"
        assert params["location"] == "%lyon%"
        assert params["make"] is None
        assert params["min_price"] == 1000
        assert params["limit"] == 21
        assert params["offset"] == 0
        assert params["now"] == NOW

    async def test_query_orders_boosted_first(self, db):
        _returning(db, all_=[])
        await ListingRepository().search(db, ListingFilters(), NOW, 20, 0)
        sql = str(db.execute.call_args.args[0])
        assert "is_boosted DESC" in sql
        assert "l.expiration_date > :now" in sql


class TestInsert:
    async def test_returning_row_has_no_projection(self, db):
        _returning(db, one=_make_listing_row(boosted=None))
        new = NewListing(
            make="Toyota", model="Corolla", year=2019, price=15000,
            seller_id="u1", seller_name="Alice",
            expiration_date=NOW + timedelta(days=60), images=["a.jpg"],
        )

        listing = await ListingRepository().insert(db, new)

        assert listing.is_boosted is False
        assert listing.boost_start is None
        assert db.execute.call_args.args[1]["images"] == ["a.jpg"]


class TestWrites:
    async def test_delete_reports_rowcount(self, db):
        _returning(db, rowcount=1)
        assert await ListingRepository().delete(db, 42) is True
        _returning(db, rowcount=0)
        assert await ListingRepository().delete(db, 42) is False

    async def test_update_expiration(self, db):
        _returning(db, rowcount=1)
        assert await ListingRepository().update_expiration(db, 42, NOW) is True
        assert db.execute.call_args.args[1] == {"listing_id": 42, "expiration_date": NOW}
