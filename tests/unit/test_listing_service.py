# tests/unit/test_listing_service.py
"""Unit tests for ListingApplicationService using mock repository."""
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.mc_common.errors import ListingNotFoundError, ListingNotOwnedError
from src.mc_listing.application.schemas import CreateListingRequest
from src.mc_listing.application.service import ListingApplicationService
from src.mc_listing.domain.models import Listing, ListingFilters

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


def _make_listing(**kwargs) -> Listing:
    defaults = dict(
        id=42, make="Toyota", model="Corolla", year=2019, price=15000,
        fuel_type="petrol", description="", images=[], seller_id="u1",
        seller_name="Alice", location="Lyon", mileage=42000,
        transmission="manual", color="red", created_at=NOW,
        expiration_date=NOW + timedelta(days=60),
    )
    defaults.update(kwargs)
    return Listing(**defaults)


@pytest.fixture
def db():
    db = MagicMock()
    db.commit = AsyncMock()
    db.rollback = AsyncMock()
    return db


@pytest.fixture
def mock_repo():
    return MagicMock()


@pytest.fixture
def svc(mock_repo):
    return ListingApplicationService(repo=mock_repo, clock=lambda: NOW)


class TestSearch:
    async def test_has_more_when_over_limit(self, db, mock_repo, svc):
        mock_repo.search = AsyncMock(return_value=[_make_listing(id=i) for i in range(21)])

        page = await svc.search(db, ListingFilters(), page=1, limit=20)

        assert page.has_more is True
        assert len(page.items) == 20

    async def test_offset_from_page(self, db, mock_repo, svc):
        mock_repo.search = AsyncMock(return_value=[])

        page = await svc.search(db, ListingFilters(), page=3, limit=10)

        assert page.has_more is False
        mock_repo.search.assert_awaited_once_with(db, ListingFilters(), NOW, 11, 20)

    async def test_boost_projection_passed_through(self, db, mock_repo, svc):
        mock_repo.search = AsyncMock(return_value=[
            _make_listing(is_boosted=True, boost_start=NOW, boost_end=NOW + timedelta(days=30)),
        ])
        page = await svc.search(db, ListingFilters(), page=1, limit=20)
        assert page.items[0].is_boosted is True
        assert page.items[0].boost_end == (NOW + timedelta(days=30)).isoformat()


class TestGetListing:
    async def test_not_found(self, db, mock_repo, svc):
        mock_repo.get_by_id = AsyncMock(return_value=None)
        with pytest.raises(ListingNotFoundError):
            await svc.get_listing(db, 999)


class TestCreateListing:
    async def test_sets_seller_and_ttl(self, db, mock_repo, svc):
        mock_repo.insert = AsyncMock(return_value=_make_listing())
        req = CreateListingRequest(make="Toyota", model="Corolla", year=2019, price=15000)

        await svc.create_listing(db, "u1", "Alice", req)

        new = mock_repo.insert.call_args.args[1]
        assert new.seller_id == "u1"
        assert new.seller_name == "Alice"
        assert new.expiration_date == NOW + timedelta(days=60)
        db.commit.assert_awaited_once()

    async def test_rolls_back_on_error(self, db, mock_repo, svc):
        mock_repo.insert = AsyncMock(side_effect=RuntimeError("db down"))
        req = CreateListingRequest(make="Toyota", model="Corolla", year=2019, price=15000)

        with pytest.raises(RuntimeError):
            await svc.create_listing(db, "u1", "Alice", req)

        db.rollback.assert_awaited_once()
        db.commit.assert_not_awaited()


class TestDeleteListing:
    async def test_owner_can_delete(self, db, mock_repo, svc):
        mock_repo.get_by_id = AsyncMock(return_value=_make_listing(seller_id="u1"))
        mock_repo.delete = AsyncMock(return_value=True)

        await svc.delete_listing(db, 42, "u1")

        mock_repo.delete.assert_awaited_once_with(db, 42)
        db.commit.assert_awaited_once()

    async def test_other_user_cannot_delete(self, db, mock_repo, svc):
        mock_repo.get_by_id = AsyncMock(return_value=_make_listing(seller_id="u1"))
        mock_repo.delete = AsyncMock()

        with pytest.raises(ListingNotOwnedError):
            await svc.delete_listing(db, 42, "u2")

        mock_repo.delete.assert_not_awaited()
        db.rollback.assert_awaited_once()

    async def test_admin_can_delete_any(self, db, mock_repo, svc):
        mock_repo.get_by_id = AsyncMock(return_value=_make_listing(seller_id="u1"))
        mock_repo.delete = AsyncMock(return_value=True)

        await svc.delete_listing(db, 42, "admin-1", is_admin=True)

        mock_repo.delete.assert_awaited_once()


class TestUpdateExpiration:
    async def test_unknown_listing(self, db, mock_repo, svc):
        mock_repo.update_expiration = AsyncMock(return_value=False)
        with pytest.raises(ListingNotFoundError):
            await svc.update_expiration(db, 999, NOW)
        db.rollback.assert_awaited_once()

    async def test_returns_updated_listing(self, db, mock_repo, svc):
        new_exp = NOW + timedelta(days=5)
        mock_repo.update_expiration = AsyncMock(return_value=True)
        mock_repo.get_by_id = AsyncMock(return_value=_make_listing(expiration_date=new_exp))

        out = await svc.update_expiration(db, 42, new_exp)

        assert out.expiration_date == new_exp.isoformat()
        db.commit.assert_awaited_once()
