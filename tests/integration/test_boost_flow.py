"""Integration tests for listing + boost lifecycle (requires running PG + Redis).

Pre-condition: alembic upgrade head
"""

import pytest
import pytest_asyncio
from httpx import AsyncClient
from sqlalchemy import text

from src.main import app
from src.mc_boost.api.router import get_ledger
from src.mc_boost.application.service import BoostLedgerService
from src.mc_boost.infrastructure.payment_simulator import SimulatedPaymentGateway
from src.mc_common.database import async_session_factory
from tests.integration.conftest import auth

pytestmark = pytest.mark.asyncio(loop_scope="session")

LISTING = {"make": "Toyota", "model": "Corolla", "year": 2019, "price": 15000}


@pytest_asyncio.fixture(loop_scope="session", autouse=True)
async def deterministic_payments():
    """Instant, always-successful payments for this module."""
    ledger = BoostLedgerService(gateway=SimulatedPaymentGateway(delay_seconds=0, success_rate=1.0))
    app.dependency_overrides[get_ledger] = lambda: ledger
    yield
    app.dependency_overrides.pop(get_ledger, None)


async def _create_listing(client: AsyncClient, user: dict[str, str], **overrides) -> int:
    resp = await client.post("/api/v1/listings", json={**LISTING, **overrides}, headers=auth(user))
    assert resp.status_code == 201
    return resp.json()["data"]["id"]


async def _age_boost(order_id: str) -> None:
    """Pretend the boost window ended yesterday."""
    async with async_session_factory() as db:
        await db.execute(text("""
            UPDATE boost_orders
            SET boost_start = NOW() - INTERVAL '31 days', boost_end = NOW() - INTERVAL '1 day'
            WHERE order_id = :order_id
        """), {"order_id": order_id})
        await db.commit()


class TestBoostLifecycle:
    async def test_create_pay_expire(self, client, seller, admin) -> None:
        listing_id = await _create_listing(client, seller)

        resp = await client.post(
            "/api/v1/boost/create", json={"listing_id": listing_id}, headers=auth(seller)
        )
        assert resp.status_code == 201
        order = resp.json()["data"]
        assert order["status"] == "pending"
        assert order["amount"] == 150

        dup = await client.post(
            "/api/v1/boost/create", json={"listing_id": listing_id}, headers=auth(seller)
        )
        assert dup.status_code == 409
        assert dup.json()["code"] == 4003

        paid = await client.post(
            f"/api/v1/boost/process-payment/{order['order_id']}", headers=auth(seller)
        )
        assert paid.status_code == 200
        assert paid.json()["data"]["status"] == "active"

        status = await client.get(
            f"/api/v1/boost/check-status/{listing_id}", headers=auth(seller)
        )
        assert status.json()["data"]["is_boosted"] is True

        again = await client.post(
            f"/api/v1/boost/process-payment/{order['order_id']}", headers=auth(seller)
        )
        assert again.status_code == 409

        await _age_boost(order["order_id"])
        # Read side already reports the boost as over, sweep or not
        status = await client.get(
            f"/api/v1/boost/check-status/{listing_id}", headers=auth(seller)
        )
        assert status.json()["data"]["is_boosted"] is False

        cleanup = await client.post("/api/v1/boost/cleanup", headers=auth(admin))
        assert cleanup.json()["data"]["cleaned_count"] >= 1

        orders = await client.get("/api/v1/boost/user-orders", headers=auth(seller))
        mine = [o for o in orders.json()["data"] if o["order_id"] == order["order_id"]]
        assert mine[0]["status"] == "expired"
        assert mine[0]["listing"]["make"] == "Toyota"

    async def test_other_user_forbidden(self, client, seller, other_user) -> None:
        listing_id = await _create_listing(client, seller)

        resp = await client.post(
            "/api/v1/boost/create", json={"listing_id": listing_id}, headers=auth(other_user)
        )

        assert resp.status_code == 403
        assert resp.json()["code"] == 3002

    async def test_unknown_listing(self, client, seller) -> None:
        resp = await client.post(
            "/api/v1/boost/create", json={"listing_id": 987654321}, headers=auth(seller)
        )
        assert resp.status_code == 404

    async def test_admin_cancel_frees_slot(self, client, seller, admin) -> None:
        listing_id = await _create_listing(client, seller)
        order = (await client.post(
            "/api/v1/boost/create", json={"listing_id": listing_id}, headers=auth(seller)
        )).json()["data"]

        resp = await client.delete(f"/api/v1/boost/cancel/{order['order_id']}", headers=auth(admin))
        assert resp.json()["data"]["status"] == "cancelled"

        again = await client.post(
            "/api/v1/boost/create", json={"listing_id": listing_id}, headers=auth(seller)
        )
        assert again.status_code == 201

    async def test_non_admin_cannot_cleanup(self, client, seller) -> None:
        resp = await client.post("/api/v1/boost/cleanup", headers=auth(seller))
        assert resp.status_code == 403


class TestMarketplaceOrdering:
    async def test_boosted_listing_sorts_first(self, client, seller, admin) -> None:
        make = f"Boostmake{seller['user_id'][:6]}"
        boosted_id = await _create_listing(client, seller, make=make, model="Old")
        newer_id = await _create_listing(client, seller, make=make, model="New")

        resp = await client.patch(
            f"/api/v1/admin/listings/{boosted_id}/featured",
            json={"is_featured": True},
            headers=auth(admin),
        )
        assert resp.json()["data"]["is_boosted"] is True

        page = (await client.get("/api/v1/listings", params={"make": make})).json()["data"]
        ids = [item["id"] for item in page["items"]]
        assert ids == [boosted_id, newer_id]

        await client.patch(
            f"/api/v1/admin/listings/{boosted_id}/featured",
            json={"is_featured": False},
            headers=auth(admin),
        )
        page = (await client.get("/api/v1/listings", params={"make": make})).json()["data"]
        assert [item["id"] for item in page["items"]] == [newer_id, boosted_id]

    async def test_expired_listing_hidden(self, client, seller, admin) -> None:
        make = f"Hiddenmake{seller['user_id'][:6]}"
        listing_id = await _create_listing(client, seller, make=make)

        await client.patch(
            f"/api/v1/admin/listings/{listing_id}/expiration",
            json={"expiration_date": "2020-01-01T00:00:00+00:00"},
            headers=auth(admin),
        )

        page = (await client.get("/api/v1/listings", params={"make": make})).json()["data"]
        assert page["items"] == []
        detail = await client.get(f"/api/v1/listings/{listing_id}")
        assert detail.status_code == 200
