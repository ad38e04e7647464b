# src/mc_boost/application/service.py
"""BoostLedgerService — owns the boost order lifecycle.

Write operations commit on success and roll back on any error, so an
exception never leaves a half-applied transition behind. All "now" values
come from the injected clock; SQL never reads CURRENT_TIMESTAMP.
"""

import asyncio
import logging
import uuid
from datetime import datetime, timedelta

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.mc_boost.domain.models import BoostOrder, BoostOrderWithListing
from src.mc_boost.domain.payment import PaymentGatewayProtocol
from src.mc_boost.domain.repository import BoostOrderRepositoryProtocol
from src.mc_boost.infrastructure.payment_simulator import SimulatedPaymentGateway
from src.mc_boost.infrastructure.persistence import BoostOrderRepository
from src.mc_boost.infrastructure.projector import BoostStatusProjector
from src.mc_common.datetime_utils import Clock, utc_now
from src.mc_common.enums import BoostStatus
from src.mc_common.errors import (
    AppError,
    BoostAlreadyPendingError,
    BoostForbiddenError,
    BoostNotClosedError,
    BoostOrderNotFoundError,
    InvalidOrderStateError,
    ListingAlreadyBoostedError,
    ListingNotFoundError,
    PaymentFailedError,
    PaymentTimeoutError,
)

logger = logging.getLogger(__name__)


class BoostLedgerService:
    def __init__(
        self,
        repo: BoostOrderRepositoryProtocol | None = None,
        gateway: PaymentGatewayProtocol | None = None,
        projector: BoostStatusProjector | None = None,
        clock: Clock = utc_now,
        amount: int | None = None,
        duration: timedelta | None = None,
        payment_timeout: float | None = None,
    ) -> None:
        self._repo: BoostOrderRepositoryProtocol = repo or BoostOrderRepository()
        self._gateway: PaymentGatewayProtocol = gateway or SimulatedPaymentGateway()
        self._projector = projector or BoostStatusProjector()
        self._clock = clock
        self._amount = settings.BOOST_AMOUNT if amount is None else amount
        self._duration = duration or timedelta(days=settings.BOOST_DURATION_DAYS)
        self._payment_timeout = (
            settings.PAYMENT_TIMEOUT_SECONDS if payment_timeout is None else payment_timeout
        )

    # ------------------------------------------------------------------
    # Owner flow
    # ------------------------------------------------------------------

    async def create_order(
        self, db: AsyncSession, requester_id: str, listing_id: int
    ) -> BoostOrder:
        """Open a pending boost order for the requester's own listing.

        The listing row stays locked until commit, so two concurrent requests
        for one listing are serialised; the partial unique index on
        boost_orders(listing_id) catches anything that slips past.
        """
        now = self._clock()
        try:
            # Stale boosts must not block a new one
            await self._sweep_listing_quietly(db, listing_id, now)

            seller_id = await self._repo.lock_listing_owner(db, listing_id)
            if seller_id is None:
                raise ListingNotFoundError(listing_id)
            if seller_id != requester_id:
                raise BoostForbiddenError()

            open_orders = await self._repo.list_open_for_listing(db, listing_id)
            if any(o.is_live(now) for o in open_orders):
                raise ListingAlreadyBoostedError(listing_id)
            if any(o.is_pending for o in open_orders):
                raise BoostAlreadyPendingError(listing_id)
            if open_orders:
                # Lapsed but still active: the expiry sweep above did not go through
                raise BoostNotClosedError(listing_id)

            order = BoostOrder(
                order_id=str(uuid.uuid4()),
                user_id=requester_id,
                listing_id=listing_id,
                amount=self._amount,
                status=BoostStatus.PENDING.value,
            )
            try:
                order = await self._repo.insert(db, order)
            except IntegrityError:
                raise BoostAlreadyPendingError(listing_id) from None
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info(
            "Boost order %s created for listing %s by %s",
            order.order_id, listing_id, requester_id,
        )
        return order

    async def activate_order(self, db: AsyncSession, order_id: str) -> BoostOrder:
        """Charge a pending order and start its boost window.

        All-or-nothing: a declined or timed-out charge writes nothing and the
        order stays pending, so the caller may retry.

        The order row stays locked (and its pooled connection checked out)
        across the charge so that concurrent requests for one order charge it
        at most once. Each payment therefore holds a connection for up to
        PAYMENT_TIMEOUT_SECONDS; the engine pool (20 + 10 overflow) bounds
        how many payments can be in flight at once.
        """
        try:
            order = await self._repo.get_by_order_id(db, order_id, for_update=True)
            if order is None:
                raise BoostOrderNotFoundError(order_id)
            if not order.is_pending:
                raise InvalidOrderStateError(order_id, order.status)

            await self._charge(order)

            now = self._clock()
            activated = await self._repo.activate(db, order_id, now, now + self._duration)
            if activated is None:
                raise InvalidOrderStateError(order_id, await self._current_status(db, order_id))
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info(
            "Boost order %s active until %s",
            order_id, activated.boost_end.isoformat() if activated.boost_end else None,
        )
        return activated

    async def list_user_orders(
        self, db: AsyncSession, user_id: str
    ) -> list[BoostOrderWithListing]:
        return await self._repo.list_by_user(db, user_id)

    async def is_boosted(self, db: AsyncSession, listing_id: int) -> bool:
        return await self._projector.is_boosted(db, listing_id, self._clock())

    # ------------------------------------------------------------------
    # Admin flow
    # ------------------------------------------------------------------

    async def list_all_active(self, db: AsyncSession) -> list[BoostOrderWithListing]:
        return await self._repo.list_active(db, self._clock())

    async def cancel_order(self, db: AsyncSession, order_id: str) -> BoostOrder:
        """Cancel a pending or active order; terminal orders are refused."""
        try:
            order = await self._repo.get_by_order_id(db, order_id, for_update=True)
            if order is None:
                raise BoostOrderNotFoundError(order_id)
            if not order.is_cancellable:
                raise InvalidOrderStateError(order_id, order.status, "pending or active")

            cancelled = await self._repo.cancel(db, order_id)
            if cancelled is None:
                raise InvalidOrderStateError(
                    order_id, await self._current_status(db, order_id), "pending or active"
                )
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info("Boost order %s cancelled (was %s)", order_id, order.status)
        return cancelled

    async def sweep_expired(self, db: AsyncSession) -> int:
        """Move every active order whose end has passed to expired."""
        try:
            count = await self._repo.expire_due(db, self._clock())
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info("Expired %d boost orders", count)
        return count

    async def sweep_listing(self, db: AsyncSession, listing_id: int) -> int:
        try:
            count = await self._repo.expire_due_for_listing(db, listing_id, self._clock())
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return count

    async def grant_complimentary(self, db: AsyncSession, listing_id: int) -> BoostOrder:
        """Feature a listing for free: replaces any open order with an active one."""
        now = self._clock()
        try:
            seller_id = await self._repo.lock_listing_owner(db, listing_id)
            if seller_id is None:
                raise ListingNotFoundError(listing_id)

            # A lapsed boost ends as expired, not cancelled
            await self._repo.expire_due_for_listing(db, listing_id, now)
            replaced = await self._repo.cancel_open_for_listing(db, listing_id)
            order = await self._repo.insert(
                db,
                BoostOrder(
                    order_id=str(uuid.uuid4()),
                    user_id=seller_id,
                    listing_id=listing_id,
                    amount=0,
                    status=BoostStatus.ACTIVE.value,
                    boost_start=now,
                    boost_end=now + self._duration,
                ),
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info(
            "Complimentary boost %s granted to listing %s (%d open orders replaced)",
            order.order_id, listing_id, replaced,
        )
        return order

    async def revoke(self, db: AsyncSession, listing_id: int) -> int:
        """Cancel whatever open order a listing has; returns how many."""
        try:
            if await self._repo.lock_listing_owner(db, listing_id) is None:
                raise ListingNotFoundError(listing_id)
            await self._repo.expire_due_for_listing(db, listing_id, self._clock())
            count = await self._repo.cancel_open_for_listing(db, listing_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info("Revoked %d boost orders on listing %s", count, listing_id)
        return count

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _sweep_listing_quietly(
        self, db: AsyncSession, listing_id: int, now: datetime
    ) -> int:
        """Best-effort single-listing expiry inside a SAVEPOINT.

        A failure rolls back only the savepoint and is logged; the enclosing
        boost request carries on.
        """
        try:
            async with db.begin_nested():
                return await self._repo.expire_due_for_listing(db, listing_id, now)
        except SQLAlchemyError:
            logger.warning(
                "Lazy boost expiry failed for listing %s", listing_id, exc_info=True
            )
            return 0

    async def _current_status(self, db: AsyncSession, order_id: str) -> str:
        order = await self._repo.get_by_order_id(db, order_id)
        return order.status if order is not None else "missing"

    async def _charge(self, order: BoostOrder) -> None:
        try:
            paid = await asyncio.wait_for(
                self._gateway.charge(order), timeout=self._payment_timeout
            )
        except asyncio.TimeoutError:
            logger.warning(
                "Payment for order %s timed out after %.1fs",
                order.order_id, self._payment_timeout,
            )
            raise PaymentTimeoutError(order.order_id) from None
        except AppError:
            raise
        except Exception as exc:
            logger.warning("Payment for order %s errored: %s", order.order_id, exc)
            raise PaymentFailedError(order.order_id) from exc

        if not paid:
            raise PaymentFailedError(order.order_id)
