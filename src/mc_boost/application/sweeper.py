# src/mc_boost/application/sweeper.py
"""Background expiry sweeper.

Runs BoostLedgerService.sweep_expired every BOOST_SWEEP_INTERVAL_SECONDS in
its own session. With several API workers, a Redis ``SET NX EX`` lock lets
exactly one of them sweep per interval; if Redis is unreachable the worker
sweeps anyway (the transition is idempotent, only duplicated work is lost).

Sweeping here is an optimisation: correctness never depends on it because
reads filter on boost_end and create_order sweeps its listing first.
"""

import asyncio
import logging

from redis.exceptions import RedisError

from config.settings import settings
from src.mc_boost.application.service import BoostLedgerService
from src.mc_common.database import async_session_factory
from src.mc_common.redis_client import get_redis

logger = logging.getLogger(__name__)

_LOCK_KEY = "mc:boost:sweep-lock"


class ExpirySweeper:
    def __init__(
        self,
        ledger: BoostLedgerService,
        interval_seconds: float | None = None,
        session_factory=async_session_factory,
    ) -> None:
        self._ledger = ledger
        self._interval = (
            settings.BOOST_SWEEP_INTERVAL_SECONDS if interval_seconds is None else interval_seconds
        )
        self._session_factory = session_factory
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self._interval <= 0:
            logger.info("Boost expiry sweeper disabled")
            return
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name="boost-expiry-sweeper")
        logger.info("Boost expiry sweeper started (every %ss)", self._interval)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    async def run_once(self) -> int:
        """One sweep, if this worker holds the lock for the current interval."""
        if not await self._acquire_lock():
            return 0
        async with self._session_factory() as db:
            return await self._ledger.sweep_expired(db)

    async def _run(self) -> None:
        while True:
            try:
                await self.run_once()
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("Boost expiry sweep failed; retrying next interval")
            await asyncio.sleep(self._interval)

    async def _acquire_lock(self) -> bool:
        try:
            redis = await get_redis()
            # Lock lives slightly less than one interval so the next tick can take it
            ttl = max(1, int(self._interval) - 1)
            return bool(await redis.set(_LOCK_KEY, "1", nx=True, ex=ttl))
        except RedisError:
            logger.warning("Redis unavailable, sweeping without lock", exc_info=True)
            return True
