"""Simulated payment gateway.

Stands in for a real processor until one is integrated: waits a fixed delay
then succeeds with a configured probability. Has no side effects, so a
failed charge leaves nothing to undo.
"""

import asyncio
import logging
import random

from config.settings import settings
from src.mc_boost.domain.models import BoostOrder

logger = logging.getLogger(__name__)


class SimulatedPaymentGateway:
    def __init__(
        self,
        delay_seconds: float | None = None,
        success_rate: float | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._delay = (
            settings.PAYMENT_SIMULATED_DELAY_SECONDS if delay_seconds is None else delay_seconds
        )
        self._success_rate = (
            settings.PAYMENT_SUCCESS_RATE if success_rate is None else success_rate
        )
        if not 0.0 <= self._success_rate <= 1.0:
            raise ValueError(f"success_rate must be within [0, 1], got {self._success_rate}")
        self._rng = rng or random.Random()

    async def charge(self, order: BoostOrder) -> bool:
        if self._delay > 0:
            await asyncio.sleep(self._delay)

        success = self._rng.random() < self._success_rate
        if success:
            logger.info("Payment succeeded for order %s: %d", order.order_id, order.amount)
        else:
            logger.warning("Payment declined for order %s", order.order_id)
        return success
