"""Payment capability required by the boost ledger.

The ledger only needs ``charge(order) -> bool``. Implementations may be slow
and may fail transiently (return False or raise); they must not leave any
side effect behind on failure. The ledger bounds every call with a timeout.
"""

from typing import Protocol

from src.mc_boost.domain.models import BoostOrder


class PaymentGatewayProtocol(Protocol):
    async def charge(self, order: BoostOrder) -> bool: ...
