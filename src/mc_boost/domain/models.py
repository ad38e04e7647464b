"""Boost order domain model — pure dataclasses, no SQLAlchemy dependency.

Lifecycle:
    pending ──pay──▶ active ──boost_end passes──▶ expired
       │                │
       └──admin──▶ cancelled ◀──admin──┘
expired and cancelled are terminal.
"""

from dataclasses import dataclass
from datetime import datetime

from src.mc_common.enums import CANCELLABLE_BOOST_STATUSES, BoostStatus


@dataclass
class BoostOrder:
    order_id: str
    user_id: str
    listing_id: int
    amount: int
    status: str = BoostStatus.PENDING.value
    boost_start: datetime | None = None
    boost_end: datetime | None = None
    created_at: datetime | None = None
    id: int | None = None  # row id, assigned by the DB

    @property
    def is_pending(self) -> bool:
        return self.status == BoostStatus.PENDING.value

    @property
    def is_cancellable(self) -> bool:
        return self.status in CANCELLABLE_BOOST_STATUSES

    def is_live(self, now: datetime) -> bool:
        """Active and not yet past its end; this is what makes a listing boosted."""
        return (
            self.status == BoostStatus.ACTIVE.value
            and self.boost_end is not None
            and self.boost_end > now
        )


@dataclass
class ListingSummary:
    make: str
    model: str
    year: int
    price: int
    images: list[str]
    seller_name: str | None = None


@dataclass
class BoostOrderWithListing:
    order: BoostOrder
    listing: ListingSummary
