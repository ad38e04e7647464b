"""Global enums — must match DB CHECK constraints exactly."""

from enum import Enum


class BoostStatus(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"
    EXPIRED = "expired"
    CANCELLED = "cancelled"


# Statuses that occupy a listing's single boost slot
OPEN_BOOST_STATUSES = (BoostStatus.PENDING.value, BoostStatus.ACTIVE.value)

# Statuses an admin may cancel from
CANCELLABLE_BOOST_STATUSES = OPEN_BOOST_STATUSES
