"""Boost status projection — "is this listing currently boosted?".

Never stored: every read recomputes it from boost_orders. A listing is
boosted iff it has an order with status 'active' and boost_end > :now.

Listing queries embed ACTIVE_BOOST_JOIN / BOOST_PROJECTION_COLUMNS; they must
alias the listings table as ``l`` and bind ``:now``. The LATERAL ... LIMIT 1
join yields at most one row per listing no matter how many historical
orders exist.
"""

from datetime import datetime

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

ACTIVE_BOOST_JOIN = """
    LEFT JOIN LATERAL (
        SELECT bo.boost_start, bo.boost_end
        FROM boost_orders bo
        WHERE bo.listing_id = l.id
          AND bo.status = 'active'
          AND bo.boost_end > :now
        ORDER BY bo.boost_end DESC
        LIMIT 1
    ) ab ON TRUE
"""

BOOST_PROJECTION_COLUMNS = """
    (ab.boost_end IS NOT NULL) AS is_boosted,
    ab.boost_start AS boost_start,
    ab.boost_end AS boost_end
"""

# Boosted listings first, newest first inside each group
BOOSTED_FIRST_ORDER = "is_boosted DESC, l.created_at DESC, l.id DESC"

_IS_BOOSTED_SQL = text("""
    SELECT EXISTS (
        SELECT 1
        FROM boost_orders
        WHERE listing_id = :listing_id
          AND status = 'active'
          AND boost_end > :now
    ) AS is_boosted
""")


class BoostStatusProjector:
    async def is_boosted(
        self, db: AsyncSession, listing_id: int, now: datetime
    ) -> bool:
        result = await db.execute(
            _IS_BOOSTED_SQL, {"listing_id": listing_id, "now": now}
        )
        return bool(result.scalar())
