# src/mc_boost/application/schemas.py
from pydantic import AliasChoices, BaseModel, Field

from src.mc_boost.domain.models import BoostOrder, BoostOrderWithListing
from src.mc_common.datetime_utils import iso_or_none


class CreateBoostRequest(BaseModel):
    # Older clients send camelCase
    listing_id: int = Field(..., gt=0, validation_alias=AliasChoices("listing_id", "listingId"))


class BoostOrderOut(BaseModel):
    order_id: str
    user_id: str
    listing_id: int
    amount: int
    status: str
    boost_start: str | None
    boost_end: str | None
    created_at: str | None

    @classmethod
    def from_domain(cls, order: BoostOrder) -> "BoostOrderOut":
        return cls(
            order_id=order.order_id,
            user_id=order.user_id,
            listing_id=order.listing_id,
            amount=order.amount,
            status=order.status,
            boost_start=iso_or_none(order.boost_start),
            boost_end=iso_or_none(order.boost_end),
            created_at=iso_or_none(order.created_at),
        )


class ListingSummaryOut(BaseModel):
    make: str
    model: str
    year: int
    price: int
    images: list[str]
    seller_name: str | None


class BoostOrderWithListingOut(BoostOrderOut):
    listing: ListingSummaryOut

    @classmethod
    def from_joined(cls, item: BoostOrderWithListing) -> "BoostOrderWithListingOut":
        base = BoostOrderOut.from_domain(item.order)
        return cls(
            **base.model_dump(),
            listing=ListingSummaryOut(
                make=item.listing.make,
                model=item.listing.model,
                year=item.listing.year,
                price=item.listing.price,
                images=item.listing.images,
                seller_name=item.listing.seller_name,
            ),
        )


class BoostStatusOut(BaseModel):
    listing_id: int
    is_boosted: bool


class CleanupOut(BaseModel):
    cleaned_count: int
