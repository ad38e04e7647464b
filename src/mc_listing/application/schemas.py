"""Pydantic schemas for mc_listing requests and responses."""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from src.mc_common.datetime_utils import iso_or_none, utc_now
from src.mc_listing.domain.models import Listing


class CreateListingRequest(BaseModel):
    make: str = Field(..., min_length=1, max_length=64)
    model: str = Field(..., min_length=1, max_length=64)
    year: int
    price: int = Field(..., gt=0)
    fuel_type: str | None = Field(None, max_length=32)
    description: str = Field("", max_length=5000)
    images: list[str] = Field(default_factory=list, max_length=20)
    location: str = Field("Unknown", max_length=128)
    mileage: int = Field(0, ge=0)
    transmission: str = Field("Unknown", max_length=32)
    color: str = Field("Unknown", max_length=32)

    @field_validator("make", "model")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v.strip()

    @field_validator("year")
    @classmethod
    def plausible_year(cls, v: int) -> int:
        # Next year's models are sold from the autumn before
        if not 1900 <= v <= utc_now().year + 1:
            raise ValueError("Valid year is required")
        return v


class UpdateExpirationRequest(BaseModel):
    expiration_date: datetime

    @field_validator("expiration_date")
    @classmethod
    def timezone_aware(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            raise ValueError("expiration_date must include a timezone offset")
        return v


class ListingOut(BaseModel):
    id: int
    make: str
    model: str
    year: int
    price: int
    fuel_type: str | None
    description: str
    images: list[str]
    seller_id: str
    seller_name: str
    location: str
    mileage: int
    transmission: str
    color: str
    created_at: str
    expiration_date: str
    is_boosted: bool
    boost_start: str | None
    boost_end: str | None

    @classmethod
    def from_domain(cls, listing: Listing) -> "ListingOut":
        return cls(
            id=listing.id,
            make=listing.make,
            model=listing.model,
            year=listing.year,
            price=listing.price,
            fuel_type=listing.fuel_type,
            description=listing.description,
            images=listing.images,
            seller_id=listing.seller_id,
            seller_name=listing.seller_name,
            location=listing.location,
            mileage=listing.mileage,
            transmission=listing.transmission,
            color=listing.color,
            created_at=listing.created_at.isoformat(),
            expiration_date=listing.expiration_date.isoformat(),
            is_boosted=listing.is_boosted,
            boost_start=iso_or_none(listing.boost_start),
            boost_end=iso_or_none(listing.boost_end),
        )


class ListingPage(BaseModel):
    items: list[ListingOut]
    page: int
    limit: int
    has_more: bool
