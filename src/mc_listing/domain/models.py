"""Domain models for mc_listing — pure dataclasses, no business logic."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class Listing:
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
    created_at: datetime
    expiration_date: datetime
    # Boost projection: filled by list/search/detail reads, never persisted
    is_boosted: bool = False
    boost_start: datetime | None = None
    boost_end: datetime | None = None


@dataclass
class NewListing:
    """Validated input for an insert; id/created_at come from the DB."""

    make: str
    model: str
    year: int
    price: int
    seller_id: str
    seller_name: str
    expiration_date: datetime
    fuel_type: str | None = None
    description: str = ""
    images: list[str] = field(default_factory=list)
    location: str = "Unknown"
    mileage: int = 0
    transmission: str = "Unknown"
    color: str = "Unknown"


@dataclass
class ListingFilters:
    """Marketplace search filters; None means "not filtered"."""

    q: str | None = None
    make: str | None = None
    model: str | None = None
    min_price: int | None = None
    max_price: int | None = None
    fuel_type: str | None = None
    transmission: str | None = None
    min_year: int | None = None
    max_year: int | None = None
    location: str | None = None
