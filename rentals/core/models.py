from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any


LISTING_STATUSES = ("active", "inactive")
REGIONS = ("kenya", "usa")
BOOKING_STATUSES = ("pending", "approved", "declined")
ROLES = ("admin", "user")


@dataclass(slots=True, frozen=True)
class Coordinate:
    lat: float
    lng: float


@dataclass(slots=True, frozen=True)
class Listing:
    id: str
    name: str
    price_per_day: float
    bedrooms: int = 1
    bathrooms: int = 1
    description: str | None = None
    location_text: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    image_main_url: str | None = None
    status: str = "active"  # active | inactive
    amenities: frozenset[str] = field(default_factory=frozenset)
    region: str = "kenya"  # kenya | usa
    created_at: str | None = None

    @property
    def coordinate(self) -> Coordinate | None:
        if self.latitude is None or self.longitude is None:
            return None
        return Coordinate(self.latitude, self.longitude)


@dataclass(slots=True, frozen=True)
class RankedListing:
    listing: Listing
    distance_km: float | None = None


@dataclass(slots=True)
class Profile:
    id: str
    name: str | None = None
    email: str | None = None
    phone: str | None = None
    avatar_url: str | None = None
    created_at: str | None = None


@dataclass(slots=True)
class Booking:
    id: str
    user_id: str
    apartment_id: str
    date_start: date
    date_end: date
    total_price: float | None = None
    status: str = "pending"  # pending | approved | declined
    admin_message: str | None = None
    created_at: str | None = None
    listing: Listing | None = None
    profile: Profile | None = None


@dataclass(slots=True, frozen=True)
class ChatMessage:
    role: str  # user | assistant
    content: str

    def to_payload(self) -> dict[str, Any]:
        return {"role": self.role, "content": self.content}


@dataclass(slots=True, frozen=True)
class Notice:
    title: str
    description: str | None = None
    variant: str = "default"  # default | destructive

    @property
    def is_error(self) -> bool:
        return self.variant == "destructive"
