from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from rentals.core.geo import haversine_distance_km
from rentals.core.models import Coordinate, Listing, RankedListing
from rentals.core.region import get_region_config


PriceRange = tuple[float, float]


def default_price_range(region: str) -> PriceRange:
    return (0, get_region_config(region).price_max)


def has_active_filters(query: str, price_range: PriceRange, region: str) -> bool:
    return bool(query.strip()) or tuple(price_range) != default_price_range(region)


def matches_query(listing: Listing, query: str) -> bool:
    if not query.strip():
        return True
    needle = query.lower()
    for text in (listing.name, listing.location_text, listing.description):
        if text and needle in text.lower():
            return True
    return False


def matches_price(listing: Listing, price_range: PriceRange) -> bool:
    low, high = price_range
    return low <= listing.price_per_day <= high


def distance_to(listing: Listing, user_location: Coordinate | None) -> float | None:
    point = listing.coordinate
    if user_location is None or point is None:
        return None
    return haversine_distance_km(user_location.lat, user_location.lng, point.lat, point.lng)


def filter_and_rank(
    listings: Iterable[Listing],
    query: str = "",
    price_range: PriceRange = (0, float("inf")),
    user_location: Coordinate | None = None,
) -> list[RankedListing]:
    """
    Keep listings matching the text query and the inclusive price range.

    With a user location, listings are ordered nearest first; listings without
    coordinates follow in their input order.
    """
    ranked = [
        RankedListing(listing=listing, distance_km=distance_to(listing, user_location))
        for listing in listings
        if matches_query(listing, query) and matches_price(listing, price_range)
    ]
    if user_location is None:
        return ranked
    with_distance = [item for item in ranked if item.distance_km is not None]
    without_distance = [item for item in ranked if item.distance_km is None]
    with_distance.sort(key=lambda item: item.distance_km)
    return with_distance + without_distance


@dataclass(slots=True)
class ListingSearch:
    region: str
    query: str = ""
    price_range: PriceRange | None = None
    user_location: Coordinate | None = None
    _defaults: PriceRange = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._defaults = default_price_range(self.region)
        if self.price_range is None:
            self.price_range = self._defaults

    @property
    def is_filtered(self) -> bool:
        return has_active_filters(self.query, self.price_range, self.region)

    @property
    def sorted_by_distance(self) -> bool:
        return self.user_location is not None

    def clear(self) -> None:
        self.query = ""
        self.price_range = self._defaults

    def apply(self, listings: Iterable[Listing]) -> list[RankedListing]:
        return filter_and_rank(listings, self.query, self.price_range, self.user_location)
