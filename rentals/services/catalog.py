from __future__ import annotations

import logging
from datetime import date

from rentals.core.bookings import expand_booked_dates
from rentals.core.models import Listing, RankedListing
from rentals.core.normalize import listing_from_row
from rentals.core.search import ListingSearch
from rentals.core.supabase_repo import SupabaseRepo


LOGGER = logging.getLogger(__name__)

FEATURED_LIMIT = 6


def load_listings(repo: SupabaseRepo, region: str, limit: int | None = None) -> list[Listing]:
    try:
        rows = repo.get_active_listings(region, limit=limit)
    except Exception as exc:  # noqa: BLE001
        LOGGER.exception("Error fetching apartments region=%s: %s", region, exc)
        return []
    return [listing_from_row(row) for row in rows]


def load_featured(repo: SupabaseRepo, region: str) -> list[Listing]:
    return load_listings(repo, region, limit=FEATURED_LIMIT)


def search_listings(repo: SupabaseRepo, search: ListingSearch) -> list[RankedListing]:
    return search.apply(load_listings(repo, search.region))


def load_listing(repo: SupabaseRepo, listing_id: str) -> Listing | None:
    try:
        row = repo.get_listing(listing_id)
    except Exception as exc:  # noqa: BLE001
        LOGGER.exception("Error fetching apartment id=%s: %s", listing_id, exc)
        return None
    return listing_from_row(row) if row else None


def load_booked_dates(repo: SupabaseRepo, listing_id: str) -> set[date]:
    try:
        ranges = repo.get_booked_ranges(listing_id)
    except Exception as exc:  # noqa: BLE001
        LOGGER.exception("Error fetching booked dates id=%s: %s", listing_id, exc)
        return set()
    return expand_booked_dates(ranges)
