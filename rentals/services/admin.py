from __future__ import annotations

import logging
from typing import Any, Mapping

from rentals.core.auth import AuthContext
from rentals.core.bookings import DashboardStats, build_dashboard_stats
from rentals.core.models import Booking, Listing, Notice
from rentals.core.normalize import ListingFormError, booking_from_row, listing_form_to_record, listing_from_row
from rentals.core.supabase_repo import SupabaseRepo


LOGGER = logging.getLogger(__name__)

DECISIONS = ("approved", "declined")


def load_all_listings(repo: SupabaseRepo, auth: AuthContext) -> list[Listing]:
    auth.require_admin()
    try:
        rows = repo.get_all_listings()
    except Exception as exc:  # noqa: BLE001
        LOGGER.exception("Error fetching apartments: %s", exc)
        return []
    return [listing_from_row(row) for row in rows]


def save_listing(
    repo: SupabaseRepo,
    auth: AuthContext,
    form: Mapping[str, Any],
    listing_id: str | None = None,
) -> Notice:
    """Create a listing, or update `listing_id` when given, from admin form input."""
    auth.require_admin()
    try:
        record = listing_form_to_record(form)
    except ListingFormError as exc:
        return Notice(title="Missing fields", description=str(exc), variant="destructive")

    try:
        if listing_id:
            repo.update_listing(listing_id, record)
        else:
            repo.insert_listing(record)
    except Exception as exc:  # noqa: BLE001
        LOGGER.exception("Error saving apartment id=%s: %s", listing_id, exc)
        return Notice(
            title="Error",
            description="Failed to save apartment. Please try again.",
            variant="destructive",
        )
    if listing_id:
        return Notice(title="Apartment updated successfully")
    return Notice(title="Apartment created successfully")


def delete_listing(repo: SupabaseRepo, auth: AuthContext, listing_id: str) -> Notice:
    auth.require_admin()
    try:
        repo.delete_listing(listing_id)
    except Exception as exc:  # noqa: BLE001
        LOGGER.exception("Error deleting apartment id=%s: %s", listing_id, exc)
        return Notice(title="Error", description="Failed to delete apartment.", variant="destructive")
    return Notice(title="Apartment deleted successfully")


def load_all_bookings(repo: SupabaseRepo, auth: AuthContext) -> list[Booking]:
    auth.require_admin()
    try:
        rows = repo.get_all_bookings()
        user_ids = sorted({str(row["user_id"]) for row in rows if row.get("user_id")})
        profiles = {str(row["id"]): row for row in repo.get_profiles(user_ids)}
    except Exception as exc:  # noqa: BLE001
        LOGGER.exception("Error fetching bookings: %s", exc)
        return []
    return [booking_from_row({**row, "profile": profiles.get(str(row.get("user_id")))}) for row in rows]


def decide_booking(
    repo: SupabaseRepo,
    auth: AuthContext,
    booking_id: str,
    status: str,
    admin_message: str | None = None,
) -> Notice:
    auth.require_admin()
    if status not in DECISIONS:
        raise ValueError(f"Booking decision must be one of {DECISIONS}, got {status!r}")
    try:
        repo.update_booking_status(booking_id, status, (admin_message or "").strip() or None)
    except Exception as exc:  # noqa: BLE001
        LOGGER.exception("Error updating booking id=%s: %s", booking_id, exc)
        return Notice(title="Error", description="Failed to update booking status.", variant="destructive")
    LOGGER.info("Booking id=%s %s", booking_id, status)
    return Notice(title=f"Booking {status}", description=f"The booking has been {status} successfully.")


def load_dashboard_stats(repo: SupabaseRepo, auth: AuthContext) -> DashboardStats:
    auth.require_admin()
    try:
        total_listings = repo.count_listings()
        booking_rows = repo.get_booking_totals()
    except Exception as exc:  # noqa: BLE001
        LOGGER.exception("Error fetching stats: %s", exc)
        return build_dashboard_stats(0, [])
    return build_dashboard_stats(total_listings, booking_rows)
