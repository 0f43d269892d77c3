from __future__ import annotations

import logging
from datetime import date

from rentals.core.auth import AuthContext
from rentals.core.bookings import (
    BookingValidationError,
    expand_booked_dates,
    total_price,
    validate_booking_request,
)
from rentals.core.models import Booking, Listing, Notice
from rentals.core.normalize import booking_from_row
from rentals.core.supabase_repo import SupabaseRepo


LOGGER = logging.getLogger(__name__)


def request_booking(
    repo: SupabaseRepo,
    auth: AuthContext,
    listing: Listing,
    date_start: date | None,
    date_end: date | None,
    today: date | None = None,
) -> Notice:
    if not auth.is_authenticated:
        return Notice(
            title="Sign in required",
            description="Please sign in to book this apartment.",
            variant="destructive",
        )

    try:
        booked = expand_booked_dates(repo.get_booked_ranges(listing.id))
    except Exception as exc:  # noqa: BLE001
        LOGGER.warning("Availability not checked apartment=%s: %s", listing.id, exc)
        booked = set()

    try:
        nights = validate_booking_request(date_start, date_end, booked, today=today)
    except BookingValidationError as exc:
        return Notice(title=exc.title, description=exc.description, variant="destructive")

    row = {
        "user_id": auth.user_id,
        "apartment_id": listing.id,
        "date_start": date_start.isoformat(),
        "date_end": date_end.isoformat(),
        "total_price": total_price(nights, listing.price_per_day),
        "status": "pending",
    }
    try:
        repo.insert_booking(row)
    except Exception as exc:  # noqa: BLE001
        LOGGER.exception("Error creating booking apartment=%s: %s", listing.id, exc)
        return Notice(
            title="Booking failed",
            description="There was an error processing your booking. Please try again.",
            variant="destructive",
        )
    LOGGER.info("Booking requested apartment=%s nights=%s", listing.id, nights)
    return Notice(title="Booking submitted!", description="Your booking request has been sent for approval.")


def load_my_bookings(repo: SupabaseRepo, auth: AuthContext) -> list[Booking]:
    user_id = auth.require_user()
    try:
        rows = repo.get_user_bookings(user_id)
    except Exception as exc:  # noqa: BLE001
        LOGGER.exception("Error fetching bookings user=%s: %s", user_id, exc)
        return []
    return [booking_from_row(row) for row in rows]
