from datetime import date

import pytest

from rentals.core.bookings import (
    BookingValidationError,
    build_dashboard_stats,
    count_by_status,
    expand_booked_dates,
    filter_bookings,
    is_date_disabled,
    nights_between,
    total_price,
    validate_booking_request,
)
from rentals.core.models import Booking


TODAY = date(2026, 10, 19)


def _booking(booking_id, status):
    return Booking(id=booking_id, user_id="u", apartment_id="a", date_start=TODAY, date_end=TODAY, status=status)


def test_booked_dates_include_checkout_day():
    booked = expand_booked_dates([{"date_start": "2026-11-01", "date_end": "2026-11-03"}])

    assert booked == {date(2026, 11, 1), date(2026, 11, 2), date(2026, 11, 3)}


def test_past_and_booked_days_are_disabled():
    booked = {date(2026, 11, 2)}

    assert is_date_disabled(date(2026, 10, 18), booked, today=TODAY)
    assert is_date_disabled(date(2026, 11, 2), booked, today=TODAY)
    assert not is_date_disabled(TODAY, booked, today=TODAY)


def test_nights_and_total():
    nights = nights_between(date(2026, 12, 20), date(2026, 12, 24))
    assert nights == 4
    assert total_price(nights, 150) == 600


def test_valid_request_returns_nights():
    assert validate_booking_request(date(2026, 11, 5), date(2026, 11, 8), set(), today=TODAY) == 3


@pytest.mark.parametrize(
    "start, end, title",
    [
        (None, date(2026, 11, 8), "Select dates"),
        (date(2026, 11, 8), date(2026, 11, 8), "Select dates"),
        (date(2026, 11, 9), date(2026, 11, 8), "Select dates"),
        (date(2026, 10, 1), date(2026, 10, 25), "Select dates"),
        (date(2026, 10, 30), date(2026, 11, 3), "Dates unavailable"),
    ],
)
def test_invalid_requests(start, end, title):
    booked = {date(2026, 11, 1)}

    with pytest.raises(BookingValidationError) as excinfo:
        validate_booking_request(start, end, booked, today=TODAY)
    assert excinfo.value.title == title


def test_filter_and_count_by_status():
    bookings = [_booking("1", "pending"), _booking("2", "approved"), _booking("3", "pending")]

    assert [b.id for b in filter_bookings(bookings, "pending")] == ["1", "3"]
    assert len(filter_bookings(bookings)) == 3
    assert count_by_status(bookings) == {"pending": 2, "approved": 1, "declined": 0}
    with pytest.raises(ValueError):
        filter_bookings(bookings, "cancelled")


def test_dashboard_revenue_counts_only_approved():
    stats = build_dashboard_stats(
        4,
        [
            {"status": "approved", "total_price": 300},
            {"status": "approved", "total_price": None},
            {"status": "pending", "total_price": 999},
            {"status": "declined", "total_price": 50},
        ],
    )

    assert stats.total_listings == 4
    assert stats.total_bookings == 4
    assert stats.pending_bookings == 1
    assert stats.revenue == 300
