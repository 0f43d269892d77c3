from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, Iterable, Mapping

from rentals.core.models import BOOKING_STATUSES, Booking
from rentals.core.normalize import parse_date


BLOCKING_STATUSES = ("pending", "approved")
STATUS_FILTERS = ("all", *BOOKING_STATUSES)


class BookingValidationError(ValueError):
    def __init__(self, title: str, description: str) -> None:
        super().__init__(description)
        self.title = title
        self.description = description


@dataclass(slots=True)
class DashboardStats:
    total_listings: int
    total_bookings: int
    pending_bookings: int
    revenue: float


def nights_between(start: date, end: date) -> int:
    return (end - start).days


def total_price(nights: int, price_per_day: float) -> float:
    return nights * price_per_day


def expand_booked_dates(ranges: Iterable[Mapping[str, Any]]) -> set[date]:
    """
    Every calendar day covered by the given bookings, check-out day included.
    """
    booked: set[date] = set()
    for row in ranges:
        current = parse_date(row["date_start"])
        end = parse_date(row["date_end"])
        while current <= end:
            booked.add(current)
            current += timedelta(days=1)
    return booked


def is_date_disabled(day: date, booked: set[date], today: date | None = None) -> bool:
    return day in booked or day < (today or date.today())


def validate_booking_request(
    date_start: date | None,
    date_end: date | None,
    booked: set[date],
    today: date | None = None,
) -> int:
    """Return the number of nights, or raise BookingValidationError."""
    if date_start is None or date_end is None:
        raise BookingValidationError("Select dates", "Please select check-in and check-out dates.")
    nights = nights_between(date_start, date_end)
    if nights <= 0:
        raise BookingValidationError("Select dates", "Check-out must be at least one night after check-in.")
    if date_start < (today or date.today()):
        raise BookingValidationError("Select dates", "Check-in cannot be in the past.")
    clashes = sorted(day for day in booked if date_start <= day <= date_end)
    if clashes:
        raise BookingValidationError(
            "Dates unavailable",
            f"{clashes[0].isoformat()} is already booked. Please choose other dates.",
        )
    return nights


def filter_bookings(bookings: Iterable[Booking], status: str = "all") -> list[Booking]:
    if status not in STATUS_FILTERS:
        raise ValueError(f"Unknown booking filter: {status!r}")
    return [booking for booking in bookings if status == "all" or booking.status == status]


def count_by_status(bookings: Iterable[Booking]) -> dict[str, int]:
    counts = Counter(booking.status for booking in bookings)
    return {status: counts.get(status, 0) for status in BOOKING_STATUSES}


def build_dashboard_stats(total_listings: int, booking_rows: Iterable[Mapping[str, Any]]) -> DashboardStats:
    rows = list(booking_rows)
    pending = sum(1 for row in rows if row.get("status") == "pending")
    revenue = sum(float(row.get("total_price") or 0) for row in rows if row.get("status") == "approved")
    return DashboardStats(
        total_listings=total_listings,
        total_bookings=len(rows),
        pending_bookings=pending,
        revenue=revenue,
    )
