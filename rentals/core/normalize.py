from __future__ import annotations

from datetime import date, datetime
from typing import Any, Mapping

from rentals.core.models import REGIONS, Booking, Listing, Profile


class ListingFormError(ValueError):
    pass


def listing_from_row(row: Mapping[str, Any]) -> Listing:
    lat = _safe_float(row.get("latitude"))
    lng = _safe_float(row.get("longitude"))
    return Listing(
        id=str(row["id"]),
        name=str(row.get("name") or ""),
        price_per_day=_safe_float(row.get("price_per_day")) or 0.0,
        bedrooms=_safe_int(row.get("bedrooms")) or 0,
        bathrooms=_safe_int(row.get("bathrooms")) or 0,
        description=row.get("description") or None,
        location_text=row.get("location_text") or None,
        latitude=lat if lat is not None and -90 <= lat <= 90 else None,
        longitude=lng if lng is not None and -180 <= lng <= 180 else None,
        image_main_url=row.get("image_main_url") or None,
        status=row.get("status") or "active",
        amenities=_amenity_set(row.get("amenities")),
        region=row.get("region") or "kenya",
        created_at=row.get("created_at"),
    )


def profile_from_row(row: Mapping[str, Any]) -> Profile:
    return Profile(
        id=str(row["id"]),
        name=row.get("name"),
        email=row.get("email"),
        phone=row.get("phone"),
        avatar_url=row.get("avatar_url"),
        created_at=row.get("created_at"),
    )


def booking_from_row(row: Mapping[str, Any]) -> Booking:
    listing_row = row.get("apartment")
    profile_row = row.get("profile")
    return Booking(
        id=str(row["id"]),
        user_id=str(row.get("user_id") or ""),
        apartment_id=str(row.get("apartment_id") or ""),
        date_start=parse_date(row["date_start"]),
        date_end=parse_date(row["date_end"]),
        total_price=_safe_float(row.get("total_price")),
        status=row.get("status") or "pending",
        admin_message=row.get("admin_message"),
        created_at=row.get("created_at"),
        listing=listing_from_row(listing_row) if isinstance(listing_row, Mapping) else None,
        profile=profile_from_row(profile_row) if isinstance(profile_row, Mapping) else None,
    )


def listing_form_to_record(form: Mapping[str, Any]) -> dict[str, Any]:
    """
    Convert admin form input (strings as typed) into an `apartments` row.

    Name and price are required; blank optional fields become None and the
    amenities field is a comma-separated list.
    """
    name = str(form.get("name") or "").strip()
    raw_price = str(form.get("price_per_day") or "").strip()
    if not name or not raw_price:
        raise ListingFormError("Please fill in all required fields.")
    price = _safe_float(raw_price)
    if price is None or price < 0:
        raise ListingFormError("Price per day must be a non-negative number.")

    region = str(form.get("region") or "kenya")
    if region not in REGIONS:
        raise ListingFormError(f"Unknown region: {region}")

    amenities = [part.strip() for part in str(form.get("amenities") or "").split(",")]
    amenities = [part for part in amenities if part]
    lat = _safe_float(form.get("latitude"))
    lng = _safe_float(form.get("longitude"))
    return {
        "name": name,
        "description": _blank_to_none(form.get("description")),
        "location_text": _blank_to_none(form.get("location_text")),
        "latitude": lat if lat is not None and -90 <= lat <= 90 else None,
        "longitude": lng if lng is not None and -180 <= lng <= 180 else None,
        "price_per_day": price,
        "bedrooms": _int_or_default(form.get("bedrooms"), 1),
        "bathrooms": _int_or_default(form.get("bathrooms"), 1),
        "image_main_url": _blank_to_none(form.get("image_main_url")),
        "amenities": amenities or None,
        "region": region,
    }


def listing_to_form(listing: Listing) -> dict[str, str]:
    return {
        "name": listing.name,
        "description": listing.description or "",
        "location_text": listing.location_text or "",
        "latitude": "" if listing.latitude is None else str(listing.latitude),
        "longitude": "" if listing.longitude is None else str(listing.longitude),
        "price_per_day": _format_number(listing.price_per_day),
        "bedrooms": str(listing.bedrooms),
        "bathrooms": str(listing.bathrooms),
        "image_main_url": listing.image_main_url or "",
        "amenities": ", ".join(sorted(listing.amenities)),
        "region": listing.region,
    }


def parse_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def _amenity_set(value: Any) -> frozenset[str]:
    if not isinstance(value, (list, tuple, set, frozenset)):
        return frozenset()
    return frozenset(str(item).strip() for item in value if str(item).strip())


def _blank_to_none(value: Any) -> str | None:
    text = str(value).strip() if value is not None else ""
    return text or None


def _format_number(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


def _safe_float(value: Any) -> float | None:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _safe_int(value: Any) -> int | None:
    if value is None or value == "":
        return None
    try:
        return int(float(value))
    except (TypeError, ValueError, OverflowError):
        return None


def _int_or_default(value: Any, default: int) -> int:
    parsed = _safe_int(value)
    return default if parsed is None else parsed
