from __future__ import annotations

from rentals.core.models import Listing


PLACEHOLDER_IMAGE_URL = "https://images.unsplash.com/photo-1502672260266-1c1ef2d93688?w=800"
CARD_DESCRIPTION = "A beautiful place to stay."
DETAIL_DESCRIPTION = (
    "Experience comfort and convenience in this beautiful apartment. "
    "Perfect for travelers looking for a home away from home."
)


def format_distance(distance_km: float) -> str:
    if distance_km < 1:
        return f"{distance_km * 1000:.0f}m away"
    return f"{distance_km:.1f}km away"


def description_or_placeholder(listing: Listing, detail: bool = False) -> str:
    if listing.description:
        return listing.description
    return DETAIL_DESCRIPTION if detail else CARD_DESCRIPTION


def image_or_placeholder(listing: Listing) -> str:
    return listing.image_main_url or PLACEHOLDER_IMAGE_URL


def amenity_preview(listing: Listing, limit: int = 3) -> list[str]:
    # Amenities are unordered; sort for a stable preview.
    names = sorted(listing.amenities)
    preview = names[:limit]
    if len(names) > limit:
        preview.append(f"+{len(names) - limit}")
    return preview


def results_summary(count: int, sorted_by_distance: bool = False) -> str:
    noun = "apartment" if count == 1 else "apartments"
    summary = f"{count} {noun} found"
    if sorted_by_distance:
        summary += " (sorted by distance)"
    return summary
