from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from datetime import date
from typing import Any, Sequence

from rentals.chat.client import ChatClient
from rentals.chat.session import ChatBusyError, ChatSession
from rentals.core.auth import AuthContext, AuthorizationError
from rentals.core.bookings import STATUS_FILTERS, count_by_status, filter_bookings
from rentals.core.config import Settings, log_level_from_env, state_path_from_env
from rentals.core.display import (
    amenity_preview,
    description_or_placeholder,
    format_distance,
    image_or_placeholder,
    results_summary,
)
from rentals.core.geolocation import IpGeolocator, parse_coordinate
from rentals.core.models import REGIONS, Booking, Notice
from rentals.core.normalize import listing_to_form, parse_date
from rentals.core.region import RegionContext, format_price
from rentals.core.search import ListingSearch
from rentals.core.supabase_repo import SupabaseRepo
from rentals.services import admin, booking_flow, catalog, profile


LOGGER = logging.getLogger(__name__)


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=log_level_from_env(), format="%(asctime)s %(levelname)s %(message)s")

    region = RegionContext(state_path_from_env())
    region.load()
    if args.command == "region":
        return _cmd_region(region, args)

    settings = Settings.from_env()
    if args.command == "chat":
        return asyncio.run(_cmd_chat(settings))

    repo = SupabaseRepo(settings.supabase_url, settings.supabase_key)
    try:
        auth = _sign_in(repo, args)
        return COMMANDS[args.command](repo, auth, region, settings, args)
    except AuthorizationError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="rentals", description="Vacation rental listings and bookings.")
    parser.add_argument("--email", default=os.environ.get("RENTALS_EMAIL"), help="Sign in as this user.")
    parser.add_argument("--password", default=os.environ.get("RENTALS_PASSWORD"), help="Password for --email.")
    sub = parser.add_subparsers(dest="command", required=True)

    region = sub.add_parser("region", help="Show or change the selected region.")
    region.add_argument("value", nargs="?", choices=REGIONS)

    search = sub.add_parser("search", help="Search active listings in the selected region.")
    search.add_argument("--query", default="")
    search.add_argument("--min-price", type=float)
    search.add_argument("--max-price", type=float)
    location = search.add_mutually_exclusive_group()
    location.add_argument("--near", type=parse_coordinate, help="Sort by distance from 'lat,lng'.")
    location.add_argument("--locate", action="store_true", help="Sort by distance from the detected location.")
    search.add_argument("--featured", action="store_true", help="Only the featured selection.")

    show = sub.add_parser("show", help="Show one listing with its booked dates.")
    show.add_argument("listing_id")

    book = sub.add_parser("book", help="Request a booking (check-in and check-out as YYYY-MM-DD).")
    book.add_argument("listing_id")
    book.add_argument("date_start", type=parse_date)
    book.add_argument("date_end", type=parse_date)

    sub.add_parser("bookings", help="List my bookings.")
    sub.add_parser("chat", help="Talk to the assistant.")

    prof = sub.add_parser("profile", help="Update my name and phone.")
    prof.add_argument("--name")
    prof.add_argument("--phone")

    sub.add_parser("admin-stats", help="Dashboard totals.")
    sub.add_parser("admin-listings", help="All listings, newest first.")

    admin_bookings = sub.add_parser("admin-bookings", help="All bookings.")
    admin_bookings.add_argument("--status", choices=STATUS_FILTERS, default="all")

    decide = sub.add_parser("decide", help="Approve or decline a booking.")
    decide.add_argument("booking_id")
    decide.add_argument("decision", choices=admin.DECISIONS)
    decide.add_argument("--message", help="Message shown to the guest.")

    save = sub.add_parser("save-listing", help="Create a listing, or update one with --id.")
    save.add_argument("--id", dest="listing_id")
    save.add_argument("fields", nargs="+", metavar="FIELD=VALUE")

    delete = sub.add_parser("delete-listing", help="Delete a listing.")
    delete.add_argument("listing_id")
    return parser


def _sign_in(repo: SupabaseRepo, args: argparse.Namespace) -> AuthContext:
    if not args.email or not args.password:
        return AuthContext.anonymous()
    try:
        return AuthContext.sign_in(repo, args.email, args.password)
    except Exception as exc:  # noqa: BLE001
        LOGGER.exception("Sign in failed for %s: %s", args.email, exc)
        raise AuthorizationError("Sign in failed.") from exc


def _cmd_region(region: RegionContext, args: argparse.Namespace) -> int:
    if args.value:
        region.set_region(args.value)
    config = region.config
    print(f"{config.flag} {config.label} ({config.currency_symbol})")
    return 0


async def _cmd_chat(settings: Settings) -> int:
    client = ChatClient(settings.chat_url, settings.supabase_key, timeout_seconds=settings.chat_timeout_seconds)
    session = ChatSession(client)
    print("Ask me anything about apartments, bookings, or locations! (empty line to quit)")
    while True:
        try:
            text = await asyncio.to_thread(input, "you> ")
        except EOFError:
            return 0
        if not text.strip():
            return 0
        printed = 0

        def show(content: str) -> None:
            nonlocal printed
            sys.stdout.write(content[printed:])
            sys.stdout.flush()
            printed = len(content)

        sys.stdout.write("assistant> ")
        try:
            notice = await session.send(text, on_update=show)
        except ChatBusyError as exc:
            notice = Notice(title=str(exc), variant="destructive")
        sys.stdout.write("\n")
        if notice is not None:
            _print_notice(notice)


def _cmd_search(
    repo: SupabaseRepo, auth: AuthContext, region: RegionContext, settings: Settings, args: argparse.Namespace
) -> int:
    if args.featured:
        for listing in catalog.load_featured(repo, region.region):
            print(f"{listing.id}  {listing.name}  {region.format_price(listing.price_per_day)}/night")
        return 0

    search = ListingSearch(region=region.region, query=args.query)
    low, high = search.price_range
    search.price_range = (
        args.min_price if args.min_price is not None else low,
        args.max_price if args.max_price is not None else high,
    )
    if args.near:
        search.user_location = args.near
    elif args.locate:
        search.user_location = IpGeolocator(settings.geolocation_url).locate()
        if search.user_location is None:
            print("Location unavailable; results are not sorted by distance.")

    results = catalog.search_listings(repo, search)
    print(results_summary(len(results), search.sorted_by_distance))
    if not results:
        print("Try adjusting your filters or search query")
    for item in results:
        listing = item.listing
        line = f"{listing.id}  {listing.name}  {region.format_price(listing.price_per_day)}/night"
        if item.distance_km is not None:
            line += f"  {format_distance(item.distance_km)}"
        print(line)
        print(f"    {listing.location_text or 'Location not specified'}  "
              f"{listing.bedrooms} bed / {listing.bathrooms} bath  {' '.join(amenity_preview(listing))}")
    return 0


def _cmd_show(
    repo: SupabaseRepo, auth: AuthContext, region: RegionContext, settings: Settings, args: argparse.Namespace
) -> int:
    listing = catalog.load_listing(repo, args.listing_id)
    if listing is None:
        print("Apartment not found")
        return 1
    booked = catalog.load_booked_dates(repo, listing.id)
    print(listing.name)
    print(listing.location_text or "Location not specified")
    print(f"{region.format_price(listing.price_per_day)}/night  {listing.bedrooms} bed / {listing.bathrooms} bath")
    print(description_or_placeholder(listing, detail=True))
    print(image_or_placeholder(listing))
    if listing.amenities:
        print("Amenities: " + ", ".join(sorted(listing.amenities)))
    upcoming = sorted(day for day in booked if day >= date.today())
    if upcoming:
        print("Booked: " + ", ".join(day.isoformat() for day in upcoming))
    return 0


def _cmd_book(
    repo: SupabaseRepo, auth: AuthContext, region: RegionContext, settings: Settings, args: argparse.Namespace
) -> int:
    listing = catalog.load_listing(repo, args.listing_id)
    if listing is None:
        print("Apartment not found")
        return 1
    return _print_notice(booking_flow.request_booking(repo, auth, listing, args.date_start, args.date_end))


def _cmd_bookings(
    repo: SupabaseRepo, auth: AuthContext, region: RegionContext, settings: Settings, args: argparse.Namespace
) -> int:
    bookings = booking_flow.load_my_bookings(repo, auth)
    if not bookings:
        print("No bookings yet. Start exploring our apartments and book your next stay!")
    for booking in bookings:
        _print_booking(booking, region)
    return 0


def _cmd_profile(
    repo: SupabaseRepo, auth: AuthContext, region: RegionContext, settings: Settings, args: argparse.Namespace
) -> int:
    current = auth.profile
    name = args.name if args.name is not None else (current.name if current else None)
    phone = args.phone if args.phone is not None else (current.phone if current else None)
    return _print_notice(profile.update_profile(repo, auth, name, phone))


def _cmd_admin_stats(
    repo: SupabaseRepo, auth: AuthContext, region: RegionContext, settings: Settings, args: argparse.Namespace
) -> int:
    stats = admin.load_dashboard_stats(repo, auth)
    print(f"Total apartments: {stats.total_listings}")
    print(f"Total bookings: {stats.total_bookings}")
    print(f"Pending bookings: {stats.pending_bookings}")
    print(f"Revenue: {region.format_price(stats.revenue)}")
    return 0


def _cmd_admin_listings(
    repo: SupabaseRepo, auth: AuthContext, region: RegionContext, settings: Settings, args: argparse.Namespace
) -> int:
    listings = admin.load_all_listings(repo, auth)
    if not listings:
        print("No apartments yet. Add your first listing!")
    for listing in listings:
        price = format_price(listing.price_per_day, listing.region) if listing.region in REGIONS else "-"
        print(f"{listing.id}  {listing.name}  {price}  {listing.region}  {listing.status}")
    return 0


def _cmd_admin_bookings(
    repo: SupabaseRepo, auth: AuthContext, region: RegionContext, settings: Settings, args: argparse.Namespace
) -> int:
    bookings = admin.load_all_bookings(repo, auth)
    counts = count_by_status(bookings)
    print(", ".join(f"{status}: {count}" for status, count in counts.items()))
    for booking in filter_bookings(bookings, args.status):
        _print_booking(booking, region)
    return 0


def _cmd_decide(
    repo: SupabaseRepo, auth: AuthContext, region: RegionContext, settings: Settings, args: argparse.Namespace
) -> int:
    return _print_notice(admin.decide_booking(repo, auth, args.booking_id, args.decision, args.message))


def _cmd_save_listing(
    repo: SupabaseRepo, auth: AuthContext, region: RegionContext, settings: Settings, args: argparse.Namespace
) -> int:
    form: dict[str, Any] = {"region": region.region}
    if args.listing_id:
        existing = catalog.load_listing(repo, args.listing_id)
        if existing is None:
            print("Apartment not found")
            return 1
        form = listing_to_form(existing)
    for item in args.fields:
        key, sep, value = item.partition("=")
        if not sep:
            print(f"error: expected FIELD=VALUE, got {item!r}", file=sys.stderr)
            return 2
        form[key.strip()] = value
    return _print_notice(admin.save_listing(repo, auth, form, listing_id=args.listing_id))


def _cmd_delete_listing(
    repo: SupabaseRepo, auth: AuthContext, region: RegionContext, settings: Settings, args: argparse.Namespace
) -> int:
    return _print_notice(admin.delete_listing(repo, auth, args.listing_id))


def _print_booking(booking: Booking, region: RegionContext) -> None:
    name = booking.listing.name if booking.listing else booking.apartment_id
    guest = ""
    if booking.profile is not None:
        guest = f"  guest={booking.profile.name or booking.profile.email or booking.user_id}"
    total = region.format_price(booking.total_price) if booking.total_price is not None else "-"
    print(
        f"{booking.id}  {name}  {booking.date_start.isoformat()} -> {booking.date_end.isoformat()}  "
        f"{total}  {booking.status}{guest}"
    )
    if booking.admin_message:
        print(f"    {booking.admin_message}")


def _print_notice(notice: Notice) -> int:
    text = notice.title if not notice.description else f"{notice.title}: {notice.description}"
    print(text, file=sys.stderr if notice.is_error else sys.stdout)
    return 1 if notice.is_error else 0


COMMANDS = {
    "search": _cmd_search,
    "show": _cmd_show,
    "book": _cmd_book,
    "bookings": _cmd_bookings,
    "profile": _cmd_profile,
    "admin-stats": _cmd_admin_stats,
    "admin-listings": _cmd_admin_listings,
    "admin-bookings": _cmd_admin_bookings,
    "decide": _cmd_decide,
    "save-listing": _cmd_save_listing,
    "delete-listing": _cmd_delete_listing,
}


if __name__ == "__main__":
    sys.exit(main())
