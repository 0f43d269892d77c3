from __future__ import annotations

import os
from typing import Any

from supabase import Client, create_client

from rentals.core.bookings import BLOCKING_STATUSES


class SupabaseRepo:
    """
    Record-style access to the hosted schema (apartments, bookings, profiles, user_roles).

    Row-level policies are enforced by the backend for the signed-in user, so
    the same calls return different rows for guests, users and admins.
    """

    def __init__(self, url: str | None = None, key: str | None = None, client: Client | None = None) -> None:
        if client is not None:
            self.client = client
            return
        supabase_url = url or os.environ.get("SUPABASE_URL")
        supabase_key = key or os.environ.get("SUPABASE_PUBLISHABLE_KEY") or os.environ.get("SUPABASE_ANON_KEY")
        if not supabase_url or not supabase_key:
            raise ValueError("SUPABASE_URL and SUPABASE_PUBLISHABLE_KEY (or SUPABASE_ANON_KEY) are required.")
        self.client: Client = create_client(supabase_url, supabase_key)

    # Listings

    def get_active_listings(self, region: str, limit: int | None = None) -> list[dict[str, Any]]:
        query = self.client.table("apartments").select("*").eq("status", "active").eq("region", region)
        if limit is not None:
            query = query.limit(limit)
        return query.execute().data or []

    def get_all_listings(self) -> list[dict[str, Any]]:
        return self.client.table("apartments").select("*").order("created_at", desc=True).execute().data or []

    def get_listing(self, listing_id: str) -> dict[str, Any] | None:
        rows = self.client.table("apartments").select("*").eq("id", listing_id).limit(1).execute().data or []
        return rows[0] if rows else None

    def count_listings(self) -> int:
        response = self.client.table("apartments").select("id", count="exact").execute()
        return response.count or 0

    def insert_listing(self, row: dict[str, Any]) -> dict[str, Any]:
        response = self.client.table("apartments").insert(row).execute()
        return (response.data or [{}])[0]

    def update_listing(self, listing_id: str, row: dict[str, Any]) -> dict[str, Any]:
        response = self.client.table("apartments").update(row).eq("id", listing_id).execute()
        return (response.data or [{}])[0]

    def delete_listing(self, listing_id: str) -> None:
        self.client.table("apartments").delete().eq("id", listing_id).execute()

    # Bookings

    def get_booked_ranges(self, listing_id: str) -> list[dict[str, Any]]:
        return (
            self.client.table("bookings")
            .select("date_start, date_end")
            .eq("apartment_id", listing_id)
            .in_("status", list(BLOCKING_STATUSES))
            .execute()
            .data
            or []
        )

    def insert_booking(self, row: dict[str, Any]) -> dict[str, Any]:
        response = self.client.table("bookings").insert(row).execute()
        return (response.data or [{}])[0]

    def get_user_bookings(self, user_id: str) -> list[dict[str, Any]]:
        return (
            self.client.table("bookings")
            .select("*, apartment:apartments(*)")
            .eq("user_id", user_id)
            .order("created_at", desc=True)
            .execute()
            .data
            or []
        )

    def get_all_bookings(self) -> list[dict[str, Any]]:
        return (
            self.client.table("bookings")
            .select("*, apartment:apartments(*)")
            .order("created_at", desc=True)
            .execute()
            .data
            or []
        )

    def get_booking_totals(self) -> list[dict[str, Any]]:
        return self.client.table("bookings").select("id, status, total_price").execute().data or []

    def update_booking_status(self, booking_id: str, status: str, admin_message: str | None) -> None:
        self.client.table("bookings").update({"status": status, "admin_message": admin_message}).eq(
            "id", booking_id
        ).execute()

    # Profiles and roles

    def get_profile(self, user_id: str) -> dict[str, Any] | None:
        rows = self.client.table("profiles").select("*").eq("id", user_id).limit(1).execute().data or []
        return rows[0] if rows else None

    def get_profiles(self, user_ids: list[str]) -> list[dict[str, Any]]:
        if not user_ids:
            return []
        return self.client.table("profiles").select("*").in_("id", user_ids).execute().data or []

    def update_profile(self, user_id: str, row: dict[str, Any]) -> None:
        self.client.table("profiles").update(row).eq("id", user_id).execute()

    def get_user_role(self, user_id: str) -> str | None:
        rows = self.client.table("user_roles").select("role").eq("user_id", user_id).execute().data or []
        roles = {row.get("role") for row in rows}
        if "admin" in roles:
            return "admin"
        return "user" if roles else None

    # Auth

    def sign_in(self, email: str, password: str) -> dict[str, Any]:
        response = self.client.auth.sign_in_with_password({"email": email, "password": password})
        return _user_to_dict(response.user)

    def sign_up(self, email: str, password: str, name: str | None = None) -> dict[str, Any]:
        credentials: dict[str, Any] = {"email": email, "password": password}
        if name:
            credentials["options"] = {"data": {"name": name}}
        response = self.client.auth.sign_up(credentials)
        return _user_to_dict(response.user)

    def sign_out(self) -> None:
        self.client.auth.sign_out()


def _user_to_dict(user: Any) -> dict[str, Any]:
    if user is None:
        raise ValueError("Authentication did not return a user.")
    return {"id": str(user.id), "email": getattr(user, "email", None)}
