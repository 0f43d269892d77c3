from __future__ import annotations

from typing import Any

import pytest


class FakeRepo:
    """In-memory stand-in for SupabaseRepo; names in `failing` raise."""

    def __init__(self) -> None:
        self.listings: list[dict[str, Any]] = []
        self.bookings: list[dict[str, Any]] = []
        self.profiles: dict[str, dict[str, Any]] = {}
        self.roles: dict[str, str] = {}
        self.users: dict[str, dict[str, Any]] = {}
        self.failing: set[str] = set()
        self.signed_out = False

    def _check(self, name: str) -> None:
        if name in self.failing:
            raise RuntimeError(f"{name} failed")

    def get_active_listings(self, region: str, limit: int | None = None) -> list[dict[str, Any]]:
        self._check("get_active_listings")
        rows = [row for row in self.listings if row.get("status") == "active" and row.get("region") == region]
        return rows[:limit] if limit is not None else rows

    def get_all_listings(self) -> list[dict[str, Any]]:
        self._check("get_all_listings")
        return list(self.listings)

    def get_listing(self, listing_id: str) -> dict[str, Any] | None:
        self._check("get_listing")
        return next((row for row in self.listings if row["id"] == listing_id), None)

    def count_listings(self) -> int:
        self._check("count_listings")
        return len(self.listings)

    def insert_listing(self, row: dict[str, Any]) -> dict[str, Any]:
        self._check("insert_listing")
        stored = {"id": f"apt-{len(self.listings) + 1}", "status": "active", **row}
        self.listings.append(stored)
        return stored

    def update_listing(self, listing_id: str, row: dict[str, Any]) -> dict[str, Any]:
        self._check("update_listing")
        for stored in self.listings:
            if stored["id"] == listing_id:
                stored.update(row)
                return stored
        return {}

    def delete_listing(self, listing_id: str) -> None:
        self._check("delete_listing")
        self.listings = [row for row in self.listings if row["id"] != listing_id]

    def get_booked_ranges(self, listing_id: str) -> list[dict[str, Any]]:
        self._check("get_booked_ranges")
        return [
            {"date_start": row["date_start"], "date_end": row["date_end"]}
            for row in self.bookings
            if row["apartment_id"] == listing_id and row["status"] in ("pending", "approved")
        ]

    def insert_booking(self, row: dict[str, Any]) -> dict[str, Any]:
        self._check("insert_booking")
        stored = {"id": f"bk-{len(self.bookings) + 1}", **row}
        self.bookings.append(stored)
        return stored

    def _with_listing(self, row: dict[str, Any]) -> dict[str, Any]:
        return {**row, "apartment": self.get_listing(row["apartment_id"])}

    def get_user_bookings(self, user_id: str) -> list[dict[str, Any]]:
        self._check("get_user_bookings")
        return [self._with_listing(row) for row in reversed(self.bookings) if row["user_id"] == user_id]

    def get_all_bookings(self) -> list[dict[str, Any]]:
        self._check("get_all_bookings")
        return [self._with_listing(row) for row in reversed(self.bookings)]

    def get_booking_totals(self) -> list[dict[str, Any]]:
        self._check("get_booking_totals")
        return [{"id": row["id"], "status": row["status"], "total_price": row.get("total_price")} for row in self.bookings]

    def update_booking_status(self, booking_id: str, status: str, admin_message: str | None) -> None:
        self._check("update_booking_status")
        for row in self.bookings:
            if row["id"] == booking_id:
                row["status"] = status
                row["admin_message"] = admin_message

    def get_profile(self, user_id: str) -> dict[str, Any] | None:
        self._check("get_profile")
        return self.profiles.get(user_id)

    def get_profiles(self, user_ids: list[str]) -> list[dict[str, Any]]:
        self._check("get_profiles")
        return [self.profiles[user_id] for user_id in user_ids if user_id in self.profiles]

    def update_profile(self, user_id: str, row: dict[str, Any]) -> None:
        self._check("update_profile")
        self.profiles.setdefault(user_id, {"id": user_id}).update(row)

    def get_user_role(self, user_id: str) -> str | None:
        self._check("get_user_role")
        return self.roles.get(user_id)

    def sign_in(self, email: str, password: str) -> dict[str, Any]:
        self._check("sign_in")
        user = self.users.get(email)
        if user is None or user["password"] != password:
            raise ValueError("Invalid login credentials")
        return {"id": user["id"], "email": email}

    def sign_up(self, email: str, password: str, name: str | None = None) -> dict[str, Any]:
        self._check("sign_up")
        user_id = f"user-{len(self.users) + 1}"
        self.users[email] = {"id": user_id, "password": password}
        self.profiles[user_id] = {"id": user_id, "email": email, "name": name}
        return {"id": user_id, "email": email}

    def sign_out(self) -> None:
        self.signed_out = True


@pytest.fixture
def repo() -> FakeRepo:
    fake = FakeRepo()
    fake.listings = [
        {
            "id": "apt-1",
            "name": "Sunny Beach Villa",
            "description": "Ocean views",
            "location_text": "Diani Beach",
            "latitude": -4.28,
            "longitude": 39.59,
            "price_per_day": 8000,
            "bedrooms": 3,
            "bathrooms": 2,
            "status": "active",
            "amenities": ["WiFi", "Pool"],
            "region": "kenya",
        },
        {
            "id": "apt-2",
            "name": "City Loft",
            "description": None,
            "location_text": "Nairobi CBD",
            "latitude": None,
            "longitude": None,
            "price_per_day": 4500,
            "bedrooms": 1,
            "bathrooms": 1,
            "status": "active",
            "amenities": None,
            "region": "kenya",
        },
        {
            "id": "apt-3",
            "name": "Brooklyn Studio",
            "location_text": "New York, NY",
            "price_per_day": 180,
            "bedrooms": 1,
            "bathrooms": 1,
            "status": "active",
            "region": "usa",
        },
    ]
    fake.users = {
        "guest@example.com": {"id": "user-1", "password": "secret"},
        "admin@example.com": {"id": "admin-1", "password": "secret"},
    }
    fake.profiles = {
        "user-1": {"id": "user-1", "name": "Wanjiru", "email": "guest@example.com"},
        "admin-1": {"id": "admin-1", "name": "Admin", "email": "admin@example.com"},
    }
    fake.roles = {"user-1": "user", "admin-1": "admin"}
    return fake
