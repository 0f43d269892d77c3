from __future__ import annotations

import logging

from rentals.core.auth import AuthContext
from rentals.core.models import Notice, Profile
from rentals.core.supabase_repo import SupabaseRepo


LOGGER = logging.getLogger(__name__)


def update_profile(repo: SupabaseRepo, auth: AuthContext, name: str | None, phone: str | None) -> Notice:
    user_id = auth.require_user()
    row = {"name": (name or "").strip() or None, "phone": (phone or "").strip() or None}
    try:
        repo.update_profile(user_id, row)
    except Exception as exc:  # noqa: BLE001
        LOGGER.exception("Error updating profile user=%s: %s", user_id, exc)
        return Notice(
            title="Error",
            description="Failed to update profile. Please try again.",
            variant="destructive",
        )
    if auth.profile is None:
        auth.profile = Profile(id=user_id, email=auth.email)
    auth.profile.name = row["name"]
    auth.profile.phone = row["phone"]
    return Notice(title="Profile updated", description="Your profile has been saved successfully.")
