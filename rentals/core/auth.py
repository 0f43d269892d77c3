from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from rentals.core.models import Profile
from rentals.core.normalize import profile_from_row
from rentals.core.supabase_repo import SupabaseRepo


LOGGER = logging.getLogger(__name__)


class AuthorizationError(PermissionError):
    pass


@dataclass(slots=True)
class AuthContext:
    user_id: str | None = None
    email: str | None = None
    role: str = "user"  # admin | user
    profile: Profile | None = None

    @classmethod
    def anonymous(cls) -> AuthContext:
        return cls()

    @classmethod
    def for_user(cls, repo: SupabaseRepo, user: dict[str, Any]) -> AuthContext:
        user_id = user["id"]
        role = repo.get_user_role(user_id) or "user"
        profile_row = repo.get_profile(user_id)
        profile = profile_from_row(profile_row) if profile_row else None
        LOGGER.info("Signed in user=%s role=%s", user_id, role)
        return cls(user_id=user_id, email=user.get("email"), role=role, profile=profile)

    @classmethod
    def sign_in(cls, repo: SupabaseRepo, email: str, password: str) -> AuthContext:
        return cls.for_user(repo, repo.sign_in(email, password))

    @classmethod
    def sign_up(cls, repo: SupabaseRepo, email: str, password: str, name: str | None = None) -> AuthContext:
        return cls.for_user(repo, repo.sign_up(email, password, name))

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None

    @property
    def is_admin(self) -> bool:
        return self.is_authenticated and self.role == "admin"

    def require_user(self) -> str:
        if self.user_id is None:
            raise AuthorizationError("Please sign in to continue.")
        return self.user_id

    def require_admin(self) -> str:
        user_id = self.require_user()
        if self.role != "admin":
            raise AuthorizationError("Admin access required.")
        return user_id

    def sign_out(self, repo: SupabaseRepo) -> AuthContext:
        if self.is_authenticated:
            repo.sign_out()
        return AuthContext.anonymous()
