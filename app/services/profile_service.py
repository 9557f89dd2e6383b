"""The signed-in user's own profile."""

from __future__ import annotations

import logging

from app.adapters.backend.base import AbstractBackend
from app.core.errors import NotFoundAppError
from app.schemas.profile import Profile
from app.utils.validators import limit_length

logger = logging.getLogger(__name__)

FULL_NAME_MAX_LENGTH = 100


class ProfileService:
    def __init__(self, backend: AbstractBackend) -> None:
        self.backend = backend

    async def get_profile(self, user_id: str) -> Profile:
        rows = await self.backend.select("profiles", eq={"id": user_id}, limit=1)
        if not rows:
            raise NotFoundAppError(code="profile_not_found", message="Profile not found", details={"user_id": user_id})
        return Profile.model_validate(rows[0])

    async def update_full_name(self, user_id: str, full_name: str | None) -> Profile:
        """Set the display name; a blank name is stored as NULL."""

        value = limit_length(full_name or "", FULL_NAME_MAX_LENGTH) or None
        rows = await self.backend.update("profiles", {"full_name": value}, eq={"id": user_id})
        if not rows:
            raise NotFoundAppError(code="profile_not_found", message="Profile not found", details={"user_id": user_id})
        logger.info("profile.updated", extra={"user_id": user_id})
        return Profile.model_validate(rows[0])
