"""Business user management.

Accounts are created through the auth provider, whose trigger inserts the
profile row; the service then makes sure the profile carries the business,
role and name it was asked for. Removing a user from a business only
unlinks the profile; the account itself is kept.
"""

from __future__ import annotations

import logging

from app.adapters.backend.base import AbstractBackend, AuthUser
from app.core.errors import NotFoundAppError, ValidationAppError
from app.core.logging import hash_identifier
from app.schemas.profile import Profile, TeamUserCreate, UserCreate
from app.services.business_service import ensure_business_exists
from app.utils.query_cache import QueryCache, business_users_key, invalidate_business_queries
from app.utils.validators import is_valid_email, is_valid_role, is_valid_uuid, validate_password

logger = logging.getLogger(__name__)

DEFAULT_ROLE = "user"


class UserService:
    """Creates, lists, re-roles and unlinks the users of a business."""

    def __init__(self, backend: AbstractBackend, cache: QueryCache) -> None:
        self.backend = backend
        self.cache = cache

    async def list_users(self, business_id: str) -> list[Profile]:
        await ensure_business_exists(self.backend, business_id)

        async def load() -> list[Profile]:
            rows = await self.backend.select(
                "profiles",
                eq={"business_id": business_id},
                order_by="created_at",
                descending=True,
            )
            return [Profile.model_validate(row) for row in rows]

        return await self.cache.fetch(business_users_key(business_id), load)

    async def user_belongs_to_business(self, user_id: str, business_id: str) -> bool:
        if not is_valid_uuid(user_id):
            return False
        rows = await self.backend.select("profiles", eq={"id": user_id, "business_id": business_id}, limit=1)
        return bool(rows)

    @staticmethod
    def _validate_credentials(email: str | None, password: str | None) -> tuple[str, str]:
        if not email or not password:
            raise ValidationAppError(code="missing_credentials", message="Email and password are required")
        if not is_valid_email(email):
            raise ValidationAppError(code="invalid_email", message="Invalid email format", details={"field": "email"})
        check = validate_password(password)
        if not check.valid:
            raise ValidationAppError(
                code="weak_password",
                message=check.error or "Invalid password",
                details={"field": "password"},
            )
        return email.strip(), password

    async def _sync_profile(self, user: AuthUser, *, email: str, business_id: str, role: str, full_name: str) -> None:
        """Point the new account's profile at the business, creating it if the trigger did not."""

        values = {"business_id": business_id, "role": role, "full_name": full_name}
        if await self.backend.select("profiles", eq={"id": user.id}, limit=1):
            await self.backend.update("profiles", values, eq={"id": user.id})
        else:
            await self.backend.insert("profiles", {"id": user.id, "email": email, "is_super_admin": False, **values})

    async def create_user(self, business_id: str, payload: UserCreate) -> AuthUser:
        """Create an account inside a business.

        Raises:
            NotFoundAppError: If the business does not exist.
            ValidationAppError: On missing/invalid credentials, invalid role, or
                when the auth provider rejects the account.
        """
        await ensure_business_exists(self.backend, business_id)
        email, password = self._validate_credentials(payload.email, payload.password)
        if payload.role and not is_valid_role(payload.role):
            raise ValidationAppError(code="invalid_role", message="Invalid role", details={"field": "role"})

        role = payload.role or DEFAULT_ROLE
        full_name = (payload.full_name or "").strip()
        user = await self.backend.create_user(
            email,
            password,
            {"full_name": full_name, "role": role, "business_id": business_id, "is_super_admin": False},
        )
        await self._sync_profile(user, email=email, business_id=business_id, role=role, full_name=full_name)

        invalidate_business_queries(self.cache, business_id)
        logger.info(
            "user.created",
            extra={"business_id": business_id, "user_id": user.id, "role": role, "email_hash": hash_identifier(email)},
        )
        return user

    async def create_team_user(self, business_id: str, payload: TeamUserCreate) -> AuthUser:
        """Create an account in the caller's own business; every field is required."""

        if not (payload.email and payload.password and payload.full_name and payload.role):
            raise ValidationAppError(
                code="missing_fields",
                message="Missing required fields: email, password, full_name, role",
            )
        if not is_valid_role(payload.role):
            raise ValidationAppError(
                code="invalid_role",
                message="Invalid role. Must be 'user' or 'admin'",
                details={"field": "role"},
            )
        return await self.create_user(
            business_id,
            UserCreate(
                email=payload.email,
                password=payload.password,
                full_name=payload.full_name,
                role=payload.role,
            ),
        )

    async def _require_member(self, business_id: str, user_id: str) -> None:
        await ensure_business_exists(self.backend, business_id)
        if not await self.user_belongs_to_business(user_id, business_id):
            raise NotFoundAppError(
                code="user_not_in_business",
                message="User does not belong to this business",
                details={"business_id": business_id, "user_id": user_id},
            )

    async def update_role(self, business_id: str, user_id: str, role: str | None) -> Profile:
        await self._require_member(business_id, user_id)
        if not role or not is_valid_role(role):
            raise ValidationAppError(code="invalid_role", message="Invalid role", details={"field": "role"})

        rows = await self.backend.update(
            "profiles",
            {"role": role},
            eq={"id": user_id, "business_id": business_id},
        )
        if not rows:
            raise NotFoundAppError(code="user_not_in_business", message="User does not belong to this business")
        invalidate_business_queries(self.cache, business_id)
        logger.info("user.role_updated", extra={"business_id": business_id, "user_id": user_id, "role": role})
        return Profile.model_validate(rows[0])

    async def remove_from_business(self, business_id: str, user_id: str) -> None:
        """Unlink the user from the business; the account and profile remain."""

        await self._require_member(business_id, user_id)
        await self.backend.update(
            "profiles",
            {"business_id": None},
            eq={"id": user_id, "business_id": business_id},
        )
        invalidate_business_queries(self.cache, business_id)
        logger.info("user.removed_from_business", extra={"business_id": business_id, "user_id": user_id})
