"""In-memory backend for local runs and tests.

Mirrors the behavior the services rely on from the hosted backend:
generated ids and timestamps, equality/range filters, ordering, and the
database trigger that creates a ``profiles`` row for each new auth account
from its metadata, and the foreign-key actions run when a business or
module is deleted. Nothing is persisted.
"""

from __future__ import annotations

import copy
import hashlib
import logging
import secrets
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Callable

from app.adapters.backend.base import AbstractBackend, AuthSession, AuthUser, Filters, Row
from app.core.errors import ValidationAppError
from app.core.logging import hash_identifier

logger = logging.getLogger(__name__)

TOKEN_TTL_SECONDS = 3600

# Columns filled from the auth metadata when the profile trigger fires
_PROFILE_METADATA_DEFAULTS: dict[str, Any] = {
    "full_name": None,
    "role": "user",
    "business_id": None,
    "is_super_admin": False,
}

# Foreign keys pointing at a deleted row: (table, column, action)
_FOREIGN_KEYS: dict[str, tuple[tuple[str, str, str], ...]] = {
    "businesses": (
        ("business_modules", "business_id", "cascade"),
        ("profiles", "business_id", "set_null"),
    ),
    "modules": (("business_modules", "module_id", "cascade"),),
}


def _hash_password(password: str, salt: str) -> str:
    return hashlib.pbkdf2_hmac("sha256", password.encode(), salt.encode(), 10_000).hex()


def _matches(row: Row, eq: Filters | None, neq: Filters | None, gte: Filters | None) -> bool:
    for column, value in (eq or {}).items():
        if row.get(column) != value:
            return False
    for column, value in (neq or {}).items():
        if row.get(column) == value:
            return False
    for column, value in (gte or {}).items():
        current = row.get(column)
        if current is None or current < value:
            return False
    return True


class InMemoryBackend(AbstractBackend):
    """Dictionary-backed implementation of ``AbstractBackend``."""

    def __init__(self, *, now: Callable[[], datetime] | None = None) -> None:
        self._now = now or (lambda: datetime.now(timezone.utc))
        self._tables: dict[str, list[Row]] = {}
        self._accounts: dict[str, dict[str, Any]] = {}
        self._tokens: dict[str, tuple[str, datetime]] = {}
        self._last_timestamp: datetime | None = None

    def _timestamp(self) -> str:
        # Strictly increasing so "newest first" ordering is deterministic
        current = self._now()
        if self._last_timestamp is not None and current <= self._last_timestamp:
            current = self._last_timestamp + timedelta(microseconds=1)
        self._last_timestamp = current
        return current.isoformat()

    def _table(self, table: str) -> list[Row]:
        return self._tables.setdefault(table, [])

    def _prepare_row(self, table: str, row: Row) -> Row:
        stored = copy.deepcopy(row)
        stored.setdefault("id", str(uuid.uuid4()))
        if table == "business_modules":
            stored.setdefault("enabled_at", self._timestamp())
        elif table != "modules":
            stored.setdefault("created_at", self._timestamp())
        return stored

    # Seeding helpers (synchronous so fixtures can call them directly)

    def seed(self, table: str, rows: Row | list[Row]) -> list[Row]:
        """Insert rows without going through the async API."""

        items = rows if isinstance(rows, list) else [rows]
        stored = [self._prepare_row(table, row) for row in items]
        self._table(table).extend(stored)
        return copy.deepcopy(stored)

    def add_account(
        self,
        email: str,
        password: str,
        *,
        full_name: str | None = None,
        role: str = "user",
        business_id: str | None = None,
        is_super_admin: bool = False,
    ) -> AuthUser:
        """Register an auth account and its profile."""

        return self._register(
            email,
            password,
            {
                "full_name": full_name,
                "role": role,
                "business_id": business_id,
                "is_super_admin": is_super_admin,
            },
        )

    def issue_token(self, user_id: str) -> str:
        """Mint a bearer token for an existing account."""

        token = secrets.token_urlsafe(32)
        self._tokens[token] = (user_id, self._now() + timedelta(seconds=TOKEN_TTL_SECONDS))
        return token

    def rows(self, table: str) -> list[Row]:
        return copy.deepcopy(self._table(table))

    def _register(self, email: str, password: str, metadata: dict[str, Any]) -> AuthUser:
        normalized = email.strip().lower()
        if normalized in self._accounts:
            raise ValidationAppError(
                code="user_creation_failed",
                message="A user with this email address has already been registered",
            )

        user_id = str(uuid.uuid4())
        salt = secrets.token_hex(8)
        self._accounts[normalized] = {
            "id": user_id,
            "email": normalized,
            "salt": salt,
            "password_hash": _hash_password(password, salt),
            "user_metadata": dict(metadata),
        }

        profile = {"id": user_id, "email": normalized}
        for column, default in _PROFILE_METADATA_DEFAULTS.items():
            value = metadata.get(column)
            profile[column] = default if value is None else value
        self._table("profiles").append(self._prepare_row("profiles", profile))

        logger.debug("backend.memory_account_created", extra={"email_hash": hash_identifier(normalized)})
        return AuthUser(id=user_id, email=normalized, user_metadata=dict(metadata))

    # AbstractBackend

    async def select(
        self,
        table: str,
        *,
        eq: Filters | None = None,
        neq: Filters | None = None,
        gte: Filters | None = None,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[Row]:
        rows = [row for row in self._table(table) if _matches(row, eq, neq, gte)]
        if order_by:
            present = [r for r in rows if r.get(order_by) is not None]
            missing = [r for r in rows if r.get(order_by) is None]
            present.sort(key=lambda r: r[order_by], reverse=descending)
            rows = present + missing
        if limit is not None:
            rows = rows[:limit]
        return copy.deepcopy(rows)

    async def count(self, table: str, *, eq: Filters | None = None, gte: Filters | None = None) -> int:
        return sum(1 for row in self._table(table) if _matches(row, eq, None, gte))

    async def insert(self, table: str, rows: Row | list[Row]) -> list[Row]:
        return self.seed(table, rows)

    async def update(self, table: str, values: Row, *, eq: Filters) -> list[Row]:
        updated: list[Row] = []
        for row in self._table(table):
            if _matches(row, eq, None, None):
                row.update(copy.deepcopy(values))
                updated.append(row)
        return copy.deepcopy(updated)

    async def delete(self, table: str, *, eq: Filters) -> list[Row]:
        kept: list[Row] = []
        removed: list[Row] = []
        for row in self._table(table):
            (removed if _matches(row, eq, None, None) else kept).append(row)
        self._tables[table] = kept
        for row in removed:
            self._apply_foreign_keys(table, row)
        return removed

    def _apply_foreign_keys(self, table: str, row: Row) -> None:
        for child, column, action in _FOREIGN_KEYS.get(table, ()):
            if action == "cascade":
                self._tables[child] = [r for r in self._table(child) if r.get(column) != row.get("id")]
            else:
                for child_row in self._table(child):
                    if child_row.get(column) == row.get("id"):
                        child_row[column] = None

    async def sign_in_with_password(self, email: str, password: str) -> AuthSession | None:
        account = self._accounts.get(email.strip().lower())
        if account is None:
            return None
        if not secrets.compare_digest(account["password_hash"], _hash_password(password, account["salt"])):
            return None

        token = self.issue_token(account["id"])
        _, expires = self._tokens[token]
        return AuthSession(
            user=AuthUser(id=account["id"], email=account["email"], user_metadata=dict(account["user_metadata"])),
            access_token=token,
            refresh_token=secrets.token_urlsafe(16),
            expires_at=int(expires.timestamp()),
        )

    async def sign_out(self, access_token: str) -> None:
        self._tokens.pop(access_token, None)

    async def get_user(self, access_token: str) -> AuthUser | None:
        entry = self._tokens.get(access_token)
        if entry is None:
            return None
        user_id, expires = entry
        if expires <= self._now():
            self._tokens.pop(access_token, None)
            return None
        for account in self._accounts.values():
            if account["id"] == user_id:
                return AuthUser(id=user_id, email=account["email"], user_metadata=dict(account["user_metadata"]))
        return None

    async def create_user(self, email: str, password: str, metadata: dict[str, Any]) -> AuthUser:
        return self._register(email, password, metadata)
