"""Backend interfaces for table access and authentication.

Services talk to the hosted database/auth provider only through
``AbstractBackend`` so the production client can be swapped for the
in-memory one in local runs and tests.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Mapping

Row = dict[str, Any]
Filters = Mapping[str, Any]


@dataclass(frozen=True)
class AuthUser:
    """Authenticated account as reported by the auth provider."""

    id: str
    email: str | None
    user_metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class AuthSession:
    """Session issued by a successful password sign-in.

    Attributes:
        user: The signed-in account.
        access_token: Bearer token for subsequent requests.
        refresh_token: Token to renew the session, when issued.
        expires_at: UNIX epoch seconds when the access token expires.
    """

    user: AuthUser
    access_token: str
    refresh_token: str | None = None
    expires_at: int | None = None


class AbstractBackend(ABC):
    """Interface for the tenant data and auth backend.

    Filters are plain mappings of column to value: ``eq`` matches equality
    (``None`` matches NULL), ``neq`` inequality and ``gte`` lower bounds.
    """

    @abstractmethod
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
        """Return rows of ``table`` matching all filters."""
        raise NotImplementedError

    @abstractmethod
    async def count(
        self,
        table: str,
        *,
        eq: Filters | None = None,
        gte: Filters | None = None,
    ) -> int:
        """Return the number of rows matching all filters."""
        raise NotImplementedError

    @abstractmethod
    async def insert(self, table: str, rows: Row | list[Row]) -> list[Row]:
        """Insert one or many rows and return them as stored."""
        raise NotImplementedError

    @abstractmethod
    async def update(self, table: str, values: Row, *, eq: Filters) -> list[Row]:
        """Update rows matching ``eq`` and return the updated rows."""
        raise NotImplementedError

    @abstractmethod
    async def delete(self, table: str, *, eq: Filters) -> list[Row]:
        """Delete rows matching ``eq`` and return the deleted rows."""
        raise NotImplementedError

    @abstractmethod
    async def sign_in_with_password(self, email: str, password: str) -> AuthSession | None:
        """Exchange credentials for a session; None when they are rejected."""
        raise NotImplementedError

    @abstractmethod
    async def sign_out(self, access_token: str) -> None:
        """Revoke the session behind ``access_token``."""
        raise NotImplementedError

    @abstractmethod
    async def get_user(self, access_token: str) -> AuthUser | None:
        """Resolve a bearer token to its account; None when invalid or expired."""
        raise NotImplementedError

    @abstractmethod
    async def create_user(self, email: str, password: str, metadata: dict[str, Any]) -> AuthUser:
        """Create a confirmed account whose profile is seeded from ``metadata``.

        Raises:
            ValidationAppError: If the provider rejects the account.
        """
        raise NotImplementedError

    async def aclose(self) -> None:
        """Release network resources, if any."""
        return None
