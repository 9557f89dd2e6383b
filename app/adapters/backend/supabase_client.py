"""Supabase backend adapter.

Table access and the admin auth API go through a service-role client that
bypasses row level security. Password sign-in and the sign-up fallback use
throwaway anon clients, so no user session is ever stored on the shared
client. Every client is built without session persistence or token refresh.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable

from postgrest.exceptions import APIError
from supabase import AsyncClient, AsyncClientOptions, AuthError, acreate_client

from app.adapters.backend.base import AbstractBackend, AuthSession, AuthUser, Filters, Row
from app.core.errors import BackendAppError, ValidationAppError
from app.core.logging import hash_identifier

logger = logging.getLogger(__name__)

ClientFactory = Callable[[str, str], Awaitable[AsyncClient]]


async def create_stateless_client(url: str, key: str) -> AsyncClient:
    """Build a client that neither stores sessions nor schedules token refreshes."""
    return await acreate_client(
        url,
        key,
        options=AsyncClientOptions(persist_session=False, auto_refresh_token=False),
    )


def _to_auth_user(user: Any) -> AuthUser:
    return AuthUser(
        id=str(user.id),
        email=getattr(user, "email", None),
        user_metadata=dict(getattr(user, "user_metadata", None) or {}),
    )


def _apply_filters(query: Any, *, eq: Filters | None = None, neq: Filters | None = None, gte: Filters | None = None) -> Any:
    for column, value in (eq or {}).items():
        query = query.is_(column, "null") if value is None else query.eq(column, value)
    for column, value in (neq or {}).items():
        query = query.neq(column, value)
    for column, value in (gte or {}).items():
        query = query.gte(column, value)
    return query


class SupabaseBackend(AbstractBackend):
    """Backend implementation on top of the async supabase-py client."""

    def __init__(
        self,
        *,
        url: str,
        service_role_key: str,
        anon_key: str,
        client_factory: ClientFactory = create_stateless_client,
    ) -> None:
        """Initialize the adapter; clients are created lazily on first use.

        Args:
            url: Supabase project URL.
            service_role_key: Key used for table access and admin auth calls.
            anon_key: Public key used for password sign-in.
            client_factory: Coroutine building an ``AsyncClient`` from url and key.
        """
        self._url = url
        self._service_role_key = service_role_key
        self._anon_key = anon_key
        self._client_factory = client_factory
        self._admin_client: AsyncClient | None = None
        self._init_lock = asyncio.Lock()

    async def _admin(self) -> AsyncClient:
        if self._admin_client is None:
            async with self._init_lock:
                if self._admin_client is None:
                    self._admin_client = await self._client_factory(self._url, self._service_role_key)
        return self._admin_client

    async def _anon(self) -> AsyncClient:
        return await self._client_factory(self._url, self._anon_key)

    async def _execute(self, query: Any, *, table: str, operation: str) -> Any:
        try:
            return await query.execute()
        except APIError as exc:
            logger.error(
                "backend.query_failed",
                extra={
                    "table": table,
                    "operation": operation,
                    "pg_code": getattr(exc, "code", None),
                    "error_msg": getattr(exc, "message", None) or str(exc),
                },
            )
            raise BackendAppError(
                code="backend_query_failed",
                message=f"Database {operation} on '{table}' failed",
                details={"context": {"table": table, "operation": operation}},
            ) from exc

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
        client = await self._admin()
        query = _apply_filters(client.table(table).select("*"), eq=eq, neq=neq, gte=gte)
        if order_by:
            query = query.order(order_by, desc=descending)
        if limit is not None:
            query = query.limit(limit)
        response = await self._execute(query, table=table, operation="select")
        return list(response.data or [])

    async def count(self, table: str, *, eq: Filters | None = None, gte: Filters | None = None) -> int:
        client = await self._admin()
        query = _apply_filters(
            client.table(table).select("*", count="exact", head=True),
            eq=eq,
            gte=gte,
        )
        response = await self._execute(query, table=table, operation="count")
        return int(response.count or 0)

    async def insert(self, table: str, rows: Row | list[Row]) -> list[Row]:
        client = await self._admin()
        response = await self._execute(client.table(table).insert(rows), table=table, operation="insert")
        return list(response.data or [])

    async def update(self, table: str, values: Row, *, eq: Filters) -> list[Row]:
        client = await self._admin()
        query = _apply_filters(client.table(table).update(values), eq=eq)
        response = await self._execute(query, table=table, operation="update")
        return list(response.data or [])

    async def delete(self, table: str, *, eq: Filters) -> list[Row]:
        client = await self._admin()
        query = _apply_filters(client.table(table).delete(), eq=eq)
        response = await self._execute(query, table=table, operation="delete")
        return list(response.data or [])

    async def sign_in_with_password(self, email: str, password: str) -> AuthSession | None:
        client = await self._anon()
        try:
            response = await client.auth.sign_in_with_password({"email": email, "password": password})
        except AuthError as exc:
            logger.info(
                "backend.sign_in_rejected",
                extra={"email_hash": hash_identifier(email), "error_msg": exc.message},
            )
            return None

        if response.user is None or response.session is None:
            return None

        session = response.session
        return AuthSession(
            user=_to_auth_user(response.user),
            access_token=session.access_token,
            refresh_token=session.refresh_token,
            expires_at=session.expires_at,
        )

    async def sign_out(self, access_token: str) -> None:
        client = await self._admin()
        try:
            await client.auth.admin.sign_out(access_token)
        except AuthError as exc:
            raise BackendAppError(
                code="sign_out_failed",
                message="Could not revoke the session",
            ) from exc

    async def get_user(self, access_token: str) -> AuthUser | None:
        client = await self._admin()
        try:
            response = await client.auth.get_user(access_token)
        except AuthError:
            return None
        if response is None or response.user is None:
            return None
        return _to_auth_user(response.user)

    async def create_user(self, email: str, password: str, metadata: dict[str, Any]) -> AuthUser:
        client = await self._admin()
        try:
            response = await client.auth.admin.create_user(
                {
                    "email": email,
                    "password": password,
                    "email_confirm": True,
                    "user_metadata": metadata,
                }
            )
            return _to_auth_user(response.user)
        except AuthError as exc:
            logger.warning(
                "backend.admin_create_user_failed",
                extra={"email_hash": hash_identifier(email), "error_msg": exc.message},
            )

        anon = await self._anon()
        try:
            signup = await anon.auth.sign_up(
                {"email": email, "password": password, "options": {"data": metadata}}
            )
        except AuthError as exc:
            raise ValidationAppError(code="user_creation_failed", message=exc.message) from exc

        if signup.user is None:
            raise ValidationAppError(
                code="user_creation_failed",
                message="The auth provider did not return the new account",
            )
        return _to_auth_user(signup.user)
