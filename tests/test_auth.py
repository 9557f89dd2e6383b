"""Unit tests for bearer token authentication and role checks."""

import asyncio

import pytest

from app.adapters.backend.in_memory import InMemoryBackend
from app.core.auth import (
    get_auth_context,
    parse_bearer_token,
    require_business_admin,
    verify_super_admin,
)
from app.core.errors import AuthenticationAppError, AuthorizationAppError


class TestParseBearerToken:
    """Test Authorization header parsing."""

    def test_extracts_token(self) -> None:
        assert parse_bearer_token("Bearer abc.def") == "abc.def"

    def test_scheme_is_case_insensitive(self) -> None:
        assert parse_bearer_token("bearer abc") == "abc"

    @pytest.mark.parametrize("header", [None, "", "Bearer", "Bearer   ", "Basic abc", "abc"])
    def test_rejects_other_headers(self, header) -> None:
        assert parse_bearer_token(header) is None


def _resolve(backend: InMemoryBackend, header: str | None):
    return asyncio.run(get_auth_context(authorization=header, backend=backend))


class TestGetAuthContext:
    """Test token resolution against the backend."""

    def test_missing_token_is_401(self, backend: InMemoryBackend) -> None:
        with pytest.raises(AuthenticationAppError) as exc_info:
            _resolve(backend, None)

        assert exc_info.value.code == "not_authenticated"
        assert exc_info.value.status_code == 401

    def test_unknown_token_is_401(self, backend: InMemoryBackend) -> None:
        with pytest.raises(AuthenticationAppError) as exc_info:
            _resolve(backend, "Bearer not-issued")

        assert exc_info.value.code == "invalid_token"

    def test_account_without_profile_is_403(self, backend: InMemoryBackend) -> None:
        user = backend.add_account("ghost@acme.io", "Passw0rd!")
        asyncio.run(backend.delete("profiles", eq={"id": user.id}))

        with pytest.raises(AuthorizationAppError) as exc_info:
            _resolve(backend, f"Bearer {backend.issue_token(user.id)}")

        assert exc_info.value.code == "access_denied"

    def test_valid_token_loads_profile(self, backend: InMemoryBackend) -> None:
        user = backend.add_account("owner@acme.io", "Passw0rd!", full_name="Owner", role="admin")
        token = backend.issue_token(user.id)

        ctx = _resolve(backend, f"Bearer {token}")

        assert ctx.user_id == user.id
        assert ctx.access_token == token
        assert ctx.profile.role == "admin"
        assert ctx.profile.full_name == "Owner"


class TestRoleChecks:
    """Test super admin and business admin guards."""

    def test_super_admin_passes(self, backend: InMemoryBackend) -> None:
        user = backend.add_account("root@acme.io", "Passw0rd!", is_super_admin=True)
        ctx = _resolve(backend, f"Bearer {backend.issue_token(user.id)}")

        assert asyncio.run(verify_super_admin(ctx)) is ctx

    def test_regular_user_is_rejected_by_super_admin_guard(self, backend: InMemoryBackend) -> None:
        user = backend.add_account("clerk@acme.io", "Passw0rd!", role="admin")
        ctx = _resolve(backend, f"Bearer {backend.issue_token(user.id)}")

        with pytest.raises(AuthorizationAppError) as exc_info:
            asyncio.run(verify_super_admin(ctx))

        assert exc_info.value.code == "access_denied"
        assert exc_info.value.status_code == 403

    def test_business_admin_with_business_passes(self, backend: InMemoryBackend, business: dict) -> None:
        user = backend.add_account("owner@acme.io", "Passw0rd!", role="admin", business_id=business["id"])
        ctx = _resolve(backend, f"Bearer {backend.issue_token(user.id)}")

        assert asyncio.run(require_business_admin(ctx)).profile.business_id == business["id"]

    def test_plain_user_is_rejected(self, backend: InMemoryBackend, business: dict) -> None:
        user = backend.add_account("clerk@acme.io", "Passw0rd!", role="user", business_id=business["id"])
        ctx = _resolve(backend, f"Bearer {backend.issue_token(user.id)}")

        with pytest.raises(AuthorizationAppError) as exc_info:
            asyncio.run(require_business_admin(ctx))

        assert exc_info.value.code == "insufficient_role"

    def test_admin_without_business_is_rejected(self, backend: InMemoryBackend) -> None:
        user = backend.add_account("floating@acme.io", "Passw0rd!", role="admin")
        ctx = _resolve(backend, f"Bearer {backend.issue_token(user.id)}")

        with pytest.raises(AuthorizationAppError) as exc_info:
            asyncio.run(require_business_admin(ctx))

        assert exc_info.value.code == "no_business_assigned"
