"""Pytest configuration and fixtures shared across all test modules.

This file is automatically loaded by pytest before running any tests.
It sets the environment before any settings are imported so developer
.env files never leak into the run, and selects the in-memory backend.
"""

import os

# CRITICAL: Set this before any imports that might load settings
os.environ["TESTING"] = "true"

os.environ.setdefault("APP_BACKEND_PROVIDER", "memory")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("BUNNY_STORAGE_ZONE", "test-zone")
os.environ.setdefault("BUNNY_STORAGE_PASSWORD", "test-storage-password")
os.environ.setdefault("BUNNY_PULL_ZONE", "test-pull")

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.adapters.backend.base import AuthUser
from app.adapters.backend.factory import get_backend
from app.adapters.backend.in_memory import InMemoryBackend
from app.adapters.rate_limit.in_memory import InMemoryLoginRateLimiter
from app.core.app_factory import create_app
from app.core.rate_limit import get_login_rate_limiter
from app.utils.query_cache import QueryCache, get_query_cache

SUPER_ADMIN_EMAIL = "root@console.io"
SUPER_ADMIN_PASSWORD = "Sup3rSecret"


class FakeClock:
    """Deterministic clock used to test expiration logic."""

    def __init__(self, start: float = 1_000_000.0) -> None:
        self.current = start

    def __call__(self) -> float:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += seconds


@pytest.fixture
def backend() -> InMemoryBackend:
    return InMemoryBackend()


@pytest.fixture
def query_cache() -> QueryCache:
    return QueryCache(ttl_seconds=30, max_entries=128)


@pytest.fixture
def login_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def login_limiter(login_clock: FakeClock) -> InMemoryLoginRateLimiter:
    return InMemoryLoginRateLimiter(max_attempts=5, window_seconds=900, block_seconds=900, clock=login_clock)


@pytest.fixture
def app(backend: InMemoryBackend, query_cache: QueryCache, login_limiter: InMemoryLoginRateLimiter) -> FastAPI:
    """Application wired to the in-memory backend, a fresh cache and limiter."""
    application = create_app()
    application.dependency_overrides[get_backend] = lambda: backend
    application.dependency_overrides[get_query_cache] = lambda: query_cache
    application.dependency_overrides[get_login_rate_limiter] = lambda: login_limiter
    return application


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app)


@pytest.fixture
def super_admin(backend: InMemoryBackend) -> AuthUser:
    return backend.add_account(
        SUPER_ADMIN_EMAIL,
        SUPER_ADMIN_PASSWORD,
        full_name="Platform Root",
        is_super_admin=True,
    )


@pytest.fixture
def admin_headers(backend: InMemoryBackend, super_admin: AuthUser) -> dict[str, str]:
    return {"Authorization": f"Bearer {backend.issue_token(super_admin.id)}"}


@pytest.fixture
def business(backend: InMemoryBackend) -> dict:
    return backend.seed(
        "businesses",
        {"name": "Acme Store", "slug": "acme-store", "logo_url": None, "is_active": True},
    )[0]


@pytest.fixture
def modules(backend: InMemoryBackend) -> list[dict]:
    return backend.seed(
        "modules",
        [
            {"name": "Inventory", "description": "Stock tracking", "icon": "box", "is_default": True},
            {"name": "Sales", "description": "Point of sale", "icon": "cart", "is_default": False},
            {"name": "Reports", "description": None, "icon": None, "is_default": False},
        ],
    )
