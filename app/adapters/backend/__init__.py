"""Backend adapter layer - abstracts over the hosted database and auth provider."""

from app.adapters.backend.base import AbstractBackend, AuthSession, AuthUser
from app.adapters.backend.factory import create_backend, get_backend
from app.adapters.backend.in_memory import InMemoryBackend
from app.adapters.backend.supabase_client import SupabaseBackend

__all__ = [
    "AbstractBackend",
    "AuthSession",
    "AuthUser",
    "InMemoryBackend",
    "SupabaseBackend",
    "create_backend",
    "get_backend",
]
