"""Factory and FastAPI dependency for the data/auth backend."""

from __future__ import annotations

import logging

from app.adapters.backend.base import AbstractBackend
from app.adapters.backend.in_memory import InMemoryBackend
from app.adapters.backend.supabase_client import SupabaseBackend
from app.core.config import settings
from app.core.errors import BackendAppError

logger = logging.getLogger(__name__)

_backend: AbstractBackend | None = None


def create_backend() -> AbstractBackend:
    """Instantiate the backend selected by ``APP_BACKEND_PROVIDER``.

    Returns:
        AbstractBackend: Configured backend instance.

    Raises:
        BackendAppError: If the provider is unknown or missing credentials.
    """
    provider = settings.app.backend_provider.lower()

    if provider == "supabase":
        cfg = settings.supabase
        if not (cfg.url and cfg.service_role_key and cfg.anon_key):
            raise BackendAppError(
                code="backend_not_configured",
                message="Supabase backend requires SUPABASE_URL, SUPABASE_SERVICE_ROLE_KEY and SUPABASE_ANON_KEY",
            )
        return SupabaseBackend(
            url=cfg.url,
            service_role_key=cfg.service_role_key,
            anon_key=cfg.anon_key,
        )

    if provider == "memory":
        logger.warning("backend.in_memory_selected", extra={"provider": provider})
        return InMemoryBackend()

    raise BackendAppError(
        code="backend_unknown_provider",
        message=f"Unknown backend provider: '{provider}'. Supported providers: supabase, memory",
    )


async def get_backend() -> AbstractBackend:
    """FastAPI dependency returning the process-wide backend instance."""

    global _backend
    if _backend is None:
        _backend = create_backend()
    return _backend


async def close_backend() -> None:
    global _backend
    if _backend is not None:
        await _backend.aclose()
        _backend = None
