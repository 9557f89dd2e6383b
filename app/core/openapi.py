"""OpenAPI metadata and customization utilities.

Enriches the generated schema with:
- A bearer token security scheme (``Authorization: Bearer <token>``)
- Tags metadata
- ``security: []`` on the public endpoints (health, login, APK download)

This keeps documentation concerns decoupled from the app factory.
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import FastAPI

PUBLIC_PATH_SUFFIXES = ("/health", "/api/auth/login", "/api/download")

TAGS_METADATA = [
    {"name": "Auth", "description": "Super admin sign-in and sign-out."},
    {"name": "Businesses", "description": "Tenant management and activity counters."},
    {"name": "Users", "description": "Accounts assigned to each business."},
    {"name": "Modules", "description": "Feature modules and per-business toggles."},
    {"name": "App distribution", "description": "Publishing and downloading the mobile app package."},
    {"name": "Dashboard", "description": "Platform overview."},
    {"name": "Profile", "description": "The signed-in user's own profile."},
    {"name": "Health", "description": "Liveness checks."},
]


def apply_openapi_customizations(app: FastAPI) -> None:
    """Patch FastAPI's OpenAPI generation to add tags and bearer security.

    All operations require the bearer token by default; public endpoints
    are exempted by setting ``security: []``.
    """

    original_openapi = app.openapi

    def custom_openapi() -> Dict[str, Any]:
        if app.openapi_schema:
            return app.openapi_schema

        schema = original_openapi()

        components = schema.setdefault("components", {})
        security_schemes = components.setdefault("securitySchemes", {})
        security_schemes.setdefault(
            "BearerAuth",
            {
                "type": "http",
                "scheme": "bearer",
                "description": "Access token returned by POST /api/auth/login.",
            },
        )
        schema.setdefault("security", [{"BearerAuth": []}])

        tags = schema.setdefault("tags", [])
        existing_tag_names = {t.get("name") for t in tags}
        for tag in TAGS_METADATA:
            if tag["name"] not in existing_tag_names:
                tags.append(tag)

        for path, methods in schema.get("paths", {}).items():
            if path.endswith(PUBLIC_PATH_SUFFIXES):
                for method_obj in methods.values():
                    if isinstance(method_obj, dict):
                        method_obj["security"] = []

        app.openapi_schema = schema
        return schema

    app.openapi = custom_openapi  # type: ignore[assignment]
