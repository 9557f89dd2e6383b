"""Integration tests for business management endpoints."""

import uuid
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from app.adapters.backend.in_memory import InMemoryBackend
from app.core.errors import BackendAppError
from app.utils.query_cache import QueryCache


class TestAccess:
    def test_requires_token(self, client: TestClient) -> None:
        response = client.get("/api/businesses")

        assert response.status_code == 401

    def test_requires_super_admin(self, client: TestClient, backend: InMemoryBackend, business: dict) -> None:
        user = backend.add_account("owner@acme.io", "Passw0rd!", role="admin", business_id=business["id"])
        headers = {"Authorization": f"Bearer {backend.issue_token(user.id)}"}

        response = client.get("/api/businesses", headers=headers)

        assert response.status_code == 403
        assert response.json()["error"]["message"] == "Access denied"


class TestListAndGet:
    def test_lists_newest_first(self, client: TestClient, backend: InMemoryBackend, admin_headers: dict) -> None:
        backend.seed("businesses", {"name": "Older", "slug": "older"})
        backend.seed("businesses", {"name": "Newer", "slug": "newer"})

        response = client.get("/api/businesses", headers=admin_headers)

        assert response.status_code == 200
        assert [b["slug"] for b in response.json()] == ["newer", "older"]

    def test_get_business(self, client: TestClient, admin_headers: dict, business: dict) -> None:
        response = client.get(f"/api/businesses/{business['id']}", headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["slug"] == "acme-store"

    @pytest.mark.parametrize("business_id", [str(uuid.uuid4()), "not-a-uuid"])
    def test_unknown_business_is_404(self, client: TestClient, admin_headers: dict, business_id: str) -> None:
        response = client.get(f"/api/businesses/{business_id}", headers=admin_headers)

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "business_not_found"

    def test_id_with_trailing_newline_never_reaches_backend(
        self, client: TestClient, backend: InMemoryBackend, admin_headers: dict, business: dict
    ) -> None:
        response = client.get(f"/api/businesses/{business['id']}%0A", headers=admin_headers)

        assert response.status_code == 404
        assert "details" not in response.json()["error"]


class TestCreate:
    def test_creates_business_with_modules(
        self, client: TestClient, backend: InMemoryBackend, admin_headers: dict, modules: list[dict]
    ) -> None:
        payload = {
            "name": "  Corner Shop ",
            "slug": "corner-shop",
            "logo_url": "https://cdn.example.com/logo.png",
            "module_ids": [modules[0]["id"], modules[1]["id"]],
        }

        response = client.post("/api/businesses", json=payload, headers=admin_headers)

        assert response.status_code == 201
        created = response.json()
        assert created["name"] == "Corner Shop"
        assert created["is_active"] is True
        links = backend.rows("business_modules")
        assert {link["module_id"] for link in links} == {modules[0]["id"], modules[1]["id"]}
        assert all(link["business_id"] == created["id"] for link in links)

    @pytest.mark.parametrize(
        ("payload", "code"),
        [
            ({"slug": "shop"}, "invalid_name"),
            ({"name": "x" * 101, "slug": "shop"}, "invalid_name"),
            ({"name": "Shop"}, "slug_required"),
            ({"name": "Shop", "slug": "Bad Slug"}, "invalid_slug"),
            ({"name": "Shop", "slug": "shop", "logo_url": "ftp://x/logo.png"}, "invalid_logo_url"),
            ({"name": "Shop", "slug": "shop", "module_ids": [str(uuid.uuid4())]}, "unknown_module"),
        ],
    )
    def test_rejects_invalid_payload(self, client: TestClient, admin_headers: dict, payload: dict, code: str) -> None:
        response = client.post("/api/businesses", json=payload, headers=admin_headers)

        assert response.status_code == 400
        assert response.json()["error"]["code"] == code

    def test_rejects_duplicate_slug(self, client: TestClient, admin_headers: dict, business: dict) -> None:
        response = client.post(
            "/api/businesses",
            json={"name": "Copy", "slug": business["slug"]},
            headers=admin_headers,
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "slug_taken"

    def test_failed_create_inserts_nothing(
        self, client: TestClient, backend: InMemoryBackend, admin_headers: dict
    ) -> None:
        client.post(
            "/api/businesses",
            json={"name": "Shop", "slug": "shop", "module_ids": [str(uuid.uuid4())]},
            headers=admin_headers,
        )

        assert backend.rows("businesses") == []

    def test_failed_module_link_removes_business(
        self,
        client: TestClient,
        backend: InMemoryBackend,
        admin_headers: dict,
        modules: list[dict],
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        original_insert = backend.insert

        async def failing_insert(table, rows):
            if table == "business_modules":
                raise BackendAppError(code="backend_query_failed", message="Database insert on 'business_modules' failed")
            return await original_insert(table, rows)

        monkeypatch.setattr(backend, "insert", failing_insert)

        response = client.post(
            "/api/businesses",
            json={"name": "Shop", "slug": "shop", "module_ids": [modules[0]["id"]]},
            headers=admin_headers,
        )

        assert response.status_code == 500
        assert backend.rows("businesses") == []
        assert backend.rows("business_modules") == []

    def test_create_invalidates_cached_list(self, client: TestClient, admin_headers: dict) -> None:
        assert client.get("/api/businesses", headers=admin_headers).json() == []

        client.post("/api/businesses", json={"name": "Shop", "slug": "shop"}, headers=admin_headers)

        assert [b["slug"] for b in client.get("/api/businesses", headers=admin_headers).json()] == ["shop"]


class TestUpdate:
    def test_updates_only_sent_fields(self, client: TestClient, admin_headers: dict, business: dict) -> None:
        response = client.patch(
            f"/api/businesses/{business['id']}",
            json={"is_active": False},
            headers=admin_headers,
        )

        assert response.status_code == 200
        body = response.json()
        assert body["is_active"] is False
        assert body["name"] == "Acme Store"
        assert body["slug"] == "acme-store"
        assert body["updated_at"] is not None

    def test_clears_logo_with_blank_value(
        self, client: TestClient, backend: InMemoryBackend, admin_headers: dict
    ) -> None:
        row = backend.seed("businesses", {"name": "Logo Co", "slug": "logo-co", "logo_url": "https://x.io/l.png"})[0]

        response = client.patch(f"/api/businesses/{row['id']}", json={"logo_url": ""}, headers=admin_headers)

        assert response.json()["logo_url"] is None

    def test_slug_of_another_business_is_rejected(
        self, client: TestClient, backend: InMemoryBackend, admin_headers: dict, business: dict
    ) -> None:
        other = backend.seed("businesses", {"name": "Other", "slug": "other"})[0]

        response = client.patch(f"/api/businesses/{other['id']}", json={"slug": "acme-store"}, headers=admin_headers)

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "slug_taken"

    def test_keeping_own_slug_is_allowed(self, client: TestClient, admin_headers: dict, business: dict) -> None:
        response = client.patch(
            f"/api/businesses/{business['id']}",
            json={"slug": "acme-store", "name": "Acme"},
            headers=admin_headers,
        )

        assert response.status_code == 200
        assert response.json()["name"] == "Acme"

    @pytest.mark.parametrize(
        ("payload", "code"),
        [
            ({"name": "   "}, "invalid_name"),
            ({"slug": "Not Valid"}, "invalid_slug"),
            ({"logo_url": "nope"}, "invalid_logo_url"),
        ],
    )
    def test_rejects_invalid_values(
        self, client: TestClient, admin_headers: dict, business: dict, payload: dict, code: str
    ) -> None:
        response = client.patch(f"/api/businesses/{business['id']}", json=payload, headers=admin_headers)

        assert response.status_code == 400
        assert response.json()["error"]["code"] == code

    def test_update_refreshes_cached_detail(
        self, client: TestClient, admin_headers: dict, business: dict, query_cache: QueryCache
    ) -> None:
        client.get(f"/api/businesses/{business['id']}", headers=admin_headers)

        client.patch(f"/api/businesses/{business['id']}", json={"name": "Renamed"}, headers=admin_headers)

        assert client.get(f"/api/businesses/{business['id']}", headers=admin_headers).json()["name"] == "Renamed"
        assert query_cache.stats()["invalidations"] >= 1


class TestDelete:
    def test_deletes_business(self, client: TestClient, backend: InMemoryBackend, admin_headers: dict, business: dict) -> None:
        response = client.delete(f"/api/businesses/{business['id']}", headers=admin_headers)

        assert response.status_code == 200
        assert response.json() == {"success": True}
        assert backend.rows("businesses") == []

    def test_delete_detaches_users_and_modules(
        self, client: TestClient, backend: InMemoryBackend, admin_headers: dict, business: dict, modules: list[dict]
    ) -> None:
        backend.seed("business_modules", {"business_id": business["id"], "module_id": modules[0]["id"]})
        clerk = backend.add_account("clerk@acme.io", "Passw0rd!", business_id=business["id"])

        client.delete(f"/api/businesses/{business['id']}", headers=admin_headers)

        assert backend.rows("business_modules") == []
        assert next(p for p in backend.rows("profiles") if p["id"] == clerk.id)["business_id"] is None

    def test_delete_unknown_is_404(self, client: TestClient, admin_headers: dict) -> None:
        response = client.delete(f"/api/businesses/{uuid.uuid4()}", headers=admin_headers)

        assert response.status_code == 404


class TestStats:
    def test_counts_activity(self, client: TestClient, backend: InMemoryBackend, admin_headers: dict, business: dict) -> None:
        bid = business["id"]
        yesterday = (datetime.now(timezone.utc) - timedelta(days=1)).isoformat()
        backend.seed("productos", [{"business_id": bid}, {"business_id": bid}, {"business_id": str(uuid.uuid4())}])
        backend.seed("ventas", [{"business_id": bid}, {"business_id": bid, "created_at": yesterday}])
        backend.add_account("clerk@acme.io", "Passw0rd!", business_id=bid)

        response = client.get(f"/api/businesses/{bid}/stats", headers=admin_headers)

        assert response.status_code == 200
        assert response.json() == {
            "total_products": 2,
            "total_sales": 2,
            "total_users": 1,
            "sales_today": 1,
        }
