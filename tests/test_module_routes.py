"""Integration tests for the module catalog and per-business toggles."""

import uuid

from fastapi.testclient import TestClient

from app.adapters.backend.in_memory import InMemoryBackend


class TestCatalog:
    def test_lists_modules_by_name(self, client: TestClient, admin_headers: dict, modules: list[dict]) -> None:
        response = client.get("/api/modules", headers=admin_headers)

        assert response.status_code == 200
        assert [m["name"] for m in response.json()] == ["Inventory", "Reports", "Sales"]
        assert response.json()[0]["is_default"] is True

    def test_requires_super_admin(self, client: TestClient, backend: InMemoryBackend) -> None:
        user = backend.add_account("clerk@acme.io", "Passw0rd!")

        response = client.get("/api/modules", headers={"Authorization": f"Bearer {backend.issue_token(user.id)}"})

        assert response.status_code == 403


class TestBusinessModules:
    def _url(self, business_id: str, module_id: str | None = None) -> str:
        base = f"/api/businesses/{business_id}/modules"
        return f"{base}/{module_id}" if module_id else base

    def test_flags_enabled_modules(
        self, client: TestClient, backend: InMemoryBackend, admin_headers: dict, business: dict, modules: list[dict]
    ) -> None:
        backend.seed("business_modules", {"business_id": business["id"], "module_id": modules[1]["id"]})

        response = client.get(self._url(business["id"]), headers=admin_headers)

        assert response.status_code == 200
        enabled = {m["name"]: m["enabled"] for m in response.json()}
        assert enabled == {"Inventory": False, "Reports": False, "Sales": True}

    def test_enable_is_idempotent(
        self, client: TestClient, backend: InMemoryBackend, admin_headers: dict, business: dict, modules: list[dict]
    ) -> None:
        url = self._url(business["id"], modules[0]["id"])

        first = client.put(url, headers=admin_headers)
        second = client.put(url, headers=admin_headers)

        assert first.status_code == 200
        assert second.json()["enabled"] is True
        assert len(backend.rows("business_modules")) == 1

    def test_enable_refreshes_cached_status(
        self, client: TestClient, admin_headers: dict, business: dict, modules: list[dict]
    ) -> None:
        client.get(self._url(business["id"]), headers=admin_headers)

        client.put(self._url(business["id"], modules[2]["id"]), headers=admin_headers)

        statuses = client.get(self._url(business["id"]), headers=admin_headers).json()
        assert next(m for m in statuses if m["name"] == "Reports")["enabled"] is True

    def test_disable_removes_link(
        self, client: TestClient, backend: InMemoryBackend, admin_headers: dict, business: dict, modules: list[dict]
    ) -> None:
        backend.seed("business_modules", {"business_id": business["id"], "module_id": modules[0]["id"]})

        response = client.delete(self._url(business["id"], modules[0]["id"]), headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["enabled"] is False
        assert backend.rows("business_modules") == []

    def test_unknown_module_is_404(self, client: TestClient, admin_headers: dict, business: dict) -> None:
        for module_id in (str(uuid.uuid4()), "inventory"):
            response = client.put(self._url(business["id"], module_id), headers=admin_headers)

            assert response.status_code == 404
            assert response.json()["error"]["code"] == "module_not_found"

    def test_unknown_business_is_404(self, client: TestClient, admin_headers: dict, modules: list[dict]) -> None:
        response = client.put(self._url(str(uuid.uuid4()), modules[0]["id"]), headers=admin_headers)

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "business_not_found"
