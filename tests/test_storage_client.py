"""Unit tests for the Bunny storage client and its factory."""

import asyncio

import httpx
import pytest

from app.adapters.storage.bunny import BunnyStorageClient
from app.adapters.storage.factory import create_storage_client
from app.core.config import settings
from app.core.errors import StorageAppError


def _client(handler, **kwargs) -> BunnyStorageClient:
    options = {"storage_zone": "zone", "access_key": "secret", "pull_zone": "pull"}
    options.update(kwargs)
    return BunnyStorageClient(transport=httpx.MockTransport(handler), **options)


class TestUrls:
    def test_default_region(self) -> None:
        client = _client(lambda request: httpx.Response(200))

        assert client.storage_url == "https://storage.bunnycdn.com/zone"
        assert client.cdn_url == "https://pull.b-cdn.net"
        assert client.public_url("app.apk") == "https://pull.b-cdn.net/app.apk"

    def test_regional_endpoint(self) -> None:
        client = _client(lambda request: httpx.Response(200), region="ny")

        assert client.storage_url == "https://ny.storage.bunnycdn.com/zone"

    def test_cdn_url_requires_pull_zone(self) -> None:
        client = _client(lambda request: httpx.Response(200), pull_zone=None)

        with pytest.raises(StorageAppError) as exc_info:
            _ = client.cdn_url

        assert exc_info.value.code == "storage_not_configured"


class TestUpload:
    def test_puts_body_with_access_key(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(201)

        url = asyncio.run(_client(handler).upload("app.apk", b"PK\x03\x04data", content_type="application/zip"))

        assert url == "https://pull.b-cdn.net/app.apk"
        assert seen[0].method == "PUT"
        assert seen[0].headers["AccessKey"] == "secret"
        assert seen[0].headers["Content-Type"] == "application/zip"
        assert seen[0].content == b"PK\x03\x04data"

    def test_rejected_upload_raises(self) -> None:
        client = _client(lambda request: httpx.Response(401, text="Unauthorized"))

        with pytest.raises(StorageAppError) as exc_info:
            asyncio.run(client.upload("app.apk", b"x", content_type="application/zip"))

        assert exc_info.value.code == "storage_upload_failed"
        assert exc_info.value.details == {"status_code": 401}

    def test_network_error_raises(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("unreachable", request=request)

        with pytest.raises(StorageAppError) as exc_info:
            asyncio.run(_client(handler).upload("app.apk", b"x", content_type="application/zip"))

        assert exc_info.value.code == "storage_upload_failed"

    def test_missing_pull_zone_sends_nothing(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(201)

        with pytest.raises(StorageAppError) as exc_info:
            asyncio.run(_client(handler, pull_zone=None).upload("app.apk", b"x", content_type="application/zip"))

        assert exc_info.value.code == "storage_not_configured"
        assert seen == []


class TestDelete:
    def test_successful_delete(self) -> None:
        assert asyncio.run(_client(lambda request: httpx.Response(200)).delete("app.apk")) is True

    def test_missing_file_is_not_an_error(self) -> None:
        assert asyncio.run(_client(lambda request: httpx.Response(404)).delete("app.apk")) is False

    def test_server_error_raises(self) -> None:
        with pytest.raises(StorageAppError) as exc_info:
            asyncio.run(_client(lambda request: httpx.Response(500)).delete("app.apk"))

        assert exc_info.value.code == "storage_delete_failed"


class TestFactory:
    def test_builds_client_from_settings(self) -> None:
        client = create_storage_client()

        assert isinstance(client, BunnyStorageClient)
        assert client.access_key == settings.storage.storage_password

    def test_missing_zone_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(settings.storage, "storage_zone", None)

        with pytest.raises(StorageAppError) as exc_info:
            create_storage_client()

        assert exc_info.value.code == "storage_not_configured"
