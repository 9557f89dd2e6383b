"""Async HTTP client for the admin API.

Every call returns an ``ApiResponse`` holding either the decoded JSON body
or an ``ApiError``; transport failures are reported the same way, so
callers never need a try/except around a request.

Usage:
    async with AdminApiClient("https://admin.example.com", token=token) as api:
        result = await api.get("/api/businesses")
        if result.error:
            print(get_error_message(result.error))
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Generic, Mapping, TypeVar

import httpx

logger = logging.getLogger(__name__)

T = TypeVar("T")

NETWORK_ERROR = "NETWORK_ERROR"

ERROR_MESSAGES: dict[str, str] = {
    NETWORK_ERROR: "Connection error. Check your internet connection.",
    "UNAUTHORIZED": "You are not authorized to perform this action.",
    "NOT_FOUND": "The requested resource was not found.",
    "VALIDATION_ERROR": "The submitted data is not valid.",
    "SERVER_ERROR": "Server error. Please try again later.",
}


class ApiError(Exception):
    """A failed API call.

    Attributes:
        message: Human-readable message from the error envelope.
        status: HTTP status code, or 0 when the request never completed.
        code: Machine-readable error code, when the server sent one.
    """

    def __init__(self, message: str, status: int, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status = status
        self.code = code

    def __repr__(self) -> str:
        return f"ApiError(message={self.message!r}, status={self.status}, code={self.code!r})"


@dataclass
class ApiResponse(Generic[T]):
    data: T | None = None
    error: ApiError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def get_error_message(error: ApiError) -> str:
    """Map well-known error codes to user-facing text, else use the error's message."""
    if error.code and error.code in ERROR_MESSAGES:
        return ERROR_MESSAGES[error.code]
    return error.message


def _error_from_response(response: httpx.Response, body: Any, default_message: str) -> ApiError:
    code: str | None = None
    message = default_message
    if isinstance(body, Mapping):
        envelope = body.get("error")
        if isinstance(envelope, Mapping):
            message = envelope.get("message") or message
            code = envelope.get("code")
        elif isinstance(envelope, str):
            message = envelope
            code = body.get("code")
        elif isinstance(body.get("detail"), str):
            message = body["detail"]
    return ApiError(message, response.status_code, code)


class AdminApiClient:
    """Thin wrapper over ``httpx.AsyncClient`` speaking the admin API's JSON envelope."""

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        *,
        timeout_seconds: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers=headers,
            timeout=timeout_seconds,
            transport=transport,
        )

    async def __aenter__(self) -> "AdminApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    def set_token(self, token: str | None) -> None:
        if token:
            self._client.headers["Authorization"] = f"Bearer {token}"
        else:
            self._client.headers.pop("Authorization", None)

    async def _send(
        self,
        method: str,
        url: str,
        *,
        default_message: str = "Request failed",
        **kwargs: Any,
    ) -> ApiResponse[Any]:
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("api_client.network_error", extra={"method": method, "url": url, "error_type": type(exc).__name__})
            return ApiResponse(error=ApiError(str(exc) or "Connection error", 0, NETWORK_ERROR))

        try:
            body = response.json() if response.content else None
        except ValueError:
            body = None

        if response.is_error:
            error = _error_from_response(response, body, default_message)
            logger.info(
                "api_client.request_failed",
                extra={"method": method, "url": url, "status": error.status, "error_code": error.code},
            )
            return ApiResponse(error=error)

        return ApiResponse(data=body)

    async def request(self, method: str, url: str, body: Any | None = None, **kwargs: Any) -> ApiResponse[Any]:
        """Send a request with an optional JSON body."""
        if body is not None:
            kwargs["json"] = body
        kwargs.setdefault("headers", {}).setdefault("Content-Type", "application/json")
        return await self._send(method, url, **kwargs)

    async def get(self, url: str, **kwargs: Any) -> ApiResponse[Any]:
        return await self.request("GET", url, **kwargs)

    async def post(self, url: str, body: Any | None = None, **kwargs: Any) -> ApiResponse[Any]:
        return await self.request("POST", url, body, **kwargs)

    async def patch(self, url: str, body: Any | None = None, **kwargs: Any) -> ApiResponse[Any]:
        return await self.request("PATCH", url, body, **kwargs)

    async def put(self, url: str, body: Any | None = None, **kwargs: Any) -> ApiResponse[Any]:
        return await self.request("PUT", url, body, **kwargs)

    async def delete(self, url: str, **kwargs: Any) -> ApiResponse[Any]:
        return await self.request("DELETE", url, **kwargs)

    async def upload_file(
        self,
        url: str,
        *,
        files: Mapping[str, Any],
        data: Mapping[str, Any] | None = None,
    ) -> ApiResponse[Any]:
        """POST a multipart form; httpx sets the multipart Content-Type itself."""
        return await self._send(
            "POST",
            url,
            files=files,
            data=data,
            default_message="File upload failed",
        )
