"""
HTTP client for the Open WebUI chat backend.

WebUIClient performs single JSON (or multipart) calls: it serializes the
request body, attaches the bearer token, and classifies the outcome:

- no response (refused, timed out, TLS failure) -> ServiceConnectionError
- non-2xx status -> ServiceStatusError (status code and raw body in the message)
- body that does not decode into the expected shape -> ResponseShapeError

Request and response bodies are logged at DEBUG level.
"""

import json
from pathlib import Path
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from chatflow.utils.errors import (
    ResponseShapeError,
    ServiceConnectionError,
    ServiceStatusError,
)
from chatflow.utils.logging import get_logger
from chatflow.utils.request_context import get_request_id

logger = get_logger(__name__)

T = TypeVar("T")

SERVICE_NAME = "open-webui"


def dump_payload(payload: BaseModel | dict[str, Any] | None) -> Any:
    """Convert a request payload to JSON-ready data using wire aliases."""
    if payload is None:
        return None
    if isinstance(payload, BaseModel):
        return payload.model_dump(mode="json", by_alias=True, exclude_none=True)
    return payload


def decode_response(
    response: httpx.Response,
    response_type: type[T] | TypeAdapter[T],
    service_name: str,
) -> T:
    """
    Decode a response body into ``response_type``.

    Raises:
        ResponseShapeError: If the body is not JSON or does not match the type
    """
    adapter = response_type if isinstance(response_type, TypeAdapter) else TypeAdapter(response_type)
    try:
        return adapter.validate_json(response.content)
    except PydanticValidationError as exc:
        raise ResponseShapeError(
            f"failed to decode response: {exc.error_count()} validation error(s): "
            f"{exc.errors(include_url=False)} (Response Body: {response.text})",
            service_name=service_name,
        ) from exc


def raise_for_status(response: httpx.Response, service_name: str) -> None:
    """Raise ServiceStatusError for any non-2xx response."""
    if not response.is_success:
        raise ServiceStatusError(
            service_name=service_name,
            status_code=response.status_code,
            body=response.text,
        )


class WebUIClient:
    """
    Client for the Open WebUI REST API.

    Holds one ``httpx.AsyncClient`` for the lifetime of the application; use
    ``async with`` or call ``aclose()`` to release its connections.
    """

    def __init__(
        self,
        base_url: str,
        api_token: str,
        timeout: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            base_url: Open WebUI root URL (e.g. "http://localhost:3000")
            api_token: Bearer token sent on every call
            timeout: Per-request timeout in seconds
            transport: Optional transport override (tests use httpx.MockTransport)
        """
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={"Authorization": f"Bearer {api_token}", "Accept": "application/json"},
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "WebUIClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _send(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        headers = {}
        request_id = get_request_id()
        if request_id:
            headers["X-Request-ID"] = request_id
        try:
            return await self._client.request(method, path, headers=headers, **kwargs)
        except httpx.TimeoutException as exc:
            raise ServiceConnectionError(
                f"API request to {self.base_url}{path} timed out: {exc}",
                service_name=SERVICE_NAME,
            ) from exc
        except httpx.TransportError as exc:
            raise ServiceConnectionError(
                f"API request failed to {self.base_url}{path}: {exc}",
                service_name=SERVICE_NAME,
            ) from exc

    async def call_api(
        self,
        method: str,
        path: str,
        payload: BaseModel | dict[str, Any] | None = None,
        response_type: type[T] | TypeAdapter[T] | None = None,
    ) -> T | None:
        """
        Perform one JSON call against the backend.

        Args:
            method: HTTP method
            path: Path relative to the base URL (e.g. "/api/v1/chats/new")
            payload: Request body; pydantic models are dumped by alias without nulls
            response_type: Type to decode the body into, or None to ignore the body

        Returns:
            Decoded response, or None when no response_type was given

        Raises:
            ServiceConnectionError: If no response was received
            ServiceStatusError: If the status is not 2xx
            ResponseShapeError: If the body does not decode into response_type
        """
        body = dump_payload(payload)
        logger.debug(
            "Open WebUI request",
            extra={
                "method": method,
                "path": path,
                "body": json.dumps(body) if body is not None else None,
            },
        )

        response = await self._send(method, path, json=body)

        logger.debug(
            "Open WebUI response",
            extra={
                "method": method,
                "path": path,
                "status_code": response.status_code,
                "body": response.text,
            },
        )

        raise_for_status(response, SERVICE_NAME)

        if response_type is None:
            return None
        return decode_response(response, response_type, SERVICE_NAME)

    async def upload_file(
        self,
        path: str,
        file_path: Path,
        response_type: type[T] | TypeAdapter[T],
        content_type: str = "text/markdown",
        filename: str | None = None,
    ) -> T:
        """
        Upload a local file as multipart/form-data under the ``file`` field.

        ``filename`` is the name sent in the form part; it defaults to the
        local file's name. The file handle is closed before this method
        returns, on every path.
        """
        upload_name = filename or file_path.name
        logger.debug(
            "Open WebUI file upload",
            extra={"path": path, "file": str(file_path), "upload_name": upload_name},
        )

        with file_path.open("rb") as handle:
            response = await self._send(
                "POST",
                path,
                files={"file": (upload_name, handle, content_type)},
            )

        logger.debug(
            "Open WebUI file upload response",
            extra={"path": path, "status_code": response.status_code, "body": response.text},
        )

        raise_for_status(response, SERVICE_NAME)
        return decode_response(response, response_type, SERVICE_NAME)
