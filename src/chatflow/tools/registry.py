"""
Vehicle registry lookup (DVSA vehicle enquiry).

Resolves a registration ID to an owner ID. Calls go through EgressSafeTransport,
so the registry must be addressed by a literal IP; hostname destinations fail
with EgressBlockedError before any DNS lookup.
"""

from urllib.parse import quote

import httpx

from chatflow.models.tools import VehicleResponse
from chatflow.tools.egress import EgressSafeTransport
from chatflow.utils.errors import ServiceConnectionError, ToolError, ToolInputError
from chatflow.utils.logging import get_logger
from chatflow.webui.client import decode_response, raise_for_status

logger = get_logger(__name__)

SERVICE_NAME = "vehicle-registry"


def map_registration_to_owner_id(registration_number: str) -> str:
    """
    Map a registration number to an owner ID.

    The registry does not expose owners, so the owner ID is derived from the
    registration number. Returns "" for numbers too short to be valid.
    """
    if len(registration_number) > 3:
        return "OWNER-" + registration_number.upper()
    return ""


def vehicle_path(registration_id: str) -> str:
    return f"vehicle-enquiry/v1/vehicles/{quote(registration_id, safe='')}"


class RegistryClient:
    """Client for the vehicle registry, restricted to literal IP destinations."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        connect_timeout: float = 5.0,
        keepalive: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            base_url: Registry root URL, e.g. "http://127.0.0.1/"
            timeout: Per-request timeout in seconds
            connect_timeout: Connect timeout applied by the egress dialer
            keepalive: Keep-alive expiry for pooled connections
            transport: Transport override; defaults to EgressSafeTransport
        """
        self.base_url = base_url.rstrip("/") + "/"
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport
            or EgressSafeTransport(connect_timeout=connect_timeout, keepalive=keepalive),
        )

    async def __aenter__(self) -> "RegistryClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def get_owner_id(self, registration_id: str) -> str:
        """
        Look up the owner ID for a registration.

        Raises:
            ToolInputError: If registration_id is empty
            EgressBlockedError: If the registry is configured by hostname
            ServiceConnectionError: If the registry cannot be reached
            ServiceStatusError: If the registry answers non-2xx
            ResponseShapeError: If the vehicle record cannot be decoded
            ToolError: If the registration cannot be mapped to an owner
        """
        registration_id = registration_id.strip()
        if not registration_id:
            raise ToolInputError("vehicle lookup received empty registration ID")

        path = vehicle_path(registration_id)
        logger.info("Vehicle lookup", extra={"registration_id": registration_id})

        try:
            response = await self._client.get(path)
        except httpx.TimeoutException as exc:
            raise ServiceConnectionError(
                f"vehicle registry request timed out: {exc}", service_name=SERVICE_NAME
            ) from exc
        except httpx.TransportError as exc:
            raise ServiceConnectionError(
                f"failed to execute vehicle registry request: {exc}", service_name=SERVICE_NAME
            ) from exc

        raise_for_status(response, SERVICE_NAME)
        vehicle = decode_response(response, VehicleResponse, SERVICE_NAME)

        owner_id = map_registration_to_owner_id(vehicle.registration_number)
        if not owner_id:
            raise ToolError(
                f"failed to map registration {vehicle.registration_number} to an owner ID",
                tool_name=SERVICE_NAME,
            )

        logger.info(
            "Vehicle details retrieved",
            extra={"registration_id": registration_id, "owner_id": owner_id},
        )
        return owner_id
