"""
Licence plate recognition (ALPR) tool.

Sends a base64-encoded image to the ALPR service and returns the registration
ID read from the first detected plate.
"""

import httpx

from chatflow.models.tools import ProcessImageRequest, ProcessImageResponse
from chatflow.utils.errors import ServiceConnectionError, ToolError, ToolInputError
from chatflow.utils.logging import get_logger
from chatflow.webui.client import decode_response, raise_for_status

logger = get_logger(__name__)

SERVICE_NAME = "alpr"
PROCESS_IMAGE_PATH = "/process-base64-image/"


class AlprClient:
    """Client for the ALPR image processing service."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "AlprClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def process_base64_image(self, image_base64: str) -> str:
        """
        Recognise the registration ID in an image.

        Args:
            image_base64: Image as base64 or a "data:image/...;base64," URL

        Returns:
            The registration ID of the first detected plate, whitespace stripped

        Raises:
            ToolInputError: If no image data was supplied
            ServiceConnectionError: If the service cannot be reached
            ServiceStatusError: If the service answers non-2xx
            ToolError: If no plate or no readable text was found
        """
        if not image_base64:
            raise ToolInputError("invalid image data provided to image recognition")

        payload = ProcessImageRequest(image_base64=image_base64)
        logger.debug("Processing image", extra={"image_size": len(image_base64)})

        try:
            response = await self._client.post(PROCESS_IMAGE_PATH, json=payload.model_dump())
        except httpx.TimeoutException as exc:
            raise ServiceConnectionError(
                f"image recognition request timed out: {exc}", service_name=SERVICE_NAME
            ) from exc
        except httpx.TransportError as exc:
            raise ServiceConnectionError(
                f"failed to execute image recognition request: {exc}", service_name=SERVICE_NAME
            ) from exc

        raise_for_status(response, SERVICE_NAME)
        result = decode_response(response, ProcessImageResponse, SERVICE_NAME)

        if not result.alpr_results:
            raise ToolError("image recognition found no licence plate results", tool_name=SERVICE_NAME)

        registration_id = result.alpr_results[0].ocr.text.strip()
        if not registration_id:
            raise ToolError(
                "image recognition result was empty: no readable text", tool_name=SERVICE_NAME
            )

        logger.info("Image processed", extra={"registration_id": registration_id})
        return registration_id
