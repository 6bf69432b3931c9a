"""
Figma service implementation for Matura.
Fetches design-file documents over the Figma REST API.
"""

from typing import Any, Dict

import httpx

from matura.errors import DesignTokenUnavailable
from matura.services.ai_service import DesignTokenProvider
from matura.utils.constants import FIGMA_API_BASE_URL, FIGMA_PROVIDER, FIGMA_TIMEOUT_SECONDS
from matura.utils.logger import logger


class FigmaService(DesignTokenProvider):
    """Figma REST client."""

    name = FIGMA_PROVIDER

    def __init__(self, base_url: str = FIGMA_API_BASE_URL, timeout: float = FIGMA_TIMEOUT_SECONDS):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    async def fetch(self, file_id: str, api_key: str) -> Dict[str, Any]:
        """
        Fetch a Figma file document.

        Args:
            file_id: Figma file key
            api_key: Personal access token

        Returns:
            The decoded file document

        Raises:
            DesignTokenUnavailable: on any non-2xx status or transport error
        """
        url = f"{self.base_url}/files/{file_id}"
        logger.debug(f"Fetching Figma file {file_id}")

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            try:
                response = await client.get(url, headers={"X-Figma-Token": api_key})
            except httpx.HTTPError as exc:
                raise DesignTokenUnavailable(f"Figma request failed: {exc}") from exc

        if not response.is_success:
            raise DesignTokenUnavailable(
                f"Figma returned status {response.status_code}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as exc:
            raise DesignTokenUnavailable(f"Figma response is not JSON: {exc}") from exc
