from __future__ import annotations

from typing import Any, Dict, Optional

import httpx

from ..config import settings
from ..exceptions import GenerationServiceError
from ..logger import logger


class GenerationClient:
    """POSTs a generation request to the external service and returns the raw body."""

    def __init__(
        self,
        url: str = settings.GENERATION_SERVICE_URL,
        timeout: float = settings.GENERATION_TIMEOUT_SECONDS,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.url = url
        self.timeout = timeout
        self._http_client = http_client

    async def generate(self, payload: Dict[str, Any]) -> str:
        if self._http_client is not None:
            return await self._post(self._http_client, payload)
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await self._post(client, payload)

    async def _post(self, client: httpx.AsyncClient, payload: Dict[str, Any]) -> str:
        logger.info(f"Calling generation service: {self.url}")
        try:
            response = await client.post(
                self.url,
                json=payload,
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
        except httpx.TimeoutException as e:
            raise GenerationServiceError(f"Generation service timed out after {self.timeout:g}s: {e}")
        except httpx.HTTPError as e:
            raise GenerationServiceError(f"Generation service request failed: {e}")

        if not response.is_success:
            raise GenerationServiceError(f"Server responded with status: {response.status_code}")

        logger.debug(f"Generation service answered with {len(response.text)} characters")
        return response.text
