# shipengine_rates/external/shipengine.py
import logging
from typing import Any, Dict, Optional

import httpx

from shipengine_rates.core.config import settings
from shipengine_rates.core.exceptions import (
    ExternalServiceClientError,
    ExternalServiceException,
    ExternalServiceServerError,
)

logger = logging.getLogger(__name__)

API_KEY_HEADER = "API-Key"


class ShipEngineClient:
    """Single request/response calls to the ShipEngine REST API.

    There is no retry here; a failed call is reported to the caller once.
    """

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None):
        self.base_url = base_url or settings.shipengine_base_url
        self.timeout = timeout or settings.request_timeout

    def get_route_url(self, route: str) -> str:
        return f"{self.base_url.rstrip('/')}/{route.lstrip('/')}"

    async def send(
        self,
        method: str,
        route: str,
        api_key: Optional[str],
        data: Optional[Any] = None,
    ) -> Any:
        headers = {
            API_KEY_HEADER: api_key or "",
            "Content-Type": "application/json",
        }
        return await self._make_request(method, route, data, headers)

    async def _make_request(
        self,
        method: str,
        route: str,
        data: Optional[Any],
        headers: Dict[str, str],
    ) -> Any:
        """Make authenticated request to ShipEngine, JSON error bodies are returned as is"""
        url = self.get_route_url(route)
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                if method.upper() == "GET":
                    response = await client.get(url, params=data, headers=headers)
                elif method.upper() == "POST":
                    response = await client.post(url, json=data, headers=headers)
                else:
                    raise ValueError(f"Unsupported HTTP method: {method}")

                logger.debug(
                    "ShipEngine response (%s) from %s: status=%s",
                    method,
                    url,
                    response.status_code,
                )

                try:
                    result = response.json()
                except ValueError:
                    result = None

                if 200 <= response.status_code < 300:
                    return result if result is not None else {}

                # ShipEngine describes failures in an ``errors`` list,
                # the normalizer turns it into the error message
                if isinstance(result, dict) and result.get("errors"):
                    logger.warning(
                        "ShipEngine error (%s %s): status=%s", method, route, response.status_code
                    )
                    return result

                if 400 <= response.status_code < 500:
                    logger.warning(
                        "ShipEngine client error (%s %s): %s", method, route, response.text
                    )
                    raise ExternalServiceClientError(
                        f"Client error: {response.status_code} {response.text}"
                    )

                logger.error(
                    "ShipEngine server error (%s %s): %s", method, route, response.text
                )
                raise ExternalServiceServerError(
                    f"Server error: {response.status_code} {response.text}"
                )
        except httpx.RequestError as e:
            logger.exception(f"Request error for {method} {route}")
            raise ExternalServiceException(f"Request failed: {str(e)}")
