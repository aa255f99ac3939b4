"""
Boxtal Connect — Boxtal API client
Thin async wrapper around the Boxtal REST API. Failures never raise: they come
back as an ApiResponse whose is_error() is True.
"""
import json
import logging
from dataclasses import dataclass
from typing import Any

import httpx

from config import API_TIMEOUT_SEC, BOXTAL_API_URL

logger = logging.getLogger(__name__)

GET    = "GET"
POST   = "POST"
PUT    = "PUT"
PATCH  = "PATCH"
DELETE = "DELETE"


@dataclass
class ApiResponse:
    status_code: int | None
    body: str = ""
    error: str | None = None

    def is_error(self) -> bool:
        return self.error is not None

    def json(self) -> Any:
        """Decoded body, or None when it is not valid JSON."""
        try:
            return json.loads(self.body)
        except ValueError:
            return None


class BoxtalApiClient:
    def __init__(
        self,
        access_key: str | None = None,
        secret_key: str | None = None,
        base_url: str = BOXTAL_API_URL,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.access_key = access_key
        self.secret_key = secret_key
        self.base_url   = base_url
        self._transport = transport

    def api_url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    async def request(self, method: str, url: str, params: dict | None = None) -> ApiResponse:
        """
        Send a request. GET/DELETE params go in the query string, anything else
        is sent as a JSON body. Basic auth is used when both keys are set.
        """
        auth = None
        if self.access_key and self.secret_key:
            auth = (self.access_key, self.secret_key)

        kwargs: dict[str, Any] = {}
        if method in (GET, DELETE):
            kwargs["params"] = params or {}
        elif params is not None:
            kwargs["json"] = params

        try:
            async with httpx.AsyncClient(
                timeout=API_TIMEOUT_SEC, auth=auth, transport=self._transport
            ) as client:
                resp = await client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            logger.warning("Boxtal API %s %s failed: %s", method, url, e)
            return ApiResponse(status_code=None, error=str(e) or type(e).__name__)

        if resp.is_error:
            logger.warning("Boxtal API %s %s returned %s", method, url, resp.status_code)
            return ApiResponse(
                status_code=resp.status_code,
                body=resp.text,
                error=f"HTTP {resp.status_code}",
            )
        return ApiResponse(status_code=resp.status_code, body=resp.text)


def api_client_factory() -> type[BoxtalApiClient]:
    """FastAPI dependency: the client class routes build their clients with."""
    return BoxtalApiClient
