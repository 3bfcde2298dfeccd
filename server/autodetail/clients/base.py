"""Shared plumbing for outbound API clients."""

from typing import Any, Optional

import httpx


class IntegrationError(Exception):
    """A third-party API call failed.

    ``status_code`` is None when the request never got a response
    (timeout, DNS, connection refused).
    """

    def __init__(
        self,
        service: str,
        message: str,
        status_code: Optional[int] = None,
        errors: Optional[list[dict[str, Any]]] = None,
    ):
        super().__init__(f"{service} API error: {message}")
        self.service = service
        self.message = message
        self.status_code = status_code
        self.errors = errors or []

    @property
    def is_client_error(self) -> bool:
        return self.status_code is not None and 400 <= self.status_code < 500


class BaseAPIClient:
    """Holds the timeout and an optional transport (tests pass ``httpx.MockTransport``)."""

    service_name = "external"

    def __init__(self, timeout: float = 10.0, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.timeout = timeout
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self.transport)

    async def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        try:
            async with self._client() as client:
                return await client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise IntegrationError(self.service_name, str(e) or e.__class__.__name__) from e

    def _json(self, response: httpx.Response) -> dict[str, Any]:
        """Decode a JSON object body; anything else is reported as an IntegrationError."""
        try:
            body = response.json()
        except ValueError as e:
            raise IntegrationError(self.service_name, "Response body is not valid JSON", response.status_code) from e

        if not isinstance(body, dict):
            raise IntegrationError(self.service_name, "Response body is not a JSON object", response.status_code)
        return body
