"""Overpass API adapter.

Concrete ``SpatialDataProvider`` implementation for the public Overpass
API (or any compatible interpreter).  The query is sent as the ``data``
form field of a single POST request; the JSON response is returned
as-is for normalization.

Configuration:
    The interpreter URL defaults to ``https://overpass-api.de/api/interpreter``.
    Override via ``ProviderConfig.api_base_url`` if needed.

Failures are never retried here: a retry is a user action at the
session level.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any

import httpx

from osm_extract.core.constants import DEFAULT_OVERPASS_URL
from osm_extract.core.exceptions import TransportError
from osm_extract.providers.base import SpatialDataProvider

if TYPE_CHECKING:
    from osm_extract.models.provider import ProviderConfig

logger = logging.getLogger(__name__)

# Maximum number of response body characters quoted in error messages.
_ERROR_SNIPPET_CHARS = 200

_RUNTIME_ERROR_PREFIX = "runtime error"


class OverpassAdapter(SpatialDataProvider):
    """Overpass interpreter adapter using ``httpx.AsyncClient``.

    A client may be injected (connection reuse, tests with
    ``httpx.MockTransport``); otherwise one is created per request.
    """

    def __init__(
        self,
        config: ProviderConfig,
        *,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        super().__init__(config)
        self._url = config.api_base_url or DEFAULT_OVERPASS_URL
        self._client = client

    @property
    def url(self) -> str:
        return self._url

    async def execute(self, query: str) -> dict[str, Any]:
        """POST *query* to the interpreter and decode the JSON body.

        Raises:
            TransportError: On non-2xx status, timeout, connection
                failure, a body that is not a JSON object, or a
                ``runtime error`` remark (server-side timeout or
                memory abort).
        """
        started = time.monotonic()
        logger.info("Overpass request | url=%s | query_chars=%d", self._url, len(query))

        if self._client is not None:
            response = await self._post(self._client, query)
        else:
            async with httpx.AsyncClient(
                timeout=self.config.http_timeout_s,
                follow_redirects=True,
            ) as client:
                response = await self._post(client, query)

        try:
            payload = response.json()
        except ValueError as exc:
            msg = f"Overpass returned a non-JSON body: {_snippet(response)}"
            raise TransportError(msg, status_code=response.status_code) from exc

        if not isinstance(payload, dict):
            msg = f"Overpass returned JSON {type(payload).__name__}, expected an object"
            raise TransportError(msg, status_code=response.status_code)

        # Server-side timeouts and memory aborts arrive as 200 with a remark.
        remark = payload.get("remark")
        if isinstance(remark, str) and remark.strip().startswith(_RUNTIME_ERROR_PREFIX):
            msg = f"Overpass aborted the query: {remark.strip()[:_ERROR_SNIPPET_CHARS]}"
            raise TransportError(msg, status_code=response.status_code)

        elements = payload.get("elements")
        logger.info(
            "Overpass response | status=%d | elements=%d | elapsed_s=%.2f",
            response.status_code,
            len(elements) if isinstance(elements, list) else -1,
            time.monotonic() - started,
        )
        return payload

    async def _post(self, client: httpx.AsyncClient, query: str) -> httpx.Response:
        try:
            response = await client.post(
                self._url,
                data={"data": query},
                headers={"User-Agent": self.config.user_agent, "Accept": "application/json"},
                timeout=self.config.http_timeout_s,
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            msg = f"Overpass returned HTTP {status}: {_snippet(exc.response)}"
            raise TransportError(msg, status_code=status) from exc
        except httpx.TimeoutException as exc:
            msg = f"Overpass request timed out after {self.config.http_timeout_s}s"
            raise TransportError(msg) from exc
        except httpx.HTTPError as exc:
            msg = f"Overpass request failed: {exc}"
            raise TransportError(msg) from exc
        return response

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()


def _snippet(response: httpx.Response) -> str:
    text = response.text.strip().replace("\n", " ")
    return text[:_ERROR_SNIPPET_CHARS] or "<empty body>"
