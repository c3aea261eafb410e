"""SpatialDataProvider abstract base class.

Defines the contract every spatial data adapter implements.  The
session controller interacts exclusively with this interface and never
knows which concrete service is behind it.

Lifecycle:
    1. ``execute(query)`` — run the query remotely, return decoded JSON.
    2. ``fetch(query)``   — ``execute`` followed by ``normalize_osm``.

Concrete adapters only implement ``execute``; normalization is shared.
"""

from __future__ import annotations

import abc
import logging
from typing import TYPE_CHECKING, Any

from osm_extract.activities.normalize_osm import normalize_osm
from osm_extract.core.exceptions import PipelineError

if TYPE_CHECKING:
    from osm_extract.models.feature import FeatureCollection
    from osm_extract.models.provider import ProviderConfig

logger = logging.getLogger("osm_extract.providers.base")


class SpatialDataProvider(abc.ABC):
    """Abstract base class for spatial data adapters.

    Example usage::

        provider = get_provider("overpass")
        collection = await provider.fetch(query)
    """

    def __init__(self, config: ProviderConfig) -> None:
        self._config = config

    @property
    def name(self) -> str:
        """Return the provider name from configuration."""
        return self._config.name

    @property
    def config(self) -> ProviderConfig:
        """Return the provider configuration (read-only)."""
        return self._config

    @abc.abstractmethod
    async def execute(self, query: str) -> dict[str, Any]:
        """Run *query* against the remote service.

        Returns:
            The decoded JSON response object.

        Raises:
            TransportError: On non-success status, timeout, transport
                failure or an undecodable body.  Never retried here.
        """

    async def fetch(self, query: str) -> FeatureCollection:
        """Execute *query* and normalize the response.

        An empty result is a valid, empty ``FeatureCollection``.

        Raises:
            TransportError: If the remote call fails.
            ResponseFormatError: If the response is not an element document.
        """
        payload = await self.execute(query)
        collection = normalize_osm(payload)
        logger.info("Fetch complete | provider=%s | features=%d", self.name, len(collection))
        return collection

    async def aclose(self) -> None:
        """Release network resources held by the adapter."""


# ---------------------------------------------------------------------------
# Provider exceptions
# ---------------------------------------------------------------------------


class ProviderError(PipelineError):
    """Base exception for provider selection and setup errors.

    Attributes:
        provider: Name of the provider that raised the error.
    """

    default_stage = "provider"
    default_code = "PROVIDER_ERROR"

    def __init__(self, provider: str, message: str) -> None:
        self.provider = provider
        super().__init__(message, code=self.default_code, stage=self.default_stage)

    def __str__(self) -> str:
        return f"[{self.provider}] {self.message}"
