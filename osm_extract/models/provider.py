"""Typed configuration model for spatial data provider adapters.

Design notes:
- Frozen dataclass for immutability; adapters never mutate their config.
- Explicit units on every numeric field.
"""

from __future__ import annotations

from dataclasses import dataclass

from osm_extract.core.constants import DEFAULT_HTTP_TIMEOUT_S


@dataclass(frozen=True, slots=True)
class ProviderConfig:
    """Configuration for a specific spatial data provider.

    Attributes:
        name: Provider name (e.g. ``"overpass"``).
        api_base_url: Endpoint URL.  Empty means the adapter default.
        http_timeout_s: Client-side timeout for one request, in seconds.
        user_agent: ``User-Agent`` header value.
    """

    name: str
    api_base_url: str = ""
    http_timeout_s: float = DEFAULT_HTTP_TIMEOUT_S
    user_agent: str = "osm-extract/0.1"
