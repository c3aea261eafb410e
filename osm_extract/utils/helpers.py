"""Shared helper functions used by the session controller and factory callers."""

from __future__ import annotations

from typing import TYPE_CHECKING

from osm_extract.models.provider import ProviderConfig

if TYPE_CHECKING:
    from osm_extract.core.config import ExtractConfig


def build_provider_config(config: ExtractConfig) -> ProviderConfig:
    """Build a ``ProviderConfig`` for the configured provider.

    Args:
        config: Loaded extraction configuration.

    Returns:
        A populated ``ProviderConfig`` instance.
    """
    return ProviderConfig(
        name=config.provider,
        api_base_url=config.overpass_url,
        http_timeout_s=config.http_timeout_s,
        user_agent=config.user_agent,
    )
