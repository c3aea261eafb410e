"""Provider factory — selects the active spatial data provider by name.

The factory maintains a registry of known adapters.  New adapters are
registered with ``register_provider``.

Usage::

    from osm_extract.providers.factory import get_provider

    provider = get_provider("overpass")
    collection = await provider.fetch(query)

The provider name is read from the ``SPATIAL_PROVIDER`` environment
variable via ``ExtractConfig.provider``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from osm_extract.models.provider import ProviderConfig
from osm_extract.providers.base import ProviderError, SpatialDataProvider

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)

OVERPASS = "overpass"

# Each entry maps a provider name to a callable that returns the adapter
# *class*, so that adapter dependencies load only when selected.
_ADAPTER_REGISTRY: dict[str, Callable[[], type[SpatialDataProvider]]] = {}


def _register_builtin_adapters() -> None:
    def _overpass() -> type[SpatialDataProvider]:
        from osm_extract.providers.overpass import OverpassAdapter

        return OverpassAdapter

    _ADAPTER_REGISTRY[OVERPASS] = _overpass


def _ensure_registry() -> None:
    """Initialise the adapter registry once (idempotent)."""
    if not _ADAPTER_REGISTRY:
        _register_builtin_adapters()


def register_provider(
    name: str,
    loader: Callable[[], type[SpatialDataProvider]],
) -> None:
    """Register a custom provider adapter.

    Args:
        name: Provider name (e.g. ``"overpass_mirror"``).
        loader: A zero-argument callable that returns the adapter class.

    Raises:
        ValueError: If the name is empty.
    """
    if not name:
        msg = "Provider name must be non-empty"
        raise ValueError(msg)
    _ensure_registry()
    _ADAPTER_REGISTRY[name] = loader
    logger.debug("Registered provider adapter: %s", name)


def get_provider(
    name: str,
    config: ProviderConfig | None = None,
) -> SpatialDataProvider:
    """Create and return a spatial data provider instance.

    Args:
        name: Provider identifier (e.g. ``"overpass"``).
        config: Optional ``ProviderConfig``.  If ``None``, a default config
                with just the provider name is used.

    Raises:
        ProviderError: If the named provider is not registered, or the
            config belongs to another provider.
    """
    _ensure_registry()

    loader = _ADAPTER_REGISTRY.get(name)
    if loader is None:
        available = ", ".join(sorted(_ADAPTER_REGISTRY))
        msg = f"Unknown spatial data provider: {name!r}. Available: {available}"
        raise ProviderError(provider=name, message=msg)

    adapter_cls = loader()

    if config is None:
        config = ProviderConfig(name=name)
    elif config.name != name:
        msg = f"ProviderConfig.name {config.name!r} does not match requested provider {name!r}"
        raise ProviderError(provider=name, message=msg)

    logger.info("Creating spatial data provider: %s", name)
    return adapter_cls(config)


def list_providers() -> list[str]:
    """Return the names of all registered provider adapters."""
    _ensure_registry()
    return sorted(_ADAPTER_REGISTRY)
