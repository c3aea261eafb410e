"""Tests for the provider factory and adapter registry."""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any
from unittest.mock import patch

import pytest

from osm_extract.core.config import ExtractConfig
from osm_extract.models.provider import ProviderConfig
from osm_extract.providers import factory
from osm_extract.providers.base import ProviderError, SpatialDataProvider
from osm_extract.providers.factory import OVERPASS, get_provider, list_providers, register_provider
from osm_extract.providers.overpass import OverpassAdapter
from osm_extract.utils.helpers import build_provider_config


class _EchoProvider(SpatialDataProvider):
    async def execute(self, query: str) -> dict[str, Any]:
        return {"elements": []}


@pytest.fixture(autouse=True)
def _isolated_registry() -> Iterator[None]:
    with patch.dict(factory._ADAPTER_REGISTRY):
        yield


class TestGetProvider:
    def test_overpass_registered_by_default(self) -> None:
        assert OVERPASS in list_providers()

    def test_returns_overpass_adapter(self) -> None:
        provider = get_provider("overpass")
        assert isinstance(provider, OverpassAdapter)
        assert provider.name == "overpass"

    def test_passes_config(self) -> None:
        config = ProviderConfig(name="overpass", api_base_url="https://mirror.example/api/interpreter")
        provider = get_provider("overpass", config)
        assert provider.config is config

    def test_unknown_provider_raises(self) -> None:
        with pytest.raises(ProviderError, match="Unknown spatial data provider") as exc_info:
            get_provider("nominatim")
        assert exc_info.value.provider == "nominatim"

    def test_mismatched_config_name_raises(self) -> None:
        with pytest.raises(ProviderError, match="does not match"):
            get_provider("overpass", ProviderConfig(name="other"))


class TestRegisterProvider:
    def test_register_custom_provider(self) -> None:
        register_provider("echo", lambda: _EchoProvider)
        assert "echo" in list_providers()
        assert isinstance(get_provider("echo"), _EchoProvider)

    def test_empty_name_rejected(self) -> None:
        with pytest.raises(ValueError, match="non-empty"):
            register_provider("", lambda: _EchoProvider)

    def test_list_is_sorted(self) -> None:
        register_provider("aaa", lambda: _EchoProvider)
        names = list_providers()
        assert names == sorted(names)


class TestBuildProviderConfig:
    def test_maps_extract_config(self) -> None:
        cfg = ExtractConfig(
            overpass_url="https://mirror.example/api/interpreter",
            http_timeout_s=12.0,
            query_timeout_s=30,
            user_agent="ua/2",
        )
        provider_config = build_provider_config(cfg)
        assert provider_config.name == "overpass"
        assert provider_config.api_base_url == "https://mirror.example/api/interpreter"
        assert provider_config.http_timeout_s == 12.0
        assert provider_config.user_agent == "ua/2"
        assert not hasattr(provider_config, "query_timeout_s")
