"""Tests for extraction configuration.

Covers:
- Default values
- Loading from environment variables
- Type coercion (string env vars → numeric fields, comma lists)
- Fail-fast range validation
"""

from __future__ import annotations

import os
from unittest.mock import patch

import pytest

from osm_extract.core.config import ConfigValidationError, ExtractConfig
from osm_extract.core.constants import DEFAULT_OVERPASS_URL


class TestExtractConfigDefaults:
    """Verify default configuration values."""

    def test_default_overpass_url(self) -> None:
        cfg = ExtractConfig()
        assert cfg.overpass_url == DEFAULT_OVERPASS_URL

    def test_default_timeouts(self) -> None:
        cfg = ExtractConfig()
        assert cfg.query_timeout_s == 60
        assert cfg.http_timeout_s == 90.0

    def test_default_provider(self) -> None:
        assert ExtractConfig().provider == "overpass"

    def test_default_export_settings(self) -> None:
        cfg = ExtractConfig()
        assert cfg.export_dir == "."
        assert cfg.export_prefix == "osm_extract"

    def test_default_categories_empty(self) -> None:
        assert ExtractConfig().default_categories == ()


class TestExtractConfigFromEnv:
    """Verify loading from environment variables."""

    def test_loads_from_environment(self) -> None:
        env = {
            "OVERPASS_API_URL": "https://overpass.kumi.systems/api/interpreter",
            "OVERPASS_QUERY_TIMEOUT_S": "120",
            "HTTP_TIMEOUT_S": "30.5",
            "SPATIAL_PROVIDER": "overpass",
            "EXPORT_DIR": "/tmp/exports",
            "EXPORT_PREFIX": "riyadh",
            "DEFAULT_CATEGORIES": "building, highway,,amenity ",
            "USER_AGENT": "test-agent/1.0",
        }
        with patch.dict(os.environ, env, clear=True):
            cfg = ExtractConfig.from_env()

        assert cfg.overpass_url == "https://overpass.kumi.systems/api/interpreter"
        assert cfg.query_timeout_s == 120
        assert cfg.http_timeout_s == 30.5
        assert cfg.export_dir == "/tmp/exports"
        assert cfg.export_prefix == "riyadh"
        assert cfg.default_categories == ("building", "highway", "amenity")
        assert cfg.user_agent == "test-agent/1.0"

    def test_defaults_when_env_missing(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            cfg = ExtractConfig.from_env()
        assert cfg == ExtractConfig()

    def test_frozen_immutability(self) -> None:
        cfg = ExtractConfig()
        with pytest.raises(AttributeError):
            cfg.http_timeout_s = 5.0  # type: ignore[misc]


class TestExtractConfigValidation:
    """Fail-fast range validation in from_env."""

    def test_query_timeout_zero_rejected(self) -> None:
        with (
            patch.dict(os.environ, {"OVERPASS_QUERY_TIMEOUT_S": "0"}, clear=True),
            pytest.raises(ConfigValidationError, match="OVERPASS_QUERY_TIMEOUT_S"),
        ):
            ExtractConfig.from_env()

    def test_http_timeout_negative_rejected(self) -> None:
        with (
            patch.dict(os.environ, {"HTTP_TIMEOUT_S": "-1"}, clear=True),
            pytest.raises(ConfigValidationError, match="must be > 0"),
        ):
            ExtractConfig.from_env()

    def test_non_http_url_rejected(self) -> None:
        with (
            patch.dict(os.environ, {"OVERPASS_API_URL": "ftp://example.com"}, clear=True),
            pytest.raises(ConfigValidationError, match="OVERPASS_API_URL"),
        ):
            ExtractConfig.from_env()

    def test_empty_provider_rejected(self) -> None:
        with (
            patch.dict(os.environ, {"SPATIAL_PROVIDER": ""}, clear=True),
            pytest.raises(ConfigValidationError, match="SPATIAL_PROVIDER"),
        ):
            ExtractConfig.from_env()

    def test_empty_export_prefix_rejected(self) -> None:
        with (
            patch.dict(os.environ, {"EXPORT_PREFIX": ""}, clear=True),
            pytest.raises(ConfigValidationError, match="EXPORT_PREFIX"),
        ):
            ExtractConfig.from_env()

    def test_non_numeric_env_raises_value_error(self) -> None:
        with (
            patch.dict(os.environ, {"HTTP_TIMEOUT_S": "abc"}, clear=True),
            pytest.raises(ValueError),
        ):
            ExtractConfig.from_env()

    def test_error_contains_key_and_value(self) -> None:
        with (
            patch.dict(os.environ, {"OVERPASS_QUERY_TIMEOUT_S": "-5"}, clear=True),
            pytest.raises(ConfigValidationError) as exc_info,
        ):
            ExtractConfig.from_env()
        assert exc_info.value.key == "OVERPASS_QUERY_TIMEOUT_S"
        assert exc_info.value.value == -5
