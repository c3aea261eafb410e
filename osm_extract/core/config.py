"""Extraction configuration loaded from environment variables.

All configuration values have sensible defaults so a session can be
created without any environment at all. ``from_env()`` validates
ranges and raises ``ConfigValidationError`` at startup instead of
letting a bad timeout surface as a confusing network failure later.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from osm_extract.core.constants import (
    DEFAULT_EXPORT_PREFIX,
    DEFAULT_HTTP_TIMEOUT_S,
    DEFAULT_OVERPASS_URL,
    DEFAULT_QUERY_TIMEOUT_S,
)
from osm_extract.core.exceptions import PipelineError


class ConfigValidationError(PipelineError):
    """Raised when configuration values are out of valid range.

    Attributes:
        key: The configuration key that failed validation.
        value: The invalid value.
        message: Human-readable description of the valid range.
    """

    default_stage = "config"
    default_code = "CONFIG_VALIDATION_FAILED"

    def __init__(self, key: str, value: object, message: str) -> None:
        self.key = key
        self.value = value
        super().__init__(f"Invalid configuration {key}={value!r}: {message}")


@dataclass(frozen=True, slots=True)
class ExtractConfig:
    """Immutable extraction configuration.

    Attributes:
        overpass_url: Overpass interpreter endpoint.
        query_timeout_s: Server-side timeout written into every query header.
        http_timeout_s: Client-side HTTP timeout for one fetch.
        provider: Active spatial data provider name.
        export_dir: Directory used by the local file saver.
        export_prefix: Prefix for generated export filenames.
        default_categories: Category keys preselected for a new session.
        user_agent: ``User-Agent`` header sent to the Overpass API.
    """

    overpass_url: str = DEFAULT_OVERPASS_URL
    query_timeout_s: int = DEFAULT_QUERY_TIMEOUT_S
    http_timeout_s: float = DEFAULT_HTTP_TIMEOUT_S
    provider: str = "overpass"
    export_dir: str = "."
    export_prefix: str = DEFAULT_EXPORT_PREFIX
    default_categories: tuple[str, ...] = field(default_factory=tuple)
    user_agent: str = "osm-extract/0.1"

    @classmethod
    def from_env(cls) -> ExtractConfig:
        """Load and validate configuration from environment variables.

        Raises:
            ConfigValidationError: If a numeric value is out of range
                or a required string value is empty.
            ValueError: If a numeric environment variable cannot be
                parsed (e.g. ``HTTP_TIMEOUT_S=abc``).
        """
        categories = os.getenv("DEFAULT_CATEGORIES", "")
        config = cls(
            overpass_url=os.getenv("OVERPASS_API_URL", DEFAULT_OVERPASS_URL),
            query_timeout_s=int(os.getenv("OVERPASS_QUERY_TIMEOUT_S", str(DEFAULT_QUERY_TIMEOUT_S))),
            http_timeout_s=float(os.getenv("HTTP_TIMEOUT_S", str(DEFAULT_HTTP_TIMEOUT_S))),
            provider=os.getenv("SPATIAL_PROVIDER", "overpass"),
            export_dir=os.getenv("EXPORT_DIR", "."),
            export_prefix=os.getenv("EXPORT_PREFIX", DEFAULT_EXPORT_PREFIX),
            default_categories=tuple(c.strip() for c in categories.split(",") if c.strip()),
            user_agent=os.getenv("USER_AGENT", "osm-extract/0.1"),
        )
        _validate(config)
        return config


def _validate(config: ExtractConfig) -> None:
    """Validate configuration ranges.  Raises ``ConfigValidationError``."""
    if config.query_timeout_s <= 0:
        raise ConfigValidationError(
            "OVERPASS_QUERY_TIMEOUT_S",
            config.query_timeout_s,
            "must be > 0 (seconds)",
        )

    if config.http_timeout_s <= 0:
        raise ConfigValidationError(
            "HTTP_TIMEOUT_S",
            config.http_timeout_s,
            "must be > 0 (seconds)",
        )

    if not config.overpass_url.startswith(("http://", "https://")):
        raise ConfigValidationError(
            "OVERPASS_API_URL",
            config.overpass_url,
            "must be an http(s) URL",
        )

    if not config.provider:
        raise ConfigValidationError(
            "SPATIAL_PROVIDER",
            config.provider,
            "must not be empty",
        )

    if not config.export_prefix:
        raise ConfigValidationError(
            "EXPORT_PREFIX",
            config.export_prefix,
            "must not be empty",
        )
