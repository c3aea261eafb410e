"""Deterministic export filename generation.

Generates export filenames of the form::

    {name}.geojson
    osm_extract_{epoch_ms}.geojson     (default name)

Name components are sanitised to slug form: only letters, digits
(any script), ``-`` and ``_`` are allowed.  Spaces become hyphens;
other characters are stripped.
"""

from __future__ import annotations

import re
from datetime import UTC, datetime

from osm_extract.core.constants import DEFAULT_EXPORT_PREFIX, GEOJSON_SUFFIX

_SLUG_RE = re.compile(r"[^\w-]+")


def sanitise_slug(value: str, *, fallback: str = "unknown") -> str:
    """Convert a string to a filesystem-safe slug.

    - Lowercase
    - Spaces → hyphens
    - Keeps Unicode letters and digits, ``-`` and ``_``; strips the rest
    - Collapses consecutive hyphens
    - Returns *fallback* if the result is empty
    """
    slug = value.lower().strip().replace(" ", "-")
    slug = _SLUG_RE.sub("", slug)
    slug = re.sub(r"-{2,}", "-", slug).strip("-")
    return slug if slug else fallback


def default_export_name(
    prefix: str = DEFAULT_EXPORT_PREFIX,
    *,
    now: datetime | None = None,
) -> str:
    """Build a timestamped export name, e.g. ``osm_extract_1760745600000``."""
    moment = now or datetime.now(UTC)
    return f"{prefix}_{int(moment.timestamp() * 1000)}"


def build_export_filename(name: str) -> str:
    """Return the sanitised ``.geojson`` filename for *name*.

    A trailing ``.geojson`` in *name* is not duplicated.  A name with
    nothing usable left after sanitising gets the timestamped default.
    """
    stem = name[: -len(GEOJSON_SUFFIX)] if name.lower().endswith(GEOJSON_SUFFIX) else name
    slug = sanitise_slug(stem, fallback="")
    return f"{slug or default_export_name()}{GEOJSON_SUFFIX}"
