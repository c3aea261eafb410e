"""Build query activity — translate a Region and filters into Overpass QL.

The query is a pure function of its inputs: the same region and filter
always produce the same string, and nothing here touches the network.

Shape of the generated query::

    [out:json][timeout:60];
    (
      nwr["building"](poly:"lat lon lat lon ...");
      nwr["highway"](poly:"lat lon lat lon ...");
    );
    out body;
    >;
    out skel qt;

``out body`` returns the matched elements with their tags; the ``>``
recursion followed by ``out skel qt`` adds the member nodes and ways
needed to resolve way and relation geometry.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from osm_extract.core.constants import DEFAULT_QUERY_TIMEOUT_S

if TYPE_CHECKING:
    from osm_extract.models.filters import CategoryFilter
    from osm_extract.models.region import Region

logger = logging.getLogger("osm_extract.activities.build_query")

# Overpass element selector covering nodes, ways and relations.
ELEMENT_SELECTOR = "nwr"


def build_query(
    region: Region,
    filters: CategoryFilter,
    *,
    timeout_s: int = DEFAULT_QUERY_TIMEOUT_S,
) -> str:
    """Build an Overpass QL query for every element inside *region*.

    Args:
        region: The validated area of interest.
        filters: Category keys to restrict to. Empty means all elements.
        timeout_s: Server-side evaluation timeout written into the header.

    Returns:
        The Overpass QL query string.
    """
    poly = serialise_poly(region)
    if filters.is_empty:
        clauses = [f'{ELEMENT_SELECTOR}(poly:"{poly}");']
    else:
        clauses = [
            f'{ELEMENT_SELECTOR}["{_escape(key)}"](poly:"{poly}");'
            for key in filters.sorted_keys()
        ]

    body = "\n".join(f"  {clause}" for clause in clauses)
    query = f"[out:json][timeout:{timeout_s}];\n(\n{body}\n);\nout body;\n>;\nout skel qt;\n"

    logger.debug(
        "Query built | region=%s | revision=%d | clauses=%d | vertices=%d",
        region.region_id,
        region.revision,
        len(clauses),
        region.vertex_count,
    )
    return query


def serialise_poly(region: Region) -> str:
    """Serialise the ring as the space-separated ``lat lon`` list of ``poly:``."""
    return " ".join(f"{_format_number(lat)} {_format_number(lon)}" for lat, lon in region.points)


def _format_number(value: float) -> str:
    # OSM stores 7 decimal places; Overpass rejects exponent notation.
    text = f"{float(value):.7f}".rstrip("0").rstrip(".")
    return "0" if text == "-0" else text


def _escape(key: str) -> str:
    return key.replace("\\", "\\\\").replace('"', '\\"')
