"""Region geometry store — the single active Region and its drawing state.

The drawing tool calls ``start_drawing`` / ``finish_drawing`` /
``edit_active_region`` / ``clear``.  Every successful mutation notifies
subscribers synchronously before the call returns, so a subscriber
(the extraction session) has discarded any stale result before the
caller's next statement runs.

A failed validation leaves the active Region untouched and notifies
nobody.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence

from osm_extract.core.exceptions import NoActiveRegionError
from osm_extract.models.region import Region

logger = logging.getLogger("osm_extract.orchestrators.region_store")

RegionListener = Callable[[Region | None], None]
"""Receives the new active Region, or ``None`` when it was removed."""


class RegionStore:
    """Holds at most one active Region."""

    def __init__(self) -> None:
        self._region: Region | None = None
        self._drawing = False
        self._listeners: list[RegionListener] = []

    @property
    def active_region(self) -> Region | None:
        return self._region

    @property
    def is_drawing(self) -> bool:
        """Whether a drawing gesture is in progress."""
        return self._drawing

    def subscribe(self, listener: RegionListener) -> Callable[[], None]:
        """Register *listener* and return a callable that unregisters it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def start_drawing(self) -> None:
        """Discard the active Region and enter the drawing sub-state.

        No effect if a drawing gesture is already in progress.
        """
        if self._drawing:
            return
        self._drawing = True
        logger.debug("Drawing started | had_region=%s", self._region is not None)
        if self._region is not None:
            self._set(None)

    def finish_drawing(self, points: Iterable[Sequence[float]]) -> Region:
        """Validate *points* and make them the active Region.

        Raises:
            InvalidGeometry: If fewer than 3 points are given or any
                coordinate is out of range.  The active Region is unchanged.
        """
        region = Region.from_points(points)
        self._drawing = False
        self._set(region)
        logger.info(
            "Region drawn | region=%s | vertices=%d",
            region.region_id,
            region.vertex_count,
        )
        return region

    def edit_active_region(self, points: Iterable[Sequence[float]]) -> Region:
        """Replace the active Region's ring, keeping its identity.

        Raises:
            NoActiveRegionError: If there is no active Region to edit.
            InvalidGeometry: If the new ring is invalid.  The active
                Region is unchanged.
        """
        current = self._region
        if current is None:
            msg = "Cannot edit: no active region"
            raise NoActiveRegionError(msg)
        region = Region.from_points(
            points,
            region_id=current.region_id,
            revision=current.revision + 1,
        )
        self._set(region)
        logger.info(
            "Region edited | region=%s | revision=%d | vertices=%d",
            region.region_id,
            region.revision,
            region.vertex_count,
        )
        return region

    def clear(self) -> None:
        """Remove the active Region.  Idempotent."""
        if self._region is None:
            return
        logger.info("Region cleared | region=%s", self._region.region_id)
        self._set(None)

    def _set(self, region: Region | None) -> None:
        self._region = region
        for listener in list(self._listeners):
            listener(region)
