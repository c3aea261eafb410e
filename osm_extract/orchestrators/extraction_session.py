"""Extraction session controller — the request lifecycle around one Region.

State machine::

    IDLE ──region set──▶ AWAITING_REGION ──request_extraction──▶ LOADING
    LOADING ──success──▶ READY          LOADING ──failure──▶ FAILED
    READY / FAILED ──region set──▶ AWAITING_REGION (result/error dropped)
    FAILED ──request_extraction──▶ LOADING (user retry)
    READY ──request_extraction / request_export──▶ READY (export, no re-fetch)
    any ──region cleared──▶ IDLE

Only one extraction may be in flight.  A region change that arrives while
``LOADING`` is recorded and applied when the fetch resolves; the outcome
of that fetch is then discarded, so a stale result never becomes visible.

The presentation layer reads everything through ``snapshot()`` or drives
the session with ``dispatch(event)``.
"""

from __future__ import annotations

import enum
import logging
import uuid
from collections.abc import Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Union

from osm_extract.activities.build_query import build_query
from osm_extract.activities.export_geojson import GeoJSONExporter, LocalFileSaver
from osm_extract.core.config import ExtractConfig
from osm_extract.core.constants import CATEGORY_CATALOGUE
from osm_extract.core.exceptions import (
    AlreadyInProgress,
    NoActiveRegionError,
    NothingToExportError,
    PipelineError,
)
from osm_extract.models.filters import CategoryFilter, GeometryFilter
from osm_extract.orchestrators.region_store import RegionStore
from osm_extract.providers.factory import get_provider
from osm_extract.utils.file_paths import default_export_name
from osm_extract.utils.helpers import build_provider_config

if TYPE_CHECKING:
    from osm_extract.activities.export_geojson import ExportResult, FileSaver
    from osm_extract.models.feature import FeatureCollection
    from osm_extract.models.region import Region
    from osm_extract.providers.base import SpatialDataProvider

logger = logging.getLogger("osm_extract.orchestrators.extraction_session")


class SessionState(enum.Enum):
    """Lifecycle state of an extraction session."""

    IDLE = "idle"
    AWAITING_REGION = "awaiting_region"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class RegionSet:
    """A Region was drawn or edited."""

    region: Region


@dataclass(frozen=True, slots=True)
class RegionCleared:
    """The active Region was removed."""


@dataclass(frozen=True, slots=True)
class RequestExtraction:
    """The user asked for extraction (or download, once ready)."""


@dataclass(frozen=True, slots=True)
class RequestExport:
    """The user asked to save the current result."""

    name: str = ""


SessionEvent = Union[RegionSet, RegionCleared, RequestExtraction, RequestExport]


@dataclass(frozen=True, slots=True)
class SessionSnapshot:
    """Read-only view of a session for the presentation layer.

    Attributes:
        state: Current lifecycle state.
        region: Region the state refers to, if any.
        collection: Result, present only in ``READY``.
        error: Failure cause, present only in ``FAILED``.
        last_export: Most recent export of the current result.
    """

    state: SessionState
    region: Region | None = None
    collection: FeatureCollection | None = None
    error: PipelineError | None = None
    last_export: ExportResult | None = None

    @property
    def is_empty_result(self) -> bool:
        """``True`` when the extraction succeeded but found nothing."""
        return self.state is SessionState.READY and self.collection is not None and self.collection.is_empty


class ExtractionSession:
    """Owns one user's Region, query, and result.

    Example usage::

        session = ExtractionSession.from_config(ExtractConfig.from_env())
        session.store.finish_drawing([(24.70, 46.60), (24.70, 46.70), (24.80, 46.70)])
        snapshot = await session.request_extraction()
        if snapshot.state is SessionState.READY:
            session.request_export()
    """

    def __init__(
        self,
        provider: SpatialDataProvider,
        *,
        store: RegionStore | None = None,
        exporter: GeoJSONExporter | None = None,
        categories: CategoryFilter | None = None,
        geometry_filter: GeometryFilter | None = None,
        config: ExtractConfig | None = None,
        session_id: str = "",
    ) -> None:
        self._provider = provider
        self._store = store if store is not None else RegionStore()
        self._config = config if config is not None else ExtractConfig()
        self._exporter = (
            exporter if exporter is not None else GeoJSONExporter(LocalFileSaver(self._config.export_dir))
        )
        self._categories = categories if categories is not None else CategoryFilter()
        self._geometry_filter = geometry_filter if geometry_filter is not None else GeometryFilter()
        self._session_id = session_id or uuid.uuid4().hex

        self._region: Region | None = self._store.active_region
        self._state = SessionState.AWAITING_REGION if self._region else SessionState.IDLE
        self._collection: FeatureCollection | None = None
        self._error: PipelineError | None = None
        self._last_export: ExportResult | None = None

        # Bumped on every region change; a fetch whose generation is stale
        # resolves into the pending region instead of READY/FAILED.
        self._generation = 0
        self._pending_region: Region | None = None

        self._unsubscribe = self._store.subscribe(self._on_region_changed)

    @classmethod
    def from_config(
        cls,
        config: ExtractConfig,
        *,
        store: RegionStore | None = None,
        saver: FileSaver | None = None,
    ) -> ExtractionSession:
        """Build a session wired to the configured provider and export directory."""
        provider = get_provider(config.provider, build_provider_config(config))
        exporter = GeoJSONExporter(saver if saver is not None else LocalFileSaver(config.export_dir))
        return cls(
            provider,
            store=store,
            exporter=exporter,
            categories=CategoryFilter.of(config.default_categories),
            config=config,
        )

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def session_id(self) -> str:
        return self._session_id

    @property
    def store(self) -> RegionStore:
        return self._store

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def region(self) -> Region | None:
        return self._region

    @property
    def collection(self) -> FeatureCollection | None:
        return self._collection

    @property
    def error(self) -> PipelineError | None:
        return self._error

    @property
    def categories(self) -> CategoryFilter:
        return self._categories

    @property
    def geometry_filter(self) -> GeometryFilter:
        return self._geometry_filter

    @property
    def category_catalogue(self) -> tuple[str, ...]:
        """Category keys offered to the user; any other key is accepted too."""
        return CATEGORY_CATALOGUE

    def snapshot(self) -> SessionSnapshot:
        """Return an immutable view of the current session."""
        return SessionSnapshot(
            state=self._state,
            region=self._region,
            collection=self._collection,
            error=self._error,
            last_export=self._last_export,
        )

    # ------------------------------------------------------------------
    # Filters
    # ------------------------------------------------------------------

    def set_categories(self, categories: CategoryFilter | Iterable[str]) -> None:
        """Select category keys for the next extraction.

        A held result stays valid; only a Region change invalidates it.

        Raises:
            InvalidFilterError: If a key is blank.
        """
        if not isinstance(categories, CategoryFilter):
            categories = CategoryFilter.of(categories)
        self._categories = categories

    def set_geometry_filter(self, geometry_filter: GeometryFilter) -> None:
        """Select the geometry kinds kept from the next extraction."""
        self._geometry_filter = geometry_filter

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    async def dispatch(self, event: SessionEvent) -> SessionSnapshot:
        """Apply one event and return the resulting snapshot.

        Raises:
            TypeError: If *event* is not a known session event.
        """
        if isinstance(event, RegionSet):
            self._on_region_changed(event.region)
        elif isinstance(event, RegionCleared):
            self._on_region_changed(None)
        elif isinstance(event, RequestExtraction):
            await self.request_extraction()
        elif isinstance(event, RequestExport):
            self.request_export(event.name)
        else:
            msg = f"Unknown session event: {type(event).__name__}"
            raise TypeError(msg)
        return self.snapshot()

    async def request_extraction(self) -> SessionSnapshot:
        """Fetch features for the active Region, or export a ready result.

        A transport failure does not raise: it moves the session to
        ``FAILED`` with the error attached.

        Raises:
            AlreadyInProgress: If an extraction is already in flight.
            NoActiveRegionError: If no Region is set.
        """
        if self._state is SessionState.LOADING:
            msg = "An extraction is already in progress"
            raise AlreadyInProgress(msg, correlation_id=self._session_id)

        if self._state is SessionState.READY:
            self.request_export()
            return self.snapshot()

        region = self._region
        if region is None:
            msg = "Draw a region before requesting an extraction"
            raise NoActiveRegionError(msg, correlation_id=self._session_id)

        query = build_query(region, self._categories, timeout_s=self._config.query_timeout_s)
        generation = self._generation
        self._error = None
        self._transition(SessionState.LOADING)

        try:
            collection = await self._provider.fetch(query)
        except PipelineError as exc:
            if not exc.correlation_id:
                exc.correlation_id = self._session_id
            self._resolve_failure(generation, exc)
        except BaseException:
            self._abort(generation)
            raise
        else:
            self._resolve_success(generation, collection)
        return self.snapshot()

    def request_export(self, name: str = "") -> ExportResult:
        """Export the ready result without re-fetching.

        Raises:
            NothingToExportError: If the session is not ``READY``.
            ExportError: If serialisation fails.
        """
        if self._state is not SessionState.READY or self._collection is None:
            msg = f"Nothing to export in state {self._state.value}"
            raise NothingToExportError(msg, correlation_id=self._session_id)

        export_name = name or default_export_name(self._config.export_prefix)
        result = self._exporter.export(self._collection, export_name)
        self._last_export = result
        return result

    async def aclose(self) -> None:
        """Detach from the store and release provider resources."""
        self._unsubscribe()
        await self._provider.aclose()

    # ------------------------------------------------------------------
    # Internal transitions
    # ------------------------------------------------------------------

    def _on_region_changed(self, region: Region | None) -> None:
        self._generation += 1
        if self._state is SessionState.LOADING:
            self._pending_region = region
            logger.info(
                "Region change deferred until fetch resolves | session=%s | cleared=%s",
                self._session_id,
                region is None,
            )
            return
        self._adopt_region(region)

    def _adopt_region(self, region: Region | None) -> None:
        self._region = region
        self._pending_region = None
        self._collection = None
        self._error = None
        self._last_export = None
        self._transition(SessionState.AWAITING_REGION if region is not None else SessionState.IDLE)

    def _discard_if_stale(self, generation: int) -> bool:
        if generation == self._generation:
            return False
        logger.info("Discarding stale extraction outcome | session=%s", self._session_id)
        self._adopt_region(self._pending_region)
        return True

    def _resolve_failure(self, generation: int, error: PipelineError) -> None:
        if self._discard_if_stale(generation):
            return
        self._collection = None
        self._error = error
        logger.warning(
            "Extraction failed | session=%s | code=%s | %s",
            self._session_id,
            error.code,
            error.message,
        )
        self._transition(SessionState.FAILED)

    def _resolve_success(self, generation: int, collection: FeatureCollection) -> None:
        if self._discard_if_stale(generation):
            return
        self._collection = collection.filter_geometry(self._geometry_filter)
        self._last_export = None
        if self._collection.is_empty:
            logger.info("Extraction returned no features | session=%s", self._session_id)
        self._transition(SessionState.READY)

    def _abort(self, generation: int) -> None:
        """Leave ``LOADING`` after an unexpected exception or cancellation."""
        if not self._discard_if_stale(generation):
            self._transition(SessionState.AWAITING_REGION)

    def _transition(self, new_state: SessionState) -> None:
        if new_state is self._state:
            return
        logger.info(
            "Session state | session=%s | %s -> %s",
            self._session_id,
            self._state.value,
            new_state.value,
        )
        self._state = new_state
