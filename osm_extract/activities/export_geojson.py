"""Export activity — serialise a FeatureCollection to a GeoJSON file.

This activity takes a normalized collection and a name, builds the
pretty-printed GeoJSON document through the pydantic schema in
``models.geojson``, and hands the UTF-8 bytes to a host ``FileSaver``.

Saving is the host's concern: a saver failure propagates unchanged,
only a serialisation failure is reported as ``ExportError``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

from pydantic import ValidationError as PydanticValidationError

from osm_extract.core.exceptions import ExportError
from osm_extract.models.geojson import GeoJSONFeatureCollection
from osm_extract.utils.file_paths import build_export_filename

if TYPE_CHECKING:
    from osm_extract.models.feature import FeatureCollection

logger = logging.getLogger("osm_extract.activities.export_geojson")

GEOJSON_MEDIA_TYPE = "application/geo+json"


class FileSaver(Protocol):
    """Host file-save primitive (download dialog, disk, object store...)."""

    def save(self, filename: str, data: bytes) -> str:
        """Persist *data* under *filename* and return where it went."""
        ...


@dataclass(frozen=True, slots=True)
class ExportResult:
    """Outcome of one export.

    Attributes:
        filename: Sanitised ``.geojson`` filename.
        location: Saver-specific location (path, key, ...).
        feature_count: Number of exported features.
        size_bytes: Size of the encoded document.
        media_type: Content type of the document.
    """

    filename: str
    location: str
    feature_count: int
    size_bytes: int
    media_type: str = GEOJSON_MEDIA_TYPE


class LocalFileSaver:
    """Writes exports into a local directory, creating it if needed."""

    def __init__(self, directory: str | Path = ".") -> None:
        self._directory = Path(directory)

    @property
    def directory(self) -> Path:
        return self._directory

    def save(self, filename: str, data: bytes) -> str:
        self._directory.mkdir(parents=True, exist_ok=True)
        target = self._directory / filename
        target.write_bytes(data)
        return str(target)


class InMemoryFileSaver:
    """Keeps exports in a dict; useful for previews and tests."""

    def __init__(self) -> None:
        self.files: dict[str, bytes] = {}

    def save(self, filename: str, data: bytes) -> str:
        self.files[filename] = data
        return f"memory://{filename}"


def serialise_collection(collection: FeatureCollection, *, indent: int = 2) -> bytes:
    """Encode *collection* as pretty-printed UTF-8 GeoJSON.

    Raises:
        ExportError: If a feature cannot be represented as GeoJSON.
    """
    try:
        document = GeoJSONFeatureCollection.from_collection(collection)
        return document.to_json(indent=indent).encode("utf-8")
    except (PydanticValidationError, TypeError, ValueError) as exc:
        msg = f"Cannot serialise feature collection: {exc}"
        raise ExportError(msg) from exc


class GeoJSONExporter:
    """Serialises collections and hands them to a ``FileSaver``."""

    def __init__(self, saver: FileSaver | None = None) -> None:
        self._saver: FileSaver = saver if saver is not None else LocalFileSaver()

    @property
    def saver(self) -> FileSaver:
        return self._saver

    def export(self, collection: FeatureCollection, name: str) -> ExportResult:
        """Serialise *collection* and save it as ``<name>.geojson``.

        Raises:
            ExportError: If serialisation fails.
        """
        data = serialise_collection(collection)
        filename = build_export_filename(name)
        location = self._saver.save(filename, data)

        logger.info(
            "Export written | file=%s | location=%s | features=%d | bytes=%d",
            filename,
            location,
            len(collection),
            len(data),
        )
        return ExportResult(
            filename=filename,
            location=location,
            feature_count=len(collection),
            size_bytes=len(data),
        )
