"""Tests for export filename generation."""

from __future__ import annotations

import re
from datetime import UTC, datetime

from osm_extract.utils.file_paths import build_export_filename, default_export_name, sanitise_slug


class TestSanitiseSlug:
    def test_lowercases_and_hyphenates(self) -> None:
        assert sanitise_slug("King Road Area") == "king-road-area"

    def test_strips_unsafe_characters(self) -> None:
        assert sanitise_slug("../etc/passwd") == "etcpasswd"

    def test_collapses_hyphens(self) -> None:
        assert sanitise_slug("a -- b") == "a-b"

    def test_empty_falls_back(self) -> None:
        assert sanitise_slug("!!!") == "unknown"

    def test_keeps_non_ascii_letters(self) -> None:
        assert sanitise_slug("طرق الرياض") == "طرق-الرياض"

    def test_custom_fallback(self) -> None:
        assert sanitise_slug("***", fallback="") == ""


class TestDefaultExportName:
    def test_epoch_millis(self) -> None:
        moment = datetime(2025, 10, 18, 0, 0, 0, tzinfo=UTC)
        assert default_export_name(now=moment) == f"osm_extract_{int(moment.timestamp()) * 1000}"

    def test_custom_prefix(self) -> None:
        assert re.fullmatch(r"riyadh_\d{13}", default_export_name("riyadh"))


class TestBuildExportFilename:
    def test_appends_suffix(self) -> None:
        assert build_export_filename("osm_extract_1") == "osm_extract_1.geojson"

    def test_suffix_not_duplicated(self) -> None:
        assert build_export_filename("Roads.GeoJSON") == "roads.geojson"

    def test_unsafe_name_sanitised(self) -> None:
        assert build_export_filename("my/roads") == "myroads.geojson"

    def test_arabic_name_kept(self) -> None:
        assert build_export_filename("مباني") == "مباني.geojson"

    def test_unusable_name_gets_timestamped_default(self) -> None:
        assert re.fullmatch(r"osm_extract_\d{13}\.geojson", build_export_filename("???"))
