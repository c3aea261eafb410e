"""Extraction pipeline activities.

Each activity is one stage of the region-to-file pipeline:
- build_query: Region + CategoryFilter → Overpass QL
- normalize_osm: raw Overpass JSON → FeatureCollection
- export_geojson: FeatureCollection → GeoJSON file
"""
