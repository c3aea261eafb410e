"""OSM Area Extract.

Turns a user-drawn polygon and a set of OpenStreetMap category filters
into an Overpass query, normalizes the returned elements into GeoJSON
features, and exports the result as a standalone ``.geojson`` file.
"""

__version__ = "0.1.0"
