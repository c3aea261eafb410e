"""Stateful coordinators.

- region_store: The single active Region and its drawing sub-state
- extraction_session: The single-flight extraction lifecycle
"""
