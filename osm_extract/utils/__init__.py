"""Filename and configuration helpers."""
