"""Resilient, cache-aware client layer for the EVE Online ESI API."""

__version__ = "0.1.0"
