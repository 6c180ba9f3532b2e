"""Bundled clinical reference data (JSON)."""
