"""Packaged JSON Schemas for rhodibot artifacts."""
