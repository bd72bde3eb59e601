"""Rhodibot - Rhodium Standard Repository compliance checker."""

__version__ = "0.3.0"

TOOL_NAME = "rhodibot"
