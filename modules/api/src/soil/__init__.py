"""Soil business-operations API."""

__version__ = "0.1.0"
