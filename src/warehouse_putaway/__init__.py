"""Warehouse put-away suggestions, override gate and dock-intake matching."""

__version__ = "0.1.0"
