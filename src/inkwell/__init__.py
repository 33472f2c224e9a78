"""Inkwell - multi-tenant content platform backend."""

__version__ = "1.0.0"
