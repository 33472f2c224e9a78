"""Database layer - connection lifecycle, base models, and mixins."""

from inkwell.core.database.base import Base, TimestampMixin, UUIDMixin
from inkwell.core.database.session import Database, get_database, get_db


__all__ = [
    "Base",
    "Database",
    "TimestampMixin",
    "UUIDMixin",
    "get_database",
    "get_db",
]
