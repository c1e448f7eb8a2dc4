"""
ORM models backing the record store.

Entities are not mapped one table per type: each named collection (users,
courses, ...) is stored as ordered rows of JSON documents, plus a marker table
of initialized collections and the single-slot session table.

Importing this package ensures model classes are registered with the Base
metadata for Alembic and runtime usage.
"""

from .records import (  # noqa: F401
    CollectionMarker,
    RecordRow,
    SessionSlot,
)
