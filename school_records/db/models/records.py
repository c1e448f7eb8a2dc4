from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import JSON, DateTime, Index, Integer, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from school_records.db.base import Base


class RecordRow(Base):
    """One entity document inside a named collection."""
    __tablename__ = "records"
    __table_args__ = (Index("ix_records_collection_position", "collection", "position"),)

    collection: Mapped[str] = mapped_column(Text, primary_key=True)
    id: Mapped[str] = mapped_column(Text, primary_key=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    data: Mapped[dict] = mapped_column(JSON, nullable=False)


class CollectionMarker(Base):
    """Marks a collection as initialized (saved at least once), even if empty."""
    __tablename__ = "collections"

    name: Mapped[str] = mapped_column(Text, primary_key=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )


class SessionSlot(Base):
    """Named single-value slot; 'current_user' holds the logged-in user id."""
    __tablename__ = "session_slots"

    name: Mapped[str] = mapped_column(Text, primary_key=True)
    value: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
