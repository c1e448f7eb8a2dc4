from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, AsyncIterator, Dict, List, Mapping, Optional, Sequence

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from .models import CollectionMarker, RecordRow, SessionSlot

logger = logging.getLogger(__name__)

USERS = "users"
COURSES = "courses"
ASSIGNMENTS = "assignments"
GRADES = "grades"
SCHEDULES = "schedules"
DEPARTMENTS = "departments"

COLLECTIONS = (USERS, COURSES, ASSIGNMENTS, GRADES, SCHEDULES, DEPARTMENTS)


class RecordStore:
    """
    Durable keyed-collection persistence.

    Each collection is an ordered sequence of JSON documents that is always read
    and written as a whole: `save` replaces the full collection in a single
    transaction, so a subsequent `load` sees either the old or the new contents,
    never a mix.

    Callers doing read-modify-write must hold `locked(collection)` for the whole
    cycle; the store itself does not serialize writers.
    """

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]) -> None:
        self._session_maker = session_maker
        self._locks: Dict[str, asyncio.Lock] = {}

    def _collection_lock(self, collection: str) -> asyncio.Lock:
        if collection not in self._locks:
            self._locks[collection] = asyncio.Lock()
        return self._locks[collection]

    # PUBLIC_INTERFACE
    @asynccontextmanager
    async def locked(self, collection: str) -> AsyncIterator[None]:
        """Hold the write lock of a collection."""
        async with self._collection_lock(collection):
            yield

    # PUBLIC_INTERFACE
    async def load(self, collection: str) -> List[Dict[str, Any]]:
        """Return the documents of a collection in saved order (empty if never saved)."""
        stmt = (
            select(RecordRow.data)
            .where(RecordRow.collection == collection)
            .order_by(RecordRow.position.asc())
        )
        async with self._session_maker() as session:
            res = await session.execute(stmt)
            return [dict(doc) for doc in res.scalars()]

    # PUBLIC_INTERFACE
    async def save(self, collection: str, documents: Sequence[Dict[str, Any]]) -> None:
        """
        Replace a collection with documents, preserving their order.

        Every document must carry a string 'id' unique within the collection.
        """
        await self.save_many({collection: documents})

    # PUBLIC_INTERFACE
    async def save_many(self, collections: Mapping[str, Sequence[Dict[str, Any]]]) -> None:
        """
        Replace several collections in one transaction.

        Either every collection is replaced or, if any write fails, none is and
        no initialization marker is written.
        """
        async with self._session_maker() as session:
            async with session.begin():
                for collection, documents in collections.items():
                    await self._replace(session, collection, documents)
        for collection, documents in collections.items():
            logger.debug("Saved %d documents to %s", len(documents), collection)

    @staticmethod
    async def _replace(
        session: AsyncSession, collection: str, documents: Sequence[Dict[str, Any]]
    ) -> None:
        rows = [
            RecordRow(collection=collection, id=str(doc["id"]), position=pos, data=dict(doc))
            for pos, doc in enumerate(documents)
        ]
        await session.execute(delete(RecordRow).where(RecordRow.collection == collection))
        session.add_all(rows)
        marker = await session.get(CollectionMarker, collection)
        if marker is None:
            session.add(CollectionMarker(name=collection))
        else:
            marker.updated_at = datetime.now(tz=timezone.utc)

    # PUBLIC_INTERFACE
    async def is_initialized(self, collection: str) -> bool:
        """Whether the collection has been saved at least once, regardless of its contents."""
        async with self._session_maker() as session:
            return (await session.get(CollectionMarker, collection)) is not None

    # Session slots
    async def read_slot(self, name: str) -> Optional[str]:
        async with self._session_maker() as session:
            slot = await session.get(SessionSlot, name)
            return slot.value if slot else None

    async def write_slot(self, name: str, value: str) -> None:
        async with self._session_maker() as session:
            async with session.begin():
                slot = await session.get(SessionSlot, name)
                if slot is None:
                    session.add(SessionSlot(name=name, value=value))
                else:
                    slot.value = value

    async def clear_slot(self, name: str) -> None:
        async with self._session_maker() as session:
            async with session.begin():
                await session.execute(delete(SessionSlot).where(SessionSlot.name == name))
