from __future__ import annotations

from school_records.db.store import RecordStore


class BaseService:
    """
    Base class for services. Holds the record store for use across multiple repositories.

    Services keep business logic, role checks and orchestration, delegating data
    access to repositories.
    """

    def __init__(self, store: RecordStore) -> None:
        self.store = store
