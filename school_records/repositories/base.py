from __future__ import annotations

from typing import Any, Callable, Dict, Generic, Iterable, List, Optional, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from school_records.core.errors import ValidationError
from school_records.db.store import RecordStore

ModelT = TypeVar("ModelT", bound=BaseModel)


class BaseRepository(Generic[ModelT]):
    """
    Base class for repositories providing common collection helpers.

    Subclasses set `collection` (the RecordStore collection name) and `model`
    (the pydantic model stored in it). Documents are stored as the model's JSON
    dump and validated back into the model on load.
    """

    collection: str
    model: Type[ModelT]

    def __init__(self, store: RecordStore) -> None:
        self.store = store

    async def load(self) -> List[ModelT]:
        """Load and validate the whole collection."""
        docs = await self.store.load(self.collection)
        return [self.model.model_validate(doc) for doc in docs]

    async def save(self, entities: Iterable[ModelT]) -> None:
        """Replace the whole collection."""
        await self.store.save(self.collection, [e.model_dump(mode="json") for e in entities])

    def build(self, **fields: Any) -> ModelT:
        """Construct a model, turning schema violations into a domain ValidationError."""
        try:
            return self.model.model_validate(fields)
        except PydanticValidationError as exc:
            raise ValidationError(
                f"Invalid {self.collection} record",
                details=exc.errors(include_url=False, include_context=False, include_input=False),
            ) from exc

    def merge(self, entity: ModelT, changes: Dict[str, Any]) -> ModelT:
        """Provided fields overwrite, all others are retained."""
        return self.build(**{**entity.model_dump(), **changes})

    async def get_all(self) -> List[ModelT]:
        return await self.load()

    async def get_by_id(self, entity_id: str) -> Optional[ModelT]:
        for entity in await self.load():
            if entity.id == entity_id:  # type: ignore[attr-defined]
                return entity
        return None

    async def filter(self, predicate: Callable[[ModelT], bool]) -> List[ModelT]:
        return [e for e in await self.load() if predicate(e)]

    async def add(self, entity: ModelT) -> ModelT:
        """Append an entity to the collection."""
        async with self.store.locked(self.collection):
            items = await self.load()
            items.append(entity)
            await self.save(items)
        return entity

    async def replace(
        self, entity_id: str, change: Callable[[ModelT], ModelT]
    ) -> Optional[ModelT]:
        """
        Replace the entity with id by change(entity) and persist.

        Returns the new entity, or None if no entity has that id. change may raise
        to abort; nothing is written in that case.
        """
        async with self.store.locked(self.collection):
            items = await self.load()
            for idx, item in enumerate(items):
                if item.id == entity_id:  # type: ignore[attr-defined]
                    updated = change(item)
                    items[idx] = updated
                    await self.save(items)
                    return updated
        return None

    async def remove(self, entity_id: str) -> bool:
        """Physically delete an entity; False if it did not exist."""
        async with self.store.locked(self.collection):
            items = await self.load()
            kept = [i for i in items if i.id != entity_id]  # type: ignore[attr-defined]
            if len(kept) == len(items):
                return False
            await self.save(kept)
        return True
