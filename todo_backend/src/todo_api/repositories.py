from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from functools import lru_cache
from threading import RLock
from typing import Dict, Iterable, List, Optional

from bson import ObjectId

from .models import TODO_FIELDS, TodoEntity, document_from_fields, entity_from_document
from .schemas import TodoCreate
from .settings import get_settings

logger = logging.getLogger(__name__)

SORTABLE_FIELDS = frozenset(TODO_FIELDS)


@dataclass(frozen=True)
class TodoQuery:
    """
    Typed filter options for listing todos. None means "no constraint".

    - owner: case-sensitive substring of the owner
    - category: exact category
    - body: case-sensitive substring of the body
    - status: completion flag
    - sort_by: one of SORTABLE_FIELDS, or None for store order
    - descending: reverse the sort (only meaningful with sort_by)
    """
    owner: Optional[str] = None
    category: Optional[str] = None
    body: Optional[str] = None
    status: Optional[bool] = None
    sort_by: Optional[str] = None
    descending: bool = False


# PUBLIC_INTERFACE
class TodoRepository(ABC):
    """Abstract repository contract for todo document stores."""

    @abstractmethod
    def insert(self, data: TodoCreate) -> str:
        """Insert a new todo and return its generated id as a hex string."""

    @abstractmethod
    def insert_many(self, items: Iterable[TodoCreate]) -> List[str]:
        """Insert several todos, returning their generated ids in input order."""

    @abstractmethod
    def get(self, todo_id: str) -> Optional[TodoEntity]:
        """Return the todo whose id equals `todo_id` (a valid ObjectId hex), or None."""

    @abstractmethod
    def list(self, query: Optional[TodoQuery] = None) -> List[TodoEntity]:
        """
        Return all todos matching every constraint in `query`.
        - owner/body: substring containment
        - category/status: equality
        - optional sort by a single field
        """


def _matches(q: TodoQuery, t: TodoEntity) -> bool:
    if q.owner is not None and q.owner not in t["owner"]:
        return False
    if q.category is not None and t["category"] != q.category:
        return False
    if q.body is not None and q.body not in t["body"]:
        return False
    if q.status is not None and t["status"] != q.status:
        return False
    return True


class InMemoryTodoRepository(TodoRepository):
    """
    Thread-safe in-memory repository suitable for testing and default runtime.

    Documents are keyed by ObjectId so ids look exactly like MongoDB's.
    """

    def __init__(self) -> None:
        self._lock = RLock()
        self._docs: Dict[ObjectId, dict] = {}

    def insert(self, data: TodoCreate) -> str:
        oid = ObjectId()
        doc = document_from_fields(data.owner, data.category, data.body, data.status, _id=oid)
        with self._lock:
            self._docs[oid] = doc
        return str(oid)

    def insert_many(self, items: Iterable[TodoCreate]) -> List[str]:
        with self._lock:
            return [self.insert(item) for item in items]

    def get(self, todo_id: str) -> Optional[TodoEntity]:
        with self._lock:
            doc = self._docs.get(ObjectId(todo_id))
            return None if doc is None else entity_from_document(doc)

    def list(self, query: Optional[TodoQuery] = None) -> List[TodoEntity]:
        q = query or TodoQuery()
        with self._lock:
            # Insertion order stands in for the store's natural order
            items = [entity_from_document(d) for d in self._docs.values()]

        items = [t for t in items if _matches(q, t)]
        if q.sort_by in SORTABLE_FIELDS:
            items.sort(key=lambda t: t[q.sort_by], reverse=q.descending)  # type: ignore[literal-required]
        return items

    def count(self) -> int:
        with self._lock:
            return len(self._docs)


# PUBLIC_INTERFACE
@lru_cache(maxsize=1)
def get_repository() -> TodoRepository:
    """
    Return the configured repository based on settings. The instance is
    cached so every request shares one store.
    - memory: InMemoryTodoRepository
    - mongo: MongoTodoRepository (requires pymongo and a reachable server)
    """
    settings = get_settings()
    if settings.persistence_backend == "mongo":
        from .db import MongoTodoRepository, get_database

        logger.info("Using MongoDB backend at %s (db=%s)", settings.mongo_addr, settings.mongo_db)
        return MongoTodoRepository(get_database(settings))
    logger.info("Using in-memory todo backend")
    return InMemoryTodoRepository()
