from __future__ import annotations

import re
from typing import Any, Dict, Iterable, List, Optional

from bson import ObjectId
from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.collection import Collection
from pymongo.database import Database

from .models import TodoEntity, document_from_fields, entity_from_document
from .repositories import SORTABLE_FIELDS, TodoQuery, TodoRepository
from .schemas import TodoCreate
from .settings import Settings

COLLECTION_NAME = "todos"


# PUBLIC_INTERFACE
def get_database(settings: Settings) -> Database:
    """Connect to the MongoDB server named in settings and return its database."""
    client: MongoClient = MongoClient(settings.mongo_addr)
    return client[settings.mongo_db]


def build_filter(q: TodoQuery) -> Dict[str, Any]:
    """
    Translate a TodoQuery into a MongoDB filter document.

    Each supplied constraint becomes one top-level key, which MongoDB ANDs
    together. Substring constraints are escaped so user text never acts as
    a regular expression.
    """
    flt: Dict[str, Any] = {}
    if q.owner is not None:
        flt["owner"] = {"$regex": re.escape(q.owner)}
    if q.category is not None:
        flt["category"] = q.category
    if q.body is not None:
        flt["body"] = {"$regex": re.escape(q.body)}
    if q.status is not None:
        flt["status"] = q.status
    return flt


class MongoTodoRepository(TodoRepository):
    """
    Repository over the `todos` collection of a MongoDB database.
    """

    def __init__(self, db: Database) -> None:
        self._collection: Collection = db[COLLECTION_NAME]

    def insert(self, data: TodoCreate) -> str:
        doc = document_from_fields(data.owner, data.category, data.body, data.status)
        result = self._collection.insert_one(doc)
        return str(result.inserted_id)

    def insert_many(self, items: Iterable[TodoCreate]) -> List[str]:
        docs = [document_from_fields(i.owner, i.category, i.body, i.status) for i in items]
        if not docs:
            return []
        result = self._collection.insert_many(docs)
        return [str(oid) for oid in result.inserted_ids]

    def get(self, todo_id: str) -> Optional[TodoEntity]:
        doc = self._collection.find_one({"_id": ObjectId(todo_id)})
        return entity_from_document(doc) if doc else None

    def list(self, query: Optional[TodoQuery] = None) -> List[TodoEntity]:
        q = query or TodoQuery()
        cursor = self._collection.find(build_filter(q))
        if q.sort_by in SORTABLE_FIELDS:
            cursor = cursor.sort(q.sort_by, DESCENDING if q.descending else ASCENDING)
        return [entity_from_document(doc) for doc in cursor]
