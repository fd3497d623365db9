from __future__ import annotations

from typing import Any, Dict, Mapping, Optional, TypedDict

from bson import ObjectId


# PUBLIC_INTERFACE
class TodoEntity(TypedDict):
    """
    A lightweight domain model representing a Todo item, independent of the
    document store's native representation.

    Fields:
    - id: 24-character hex string of the store-generated ObjectId
    - owner: Free text name of whoever owns the todo
    - category: Free text category (e.g. "video games")
    - body: Free text description of the task
    - status: Boolean "done" flag
    """

    id: str
    owner: str
    category: str
    body: str
    status: bool


# Document fields other than _id, in the order they are written.
TODO_FIELDS = ("owner", "category", "body", "status")


# PUBLIC_INTERFACE
def entity_from_document(doc: Mapping[str, Any]) -> TodoEntity:
    """
    Convert a stored document into a TodoEntity.

    Missing text fields become "" and a missing status becomes False, so
    documents inserted by other tools still deserialize.
    """
    return {
        "id": str(doc["_id"]),
        "owner": str(doc.get("owner") or ""),
        "category": str(doc.get("category") or ""),
        "body": str(doc.get("body") or ""),
        "status": bool(doc.get("status", False)),
    }


# PUBLIC_INTERFACE
def document_from_fields(
    owner: str, category: str, body: str, status: bool, _id: Optional[ObjectId] = None
) -> Dict[str, Any]:
    """Build the store document for a todo. `_id` is only set when given."""
    doc: Dict[str, Any] = {
        "owner": owner,
        "category": category,
        "body": body,
        "status": status,
    }
    if _id is not None:
        doc["_id"] = _id
    return doc
