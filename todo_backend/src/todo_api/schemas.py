from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


# PUBLIC_INTERFACE
class TodoCreate(BaseModel):
    """
    Schema for creating a new Todo item.

    Any identifier sent by the client (`id` or `_id`) is ignored; the store
    assigns one on insert.
    """

    model_config = ConfigDict(
        extra="ignore",
        json_schema_extra={
            "example": {
                "owner": "Jason",
                "category": "video games",
                "body": "finish quest",
                "status": False,
            }
        },
    )

    owner: str = Field(..., description="Who the todo belongs to")
    category: str = Field(..., description="Free text category of the todo")
    body: str = Field(..., description="What needs to be done")
    status: bool = Field(default=False, description="Completion status flag")


# PUBLIC_INTERFACE
class TodoOut(BaseModel):
    """
    Schema returned by the API for a Todo item.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "588935f57546a2daea44de7c",
                "owner": "Jason",
                "category": "video games",
                "body": "finish quest",
                "status": True,
            }
        }
    )

    id: str = Field(..., description="Hex string of the todo's ObjectId")
    owner: str = Field(..., description="Who the todo belongs to")
    category: str = Field(..., description="Free text category of the todo")
    body: str = Field(..., description="What needs to be done")
    status: bool = Field(..., description="Completion status flag")


# PUBLIC_INTERFACE
class TodoCreated(BaseModel):
    """Response body for a successful create."""

    id: str = Field(..., description="Hex string of the new todo's ObjectId")
