from __future__ import annotations

from fastapi import APIRouter

from ..controller import TodoController
from ..repositories import TodoRepository


# PUBLIC_INTERFACE
def build_router(repo: TodoRepository) -> APIRouter:
    """
    Create the todos router, with every route served by a TodoController
    bound to `repo`.
    """
    router = APIRouter(tags=["todos"])
    TodoController(repo).add_routes(router)
    return router
