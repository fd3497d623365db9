from __future__ import annotations

import logging
from typing import Awaitable, Callable, List, Optional

from bson import ObjectId
from fastapi import APIRouter, status
from starlette.concurrency import run_in_threadpool
from starlette.requests import Request
from starlette.responses import Response

from .errors import BadRequestError, NotFoundError
from .repositories import SORTABLE_FIELDS, TodoQuery, TodoRepository
from .schemas import TodoCreate, TodoCreated, TodoOut
from .transport import FastAPIContext, RequestContext

logger = logging.getLogger(__name__)

TODOS_PATH = "/api/todos"

Handler = Callable[[RequestContext], None]


# PUBLIC_INTERFACE
class TodoController:
    """
    Translates todo requests into repository calls and responses.

    Handlers take a RequestContext, write the response through it, and raise
    BadRequestError / NotFoundError for client mistakes. They never catch
    store failures.
    """

    OWNER_KEY = "owner"
    CATEGORY_KEY = "category"
    BODY_KEY = "body"
    STATUS_KEY = "status"
    SORT_BY_KEY = "sortby"
    SORT_ORDER_KEY = "sortorder"

    def __init__(self, repo: TodoRepository) -> None:
        self._repo = repo

    # PUBLIC_INTERFACE
    def get_todo(self, ctx: RequestContext) -> None:
        """
        Respond with the todo named by the `id` path parameter.

        Raises:
            BadRequestError: the id is not a legal ObjectId (store not queried).
            NotFoundError: no todo has that id.
        """
        todo_id = ctx.path_param("id")
        if not ObjectId.is_valid(todo_id):
            logger.info("Rejected malformed todo id %r", todo_id)
            raise BadRequestError("The requested todo id wasn't a legal Mongo Object ID.")

        todo = self._repo.get(todo_id)
        if todo is None:
            raise NotFoundError("The requested todo was not found")
        ctx.json(TodoOut(**todo).model_dump())
        ctx.status(status.HTTP_200_OK)

    # PUBLIC_INTERFACE
    def get_todos(self, ctx: RequestContext) -> None:
        """
        Respond with every todo matching the query-string filters.
        An empty result is still a 200.
        """
        query = self.construct_query(ctx)
        logger.debug("Listing todos with %s", query)
        ctx.json([TodoOut(**t).model_dump() for t in self._repo.list(query)])
        ctx.status(status.HTTP_200_OK)

    # PUBLIC_INTERFACE
    def add_new_todo(self, ctx: RequestContext) -> None:
        """
        Insert the todo described by the request body and respond with its
        new id and 201 Created.
        """
        new_todo = ctx.body_as(TodoCreate)
        new_id = self._repo.insert(new_todo)
        logger.info("Added todo %s (owner=%s)", new_id, new_todo.owner)
        ctx.json(TodoCreated(id=new_id).model_dump())
        ctx.status(status.HTTP_201_CREATED)

    def construct_query(self, ctx: RequestContext) -> TodoQuery:
        """
        Parse the raw query parameters into a TodoQuery.

        Absent or blank parameters impose no constraint. Raises
        BadRequestError for a non-boolean status or an unknown sort option.
        """
        owner = self._text_param(ctx, self.OWNER_KEY)
        category = self._text_param(ctx, self.CATEGORY_KEY)
        body = self._text_param(ctx, self.BODY_KEY)

        todo_status: Optional[bool] = None
        raw_status = self._text_param(ctx, self.STATUS_KEY)
        if raw_status is not None:
            normalized = raw_status.strip().lower()
            if normalized not in {"true", "false"}:
                logger.info("Rejected todo status filter %r", raw_status)
                raise BadRequestError("Todo status must be 'true' or 'false'")
            todo_status = normalized == "true"

        sort_by = self._text_param(ctx, self.SORT_BY_KEY)
        if sort_by is not None and sort_by not in SORTABLE_FIELDS:
            raise BadRequestError(
                "sortby must be one of: " + ", ".join(sorted(SORTABLE_FIELDS))
            )

        descending = False
        sort_order = self._text_param(ctx, self.SORT_ORDER_KEY)
        if sort_order is not None:
            ord_norm = sort_order.strip().lower()
            if ord_norm not in {"asc", "desc"}:
                raise BadRequestError("sortorder must be 'asc' or 'desc'")
            descending = ord_norm == "desc"

        return TodoQuery(
            owner=owner,
            category=category,
            body=body,
            status=todo_status,
            sort_by=sort_by,
            descending=descending,
        )

    @staticmethod
    def _text_param(ctx: RequestContext, key: str) -> Optional[str]:
        if key not in ctx.query_param_map():
            return None
        value = ctx.query_param(key)
        if value is None or not value.strip():
            return None
        return value

    # PUBLIC_INTERFACE
    def add_routes(self, router: APIRouter) -> None:
        """Register the list, get-by-id and create routes on `router`."""
        router.add_api_route(
            TODOS_PATH,
            _endpoint(self.get_todos),
            methods=["GET"],
            response_model=List[TodoOut],
            summary="List Todos",
            description=(
                "List todos matching optional filters.\n\n"
                "Query parameters:\n"
                "- owner: substring of the owner\n"
                "- category: exact category\n"
                "- body: substring of the body\n"
                "- status: true or false\n"
                "- sortby: owner, category, body or status\n"
                "- sortorder: asc (default) or desc"
            ),
            responses={
                200: {"description": "List retrieved successfully"},
                400: {"description": "Invalid query parameters"},
            },
        )
        router.add_api_route(
            TODOS_PATH + "/{id}",
            _endpoint(self.get_todo),
            methods=["GET"],
            response_model=TodoOut,
            summary="Get Todo",
            description="Get a single Todo item by its ObjectId.",
            responses={
                200: {"description": "Todo found"},
                400: {"description": "Malformed id"},
                404: {"description": "Todo not found"},
            },
        )
        router.add_api_route(
            TODOS_PATH,
            _endpoint(self.add_new_todo),
            methods=["POST"],
            response_model=TodoCreated,
            status_code=status.HTTP_201_CREATED,
            summary="Create Todo",
            description="Create a new Todo item and return its id.",
            responses={
                201: {"description": "Todo created successfully"},
                422: {"description": "Validation error"},
            },
        )


def _endpoint(handler: Handler) -> Callable[[Request], Awaitable[Response]]:
    """
    Wrap a synchronous controller handler as a FastAPI endpoint.

    The handler runs in the thread pool because store calls may block. The
    endpoint returns a ready JSONResponse, so the route's response_model only
    documents the payload; handlers shape it through TodoOut / TodoCreated.
    """

    async def endpoint(request: Request) -> Response:
        ctx = await FastAPIContext.from_request(request)
        await run_in_threadpool(handler, ctx)
        return ctx.to_response()

    endpoint.__name__ = handler.__name__
    return endpoint
