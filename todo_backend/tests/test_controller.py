from typing import Any, Dict, List, Optional

import pytest
from bson import ObjectId
from fastapi import APIRouter
from pydantic import ValidationError

from todo_api.controller import TodoController
from todo_api.errors import BadRequestError, NotFoundError
from todo_api.models import TODO_FIELDS
from todo_api.repositories import InMemoryTodoRepository, TodoQuery
from todo_api.seed import seed


class FakeContext:
    """In-memory RequestContext: canned request data, captured response."""

    def __init__(
        self,
        query: Optional[Dict[str, Any]] = None,
        path: Optional[Dict[str, str]] = None,
        body: Optional[Dict[str, Any]] = None,
    ) -> None:
        self._query = {
            k: list(v) if isinstance(v, (list, tuple)) else [v] for k, v in (query or {}).items()
        }
        self._path = path or {}
        self._body = body
        self.payload: Any = None
        self.status_code: Optional[int] = None

    def query_param_map(self) -> Dict[str, List[str]]:
        return self._query

    def query_param(self, key):
        values = self._query.get(key)
        return values[0] if values else None

    def path_param(self, key):
        return self._path[key]

    def body_as(self, model):
        return model.model_validate(self._body)

    def json(self, payload):
        self.payload = payload

    def status(self, code):
        self.status_code = code


class SpyRepository(InMemoryTodoRepository):
    """Records calls so tests can assert the store was (not) consulted."""

    def __init__(self) -> None:
        super().__init__()
        self.get_calls: List[str] = []
        self.list_calls: List[TodoQuery] = []

    def get(self, todo_id):
        self.get_calls.append(todo_id)
        return super().get(todo_id)

    def list(self, query=None):
        self.list_calls.append(query)
        return super().list(query)


@pytest.fixture
def spy() -> SpyRepository:
    return SpyRepository()


@pytest.fixture
def ids(spy) -> List[str]:
    return seed(spy)


@pytest.fixture
def controller(spy, ids) -> TodoController:
    return TodoController(spy)


def test_add_routes_registers_read_and_create_routes(controller):
    router = APIRouter()
    controller.add_routes(router)
    registered = {(route.path, method) for route in router.routes for method in route.methods}
    assert ("/api/todos", "GET") in registered
    assert ("/api/todos/{id}", "GET") in registered
    assert ("/api/todos", "POST") in registered


class TestGetTodos:
    def test_all(self, controller):
        ctx = FakeContext()
        controller.get_todos(ctx)
        assert ctx.status_code == 200
        assert len(ctx.payload) == 5

    def test_category(self, controller):
        ctx = FakeContext(query={TodoController.CATEGORY_KEY: "video games"})
        controller.get_todos(ctx)
        assert ctx.status_code == 200
        assert {t["owner"] for t in ctx.payload} == {"Jason", "Bryan"}
        assert all(t["category"] == "video games" for t in ctx.payload)

    def test_owner(self, controller):
        ctx = FakeContext(query={TodoController.OWNER_KEY: "Jason"})
        controller.get_todos(ctx)
        assert len(ctx.payload) == 2

    def test_body(self, controller):
        ctx = FakeContext(query={TodoController.BODY_KEY: "finish quest"})
        controller.get_todos(ctx)
        assert [t["body"] for t in ctx.payload] == ["finish quest"]

    def test_status_and_owner_without_match(self, controller):
        ctx = FakeContext(query={TodoController.STATUS_KEY: "false", TodoController.OWNER_KEY: "Jason"})
        controller.get_todos(ctx)
        assert ctx.status_code == 200
        assert ctx.payload == []

    def test_first_value_of_repeated_key_wins(self, controller):
        ctx = FakeContext(query={TodoController.OWNER_KEY: ["Hannah", "Jason"]})
        controller.get_todos(ctx)
        assert [t["owner"] for t in ctx.payload] == ["Hannah"]

    def test_bad_status_never_reaches_store(self, controller, spy):
        ctx = FakeContext(query={TodoController.STATUS_KEY: "yes"})
        with pytest.raises(BadRequestError):
            controller.get_todos(ctx)
        assert spy.list_calls == []
        assert ctx.status_code is None


class TestConstructQuery:
    def test_empty(self, controller):
        assert controller.construct_query(FakeContext()) == TodoQuery()

    def test_all_filters(self, controller):
        ctx = FakeContext(
            query={
                "owner": "Ja",
                "category": "movies",
                "body": "aven",
                "status": "True",
                "sortby": "body",
                "sortorder": "DESC",
            }
        )
        assert controller.construct_query(ctx) == TodoQuery(
            owner="Ja",
            category="movies",
            body="aven",
            status=True,
            sort_by="body",
            descending=True,
        )

    @pytest.mark.parametrize(
        "query",
        [{"status": "1"}, {"sortby": "id"}, {"sortorder": "up"}],
    )
    def test_rejects_malformed_values(self, controller, query):
        with pytest.raises(BadRequestError):
            controller.construct_query(FakeContext(query=query))


class TestGetTodo:
    def test_existing(self, controller, ids):
        ctx = FakeContext(path={"id": ids[2]})
        controller.get_todo(ctx)
        assert ctx.status_code == 200
        assert ctx.payload == {
            "id": ids[2],
            "owner": "Hannah",
            "category": "reading",
            "body": "3 books",
            "status": True,
        }

    @pytest.mark.parametrize("bad_id", ["invalid-id", "", "123", "zz" * 12, str(ObjectId()) + "0"])
    def test_malformed_id_never_reaches_store(self, controller, spy, bad_id):
        with pytest.raises(BadRequestError):
            controller.get_todo(FakeContext(path={"id": bad_id}))
        assert spy.get_calls == []

    def test_absent_id(self, controller, spy):
        missing = str(ObjectId())
        with pytest.raises(NotFoundError) as excinfo:
            controller.get_todo(FakeContext(path={"id": missing}))
        assert excinfo.value.status_code == 404
        assert spy.get_calls == [missing]


class TestAddNewTodo:
    def test_created_todo_round_trips(self, controller, spy):
        body = {"owner": "John", "category": "Movie", "body": "Avengers", "status": True}
        ctx = FakeContext(body=body)
        controller.add_new_todo(ctx)
        assert ctx.status_code == 201
        new_id = ctx.payload["id"]

        assert spy.get(new_id) == {"id": new_id, **body}
        assert spy.count() == 6

    def test_invalid_body_inserts_nothing(self, controller, spy):
        ctx = FakeContext(body={"owner": "John", "status": "not a bool"})
        with pytest.raises(ValidationError):
            controller.add_new_todo(ctx)
        assert spy.count() == 5


class TestResponseShaping:
    class ExtraFieldRepository(InMemoryTodoRepository):
        """Returns records carrying a field that is not part of a todo."""

        def get(self, todo_id):
            todo = super().get(todo_id)
            return None if todo is None else {**todo, "internal": "x"}

        def list(self, query=None):
            return [{**t, "internal": "x"} for t in super().list(query)]

    def test_payloads_only_carry_todo_fields(self):
        repo = self.ExtraFieldRepository()
        ids = seed(repo)
        controller = TodoController(repo)

        one = FakeContext(path={"id": ids[0]})
        controller.get_todo(one)
        assert set(one.payload) == {"id", *TODO_FIELDS}

        many = FakeContext()
        controller.get_todos(many)
        assert all(set(t) == {"id", *TODO_FIELDS} for t in many.payload)


@pytest.mark.parametrize("field", TODO_FIELDS)
def test_every_todo_field_is_sortable(controller, field):
    ctx = FakeContext(query={TodoController.SORT_BY_KEY: field})
    controller.get_todos(ctx)
    values = [t[field] for t in ctx.payload]
    assert values == sorted(values)
