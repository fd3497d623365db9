import os
from typing import List

import pytest
from fastapi.testclient import TestClient

# Ensure we default to memory backend for tests to avoid needing a MongoDB server
os.environ.setdefault("PERSISTENCE_BACKEND", "memory")

from todo_api.main import create_app  # noqa: E402
from todo_api.repositories import InMemoryTodoRepository  # noqa: E402
from todo_api.seed import seed  # noqa: E402


@pytest.fixture
def repo() -> InMemoryTodoRepository:
    return InMemoryTodoRepository()


@pytest.fixture
def seeded_ids(repo: InMemoryTodoRepository) -> List[str]:
    # Jason/movies, Jason/video games, Hannah, Harold, Bryan (in that order)
    return seed(repo)


@pytest.fixture
def client(repo: InMemoryTodoRepository, seeded_ids: List[str]) -> TestClient:
    return TestClient(create_app(repo))
