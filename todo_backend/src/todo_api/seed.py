"""
Load a small set of example todos into the configured store.

Usage:
    PERSISTENCE_BACKEND=mongo python -m todo_api.seed
"""
from __future__ import annotations

import logging
from typing import List

from .repositories import TodoRepository, get_repository
from .schemas import TodoCreate

logger = logging.getLogger(__name__)

SAMPLE_TODOS: List[TodoCreate] = [
    TodoCreate(owner="Jason", category="movies", body="avengers.", status=True),
    TodoCreate(owner="Jason", category="video games", body="finish quest", status=True),
    TodoCreate(owner="Hannah", category="reading", body="3 books", status=True),
    TodoCreate(owner="Harold", category="board games", body="monopoly", status=False),
    TodoCreate(owner="Bryan", category="video games", body="join clan", status=True),
]


# PUBLIC_INTERFACE
def seed(repo: TodoRepository) -> List[str]:
    """Insert SAMPLE_TODOS into `repo` and return the new ids."""
    ids = repo.insert_many(SAMPLE_TODOS)
    logger.info("Seeded %d todos", len(ids))
    return ids


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    seed(get_repository())


if __name__ == "__main__":
    main()
