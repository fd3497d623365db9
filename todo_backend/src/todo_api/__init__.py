"""
Todo backend package.

Serves list, lookup and create endpoints for todos kept in a document store.
The FastAPI application lives in `todo_api.main`.
"""
