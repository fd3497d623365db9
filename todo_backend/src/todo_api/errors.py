from __future__ import annotations


# PUBLIC_INTERFACE
class TodoApiError(Exception):
    """
    Base class for errors the todo controller reports back to the client.

    Subclasses set `status_code` and `kind`; the application's exception
    handler turns them into a JSON response.
    """

    status_code: int = 500
    kind: str = "TodoApiError"

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


# PUBLIC_INTERFACE
class BadRequestError(TodoApiError):
    """Malformed identifier or filter value. Raised before the store is touched."""

    status_code = 400
    kind = "BadRequest"


# PUBLIC_INTERFACE
class NotFoundError(TodoApiError):
    """A well-formed identifier with no matching todo."""

    status_code = 404
    kind = "NotFound"
