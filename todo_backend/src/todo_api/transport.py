from __future__ import annotations

from typing import Any, Dict, List, Optional, Protocol, Type, TypeVar

from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError
from starlette.requests import Request

ModelT = TypeVar("ModelT", bound=BaseModel)


# PUBLIC_INTERFACE
class RequestContext(Protocol):
    """
    What the todo controller needs from the HTTP layer for one request.

    Reads: query parameters, path parameters and the body. Writes: a JSON
    payload and a status code.
    """

    def query_param_map(self) -> Dict[str, List[str]]:
        ...

    def query_param(self, key: str) -> Optional[str]:
        ...

    def path_param(self, key: str) -> str:
        ...

    def body_as(self, model: Type[ModelT]) -> ModelT:
        ...

    def json(self, payload: Any) -> None:
        ...

    def status(self, code: int) -> None:
        ...


class FastAPIContext:
    """
    RequestContext backed by a Starlette request.

    The body is read up front (it can only be awaited) so the controller
    itself can stay synchronous.
    """

    def __init__(self, request: Request, body: bytes = b"") -> None:
        self._request = request
        self._body = body
        self._payload: Any = None
        self._status_code = 200

    @classmethod
    async def from_request(cls, request: Request) -> "FastAPIContext":
        body = await request.body() if request.method in {"POST", "PUT", "PATCH"} else b""
        return cls(request, body)

    def query_param_map(self) -> Dict[str, List[str]]:
        params = self._request.query_params
        return {key: params.getlist(key) for key in params.keys()}

    def query_param(self, key: str) -> Optional[str]:
        # Starlette's get() returns the last value of a repeated key
        values = self._request.query_params.getlist(key)
        return values[0] if values else None

    def path_param(self, key: str) -> str:
        return str(self._request.path_params[key])

    def body_as(self, model: Type[ModelT]) -> ModelT:
        """
        Deserialize the body into `model`.

        Raises RequestValidationError for malformed JSON or a body that does
        not fit the model, matching FastAPI's own body validation.
        """
        try:
            return model.model_validate_json(self._body or b"null")
        except ValidationError as e:
            errors = [
                {**err, "loc": ("body", *err["loc"])}
                for err in e.errors(include_url=False, include_context=False)
            ]
            raise RequestValidationError(errors) from e

    def json(self, payload: Any) -> None:
        self._payload = payload

    def status(self, code: int) -> None:
        self._status_code = code

    def to_response(self) -> JSONResponse:
        return JSONResponse(content=jsonable_encoder(self._payload), status_code=self._status_code)
