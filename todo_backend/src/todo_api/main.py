import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .errors import TodoApiError
from .repositories import TodoRepository, get_repository
from .routers import todos as todos_router
from .settings import get_settings

openapi_tags = [
    {"name": "health", "description": "Service health and status endpoints."},
    {
        "name": "todos",
        "description": "List, look up and create Todo items stored in a document database.",
    },
]


# PUBLIC_INTERFACE
def create_app(repo: Optional[TodoRepository] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        repo: Store to serve todos from. Defaults to the backend selected by
            PERSISTENCE_BACKEND.
    """
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    repository = repo if repo is not None else get_repository()

    app = FastAPI(
        title="Todo Backend",
        description="Backend API service for querying and creating todos in a document store.",
        version="0.1.0",
        openapi_tags=openapi_tags,
    )

    # Configure CORS based on settings (CORS_ALLOW_ORIGINS), with '*' fallback
    allow_all = (settings.cors_allow_origins == ["*"]) or (len(settings.cors_allow_origins) == 0)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if allow_all else settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(TodoApiError)
    async def todo_api_exception_handler(request: Request, exc: TodoApiError) -> JSONResponse:
        """
        Return the controller's bad-request / not-found errors as JSON.

        Response format:
            {"error": "BadRequest" | "NotFound", "detail": "<message>"}
        """
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.kind, "detail": exc.detail},
        )

    # Global exception handler for consistent JSON on validation errors
    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """
        Return a consistent JSON structure for request validation errors.

        Response format:
            {
                "error": "ValidationError",
                "detail": [... pydantic/fastapi error details ...],
                "message": "Request validation failed"
            }
        """
        return JSONResponse(
            status_code=422,
            content={
                "error": "ValidationError",
                "message": "Request validation failed",
                "detail": jsonable_encoder(exc.errors()),
            },
        )

    # PUBLIC_INTERFACE
    @app.get("/", summary="Health Check", tags=["health"])
    def health_check():
        """
        Health check endpoint.

        Returns:
            A JSON object indicating service health.
        """
        return {"message": "Healthy", "backend": settings.persistence_backend}

    app.include_router(todos_router.build_router(repository))
    return app


app = create_app()
