"""CLI entry point for launching the FastAPI app with uvicorn."""

import os

import uvicorn


def main() -> None:
    """Run the development server."""
    uvicorn.run(
        "todo_api.main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "4567")),
    )


if __name__ == "__main__":
    main()
