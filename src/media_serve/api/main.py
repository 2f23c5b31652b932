"""FastAPI application and the ``serve`` entry points."""

import os
from contextlib import asynccontextmanager, contextmanager
from datetime import datetime
from typing import Any, Callable, Iterator, Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import __version__
from .models.config import DEFAULT_PORT, ServerConfig
from .models.responses import ErrorResponse
from .routes import render
from .services.rendering import RenderService
from ..core.diagram import Diagram, SizedDiagram
from ..core.errors import RenderError
from ..utils.config import Config


def _error_response(status_code: int, code: str, message: str, details: Optional[str]) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(
            error={
                "code": code,
                "message": message,
                "details": details
            },
            timestamp=datetime.now()
        ).model_dump(mode="json")
    )


def create_app(render_service: RenderService, config: Optional[ServerConfig] = None) -> FastAPI:
    """
    Build the application serving one piece of content.

    Args:
        render_service: Produces the content for every request
        config: Server settings; read from the environment when omitted

    Returns:
        FastAPI app with a single catch-all GET route
    """
    config = config or ServerConfig.from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan manager."""
        print(f"Starting media server v{app.version} on {config.host}:{config.port}")
        print(f"Rendering defaults: {Config.to_dict()}")
        yield
        print("Media server stopped")

    app = FastAPI(
        title="media-serve",
        description="Serves a single rendered image or diagram for visual debugging",
        version=__version__,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        lifespan=lifespan
    )
    app.state.render_service = render_service
    app.state.config = config

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Handle HTTP exceptions (e.g. non-GET methods) with structured error responses."""
        return _error_response(exc.status_code, "HTTP_ERROR", str(exc.detail), None)

    @app.exception_handler(RenderError)
    async def render_exception_handler(request: Request, exc: RenderError):
        """Fail the request when the value cannot be rendered."""
        print(f"Render error: {exc}")
        return _error_response(
            500,
            exc.code,
            "The server could not render this value",
            str(exc) if config.show_error_details else None
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle unexpected exceptions."""
        print(f"Unexpected error: {exc}")
        return _error_response(
            500,
            "INTERNAL_ERROR",
            "An unexpected error occurred",
            str(exc) if config.show_error_details else None
        )

    app.include_router(render.router)
    return app


@contextmanager
def use_default_port(default: int = DEFAULT_PORT) -> Iterator[None]:
    """
    Set the PORT environment variable to ``default`` if it's unset, removing
    it again afterwards. Tells stdout which port it's listening on otherwise.
    """
    port = os.environ.get("PORT")
    if port is not None:
        print(f"Running server on localhost:{port}")
        yield
        return

    os.environ["PORT"] = str(default)
    try:
        yield
    finally:
        os.environ.pop("PORT", None)


def run(render_service: RenderService) -> None:
    """Run the server until interrupted, on the port given by PORT (default 3000)."""
    with use_default_port():
        config = ServerConfig.from_env()
        app = create_app(render_service, config)
        uvicorn.run(
            app,
            host=config.host,
            port=config.port,
            log_level=config.log_level
        )


def serve(content: Any) -> None:
    """
    Start a web server which serves the given content to the client.

    It listens on the port specified by the PORT environment variable, or
    3000 if there is none, so the result is visible at http://localhost:3000.
    The server responds to any GET request with the rendered content; the
    route is ignored.
    """
    run(RenderService.for_content(content))


def serve_handler(handler: Callable[[Request], Any]) -> None:
    """
    Like ``serve``, but the content is computed by ``handler`` for each
    request, so it can depend on the request. ``handler`` may be a coroutine
    function.
    """
    run(RenderService(handler))


def serve_diagram(diagram: Diagram) -> None:
    """A type-specialized version of ``serve`` for diagrams."""
    if not isinstance(diagram, (Diagram, SizedDiagram)):
        raise TypeError(f"Expected a Diagram, got {type(diagram).__name__}")
    serve(diagram)
