"""Rendering service that turns the served value into a response body."""

import inspect
from typing import Any, Callable

from fastapi import Request
from starlette.concurrency import run_in_threadpool

from ...core.content import RenderedContent, render_content

# Called once per request; may return a renderable value or an awaitable of one
ContentSource = Callable[[Request], Any]


class RenderService:
    """Produces the rendered content for each incoming request."""

    def __init__(self, source: ContentSource):
        self.source = source

    @classmethod
    def for_content(cls, content: Any) -> "RenderService":
        """Serve the same value for every request."""
        return cls(lambda request: content)

    async def render(self, request: Request) -> RenderedContent:
        """
        Render the content for a request.

        The source is evaluated first (awaiting it if it is a coroutine), and
        so is any zero-argument callable it yields. Encoding then runs in the
        threadpool since OpenCV work is CPU-bound.

        Raises:
            RenderError: If the value cannot be encoded
        """
        value = await _resolve(self.source(request))
        while callable(value):
            value = await _resolve(value())
        return await run_in_threadpool(render_content, value)


async def _resolve(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value
