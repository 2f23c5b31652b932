"""Catch-all endpoint that answers every GET with the rendered content."""

from fastapi import APIRouter, Depends, Request, Response

from ..services.rendering import RenderService


router = APIRouter()


def get_render_service(request: Request) -> RenderService:
    """Get the render service the app was created with."""
    return request.app.state.render_service


@router.get("/{path:path}")
async def render(
    path: str,
    request: Request,
    render_service: RenderService = Depends(get_render_service)
):
    """
    Respond with the rendered content.

    The request path is ignored; every GET gets the same kind of answer.
    """
    rendered = await render_service.render(request)
    return Response(
        content=rendered.body,
        media_type=rendered.content_type,
        headers={"Cache-Control": "no-store"}
    )
