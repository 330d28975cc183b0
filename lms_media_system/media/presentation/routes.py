"""
Media API Routes.

FastAPI route definitions for course video streaming.
"""

from typing import Callable, Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Request

from ...core.auth import AuthenticationError, CallerIdentity, TokenAuthenticator
from .controllers import MediaController
from .schemas import ErrorResponse, MediaInfoResponse


def create_caller_dependency(authenticator: TokenAuthenticator) -> Callable:
    """Create a dependency that resolves the bearer token to a caller identity"""

    async def require_caller(authorization: Optional[str] = Header(None)) -> CallerIdentity:
        try:
            return authenticator.authenticate_header(authorization)
        except AuthenticationError as e:
            raise HTTPException(status_code=e.status_code, detail=str(e))

    return require_caller


def create_media_routes(media_controller: MediaController, require_caller: Callable) -> APIRouter:
    """Create media API routes with dependency injection"""

    router = APIRouter(tags=["media"])
    error_responses = {
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    }

    # HEAD lets players learn the length and range support without a body
    @router.api_route("/media/{course_id}", methods=["GET", "HEAD"], responses={**error_responses, 206: {"description": "Partial content"}, 416: {"model": ErrorResponse}})
    @router.api_route("/api/video/{course_id}", methods=["GET", "HEAD"], include_in_schema=False)
    async def stream_media(course_id: str, request: Request, caller: CallerIdentity = Depends(require_caller)):
        """
        Stream a course video with HTTP range request support.

        - **Range**: optional `bytes=<start>-[<end>]` header for seeking
        - **206**: partial content for a valid range
        - **416**: range cannot be satisfied for the file length

        Usage in HTML5:
        ```html
        <video controls>
            <source src="/media/{course_id}" type="video/mp4">
        </video>
        ```
        """
        return await media_controller.stream_media(course_id, request, caller)

    @router.get("/media/{course_id}/info", response_model=MediaInfoResponse, responses=error_responses)
    async def get_media_info(course_id: str, caller: CallerIdentity = Depends(require_caller)):
        """
        Get streaming information for a course video.

        Returns the file size, content type, range support and chunk size.
        """
        return await media_controller.get_media_info(course_id, caller)

    return router
