"""
Media HTTP Controllers.

Handle HTTP requests and responses for media delivery and convert media
errors into HTTP statuses at the endpoint boundary.
"""

import logging
from typing import Union

from fastapi import HTTPException, Request, Response
from fastapi.responses import StreamingResponse

from ...core.auth import Action, CallerIdentity, can_access
from ...core.config import StreamingConfig
from ..application.locator_service import ResourceLocator
from ..application.streaming_service import RangeStreamer
from ..domain.errors import MediaNotFound, MediaUnavailable, RangeNotSatisfiable
from ..domain.models import MediaResource
from .schemas import MediaInfoResponse


class MediaStreamingResponse(StreamingResponse):
    """Streaming response that releases the storage cursor however sending ends"""

    async def __call__(self, scope, receive, send):
        try:
            await super().__call__(scope, receive, send)
        finally:
            # Starlette leaves the iterator open when the client disconnects
            await self.body_iterator.aclose()


class MediaController:
    """Controller for media streaming operations"""

    def __init__(self, locator: ResourceLocator, streamer: RangeStreamer, streaming_config: StreamingConfig):
        self.locator = locator
        self.streamer = streamer
        self.streaming_config = streaming_config
        self.logger = logging.getLogger(__name__)

    async def get_media_info(self, course_id: str, caller: CallerIdentity) -> MediaInfoResponse:
        """Get streaming information for a course video"""
        resource = await self._locate_for(course_id, caller)

        return MediaInfoResponse(
            course_id=resource.resource_id,
            title=resource.title,
            file_size_bytes=resource.length,
            content_type=resource.content_type,
            supports_range_requests=True,
            chunk_size_bytes=self.streamer.get_optimal_chunk_size(resource.length),
        )

    async def stream_media(self, course_id: str, request: Request, caller: CallerIdentity) -> Response:
        """Stream a course video with range request support"""
        resource = await self._locate_for(course_id, caller)
        range_header = request.headers.get("range")

        try:
            plan = self.streamer.plan(resource, range_header)
        except RangeNotSatisfiable as e:
            self.logger.info(str(e))
            raise HTTPException(status_code=416, detail="Range not satisfiable", headers=self.streamer.not_satisfiable_headers(e))

        headers = dict(plan.headers)
        media_type = headers.pop("Content-Type")
        headers["Cache-Control"] = f"private, max-age={self.streaming_config.cache_max_age_seconds}"

        if request.method == "HEAD":
            # Planned headers, no read cursor
            return Response(status_code=plan.status_code, headers=headers, media_type=media_type)

        try:
            body = await self.streamer.open_body(resource, plan)
        except MediaUnavailable:
            raise HTTPException(status_code=500, detail="Server error")

        # A MediaIOError raised mid-body aborts the connection; headers are already sent.
        return MediaStreamingResponse(body, status_code=plan.status_code, headers=headers, media_type=media_type)

    async def _locate_for(self, course_id: Union[int, str], caller: CallerIdentity) -> MediaResource:
        """Locate a course video and check the caller may view it"""
        try:
            resource = await self.locator.locate(course_id)
        except MediaNotFound as e:
            raise HTTPException(status_code=404, detail=str(e))
        except Exception as e:
            self.logger.error(f"Error locating media for course {course_id}: {e}", exc_info=True)
            raise HTTPException(status_code=500, detail="Server error")

        if not can_access(caller, resource, Action.VIEW):
            self.logger.info(f"User {caller.username} denied access to course {course_id}")
            raise HTTPException(status_code=403, detail="Not allowed")

        return resource
