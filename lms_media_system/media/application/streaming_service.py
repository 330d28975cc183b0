"""
Media Streaming Application Service.

Handles range-aware delivery of a located media resource: range parsing and
validation, response planning and bounded-memory chunked streaming.
"""

import logging
from typing import AsyncIterator, Dict, Optional

from ...core.logging_config import ErrorTracker, get_error_tracker, get_performance_logger
from ..domain.errors import MediaIOError, MediaUnavailable, RangeNotSatisfiable, SinkClosed
from ..domain.interfaces import MediaSink, MediaStorage
from ..domain.models import RANGE_UNIT, ByteRange, MediaResource, StreamOutcome, StreamPlan


class MediaBody:
    """
    Bytes of one planned response span.

    Built by ``RangeStreamer.open_body`` with the storage cursor already open
    and its first chunk read. Storage errors raise MediaIOError carrying the
    number of bytes already handed out. ``aclose`` releases the cursor whether
    or not iteration started.
    """

    def __init__(self, streamer: 'RangeStreamer', resource: MediaResource, plan: StreamPlan,
                 chunks: Optional[AsyncIterator[bytes]] = None, first_chunk: Optional[bytes] = None):
        self.streamer = streamer
        self.resource = resource
        self.plan = plan
        self.bytes_sent = 0
        self._chunks = chunks
        self._pending = first_chunk
        self._started = streamer.performance_logger.start_timer()

    def __aiter__(self) -> 'MediaBody':
        return self

    async def __anext__(self) -> bytes:
        if self._pending is not None:
            chunk, self._pending = self._pending, None
        elif self._chunks is None:
            raise StopAsyncIteration
        else:
            try:
                chunk = await self._chunks.__anext__()
            except StopAsyncIteration:
                await self.aclose()
                self._log_completed()
                raise
            except OSError as e:
                await self.aclose()
                self.streamer.error_tracker.log_error(e, "io_failure", {
                    "resource_id": self.resource.resource_id,
                    "bytes_sent": self.bytes_sent,
                    "content_length": self.plan.content_length,
                })
                raise MediaIOError(self.resource.resource_id, self.bytes_sent, str(e)) from e

        self.bytes_sent += len(chunk)
        return chunk

    async def aclose(self) -> None:
        chunks, self._chunks = self._chunks, None
        self._pending = None
        if chunks is not None:
            await chunks.aclose()

    def _log_completed(self) -> None:
        byte_range = self.plan.byte_range
        self.streamer.performance_logger.end_timer(
            f"stream {byte_range.content_range(self.resource.length)} of {self.resource.resource_id}",
            self._started,
            self.bytes_sent,
        )


class RangeStreamer:
    """Application service for range-aware media streaming"""

    def __init__(self, media_storage: MediaStorage, max_chunk_size: int = 1024 * 1024,
                 error_tracker: Optional[ErrorTracker] = None):
        self.media_storage = media_storage
        self.max_chunk_size = max_chunk_size
        self.error_tracker = error_tracker or get_error_tracker("media")
        self.performance_logger = get_performance_logger("media", logging.DEBUG)
        self.logger = logging.getLogger(__name__)

    def plan(self, resource: MediaResource, range_header: Optional[str] = None) -> StreamPlan:
        """
        Compute status, headers and byte span for a response.

        A valid ``bytes=`` range always produces 206, even when it covers the
        whole resource. A header without the ``bytes=`` unit is ignored and the
        full resource is served with 200. Raises RangeNotSatisfiable for any
        other header that does not parse or does not fit the resource.
        """
        byte_range = None
        if range_header is not None:
            try:
                byte_range = ByteRange.from_header(range_header, resource.length)
            except ValueError as e:
                raise RangeNotSatisfiable(range_header, resource.length, str(e)) from e

        if byte_range is not None:
            headers = {
                "Content-Range": byte_range.content_range(resource.length),
                "Accept-Ranges": RANGE_UNIT,
                "Content-Length": str(byte_range.size),
                "Content-Type": resource.content_type,
            }
            return StreamPlan(status_code=206, headers=headers, byte_range=byte_range)

        headers = {
            "Content-Length": str(resource.length),
            "Content-Type": resource.content_type,
            "Accept-Ranges": RANGE_UNIT,
        }
        return StreamPlan(status_code=200, headers=headers, byte_range=ByteRange.full(resource.length))

    async def open_body(self, resource: MediaResource, plan: StreamPlan) -> MediaBody:
        """
        Open the storage cursor for ``plan`` and read its first chunk.

        Raises MediaUnavailable when storage fails before any byte is read,
        while the caller can still answer with an error status.
        """
        byte_range = plan.byte_range
        if byte_range is None:
            return MediaBody(self, resource, plan)

        chunk_size = self.get_optimal_chunk_size(resource.length)
        chunks = self.media_storage.open_range(resource.path, byte_range.start, byte_range.end, chunk_size)

        try:
            first_chunk = await chunks.__anext__()
        except StopAsyncIteration:
            error = MediaUnavailable(resource.resource_id, "storage returned no data")
            self.error_tracker.log_warning(str(error), "open_failure")
            raise error
        except OSError as e:
            await chunks.aclose()
            self.error_tracker.log_error(e, "open_failure", {"resource_id": resource.resource_id, "range": byte_range.content_range(resource.length)})
            raise MediaUnavailable(resource.resource_id, str(e)) from e

        return MediaBody(self, resource, plan, chunks, first_chunk)

    async def stream(self, resource: MediaResource, range_header: Optional[str], sink: MediaSink) -> StreamOutcome:
        """Plan the response for ``range_header`` and drive it into ``sink``"""
        try:
            plan = self.plan(resource, range_header)
        except RangeNotSatisfiable as e:
            self.logger.info(str(e))
            headers = self.not_satisfiable_headers(e)
            await sink.send_headers(416, headers)
            return StreamOutcome(status_code=416, headers=headers, error=e)

        try:
            body = await self.open_body(resource, plan)
        except MediaUnavailable as e:
            headers = {"Content-Length": "0"}
            await sink.send_headers(500, headers)
            return StreamOutcome(status_code=500, headers=headers, error=e)

        outcome = StreamOutcome(status_code=plan.status_code, headers=dict(plan.headers))
        try:
            await sink.send_headers(plan.status_code, plan.headers)
            if sink.is_closed() and plan.content_length:
                raise SinkClosed(f"Sink closed before streaming {resource.resource_id}")

            async for chunk in body:
                await sink.write(chunk)
                outcome.bytes_sent += len(chunk)
                if sink.is_closed() and outcome.bytes_sent < plan.content_length:
                    raise SinkClosed(f"Sink closed after {outcome.bytes_sent} bytes of {resource.resource_id}")

            outcome.completed = True

        except SinkClosed as e:
            self.error_tracker.record("client_disconnect")
            self.logger.info(f"Client went away: {e}")
            outcome.error = e
        except MediaIOError as e:
            outcome.error = e
        finally:
            await body.aclose()

        return outcome

    def get_optimal_chunk_size(self, file_size: int) -> int:
        """Get chunk size for streaming based on file size"""
        if file_size < 1024 * 1024:  # < 1MB
            chunk_size = 64 * 1024
        elif file_size < 10 * 1024 * 1024:  # < 10MB
            chunk_size = 256 * 1024
        elif file_size < 100 * 1024 * 1024:  # < 100MB
            chunk_size = 512 * 1024
        else:
            chunk_size = 1024 * 1024

        return max(1, min(chunk_size, self.max_chunk_size))

    def not_satisfiable_headers(self, error: RangeNotSatisfiable) -> Dict[str, str]:
        return {"Content-Range": error.content_range, "Accept-Ranges": RANGE_UNIT}
