"""
Media Domain Errors.

Failure taxonomy for media delivery. The presentation layer converts each
error into the matching HTTP status at the endpoint boundary.
"""

from enum import Enum


class NotFoundReason(Enum):
    """Why a media resource could not be located"""
    COURSE_NOT_FOUND = "course_not_found"
    FILE_MISSING = "file_missing"


class MediaError(Exception):
    """Base class for media delivery failures"""


class MediaNotFound(MediaError):
    """No course record, or the course video is absent from storage"""

    def __init__(self, resource_id: str, reason: NotFoundReason):
        self.resource_id = resource_id
        self.reason = reason
        if reason == NotFoundReason.COURSE_NOT_FOUND:
            message = f"Course {resource_id} not found"
        else:
            message = f"Video file for course {resource_id} not found"
        super().__init__(message)


class RangeNotSatisfiable(MediaError):
    """The requested byte range cannot be served for the resource length"""

    def __init__(self, range_header: str, length: int, detail: str = ""):
        self.range_header = range_header
        self.length = length
        message = f"Range {range_header!r} not satisfiable for {length} bytes"
        if detail:
            message += f": {detail}"
        super().__init__(message)

    @property
    def content_range(self) -> str:
        return f"bytes */{self.length}"


class MediaUnavailable(MediaError):
    """Storage could not open the resource before any byte was sent"""

    def __init__(self, resource_id: str, message: str):
        self.resource_id = resource_id
        super().__init__(f"Could not open {resource_id}: {message}")


class MediaIOError(MediaError):
    """Storage read failed after the response headers were sent"""

    def __init__(self, resource_id: str, bytes_sent: int, message: str):
        self.resource_id = resource_id
        self.bytes_sent = bytes_sent
        super().__init__(f"Stream of {resource_id} failed after {bytes_sent} bytes: {message}")


class SinkClosed(MediaError):
    """The downstream sink stopped accepting bytes"""
