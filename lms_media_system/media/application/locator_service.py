"""
Media Resource Locator.

Resolves an opaque course id to the video it references on the storage backend.
"""

import mimetypes
from typing import Any, Dict, Optional, Union

from ...core.logging_config import ErrorTracker, get_error_tracker
from ..domain.errors import MediaNotFound, NotFoundReason
from ..domain.interfaces import CourseRepository, MediaStorage
from ..domain.models import MediaResource


VIDEO_CONTENT_TYPES = {
    ".mp4": "video/mp4",
    ".m4v": "video/mp4",
    ".webm": "video/webm",
    ".avi": "video/x-msvideo",
    ".mkv": "video/x-matroska",
    ".mov": "video/quicktime",
}


class ResourceLocator:
    """Application service that locates course videos"""

    def __init__(self, course_repository: CourseRepository, media_storage: MediaStorage, default_content_type: str = "video/mp4",
                 error_tracker: Optional[ErrorTracker] = None):
        self.course_repository = course_repository
        self.media_storage = media_storage
        self.default_content_type = default_content_type
        self.error_tracker = error_tracker or get_error_tracker("media")

    async def locate(self, resource_id: Union[int, str]) -> MediaResource:
        """
        Resolve ``resource_id`` to a MediaResource with its current length.

        Raises MediaNotFound with reason COURSE_NOT_FOUND when there is no
        course record and FILE_MISSING when the record points at a file that
        is not on storage.
        """
        resource_id = str(resource_id)

        course = await self.course_repository.get_course(resource_id)
        if not course:
            self.error_tracker.log_warning(f"no course record for {resource_id}", NotFoundReason.COURSE_NOT_FOUND.value)
            raise MediaNotFound(resource_id, NotFoundReason.COURSE_NOT_FOUND)

        src = course.get("src")
        path = self.course_repository.resolve_path(src) if src else None
        if path is None or not await self.media_storage.exists(path):
            self.error_tracker.log_warning(f"video file for course {resource_id} missing from storage ({src})", NotFoundReason.FILE_MISSING.value)
            raise MediaNotFound(resource_id, NotFoundReason.FILE_MISSING)

        try:
            length = await self.media_storage.get_size(path)
        except FileNotFoundError:
            self.error_tracker.log_warning(f"video file for course {resource_id} removed while sizing ({src})", NotFoundReason.FILE_MISSING.value)
            raise MediaNotFound(resource_id, NotFoundReason.FILE_MISSING)

        return MediaResource(
            resource_id=resource_id,
            path=path,
            length=length,
            content_type=self._get_content_type(course, path.suffix),
            title=course.get("title"),
            owner_id=course.get("created_by"),
        )

    def _get_content_type(self, course: Dict[str, Any], suffix: str) -> str:
        """Get MIME content type for a course video"""
        if course.get("content_type"):
            return course["content_type"]

        suffix = suffix.lower()
        if suffix in VIDEO_CONTENT_TYPES:
            return VIDEO_CONTENT_TYPES[suffix]

        guessed, _ = mimetypes.guess_type(f"media{suffix}")
        return guessed or self.default_content_type
