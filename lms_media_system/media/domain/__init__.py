"""
Media Domain Layer.

Contains pure business logic and domain models for media delivery.
No external dependencies - only Python standard library and domain concepts.
"""

from .models import MediaResource, ByteRange, StreamPlan, StreamOutcome
from .errors import MediaError, MediaNotFound, NotFoundReason, RangeNotSatisfiable, MediaUnavailable, MediaIOError, SinkClosed
from .interfaces import CourseRepository, MediaStorage, MediaSink

__all__ = [
    "MediaResource",
    "ByteRange",
    "StreamPlan",
    "StreamOutcome",
    "MediaError",
    "MediaNotFound",
    "NotFoundReason",
    "RangeNotSatisfiable",
    "MediaUnavailable",
    "MediaIOError",
    "SinkClosed",
    "CourseRepository",
    "MediaStorage",
    "MediaSink",
]
