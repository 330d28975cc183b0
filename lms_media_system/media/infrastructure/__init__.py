"""
Media Infrastructure Layer.

Concrete implementations of the domain interfaces on top of the course
index and the local file system.
"""

from .repositories import IndexedCourseRepository, FileSystemMediaStorage

__all__ = [
    "IndexedCourseRepository",
    "FileSystemMediaStorage",
]
