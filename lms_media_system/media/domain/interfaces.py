"""
Media Domain Interfaces.

Abstract interfaces that define contracts for media delivery.
These interfaces allow dependency inversion - domain logic doesn't depend on infrastructure.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, AsyncIterator, Dict, Mapping, Optional, Union


class CourseRepository(ABC):
    """Abstract lookup of course records"""

    @abstractmethod
    async def get_course(self, course_id: Union[int, str]) -> Optional[Dict[str, Any]]:
        """Get the course record, or None when no such course exists"""
        pass

    @abstractmethod
    def resolve_path(self, src: str) -> Optional[Path]:
        """Map a stored video reference to a storage path"""
        pass


class MediaStorage(ABC):
    """Abstract storage backend holding media files"""

    @abstractmethod
    async def exists(self, path: Path) -> bool:
        """Check if a media file exists"""
        pass

    @abstractmethod
    async def get_size(self, path: Path) -> int:
        """Get the byte length of a media file"""
        pass

    @abstractmethod
    def open_range(self, path: Path, start: int, end: int, chunk_size: int) -> AsyncIterator[bytes]:
        """
        Open a positioned cursor over bytes ``[start, end]`` of a media file.

        Yields chunks of at most ``chunk_size`` bytes. The underlying handle is
        released when the iterator finishes, fails or is closed early.
        """
        pass


class MediaSink(ABC):
    """Destination a stream writes its status, headers and bytes to"""

    @abstractmethod
    async def send_headers(self, status_code: int, headers: Mapping[str, str]) -> None:
        pass

    @abstractmethod
    async def write(self, chunk: bytes) -> None:
        """Deliver a chunk; raise SinkClosed if the receiver has gone away"""
        pass

    @abstractmethod
    def is_closed(self) -> bool:
        pass
