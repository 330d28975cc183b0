"""
Media Repository Implementations.

Course index and file system implementations of the media domain interfaces.
"""

import logging
from pathlib import Path
from typing import Any, AsyncIterator, Dict, Optional, Union

import aiofiles
import aiofiles.os

from ..domain.interfaces import CourseRepository, MediaStorage
from ...storage.manager import StorageManager


class IndexedCourseRepository(CourseRepository):
    """Course lookup backed by the storage manager's course index"""

    def __init__(self, storage_manager: StorageManager):
        self.storage_manager = storage_manager
        self.logger = logging.getLogger(__name__)

    async def get_course(self, course_id: Union[int, str]) -> Optional[Dict[str, Any]]:
        return self.storage_manager.get_course_record(course_id)

    def resolve_path(self, src: str) -> Optional[Path]:
        return self.storage_manager.resolve_media_path(src)


class FileSystemMediaStorage(MediaStorage):
    """File system implementation of the media storage backend"""

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    async def exists(self, path: Path) -> bool:
        return await aiofiles.os.path.isfile(path)

    async def get_size(self, path: Path) -> int:
        return await aiofiles.os.path.getsize(path)

    async def open_range(self, path: Path, start: int, end: int, chunk_size: int) -> AsyncIterator[bytes]:
        """Yield bytes ``[start, end]`` of ``path`` in chunks of at most ``chunk_size``"""
        if chunk_size <= 0:
            raise ValueError("Chunk size must be positive")

        async with aiofiles.open(path, "rb") as f:
            await f.seek(start)
            remaining = end - start + 1

            while remaining > 0:
                chunk = await f.read(min(chunk_size, remaining))
                if not chunk:
                    # File shrank after it was sized
                    raise OSError(f"Unexpected end of file at byte {end - remaining + 1} of {path}")
                remaining -= len(chunk)
                yield chunk

        self.logger.debug(f"Closed {path} after reading bytes {start}-{end}")
