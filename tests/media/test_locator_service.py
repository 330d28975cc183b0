"""
Tests for resolving course ids to media resources.
"""

import asyncio

import pytest

from lms_media_system.core.logging_config import ErrorTracker
from lms_media_system.media.application.locator_service import ResourceLocator
from lms_media_system.media.domain.errors import MediaNotFound, NotFoundReason
from lms_media_system.media.infrastructure.repositories import FileSystemMediaStorage, IndexedCourseRepository


class CountingStorage(FileSystemMediaStorage):
    """File system storage that records every read cursor opened"""

    def __init__(self):
        super().__init__()
        self.opened = []

    def open_range(self, path, start, end, chunk_size):
        self.opened.append((path, start, end))
        return super().open_range(path, start, end, chunk_size)


@pytest.fixture
def media_storage():
    return CountingStorage()


@pytest.fixture
def locator(storage_manager, media_storage):
    return ResourceLocator(IndexedCourseRepository(storage_manager), media_storage)


def test_locate_existing_course(locator, course_id, storage_manager):
    resource = asyncio.run(locator.locate(course_id))

    assert resource.resource_id == course_id
    assert resource.length == 1000
    assert resource.content_type == "video/mp4"
    assert resource.title == "Intro to Algebra"
    assert resource.owner_id == 7
    assert resource.path == (storage_manager.video_path / "lecture.mp4").resolve()


def test_integer_ids_are_accepted(locator, course_id):
    resource = asyncio.run(locator.locate(int(course_id)))

    assert resource.resource_id == course_id


def test_unknown_course(locator, media_storage):
    with pytest.raises(MediaNotFound) as excinfo:
        asyncio.run(locator.locate("999"))

    assert excinfo.value.reason == NotFoundReason.COURSE_NOT_FOUND
    assert media_storage.opened == []


def test_course_whose_file_is_missing(locator, storage_manager, media_storage):
    course_id = storage_manager.register_course(title="Lost", video_filename="gone.mp4", created_by=1)

    with pytest.raises(MediaNotFound) as excinfo:
        asyncio.run(locator.locate(course_id))

    assert excinfo.value.reason == NotFoundReason.FILE_MISSING
    assert media_storage.opened == []


def test_not_found_causes_are_counted(storage_manager, media_storage, course_id):
    tracker = ErrorTracker("media")
    locator = ResourceLocator(IndexedCourseRepository(storage_manager), media_storage, error_tracker=tracker)
    missing_id = storage_manager.register_course(title="Lost", video_filename="gone.mp4", created_by=1)

    for resource_id in ("999", "998", missing_id):
        with pytest.raises(MediaNotFound):
            asyncio.run(locator.locate(resource_id))
    asyncio.run(locator.locate(course_id))

    assert tracker.get_error_stats()["by_kind"] == {"course_not_found": 2, "file_missing": 1}


def test_reference_outside_storage_root_is_missing(locator, storage_manager):
    course_id = storage_manager.register_course(title="Escape", video_filename="../../secrets.mp4", created_by=1)

    with pytest.raises(MediaNotFound) as excinfo:
        asyncio.run(locator.locate(course_id))

    assert excinfo.value.reason == NotFoundReason.FILE_MISSING


def test_length_reflects_current_file(locator, course_id, storage_manager):
    (storage_manager.video_path / "lecture.mp4").write_bytes(b"x" * 10)

    assert asyncio.run(locator.locate(course_id)).length == 10


@pytest.mark.parametrize(
    "filename, content_type, expected",
    [
        ("clip.webm", None, "video/webm"),
        ("clip.avi", None, "video/x-msvideo"),
        ("clip.MOV", None, "video/quicktime"),
        ("clip.bin", "video/mp4", "video/mp4"),
    ],
)
def test_content_type(locator, storage_manager, filename, content_type, expected):
    (storage_manager.video_path / filename).write_bytes(b"data")
    course_id = storage_manager.register_course(title="Clip", video_filename=filename, created_by=1, content_type=content_type)

    assert asyncio.run(locator.locate(course_id)).content_type == expected


def test_unknown_extension_falls_back_to_default(storage_manager, media_storage):
    locator = ResourceLocator(IndexedCourseRepository(storage_manager), media_storage, default_content_type="video/mp4")
    (storage_manager.video_path / "clip.zzq").write_bytes(b"data")
    course_id = storage_manager.register_course(title="Clip", video_filename="clip.zzq", created_by=1)

    assert asyncio.run(locator.locate(course_id)).content_type == "video/mp4"


def test_file_system_storage_reads_positioned_chunks(tmp_path):
    path = tmp_path / "video.mp4"
    path.write_bytes(bytes(range(100)))
    storage = FileSystemMediaStorage()

    async def collect():
        return [chunk async for chunk in storage.open_range(path, 10, 54, 16)]

    chunks = asyncio.run(collect())

    assert [len(chunk) for chunk in chunks] == [16, 16, 13]
    assert b"".join(chunks) == bytes(range(10, 55))


def test_file_system_storage_reports_truncated_file(tmp_path):
    path = tmp_path / "video.mp4"
    path.write_bytes(b"short")
    storage = FileSystemMediaStorage()

    async def collect():
        return [chunk async for chunk in storage.open_range(path, 0, 99, 16)]

    with pytest.raises(OSError):
        asyncio.run(collect())


def test_file_system_storage_size_and_existence(tmp_path):
    path = tmp_path / "video.mp4"
    path.write_bytes(b"12345")
    storage = FileSystemMediaStorage()

    assert asyncio.run(storage.exists(path))
    assert not asyncio.run(storage.exists(tmp_path / "other.mp4"))
    assert not asyncio.run(storage.exists(tmp_path))
    assert asyncio.run(storage.get_size(path)) == 5
