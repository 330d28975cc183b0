"""
End-to-end tests for the media endpoint through the FastAPI application.
"""

import asyncio

import pytest
from fastapi.testclient import TestClient

from lms_media_system.api.server import APIServer
from lms_media_system.core.auth import CallerIdentity, Role
from lms_media_system.media.infrastructure.repositories import FileSystemMediaStorage
from lms_media_system.media.integration import MediaModule
from lms_media_system.storage.manager import StorageManager


class SpyStorage(FileSystemMediaStorage):
    """File system storage that records read cursors and can fail on demand"""

    def __init__(self, fail_after_reads=None):
        super().__init__()
        self.fail_after_reads = fail_after_reads
        self.opened = []
        self.open_handles = 0
        self.reads = 0

    async def open_range(self, path, start, end, chunk_size):
        self.opened.append((start, end))
        self.open_handles += 1
        chunks = super().open_range(path, start, end, chunk_size)
        try:
            async for chunk in chunks:
                if self.fail_after_reads is not None and self.reads >= self.fail_after_reads:
                    raise PermissionError("Permission denied")
                self.reads += 1
                yield chunk
        finally:
            await chunks.aclose()
            self.open_handles -= 1


@pytest.fixture
def small_chunks(config):
    config.streaming.max_chunk_size_bytes = 100
    return config


def spy_client(config, storage_manager, spy):
    server = APIServer(config, storage_manager, media_module=MediaModule(config, storage_manager, media_storage=spy))
    return TestClient(server.app, raise_server_exceptions=False)


def test_full_file_without_range(client, course_id, student_headers, video_bytes):
    response = client.get(f"/media/{course_id}", headers=student_headers)

    assert response.status_code == 200
    assert response.headers["Content-Length"] == "1000"
    assert response.headers["Content-Type"] == "video/mp4"
    assert "Content-Range" not in response.headers
    assert response.content == video_bytes


def test_first_half(client, course_id, student_headers, video_bytes):
    response = client.get(f"/media/{course_id}", headers={**student_headers, "Range": "bytes=0-499"})

    assert response.status_code == 206
    assert response.headers["Content-Range"] == "bytes 0-499/1000"
    assert response.headers["Content-Length"] == "500"
    assert response.headers["Accept-Ranges"] == "bytes"
    assert response.headers["Content-Type"] == "video/mp4"
    assert response.content == video_bytes[:500]


def test_open_ended_range(client, course_id, student_headers, video_bytes):
    response = client.get(f"/media/{course_id}", headers={**student_headers, "Range": "bytes=900-"})

    assert response.status_code == 206
    assert response.headers["Content-Range"] == "bytes 900-999/1000"
    assert response.headers["Content-Length"] == "100"
    assert response.content == video_bytes[900:]


@pytest.mark.parametrize("range_header", ["bytes=1000-1100", "bytes=500-400", "bytes=0-1000", "bytes=-100", "bytes=x-y"])
def test_unsatisfiable_range(client, course_id, student_headers, video_bytes, range_header):
    response = client.get(f"/media/{course_id}", headers={**student_headers, "Range": range_header})

    assert response.status_code == 416
    assert response.headers["Content-Range"] == "bytes */1000"
    assert video_bytes[:16] not in response.content


def test_non_byte_range_unit_serves_full_file(client, course_id, student_headers, video_bytes):
    response = client.get(f"/media/{course_id}", headers={**student_headers, "Range": "items=0-5"})

    assert response.status_code == 200
    assert response.content == video_bytes


def test_adjacent_ranges_reassemble_the_file(client, course_id, student_headers, video_bytes):
    head = client.get(f"/media/{course_id}", headers={**student_headers, "Range": "bytes=0-123"})
    tail = client.get(f"/media/{course_id}", headers={**student_headers, "Range": "bytes=124-999"})

    assert head.content + tail.content == video_bytes


def test_legacy_video_path(client, course_id, student_headers):
    response = client.get(f"/api/video/{course_id}", headers={**student_headers, "Range": "bytes=10-19"})

    assert response.status_code == 206
    assert response.headers["Content-Range"] == "bytes 10-19/1000"


def test_unknown_course_is_404_without_storage_read(config, storage_manager, student_headers):
    spy = SpyStorage()
    server = APIServer(config, storage_manager, media_module=MediaModule(config, storage_manager, media_storage=spy))

    with TestClient(server.app) as client:
        response = client.get("/media/404", headers=student_headers)

    assert response.status_code == 404
    assert spy.opened == []


def test_missing_video_file_is_404(client, storage_manager, student_headers):
    course_id = storage_manager.register_course(title="Lost", video_filename="gone.mp4", created_by=1)

    response = client.get(f"/media/{course_id}", headers=student_headers)

    assert response.status_code == 404
    assert "Video file" in response.json()["detail"]


def test_missing_token_is_401(client, course_id):
    response = client.get(f"/media/{course_id}")

    assert response.status_code == 401


def test_bad_token_is_403(client, course_id):
    response = client.get(f"/media/{course_id}", headers={"Authorization": "Bearer not-a-jwt"})

    assert response.status_code == 403


def test_storage_not_started_is_500(config, student_headers):
    stopped = StorageManager(config)
    server = APIServer(config, stopped)

    with TestClient(server.app) as client:
        response = client.get("/media/1", headers=student_headers)

    assert response.status_code == 500


def test_media_info(client, course_id, student_headers):
    response = client.get(f"/media/{course_id}/info", headers=student_headers)

    assert response.status_code == 200
    body = response.json()
    assert body["course_id"] == course_id
    assert body["file_size_bytes"] == 1000
    assert body["content_type"] == "video/mp4"
    assert body["supports_range_requests"] is True


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["storage_running"] is True


def test_storage_stats_for_main_admin_only(client, course_id, authenticator, student_headers):
    admin_token = authenticator.issue_token(CallerIdentity(id=1, username="root", role=Role.MAIN_ADMIN))

    denied = client.get("/storage/stats", headers=student_headers)
    allowed = client.get("/storage/stats", headers={"Authorization": f"Bearer {admin_token}"})

    assert denied.status_code == 403
    assert allowed.status_code == 200
    assert allowed.json()["course_count"] == 1


def test_health_reports_media_failures(client, student_headers):
    client.get("/media/404", headers=student_headers)

    media = client.get("/health").json()["media"]

    assert media["errors"]["by_kind"] == {"course_not_found": 1}


@pytest.mark.parametrize("path", ["/media/{}", "/api/video/{}"])
def test_head_sends_planned_headers_without_reading(config, storage_manager, course_id, student_headers, path):
    spy = SpyStorage()

    with spy_client(config, storage_manager, spy) as client:
        full = client.head(path.format(course_id), headers=student_headers)
        partial = client.head(path.format(course_id), headers={**student_headers, "Range": "bytes=0-99"})

    assert full.status_code == 200
    assert full.headers["Content-Length"] == "1000"
    assert full.headers["Accept-Ranges"] == "bytes"
    assert full.headers["Content-Type"] == "video/mp4"
    assert full.content == b""
    assert partial.status_code == 206
    assert partial.headers["Content-Range"] == "bytes 0-99/1000"
    assert partial.headers["Content-Length"] == "100"
    assert spy.opened == []


def test_open_failure_before_any_byte_is_500(small_chunks, storage_manager, course_id, student_headers):
    spy = SpyStorage(fail_after_reads=0)

    with spy_client(small_chunks, storage_manager, spy) as client:
        response = client.get(f"/media/{course_id}", headers={**student_headers, "Range": "bytes=0-499"})

    assert response.status_code == 500
    assert "Content-Range" not in response.headers
    assert spy.open_handles == 0


def test_failure_mid_body_truncates_response_and_server_keeps_serving(small_chunks, storage_manager, course_id, student_headers, video_bytes):
    spy = SpyStorage(fail_after_reads=3)

    with spy_client(small_chunks, storage_manager, spy) as client:
        broken = client.get(f"/media/{course_id}", headers=student_headers)
        spy.fail_after_reads = None
        after = client.get(f"/media/{course_id}", headers=student_headers)

    assert broken.status_code == 200
    assert broken.headers["Content-Length"] == "1000"
    assert broken.content == video_bytes[:300]
    assert after.status_code == 200
    assert after.content == video_bytes
    assert spy.open_handles == 0


def test_client_disconnect_releases_file_handle(small_chunks, storage_manager, course_id, student_headers):
    spy = SpyStorage()
    server = APIServer(small_chunks, storage_manager, media_module=MediaModule(small_chunks, storage_manager, media_storage=spy))
    scope = {
        "type": "http",
        "asgi": {"version": "3.0"},
        "http_version": "1.1",
        "method": "GET",
        "scheme": "http",
        "path": f"/media/{course_id}",
        "raw_path": f"/media/{course_id}".encode(),
        "root_path": "",
        "query_string": b"",
        "headers": [(b"host", b"testserver"), (b"authorization", student_headers["Authorization"].encode())],
        "client": ("testclient", 50000),
        "server": ("testserver", 80),
    }
    body_sent = []

    async def drive():
        first_chunk_sent = asyncio.Event()
        request_delivered = False

        async def receive():
            nonlocal request_delivered
            if not request_delivered:
                request_delivered = True
                return {"type": "http.request", "body": b"", "more_body": False}
            await first_chunk_sent.wait()
            return {"type": "http.disconnect"}

        async def send(message):
            if message["type"] == "http.response.body" and message.get("body"):
                body_sent.append(message["body"])
                first_chunk_sent.set()
                await asyncio.sleep(0.01)

        await server.app(scope, receive, send)
        return spy.open_handles

    open_handles_after_response = asyncio.run(drive())

    assert open_handles_after_response == 0
    assert 0 < sum(len(chunk) for chunk in body_sent) < 1000
    assert spy.reads < 10
