"""
Shared fixtures for the LMS Media System tests.
"""

import pytest
from fastapi.testclient import TestClient

from lms_media_system.api.server import APIServer
from lms_media_system.core.auth import CallerIdentity, Role, TokenAuthenticator
from lms_media_system.core.config import Config
from lms_media_system.storage.manager import StorageManager


VIDEO_LENGTH = 1000


@pytest.fixture
def video_bytes() -> bytes:
    return bytes(i % 251 for i in range(VIDEO_LENGTH))


@pytest.fixture
def config(tmp_path) -> Config:
    config = Config(str(tmp_path / "config.json"), save_defaults=False)
    config.storage.base_path = str(tmp_path / "storage")
    config.auth.jwt_secret = "test-secret"
    config.system.log_file = None
    return config


@pytest.fixture
def storage_manager(config):
    manager = StorageManager(config)
    manager.start()
    yield manager
    manager.close()


@pytest.fixture
def course_id(storage_manager, video_bytes) -> str:
    (storage_manager.video_path / "lecture.mp4").write_bytes(video_bytes)
    return storage_manager.register_course(title="Intro to Algebra", video_filename="lecture.mp4", created_by=7)


@pytest.fixture
def authenticator(config) -> TokenAuthenticator:
    return TokenAuthenticator(config.auth)


@pytest.fixture
def student_headers(authenticator) -> dict:
    token = authenticator.issue_token(CallerIdentity(id=42, username="student1", role=Role.STUDENT))
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def api_server(config, storage_manager) -> APIServer:
    return APIServer(config, storage_manager)


@pytest.fixture
def client(api_server):
    with TestClient(api_server.app) as test_client:
        yield test_client
