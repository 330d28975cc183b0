"""
Media Module Integration.

Wires the media delivery layers together and exposes their routes to the API server.
This module handles dependency injection and service composition.
"""

import logging
from typing import Optional

from fastapi import APIRouter

from ..core.auth import TokenAuthenticator
from ..core.config import Config
from ..core.logging_config import get_error_tracker
from ..storage.manager import StorageManager

# Domain interfaces
from .domain.interfaces import CourseRepository, MediaStorage

# Infrastructure implementations
from .infrastructure.repositories import IndexedCourseRepository, FileSystemMediaStorage

# Application services
from .application.locator_service import ResourceLocator
from .application.streaming_service import RangeStreamer

# Presentation layer
from .presentation.controllers import MediaController
from .presentation.routes import create_media_routes, create_caller_dependency


class MediaModule:
    """
    Composition root for media delivery.

    Creates and wires the repositories, services and controller for a
    process-scoped storage manager.
    """

    def __init__(
        self,
        config: Config,
        storage_manager: StorageManager,
        authenticator: Optional[TokenAuthenticator] = None,
        media_storage: Optional[MediaStorage] = None
    ):
        self.config = config
        self.storage_manager = storage_manager
        self.authenticator = authenticator or TokenAuthenticator(config.auth)
        self.logger = logging.getLogger(__name__)

        self.course_repository: CourseRepository = IndexedCourseRepository(storage_manager)
        self.media_storage: MediaStorage = media_storage or FileSystemMediaStorage()
        # Not-found causes and stream failures are counted together
        self.error_tracker = get_error_tracker("media")

        self.locator = ResourceLocator(
            course_repository=self.course_repository,
            media_storage=self.media_storage,
            default_content_type=config.streaming.default_content_type,
            error_tracker=self.error_tracker
        )
        self.streamer = RangeStreamer(
            media_storage=self.media_storage,
            max_chunk_size=config.streaming.max_chunk_size_bytes,
            error_tracker=self.error_tracker
        )

        self.media_controller = MediaController(
            locator=self.locator,
            streamer=self.streamer,
            streaming_config=config.streaming
        )

        self.logger.info("Media module initialized")

    def get_api_routes(self) -> APIRouter:
        """Get FastAPI routes for media delivery"""
        return create_media_routes(
            media_controller=self.media_controller,
            require_caller=create_caller_dependency(self.authenticator)
        )

    def get_module_status(self) -> dict:
        return {
            "course_repository": type(self.course_repository).__name__,
            "media_storage": type(self.media_storage).__name__,
            "max_chunk_size_bytes": self.streamer.max_chunk_size,
            "storage_running": self.storage_manager.is_running(),
            "errors": self.error_tracker.get_error_stats()
        }
