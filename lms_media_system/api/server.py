"""
FastAPI Server for the LMS Media System.

This module builds the FastAPI application and runs it under uvicorn.
"""

import logging
import threading
from datetime import datetime
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
import uvicorn

from ..core.auth import CallerIdentity, Role, TokenAuthenticator
from ..core.config import Config
from ..media.integration import MediaModule
from ..media.presentation.routes import create_caller_dependency
from ..storage.manager import StorageManager
from .models import HealthResponse, StorageStatsResponse, SuccessResponse


class APIServer:
    """FastAPI server for the LMS Media System"""

    def __init__(self, config: Config, storage_manager: StorageManager, media_module: Optional[MediaModule] = None):
        self.config = config
        self.storage_manager = storage_manager
        self.authenticator = TokenAuthenticator(config.auth)
        self.media_module = media_module or MediaModule(config, storage_manager, authenticator=self.authenticator)
        self.logger = logging.getLogger(__name__)

        self.app = FastAPI(title="LMS Media System API", description="Range-aware course video delivery", version="1.0.0")

        # Server state
        self.running = False
        self._server: Optional[uvicorn.Server] = None
        self._server_thread: Optional[threading.Thread] = None

        # Browser players fetch videos cross-origin
        self.app.add_middleware(CORSMiddleware, allow_origins=config.system.cors_origins, allow_credentials=True, allow_methods=["GET", "HEAD", "OPTIONS"], allow_headers=["*"], expose_headers=["Content-Range", "Accept-Ranges", "Content-Length"])

        self._setup_routes()

    def _setup_routes(self):
        """Setup API routes"""
        require_caller = create_caller_dependency(self.authenticator)

        @self.app.get("/", response_model=SuccessResponse)
        async def root():
            return SuccessResponse(message="LMS Media System API")

        @self.app.get("/health", response_model=HealthResponse)
        async def health_check():
            return HealthResponse(status="healthy", timestamp=datetime.now().isoformat(), storage_running=self.storage_manager.is_running(), media=self.media_module.get_module_status())

        @self.app.get("/storage/stats", response_model=StorageStatsResponse)
        async def get_storage_stats(caller: CallerIdentity = Depends(require_caller)):
            """Get storage statistics (main admin only)"""
            if caller.role != Role.MAIN_ADMIN:
                raise HTTPException(status_code=403, detail="Not allowed")
            try:
                return StorageStatsResponse(**self.storage_manager.get_storage_statistics())
            except OSError as e:
                self.logger.error(f"Error getting storage stats: {e}")
                raise HTTPException(status_code=500, detail="Server error")

        self.app.include_router(self.media_module.get_api_routes())

    def start(self) -> bool:
        """Start the API server"""
        if self.running:
            self.logger.warning("API server is already running")
            return True

        if not self.config.system.enable_api:
            self.logger.info("API server disabled in configuration")
            return False

        try:
            self.logger.info(f"Starting API server on {self.config.system.api_host}:{self.config.system.api_port}")
            uvicorn_config = uvicorn.Config(self.app, host=self.config.system.api_host, port=self.config.system.api_port, log_level="info")
            self._server = uvicorn.Server(uvicorn_config)
            self.running = True

            self._server_thread = threading.Thread(target=self._run_server, daemon=True)
            self._server_thread.start()

            return True

        except Exception as e:
            self.logger.error(f"Error starting API server: {e}")
            self.running = False
            return False

    def stop(self) -> None:
        """Stop the API server"""
        if not self.running:
            return

        self.logger.info("Stopping API server...")

        if self._server:
            self._server.should_exit = True
        if self._server_thread:
            self._server_thread.join(timeout=10)

        self.running = False
        self.logger.info("API server stopped")

    def _run_server(self) -> None:
        """Run the uvicorn server"""
        try:
            self._server.run()
        except Exception as e:
            self.logger.error(f"Error running API server: {e}")
        finally:
            self.running = False

    def is_running(self) -> bool:
        return self.running
