"""
Data models for the LMS Media System API.

This module defines Pydantic models for API requests and responses.
"""

from typing import Any, Dict, Optional
from pydantic import BaseModel


class SuccessResponse(BaseModel):
    """Generic success response model"""

    success: bool = True
    message: str
    data: Optional[Dict[str, Any]] = None


class HealthResponse(BaseModel):
    """Health check response model"""

    status: str
    timestamp: str
    storage_running: bool
    media: Dict[str, Any]


class StorageStatsResponse(BaseModel):
    """Storage statistics response model"""

    base_path: str
    course_count: int
    video_file_count: int
    total_size_bytes: int
