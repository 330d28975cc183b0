"""
Media API Request/Response Schemas.

Pydantic models for API serialization and validation.
"""

from typing import Optional
from pydantic import BaseModel, Field


class MediaInfoResponse(BaseModel):
    """Streaming information for a course video"""
    course_id: str = Field(..., description="Course identifier")
    title: Optional[str] = Field(None, description="Course title")
    file_size_bytes: int = Field(..., description="Video size in bytes")
    content_type: str = Field(..., description="MIME type served for the video")
    supports_range_requests: bool = Field(True, description="Whether byte range requests are honored")
    chunk_size_bytes: int = Field(..., description="Chunk size used when streaming")

    class Config:
        json_schema_extra = {
            "example": {
                "course_id": "12",
                "title": "Intro to Algebra",
                "file_size_bytes": 52428800,
                "content_type": "video/mp4",
                "supports_range_requests": True,
                "chunk_size_bytes": 524288
            }
        }


class ErrorResponse(BaseModel):
    """Error response model"""
    detail: str = Field(..., description="Error description")
