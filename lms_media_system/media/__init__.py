"""
Media Module for the LMS Media System.

This module provides range-aware delivery of course videos
following clean architecture principles.
"""

from .domain.models import MediaResource, ByteRange, StreamPlan, StreamOutcome
from .application.locator_service import ResourceLocator
from .application.streaming_service import RangeStreamer
from .integration import MediaModule

__all__ = ["MediaResource", "ByteRange", "StreamPlan", "StreamOutcome", "ResourceLocator", "RangeStreamer", "MediaModule"]
