"""
Media Application Layer.

Contains the use cases that locate course videos and stream them
with HTTP range semantics.
"""

from .locator_service import ResourceLocator
from .streaming_service import RangeStreamer

__all__ = [
    "ResourceLocator",
    "RangeStreamer",
]
