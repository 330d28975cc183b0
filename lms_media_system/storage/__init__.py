"""
Storage module for the LMS Media System.

This module owns the video directory and the course index.
"""

from .manager import StorageManager

__all__ = ["StorageManager"]
