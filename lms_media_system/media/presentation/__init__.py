"""
Media Presentation Layer.

HTTP controllers, routes and schemas for course video delivery.
"""

from .controllers import MediaController
from .routes import create_media_routes, create_caller_dependency

__all__ = [
    "MediaController",
    "create_media_routes",
    "create_caller_dependency",
]
