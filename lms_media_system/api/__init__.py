"""
API module for the LMS Media System.

This module provides the FastAPI application and its uvicorn runner.
"""

from .server import APIServer

__all__ = ["APIServer"]
