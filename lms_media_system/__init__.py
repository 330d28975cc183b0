"""
LMS Media System

Learning-management backend component that delivers course videos
over HTTP with byte range support.
"""

__version__ = "1.0.0"
__author__ = "LMS Platform Team"

from .main import LMSMediaSystem

__all__ = ["LMSMediaSystem"]
