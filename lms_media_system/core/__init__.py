"""
LMS Media System - Core Module

This module contains configuration management, logging setup and
caller authentication shared by every other component.
"""

from .config import Config
from .auth import Action, CallerIdentity, Role, TokenAuthenticator, can_access

__all__ = ["Config", "Action", "CallerIdentity", "Role", "TokenAuthenticator", "can_access"]
