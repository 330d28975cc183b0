"""
Configuration management for the LMS Media System.

This module handles all configuration settings including storage paths,
streaming parameters, token verification and server settings.
"""

import json
import logging
import secrets
from typing import Any, Dict, List, Optional
from dataclasses import dataclass, asdict, field, fields
from pathlib import Path


DEFAULT_JWT_SECRET = "change-me-before-deploying"


@dataclass
class StorageConfig:
    """Storage configuration"""

    base_path: str = "storage"
    video_dir: str = "videos"  # Relative to base_path
    course_index_file: str = "course_index.json"  # Relative to base_path

    @property
    def video_path(self) -> Path:
        return Path(self.base_path) / self.video_dir

    @property
    def course_index_path(self) -> Path:
        return Path(self.base_path) / self.course_index_file


@dataclass
class StreamingConfig:
    """Media streaming configuration"""

    max_chunk_size_bytes: int = 1024 * 1024  # Upper bound for a single read
    default_content_type: str = "video/mp4"
    cache_max_age_seconds: int = 3600


@dataclass
class AuthConfig:
    """Bearer token configuration"""

    jwt_secret: str = DEFAULT_JWT_SECRET
    jwt_algorithm: str = "HS256"
    token_ttl_hours: int = 8


@dataclass
class SystemConfig:
    """System-wide configuration"""

    log_level: str = "INFO"
    log_file: Optional[str] = "lms_media_system.log"
    api_host: str = "0.0.0.0"
    api_port: int = 3000
    enable_api: bool = True
    cors_origins: List[str] = field(default_factory=lambda: ["*"])


class Config:
    """Main configuration manager"""

    def __init__(self, config_file: Optional[str] = None, save_defaults: bool = True):
        self.config_file = config_file or "config.json"
        self.save_defaults = save_defaults
        self.logger = logging.getLogger(__name__)

        # Default configurations
        self.storage = StorageConfig()
        self.streaming = StreamingConfig()
        self.auth = AuthConfig()
        self.system = SystemConfig()

        self.load_config()

    def load_config(self) -> None:
        """Load configuration from file"""
        config_path = Path(self.config_file)

        if config_path.exists():
            try:
                with open(config_path, "r") as f:
                    config_data = json.load(f)

                self.storage = self._load_section(StorageConfig, config_data.get("storage"))
                self.streaming = self._load_section(StreamingConfig, config_data.get("streaming"))
                self.auth = self._load_section(AuthConfig, config_data.get("auth"))
                self.system = self._load_section(SystemConfig, config_data.get("system"))

                self.logger.info(f"Configuration loaded from {config_path}")

            except (OSError, ValueError, TypeError) as e:
                self.logger.error(f"Error loading config from {config_path}: {e}")
        else:
            self.logger.info(f"Config file {config_path} not found, using defaults")
            if self.save_defaults:
                # Fresh secret per install
                self.auth.jwt_secret = secrets.token_urlsafe(32)
                self.save_config()

        if self.auth.jwt_secret == DEFAULT_JWT_SECRET:
            self.logger.warning("auth.jwt_secret is the built-in default; tokens can be forged until it is changed")

    def _load_section(self, section_cls, section_data: Optional[Dict[str, Any]]):
        """Build a config section, ignoring keys the section does not define"""
        if not section_data:
            return section_cls()

        known = {f.name for f in fields(section_cls)}
        unknown = sorted(set(section_data) - known)
        if unknown:
            self.logger.warning(f"Ignoring unknown {section_cls.__name__} keys: {', '.join(unknown)}")

        return section_cls(**{key: value for key, value in section_data.items() if key in known})

    def save_config(self) -> None:
        """Save current configuration to file"""
        try:
            with open(self.config_file, "w") as f:
                json.dump(self.to_dict(), f, indent=2)
            self.logger.info(f"Configuration saved to {self.config_file}")
        except OSError as e:
            self.logger.error(f"Error saving config to {self.config_file}: {e}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary"""
        return {"storage": asdict(self.storage), "streaming": asdict(self.streaming), "auth": asdict(self.auth), "system": asdict(self.system)}
