"""
Storage Manager for the LMS Media System.

This module owns the process-wide storage handle: the video directory and
the course index that maps course ids to stored video references.
"""

import json
import logging
import os
import threading
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, Union

from ..core.config import Config


class StorageManager:
    """Manages the video directory and the course index"""

    def __init__(self, config: Config):
        self.config = config
        self.storage_config = config.storage
        self.logger = logging.getLogger(__name__)

        self.base_path = Path(self.storage_config.base_path)
        self.video_path = self.storage_config.video_path
        self.course_index_path = self.storage_config.course_index_path

        self.course_index: Dict[str, Any] = {"courses": {}, "next_id": 1, "last_updated": None}
        self._lock = threading.RLock()
        self.running = False

    def start(self) -> None:
        """Open the storage backend: ensure directories and load the course index"""
        with self._lock:
            if self.running:
                return

            self._ensure_storage_structure()
            self.course_index = self._load_course_index()
            self.running = True

        self.logger.info(f"Storage manager started ({len(self.course_index['courses'])} courses indexed)")

    def close(self) -> None:
        """Flush the course index and release the storage backend"""
        with self._lock:
            if not self.running:
                return

            self._save_course_index()
            self.running = False

        self.logger.info("Storage manager closed")

    def is_running(self) -> bool:
        return self.running

    def _require_running(self) -> None:
        if not self.running:
            raise RuntimeError("Storage manager is not started")

    def _ensure_storage_structure(self) -> None:
        """Ensure storage directory structure exists"""
        self.base_path.mkdir(parents=True, exist_ok=True)
        self.video_path.mkdir(parents=True, exist_ok=True)
        self.logger.debug(f"Ensured video directory: {self.video_path}")

    def _load_course_index(self) -> Dict[str, Any]:
        """Load course index from disk"""
        if not self.course_index_path.exists():
            return {"courses": {}, "next_id": 1, "last_updated": None}

        try:
            with open(self.course_index_path, "r") as f:
                index = json.load(f)
        except (OSError, ValueError) as e:
            self.logger.error(f"Error loading course index: {e}")
            raise

        index.setdefault("courses", {})
        index.setdefault("next_id", self._next_free_id(index["courses"]))
        return index

    def _save_course_index(self) -> None:
        """Save course index to disk"""
        self.course_index["last_updated"] = datetime.now().isoformat()
        tmp_path = self.course_index_path.with_suffix(".tmp")
        with open(tmp_path, "w") as f:
            json.dump(self.course_index, f, indent=2)
        os.replace(tmp_path, self.course_index_path)

    @staticmethod
    def _next_free_id(courses: Dict[str, Any]) -> int:
        numeric_ids = [int(course_id) for course_id in courses if str(course_id).isdigit()]
        return max(numeric_ids, default=0) + 1

    def register_course(self, title: str, video_filename: str, created_by: Union[int, str], description: str = "", content_type: Optional[str] = None) -> str:
        """Register a course whose video has already been placed in the video directory"""
        if not title or not video_filename:
            raise ValueError("title and video_filename are required")

        with self._lock:
            self._require_running()

            course_id = str(self.course_index["next_id"])
            self.course_index["next_id"] += 1

            course = {
                "id": course_id,
                "title": title,
                "description": description,
                "src": str(Path(self.storage_config.video_dir) / video_filename),
                "created_by": created_by,
                "created_at": datetime.now().isoformat(),
            }
            if content_type:
                course["content_type"] = content_type

            self.course_index["courses"][course_id] = course
            self._save_course_index()

        self.logger.info(f"Registered course {course_id}: {title}")
        return course_id

    def get_course_record(self, course_id: Union[int, str]) -> Optional[Dict[str, Any]]:
        """Get a copy of the course record, or None when no such course exists"""
        with self._lock:
            self._require_running()
            course = self.course_index["courses"].get(str(course_id))
            return dict(course) if course else None

    def resolve_media_path(self, src: str) -> Optional[Path]:
        """
        Resolve a stored video reference to an absolute path.

        Returns None when the reference points outside the storage root.
        """
        base = self.base_path.resolve()
        candidate = (base / src).resolve()
        if candidate != base and base not in candidate.parents:
            self.logger.warning(f"Video reference escapes storage root: {src}")
            return None
        return candidate

    def get_storage_statistics(self) -> Dict[str, Any]:
        """Get storage usage statistics"""
        with self._lock:
            course_count = len(self.course_index["courses"])

        total_size = 0
        file_count = 0
        if self.video_path.exists():
            for video_file in self.video_path.iterdir():
                if video_file.is_file():
                    file_count += 1
                    total_size += video_file.stat().st_size

        return {"base_path": str(self.base_path), "course_count": course_count, "video_file_count": file_count, "total_size_bytes": total_size}
