"""
Logging configuration for the LMS Media System.

Sets up the root logger (colored console, rotating file), pins the levels of
the media, API and uvicorn loggers, and provides the per-component helpers
used to count delivery failures and time streams.
"""

import logging
import logging.handlers
import os
import sys
import threading
import time
from datetime import datetime
from typing import Any, Dict, Optional


CONSOLE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
FILE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'

# 10MB per file, 5 backups
MAX_LOG_BYTES = 10 * 1024 * 1024
LOG_BACKUPS = 5


class ColoredFormatter(logging.Formatter):
    """Colored formatter for console output"""

    # ANSI color codes
    COLORS = {
        'DEBUG': '\033[36m',
        'INFO': '\033[32m',
        'WARNING': '\033[33m',
        'ERROR': '\033[31m',
        'CRITICAL': '\033[35m',
    }
    RESET = '\033[0m'

    def format(self, record):
        color = self.COLORS.get(record.levelname)
        if color is None:
            return super().format(record)

        # Color a copy so file handlers keep the plain level name
        record = logging.makeLogRecord(record.__dict__)
        record.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(record)


class LMSMediaLogger:
    """Root logger setup for the LMS Media System"""

    def __init__(self, log_level: str = "INFO", log_file: Optional[str] = None, enable_console: bool = True):
        self.log_level = log_level.upper()
        self.log_file = log_file
        self.enable_console = enable_console

        self._setup_logging()

    @property
    def level(self) -> int:
        return getattr(logging, self.log_level)

    def _setup_logging(self) -> None:
        root_logger = logging.getLogger()
        root_logger.setLevel(self.level)
        root_logger.handlers.clear()

        if self.enable_console:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setLevel(self.level)
            console_handler.setFormatter(ColoredFormatter(CONSOLE_FORMAT))
            root_logger.addHandler(console_handler)

        if self.log_file:
            self._add_file_handler(root_logger)

        self._setup_component_loggers()

        logging.getLogger(__name__).info(f"Logging initialized - Level: {self.log_level}, File: {self.log_file}")

    def _add_file_handler(self, root_logger: logging.Logger) -> None:
        try:
            log_dir = os.path.dirname(self.log_file)
            if log_dir:
                os.makedirs(log_dir, exist_ok=True)

            file_handler = logging.handlers.RotatingFileHandler(self.log_file, maxBytes=MAX_LOG_BYTES, backupCount=LOG_BACKUPS)
            # The file keeps every range served, whatever the console shows
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
            root_logger.addHandler(file_handler)

        except OSError as e:
            print(f"Warning: Could not setup file logging: {e}")

    def _setup_component_loggers(self) -> None:
        """Pin component levels; per-range lines only show at DEBUG"""
        debug = self.log_level == 'DEBUG'

        logging.getLogger('lms_media_system.media').setLevel(logging.DEBUG if debug else logging.INFO)
        logging.getLogger('lms_media_system.api').setLevel(logging.INFO)
        logging.getLogger('performance').setLevel(logging.DEBUG if debug else logging.INFO)

        # Every seek is an access log line
        logging.getLogger('uvicorn').setLevel(logging.INFO if debug else logging.WARNING)
        logging.getLogger('fastapi').setLevel(logging.WARNING)

    @staticmethod
    def setup_exception_logging():
        """Route uncaught exceptions through logging"""

        def handle_exception(exc_type, exc_value, exc_traceback):
            if issubclass(exc_type, KeyboardInterrupt):
                sys.__excepthook__(exc_type, exc_value, exc_traceback)
                return

            logging.getLogger("uncaught_exception").critical("Uncaught exception", exc_info=(exc_type, exc_value, exc_traceback))

        sys.excepthook = handle_exception


class PerformanceLogger:
    """
    Times operations for one component.

    Timers are started with ``start_timer`` and the returned token is handed
    back to ``end_timer``, so concurrent streams can be timed by one logger.
    """

    def __init__(self, name: str, level: int = logging.INFO):
        self.logger = logging.getLogger(f"performance.{name}")
        self.level = level

    def start_timer(self) -> float:
        return time.perf_counter()

    def end_timer(self, operation: str, started: float, bytes_transferred: Optional[int] = None) -> float:
        """Log how long ``operation`` took, with throughput when bytes were moved"""
        duration = time.perf_counter() - started

        message = f"Completed: {operation} in {duration:.3f}s"
        if bytes_transferred is not None:
            rate = bytes_transferred / duration / 1024 if duration > 0 else 0.0
            message += f" ({bytes_transferred} bytes, {rate:.1f} KiB/s)"

        self.logger.log(self.level, message)
        return duration


class ErrorTracker:
    """
    Count and log failures of one component by kind.

    Kinds are short labels such as ``course_not_found`` or ``io_failure``;
    their counts are reported by ``get_error_stats`` on the health endpoint.
    Safe to share between concurrent requests.
    """

    def __init__(self, component_name: str):
        self.component_name = component_name
        self.logger = logging.getLogger(f"errors.{component_name}")
        self.counts: Dict[str, int] = {}
        self.last_error_time: Optional[datetime] = None
        self._lock = threading.Lock()

    def record(self, kind: str) -> None:
        with self._lock:
            self.counts[kind] = self.counts.get(kind, 0) + 1
            self.last_error_time = datetime.now()

    def log_error(self, error: Exception, kind: str, additional_data: Optional[Dict[str, Any]] = None) -> None:
        """Count ``error`` under ``kind`` and log it with its traceback"""
        self.record(kind)

        error_msg = f"Error in {self.component_name} ({kind}): {error}"
        if additional_data:
            error_msg += f" | Data: {additional_data}"

        self.logger.error(error_msg, exc_info=error)

    def log_warning(self, message: str, kind: str) -> None:
        self.record(kind)
        self.logger.warning(f"Warning in {self.component_name} ({kind}): {message}")

    def get_error_stats(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "component": self.component_name,
                "error_count": sum(self.counts.values()),
                "by_kind": dict(self.counts),
                "last_error_time": self.last_error_time.isoformat() if self.last_error_time else None,
            }


def setup_logging(log_level: str = "INFO", log_file: Optional[str] = None) -> LMSMediaLogger:
    """Setup logging for the entire application"""
    logger_setup = LMSMediaLogger(log_level=log_level, log_file=log_file)
    LMSMediaLogger.setup_exception_logging()
    return logger_setup


def get_performance_logger(component_name: str, level: int = logging.INFO) -> PerformanceLogger:
    return PerformanceLogger(component_name, level)


def get_error_tracker(component_name: str) -> ErrorTracker:
    return ErrorTracker(component_name)
