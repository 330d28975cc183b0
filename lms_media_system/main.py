"""
Main Application Coordinator for the LMS Media System.

This module coordinates all system components and provides graceful startup/shutdown.
"""

import signal
import time
import logging
import sys
from typing import Optional
from datetime import datetime

from .core.config import Config
from .core.logging_config import setup_logging, get_error_tracker, get_performance_logger
from .storage.manager import StorageManager
from .api.server import APIServer


class LMSMediaSystem:
    """Main application coordinator for the LMS Media System"""

    def __init__(self, config_file: Optional[str] = None, log_level: Optional[str] = None):
        self.config = Config(config_file)
        if log_level:
            self.config.system.log_level = log_level

        self.logger_setup = setup_logging(log_level=self.config.system.log_level, log_file=self.config.system.log_file)
        self.logger = logging.getLogger(__name__)

        self.error_tracker = get_error_tracker("main_system")
        self.performance_logger = get_performance_logger("main_system")

        # Process-scoped storage handle, opened in start() and closed in stop()
        self.storage_manager = StorageManager(self.config)
        self.api_server = APIServer(self.config, self.storage_manager)

        self.running = False
        self.start_time: Optional[datetime] = None

        self._setup_signal_handlers()

        self.logger.info("LMS Media System initialized")

    def _setup_signal_handlers(self) -> None:
        """Setup signal handlers for graceful shutdown"""

        def signal_handler(signum, frame):
            self.logger.info(f"Received signal {signum}, initiating graceful shutdown...")
            self.running = False

        signal.signal(signal.SIGINT, signal_handler)
        signal.signal(signal.SIGTERM, signal_handler)

    def start(self) -> bool:
        """Start the entire system"""
        if self.running:
            self.logger.warning("System is already running")
            return True

        self.logger.info("Starting LMS Media System...")
        startup_started = self.performance_logger.start_timer()
        self.start_time = datetime.now()

        self.logger.info("Opening storage...")
        try:
            self.storage_manager.start()
        except Exception as e:
            self.error_tracker.log_error(e, "storage_startup")
            return False

        self.logger.info("Starting API server...")
        try:
            if not self.api_server.start():
                self.error_tracker.log_warning("Failed to start API server", "api_startup")
                self.storage_manager.close()
                return False
        except Exception as e:
            self.error_tracker.log_error(e, "api_startup")
            self.storage_manager.close()
            return False

        self.running = True
        startup_time = self.performance_logger.end_timer("system_startup", startup_started)
        self.logger.info(f"LMS Media System started successfully in {startup_time:.2f}s")
        return True

    def stop(self) -> None:
        """Stop the entire system gracefully"""
        self.logger.info("Stopping LMS Media System...")
        self.running = False

        try:
            # Stop serving before the storage handle goes away
            self.api_server.stop()
            self.storage_manager.close()

            if self.start_time:
                uptime = (datetime.now() - self.start_time).total_seconds()
                self.logger.info(f"System uptime: {uptime:.1f} seconds")

            self.logger.info("LMS Media System stopped")

        except Exception as e:
            self.error_tracker.log_error(e, "system_shutdown")

    def run(self) -> None:
        """Run the system (blocking call)"""
        if not self.start():
            self.logger.error("Failed to start system")
            return

        try:
            self.logger.info("System running... Press Ctrl+C to stop")

            while self.running and self.api_server.is_running():
                time.sleep(1)

        except KeyboardInterrupt:
            self.logger.info("Keyboard interrupt received")
        finally:
            self.stop()

    def is_running(self) -> bool:
        return self.running


def main():
    """Main entry point for the application"""
    import argparse

    parser = argparse.ArgumentParser(description="LMS Media System")
    parser.add_argument("--config", type=str, help="Path to configuration file", default="config.json")
    parser.add_argument("--log-level", type=str, choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="Override log level", default=None)

    args = parser.parse_args()

    system = LMSMediaSystem(args.config, log_level=args.log_level)

    try:
        system.run()
    except Exception as e:
        logging.error(f"Fatal error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
