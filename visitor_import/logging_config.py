"""
Logging Configuration Module

This module configures console logging for the import tools and silences
noisy third-party libraries. While a progress bar is shown, console records
are redirected through tqdm by :class:`~visitor_import.progress.TqdmProgress`.
"""

import logging
import sys
from typing import Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s"


class LoggingConfig:
    """Console logging configuration for import runs."""

    def __init__(self):
        self._handler: Optional[logging.Handler] = None

    def setup_logging(self, debug: bool = False, log_file: Optional[str] = None) -> None:
        """
        Configure root logging and silence chatty libraries.

        Args:
            debug: Whether to enable debug logging
            log_file: Optional file that receives a copy of every record
        """
        root_logger = logging.getLogger()
        root_logger.handlers.clear()  # Remove any existing handlers

        self._handler = logging.StreamHandler(sys.stderr)
        self._handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root_logger.addHandler(self._handler)

        if log_file:
            file_handler = logging.FileHandler(log_file, encoding="utf-8")
            file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
            root_logger.addHandler(file_handler)

        root_logger.setLevel(logging.DEBUG if debug else logging.INFO)

        # Silence noisy libraries if not in debug mode
        if not debug:
            self._silence_noisy_libraries()

    def _silence_noisy_libraries(self) -> None:
        """Silence noisy third-party libraries."""
        noisy_loggers = [
            "sqlalchemy.engine",
            "sqlalchemy.pool",
            "sqlalchemy.orm",
        ]

        for name in noisy_loggers:
            logger = logging.getLogger(name)
            logger.setLevel(logging.WARNING)

    def stop(self) -> None:
        """Flush and detach the handlers installed by setup_logging."""
        root_logger = logging.getLogger()
        for handler in list(root_logger.handlers):
            handler.flush()
            if handler is not self._handler:
                handler.close()
            root_logger.removeHandler(handler)
        self._handler = None


# Global logging configuration instance
logging_config = LoggingConfig()


def setup_logging(debug: bool = False, log_file: Optional[str] = None) -> None:
    """
    Setup logging configuration.

    Args:
        debug: Whether to enable debug logging
        log_file: Optional path of a log file
    """
    logging_config.setup_logging(debug, log_file)


def stop_logging() -> None:
    """Detach logging handlers and cleanup."""
    logging_config.stop()


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger with the specified name.

    Args:
        name: Logger name

    Returns:
        Configured logger instance
    """
    return logging.getLogger(name)
