"""Centralized logging factory for consistent logger creation across the engine.

This module provides a singleton-based logging factory that ensures consistent
logger configuration for every component of the workflow engine. It handles:
- Automatic initialization of the logging system
- Centralized log file management
- Consistent formatting across all loggers
- Per-component logging level configuration

Usage:
    # Explicit initialization (optional - auto-initializes on first use)
    LoggingFactory.initialize(log_dir=Path("logs"), level=logging.INFO)

    # Get a logger for your module
    logger = LoggingFactory.get_logger(__name__)
    logger.info("Workflow started")

    # Or use the convenience function
    from content_workflows.utils.logging_factory import get_logger
    logger = get_logger(__name__)
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

# Component loggers whose verbosity is switched together
COMPONENT_LOGGERS = (
    "content_workflows.orchestration",
    "content_workflows.context",
    "content_workflows.steps",
)


class LoggingFactory:
    """Factory for creating and configuring loggers consistently.

    The logging system is configured once per process; subsequent calls to
    initialize() are ignored. Output goes to ``<log_dir>/workflows.log`` and
    to the console.

    Class Attributes:
        _initialized: Flag to ensure single initialization
        _log_dir: Directory path where log files are stored
    """

    _initialized = False
    _log_dir = Path("logs")

    @classmethod
    def initialize(
        cls,
        log_dir: Optional[Path] = None,
        level: int = logging.INFO,
        format_string: Optional[str] = None,
        log_to_file: bool = True,
        log_to_console: bool = True,
    ) -> None:
        """Initialize the logging system once for the entire process.

        Args:
            log_dir: Directory for log files. If None, uses "logs" in current directory.
            level: Default logging level for the root logger.
            format_string: Custom format string for log messages. If None, uses:
                          "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            log_to_file: Write ``workflows.log``.
            log_to_console: Attach a plain stderr handler. The CLI turns this
                          off and renders log records through Rich instead.
        """
        if cls._initialized:
            return

        if log_dir:
            cls._log_dir = log_dir

        if format_string is None:
            format_string = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

        handlers: list[logging.Handler] = []
        if log_to_file:
            cls._log_dir.mkdir(parents=True, exist_ok=True)
            handlers.append(logging.FileHandler(cls._log_dir / "workflows.log"))
        if log_to_console:
            handlers.append(logging.StreamHandler())

        logging.basicConfig(level=level, format=format_string, handlers=handlers)

        cls._initialized = True

    @classmethod
    def get_logger(cls, name: str) -> logging.Logger:
        """Get a configured logger for the given module name.

        Initializes the logging system with defaults if initialize() has not
        been called explicitly.

        Args:
            name: Module name for the logger, typically __name__.

        Returns:
            Configured logger instance ready for use.
        """
        if not cls._initialized:
            cls.initialize()

        return logging.getLogger(name)

    @classmethod
    def set_level(cls, name: str, level: int) -> None:
        """Set the logging level for a specific logger.

        Args:
            name: Logger name to configure (e.g. 'content_workflows.steps')
            level: Logging level to set
        """
        logging.getLogger(name).setLevel(level)

    @classmethod
    def configure_verbose(cls, verbose: bool = False) -> None:
        """Switch the engine loggers between DEBUG and INFO.

        Args:
            verbose: If True, sets all engine loggers to DEBUG level.
        """
        level = logging.DEBUG if verbose else logging.INFO

        logging.getLogger().setLevel(level)
        logging.getLogger("content_workflows").setLevel(level)

        for name in COMPONENT_LOGGERS:
            logging.getLogger(name).setLevel(level)


def get_logger(name: str) -> logging.Logger:
    """Get a configured logger for the given module name.

    Delegates to LoggingFactory.get_logger().

    Args:
        name: Module name for the logger.

    Returns:
        Configured logger instance ready for use.
    """
    return LoggingFactory.get_logger(name)
