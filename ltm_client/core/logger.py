# core/logger.py
"""
Centralized logging configuration for the LTM client.
Console output (stderr) always; rotating file output only when LOG_DIR is set.
stdout is left to the report itself.
"""
import os
import sys
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

# Log level from environment (default INFO)
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Optional log directory; a library should not write files unless asked to
LOG_DIR = Path(os.environ["LOG_DIR"]) if os.getenv("LOG_DIR") else None

# Standard format for all loggers
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s"
LOG_FORMAT_SIMPLE = "%(asctime)s - %(levelname)s - %(message)s"


def setup_logger(name: str, level: str = None) -> logging.Logger:
    """
    Create a logger with console and (optional) file handlers.

    Args:
        name: Logger name (typically "ltm.<area>")
        level: Override log level (default from LOG_LEVEL env var)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    # Avoid duplicate handlers if called multiple times
    if logger.handlers:
        return logger

    effective_level = getattr(logging, (level or LOG_LEVEL).upper(), logging.INFO)
    logger.setLevel(effective_level)

    # Console handler - simpler format for readability
    console = logging.StreamHandler(sys.stderr)
    console.setLevel(effective_level)
    console.setFormatter(logging.Formatter(LOG_FORMAT_SIMPLE))
    logger.addHandler(console)

    if LOG_DIR is not None:
        # File handler with rotation (10MB, keep 5 backups)
        try:
            LOG_DIR.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(
                str(LOG_DIR / "ltm-client.log"),
                maxBytes=10 * 1024 * 1024,  # 10MB
                backupCount=5,
                encoding="utf-8"
            )
            file_handler.setLevel(effective_level)
            file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
            logger.addHandler(file_handler)
        except OSError as e:
            # Don't crash if file logging fails (e.g., permissions)
            logger.warning(f"Could not set up file logging: {e}")

    return logger


# Pre-configured loggers for main modules
def get_f5_logger() -> logging.Logger:
    """Logger for F5 REST calls and session handling."""
    return setup_logger("ltm.f5")


def get_service_logger() -> logging.Logger:
    """Logger for report building and operations."""
    return setup_logger("ltm.service")


def get_cli_logger() -> logging.Logger:
    """Logger for the command line entry point."""
    return setup_logger("ltm.cli")
