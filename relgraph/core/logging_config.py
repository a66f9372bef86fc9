"""Centralized Logging Configuration

This module provides:
- Centralized logging configuration for all engine components
- Console and optional file logging with consistent formatting
- Logger factory with the ``relgraph`` naming convention
"""

import logging
import logging.config
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union


ROOT_LOGGER_NAME = "relgraph"


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[Union[str, Path]] = None,
    console_output: bool = True,
    file_output: bool = False
) -> None:
    """Setup logging configuration for the engine

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Log file path (defaults to logs/relgraph.log when file output is on)
        console_output: Whether to output logs to console
        file_output: Whether to output logs to file
    """
    log_level = log_level.upper()

    config: Dict[str, Any] = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S"
            },
            "detailed": {
                "format": "%(asctime)s [%(levelname)s] %(name)s:%(lineno)d - %(funcName)s() - %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S"
            }
        },
        "handlers": {},
        "loggers": {
            ROOT_LOGGER_NAME: {
                "level": log_level,
                "handlers": [],
                "propagate": False
            }
        }
    }

    if console_output:
        config["handlers"]["console"] = {
            "class": "logging.StreamHandler",
            "level": log_level,
            "formatter": "standard",
            "stream": "ext://sys.stderr"
        }
        config["loggers"][ROOT_LOGGER_NAME]["handlers"].append("console")

    if file_output:
        if log_file is None:
            log_file = Path("logs") / "relgraph.log"
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        config["handlers"]["file"] = {
            "class": "logging.FileHandler",
            "level": log_level,
            "formatter": "detailed",
            "filename": str(log_file),
            "mode": "a",
            "encoding": "utf-8"
        }
        config["loggers"][ROOT_LOGGER_NAME]["handlers"].append("file")

    logging.config.dictConfig(config)

    logger = get_logger("core.logging")
    logger.debug("Logging system initialized - Level: %s, Console: %s, File: %s",
                 log_level, console_output, log_file if file_output else "None")


def get_logger(name: str) -> logging.Logger:
    """Get a logger within the relgraph namespace

    Example:
        logger = get_logger("graph_visualization.layout_solver")
        # Creates logger named "relgraph.graph_visualization.layout_solver"
    """
    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def auto_setup_logging(default_level: str = "INFO") -> None:
    """Setup logging from RELGRAPH_LOG_* environment variables"""
    log_level = os.getenv("RELGRAPH_LOG_LEVEL", default_level).upper()
    log_file = os.getenv("RELGRAPH_LOG_FILE")
    console_output = os.getenv("RELGRAPH_LOG_CONSOLE", "true").lower() == "true"

    setup_logging(
        log_level=log_level,
        log_file=log_file,
        console_output=console_output,
        file_output=bool(log_file)
    )


def log_operation_end(logger: logging.Logger, operation: str, duration: float, success: bool = True, **kwargs):
    """Log the completion of an operation with timing"""
    status = "completed" if success else "failed"
    context = " ".join(f"{k}={v}" for k, v in kwargs.items())
    logger.info("%s %s in %.2fs%s", operation.capitalize(), status, duration,
                f" ({context})" if context else "")
