# chess_probe/chess_probe/utils/logging_config.py
"""
Logging configuration for the ChessProbe application.

This module provides a centralized function to set up consistent logging
across the application, with distinct formatting for console and file
outputs. Console logs go to stderr so stdout only carries the result; while a
progress bar is shown, `main` routes them through tqdm with
`logging_redirect_tqdm`.
"""
import logging
import sys
from typing import List, Optional

from chess_probe.config import settings


def setup_logging(
    log_level_str: Optional[str] = None,
    log_file: Optional[str] = None,
    log_to_console: bool = True,
) -> None:
    """
    Configures application-wide logging by manipulating the root logger.

    By configuring the root logger, all loggers created via
    `logging.getLogger(...)` will inherit this configuration.

    Args:
        log_level_str: The desired logging level as a string (e.g., "INFO", "DEBUG").
                       If None, defaults to `settings.DEFAULT_LOG_LEVEL`.
        log_file: Path of a log file. If None, nothing is logged to a file.
        log_to_console: Whether to output logs to the console (stderr).
    """
    effective_log_level_str = log_level_str or settings.DEFAULT_LOG_LEVEL

    level_val = logging.getLevelName(effective_log_level_str.upper())
    if not isinstance(level_val, int):
        logging.warning(
            f"Invalid log level string: '{effective_log_level_str}'. Defaulting to 'INFO'."
        )
        level_val = logging.INFO
        effective_log_level_str = "INFO"

    root_logger = logging.getLogger()
    root_logger.setLevel(level_val)

    if root_logger.hasHandlers():
        root_logger.handlers.clear()

    console_formatter = logging.Formatter("%(levelname)-8s - %(name)s - %(message)s")
    file_formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    handlers: List[logging.Handler] = []
    if log_to_console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(console_formatter)
        handlers.append(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        file_handler.setFormatter(file_formatter)
        handlers.append(file_handler)

    if not handlers:
        root_logger.addHandler(logging.NullHandler())
        return

    for handler in handlers:
        root_logger.addHandler(handler)

    # httpx logs every request at INFO; keep it out of the way unless debugging.
    if level_val > logging.DEBUG:
        logging.getLogger("httpx").setLevel(logging.WARNING)

    setup_logger = logging.getLogger(settings.APP_NAME + ".Logging")
    setup_logger.debug(f"Logging initialized. Level: {effective_log_level_str.upper()}.")
    if log_file:
        setup_logger.debug(f"Logging to file enabled: '{log_file}'.")
