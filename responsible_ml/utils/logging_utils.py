"""
Logging utilities for the Responsible ML workflow.
"""

import functools
import logging
import sys
import time
from pathlib import Path
from typing import Optional, Union
from datetime import datetime

from ..config.logging_config import get_logging_config, apply_logging_config


def setup_logging(log_file_path: Optional[Union[str, Path]] = None,
                  level: int = logging.INFO,
                  format_string: Optional[str] = None,
                  date_format: Optional[str] = None,
                  verbose: bool = False,
                  quiet: bool = False) -> logging.Logger:
    """
    Setup logging to a file and stdout with per-component levels.

    Args:
        log_file_path: Log file or directory. If None, creates timestamped file in 'logs'.
        level: Logging level for the workflow components
        format_string: Custom format string for log messages
        date_format: Custom date format string
        verbose: Enable verbose logging (DEBUG level)
        quiet: Enable minimal logging (WARNING level only)

    Returns:
        Configured logger instance
    """
    if quiet:
        config = get_logging_config(verbose=False)
        config['root_level'] = logging.WARNING
        config['console_level'] = logging.WARNING
    elif verbose:
        config = get_logging_config(verbose=True)
        level = logging.DEBUG
    else:
        config = get_logging_config(verbose=False)
        if level != logging.INFO:
            config['root_level'] = level
            config['console_level'] = level
            config['file_level'] = level
            config['components'] = {name: level for name in config['components']}

    # Clear any existing handlers to avoid duplicate lines on repeated runs
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
    if log_file_path is None:
        log_file_path = Path('logs') / f'workflow_run_{timestamp}.log'
    else:
        log_file_path = Path(log_file_path)
        # A directory gets a default file name inside it
        if log_file_path.is_dir() or str(log_file_path).endswith('/') or not log_file_path.suffix:
            log_file_path = log_file_path / f'workflow_run_{timestamp}.log'
    log_file_path.parent.mkdir(parents=True, exist_ok=True)

    formatter = logging.Formatter(format_string or config['format'],
                                  datefmt=date_format or config['date_format'])

    file_handler = logging.FileHandler(log_file_path, mode='w', encoding='utf-8')
    file_handler.setLevel(config['file_level'])
    file_handler.setFormatter(formatter)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(config['console_level'])
    console_handler.setFormatter(formatter)

    root_logger.setLevel(config['root_level'])
    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    apply_logging_config(config)

    logger = logging.getLogger('responsible_ml')
    logger.info(f"Logging initialized - File: {log_file_path}, Level: {logging.getLevelName(level)}")

    return logger


def log_execution_time(func):
    """
    Decorator to log function execution time.

    Args:
        func: Function to decorate

    Returns:
        Decorated function
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        logger = logging.getLogger(func.__module__)
        start_time = time.time()

        logger.debug(f"Starting {func.__name__}")

        try:
            result = func(*args, **kwargs)
        except Exception as e:
            execution_time = time.time() - start_time
            logger.error(f"Failed {func.__name__} after {execution_time:.2f} seconds: {str(e)}")
            raise
        execution_time = time.time() - start_time
        logger.debug(f"Completed {func.__name__} in {execution_time:.2f} seconds")
        return result

    return wrapper
