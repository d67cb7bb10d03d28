"""
Logging utilities for the issuer data-quality scorecard.
Uses loguru; every line carries the component that wrote it.
"""

import sys
import time
from datetime import datetime
from functools import wraps
from typing import Any, Callable, Dict, List

from loguru import logger

from issuer_dq.config import settings

DEFAULT_COMPONENT = 'issuer_dq'

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[component]}</cyan> | "
    "<level>{message}</level>"
)


def setup_logging(
    log_level: str = None,
    log_to_file: bool = None,
    log_to_console: bool = None
) -> None:
    """
    Replace the loguru sinks with the scorecard ones.

    Unset arguments fall back to the ``DQ_LOG_*`` settings. File sinks
    write a daily scorecard log plus an errors-only log under
    ``settings.logs_path``.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_to_file: Whether to log to file
        log_to_console: Whether to log to stdout
    """
    level = log_level or settings.logging.level
    to_file = settings.logging.to_file if log_to_file is None else log_to_file
    to_console = settings.logging.to_console if log_to_console is None else log_to_console

    handlers: List[Dict[str, Any]] = []
    if to_console:
        handlers.append({'sink': sys.stdout, 'format': LOG_FORMAT, 'level': level, 'colorize': True})

    if to_file:
        settings.logs_path.mkdir(parents=True, exist_ok=True)
        day = datetime.now().strftime('%Y%m%d')
        handlers.append({
            'sink': str(settings.logs_path / f"scorecard_{day}.log"),
            'format': LOG_FORMAT,
            'level': level,
            'rotation': "100 MB",
            'retention': "30 days",
            'compression': "gz"
        })
        handlers.append({
            'sink': str(settings.logs_path / "errors.log"),
            'format': LOG_FORMAT,
            'level': "ERROR",
            'rotation': "50 MB",
            'retention': "90 days",
            'compression': "gz"
        })

    # Records from the unbound logger fall back to DEFAULT_COMPONENT
    logger.configure(handlers=handlers, extra={'component': DEFAULT_COMPONENT})


def get_logger(name: str):
    """Return the shared logger with ``name`` as its component."""
    return logger.bind(component=name)


def log_execution_time(func: Callable) -> Callable:
    """Decorator logging how long ``func`` ran, whether it returned or raised."""
    log = get_logger(func.__module__)

    @wraps(func)
    def wrapper(*args, **kwargs) -> Any:
        started = time.perf_counter()
        try:
            result = func(*args, **kwargs)
        except Exception as e:
            log.error(f"{func.__name__} failed after {time.perf_counter() - started:.2f}s: {e}")
            raise
        log.info(f"{func.__name__} finished in {time.perf_counter() - started:.2f}s")
        return result

    return wrapper


class RunLogger:
    """
    Logger for one scorecard run.

    Lines are tagged ``<dataset>:<run_id>`` in the component field so the
    output of concurrent or repeated runs can be told apart.
    """

    def __init__(self, dataset_name: str, run_id: str = None):
        self.dataset_name = dataset_name
        self.run_id = run_id or datetime.now().strftime('%Y%m%d_%H%M%S')
        self._log = logger.bind(component=f"{dataset_name}:{self.run_id}")

    def info(self, message: str):
        self._log.info(message)

    def warning(self, message: str):
        self._log.warning(message)

    def error(self, message: str):
        self._log.error(message)

    def log_metrics(self, metrics: Dict[str, Any]):
        self.info("Metrics: " + ", ".join(f"{k}={v}" for k, v in metrics.items()))


# Initialize logging on module import
setup_logging()

__all__ = ['logger', 'setup_logging', 'get_logger', 'log_execution_time', 'RunLogger']
