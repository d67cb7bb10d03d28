"""Utility modules for the issuer data-quality scorecard."""

from .logging_utils import logger, setup_logging, get_logger, log_execution_time, RunLogger

__all__ = ['logger', 'setup_logging', 'get_logger', 'log_execution_time', 'RunLogger']
