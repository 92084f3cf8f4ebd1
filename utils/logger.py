"""
Logging utility functions and helpers.
"""

import logging


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a module.

    Secret-bearing extras are masked by the handlers' RedactSecretsFilter
    (core/logging_config.py), so callers log plain values.

    Usage:
        from utils.logger import get_logger
        logger = get_logger(__name__)
    """
    return logging.getLogger(name)
