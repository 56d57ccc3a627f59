"""Utility functions."""

from .logging import setup_logging, get_logger, log_group

__all__ = [
    "setup_logging",
    "get_logger",
    "log_group",
]
