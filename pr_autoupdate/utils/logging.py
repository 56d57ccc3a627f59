"""Logging utilities."""

import logging
import sys
from contextlib import contextmanager
from typing import Iterator, Optional

LOGGER_NAME = "pr_autoupdate"


def setup_logging(
    level: int = logging.INFO,
    format_str: Optional[str] = None
) -> logging.Logger:
    """
    Setup logging for pr-autoupdate.

    Args:
        level: Logging level (default: INFO)
        format_str: Custom format string

    Returns:
        Configured logger
    """
    if format_str is None:
        format_str = "[%(asctime)s] %(levelname)s - %(message)s"

    logging.basicConfig(
        level=level,
        format=format_str,
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    return logger


def get_logger(name: str = LOGGER_NAME) -> logging.Logger:
    """Get a logger instance."""
    return logging.getLogger(name)


@contextmanager
def log_group(title: str, stream=None) -> Iterator[None]:
    """
    Fold everything logged inside the block into a collapsible group
    in the GitHub Actions log.
    """
    out = stream or sys.stdout
    out.write(f"::group::{title}\n")
    out.flush()
    try:
        yield
    finally:
        out.write("::endgroup::\n")
        out.flush()
