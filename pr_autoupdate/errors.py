"""Exceptions raised by pr-autoupdate."""

from typing import Optional


class AutoUpdateError(Exception):
    """Base class for pr-autoupdate errors."""


class ConfigError(AutoUpdateError, ValueError):
    """Invalid or missing configuration value."""


class UnsupportedEventError(AutoUpdateError, ValueError):
    """The triggering event type is not handled."""


class MergeFailedError(AutoUpdateError):
    """
    A branch update ended in a fatal state.

    Raised for merge conflicts when conflicts are not ignored, and when
    all retries of a failing merge have been used up.
    """

    def __init__(self, pr_number: int, state, cause: Optional[Exception] = None):
        self.pr_number = pr_number
        self.state = state
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"Branch update for PR #{pr_number} failed ({state.value}){detail}")
