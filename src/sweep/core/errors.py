"""Exception types for sweep."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from sweep.core.patterns import InvalidPattern


class SweepError(Exception):
    """Base exception for sweep errors."""

    pass


class UnsafePatternError(SweepError, ValueError):
    """A whitelist regex was rejected before compilation."""

    pass


class AppValidationError(SweepError):
    """An app cannot be analyzed (missing directories, bad whitelist)."""

    pass


class InvalidWhitelistError(AppValidationError):
    """One or more whitelist patterns failed to compile.

    The app's analysis must stop before any scanning takes place.
    """

    def __init__(self, app_name: str, invalid_patterns: list["InvalidPattern"]):
        self.app_name = app_name
        self.invalid_patterns = list(invalid_patterns)
        details = "; ".join(f"{p.pattern} ({p.reason})" for p in self.invalid_patterns)
        super().__init__(f"Invalid whitelist pattern(s) for '{app_name}': {details}")
