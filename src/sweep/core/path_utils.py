"""
Path utilities for sweep.

Provides the canonical app-relative, forward-slash path form used by the
whitelist matchers, plus app directory validation.
"""

import logging
import os
import posixpath
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


@dataclass
class PathValidationResult:
    """Result of path validation.

    Attributes:
        valid: True if the path is valid for the requested operation.
        error_message: Human-readable error message if validation failed.
    """
    valid: bool
    error_message: Optional[str] = None


def to_posix(path: str) -> str:
    """Replace every backslash with a forward slash."""
    return path.replace("\\", "/")


def basename(normalized_path: str) -> str:
    """Basename of a forward-slash path."""
    return posixpath.basename(normalized_path.rstrip("/")) or normalized_path


class PathNormalizer:
    """
    Maps any path representation to the canonical app-relative form.

    Absolute paths are made relative to the app root; relative paths lose a
    leading ``./``. Paths resolving outside the app root normalize to ``""``
    and are reported once per distinct input.
    """

    def __init__(self, app_dir: Path | str):
        self._app_dir = os.path.abspath(os.fspath(app_dir))
        self._warned: set[str] = set()

    @property
    def app_dir(self) -> str:
        return self._app_dir

    @property
    def warned_paths(self) -> frozenset[str]:
        """Out-of-app paths a warning was emitted for."""
        return frozenset(self._warned)

    def normalize(self, file_path: object) -> str:
        """
        Normalize a path for whitelist matching.

        Args:
            file_path: Absolute or relative path (str or os.PathLike)

        Returns:
            Forward-slash path relative to the app root, or "" when the input
            is empty, not a path, or outside the app
        """
        if isinstance(file_path, os.PathLike):
            file_path = os.fspath(file_path)
        if not file_path or not isinstance(file_path, str):
            return ""

        if os.path.isabs(file_path):
            try:
                relative = to_posix(os.path.relpath(file_path, self._app_dir))
            except ValueError:
                # Different drive on Windows
                relative = None
            if (
                relative is None
                or relative == ".."
                or relative.startswith("../")
                or os.path.isabs(relative)
            ):
                self._warn_outside(file_path)
                return ""
            return relative

        normalized = to_posix(file_path)
        if normalized.startswith("./"):
            return normalized[2:]
        return normalized

    def _warn_outside(self, file_path: str) -> None:
        if file_path in self._warned:
            return
        self._warned.add(file_path)
        logger.warning(f"Ignoring path outside app: {file_path}")


def validate_app_directory(app_dir: Path, src_dir: Path, app_name: str) -> PathValidationResult:
    """
    Validate that an app can be analyzed.

    Checks:
    1. App directory exists
    2. Source directory exists
    """
    try:
        if not app_dir.is_dir():
            return PathValidationResult(
                valid=False,
                error_message=f"App '{app_name}' not found",
            )
        if not src_dir.is_dir():
            return PathValidationResult(
                valid=False,
                error_message=f"src directory not found for '{app_name}'",
            )
        return PathValidationResult(valid=True)
    except (OSError, ValueError) as e:
        return PathValidationResult(
            valid=False,
            error_message=f"Invalid path '{app_dir}': {e}",
        )
