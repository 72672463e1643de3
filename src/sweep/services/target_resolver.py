"""
Centralized target resolution for sweep.

Turns the CLI target argument (``.``, a path, an app name, or ``all``) into
the project root used for configuration and the app to analyze.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

ALL_APPS = "all"


@dataclass
class TargetResolution:
    """
    Result of target resolution.

    Attributes:
        app_name: App name, or "all" for every app under the apps directory.
        root_dir: Project root; configuration is loaded from here.
        app_dir: Explicit app directory when the target is a path,
            None when the app lives under the configured apps directory.
    """

    app_name: str
    root_dir: Path
    app_dir: Optional[Path] = None

    @property
    def all_apps(self) -> bool:
        return self.app_name.lower() == ALL_APPS


def resolve_target(target: Optional[str], cwd: Path | str) -> TargetResolution:
    """
    Resolve a CLI target.

    Resolution order:
    1. "all" analyzes every app under the apps directory of cwd
    2. "." (or empty) analyzes cwd itself
    3. An existing directory is analyzed as its own project
    4. Anything else is an app name under the apps directory of cwd

    Args:
        target: Raw target argument
        cwd: Base directory for relative targets

    Returns:
        TargetResolution describing what to analyze
    """
    base = Path(cwd).absolute()
    name = (target or ".").strip() or "."

    if name.lower() == ALL_APPS:
        return TargetResolution(app_name=ALL_APPS, root_dir=base)

    if name in (".", "./"):
        return TargetResolution(app_name=base.name or "current", root_dir=base, app_dir=base)

    candidate = Path(os.path.abspath(base / name))
    if candidate.is_dir():
        return TargetResolution(
            app_name=candidate.name or "current", root_dir=candidate, app_dir=candidate
        )

    return TargetResolution(app_name=name, root_dir=base)
