"""
Per-app analysis session.

An AppSession owns every piece of state tied to the app being analyzed:
resolved directories, the compiled whitelist with its verdict cache, and
the lazily loaded source texts. A new session is built whenever the active
app changes; nothing carries over from the previous app.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from sweep.core.config import SweepConfig
from sweep.core.errors import AppValidationError, InvalidWhitelistError
from sweep.core.file_collector import FileCollector
from sweep.core.models import AssetFile, SourceFile
from sweep.core.path_utils import validate_app_directory
from sweep.core.usage_detector import AssetUsageDetector, SourceContentCache
from sweep.core.whitelist import WhitelistMatcher

logger = logging.getLogger(__name__)


@dataclass
class AppSession:
    """
    State for one app's run.

    Attributes:
        app_name: Name used for per-app whitelist lookup and report keys
        root_dir: Project root (report paths are relative to it)
        app_dir: App directory (whitelist paths are relative to it)
        src_dir: Directory holding the source files
        assets_dir: Conventional assets directory (informational)
        scan_dir: Directory searched for assets
        matcher: Whitelist matcher compiled for this app
    """

    app_name: str
    root_dir: Path
    app_dir: Path
    src_dir: Path
    assets_dir: Path
    scan_dir: Path
    matcher: WhitelistMatcher
    sources: list[SourceFile] = field(default_factory=list)
    _contents: Optional[SourceContentCache] = field(default=None, repr=False)

    @classmethod
    def create(
        cls,
        config: SweepConfig,
        app_name: str,
        app_dir: Optional[Path] = None,
    ) -> "AppSession":
        """
        Build a session for an app.

        Args:
            config: Loaded configuration
            app_name: App name (per-app whitelist key)
            app_dir: Explicit app directory; defaults to <root>/<apps_dir>/<app_name>
        """
        root_dir = Path(config.root_dir or Path.cwd()).absolute()
        if app_dir is None:
            app_dir = root_dir / config.apps_dir / app_name
        app_dir = Path(app_dir).absolute()

        patterns = config.whitelist.patterns_for(app_name)
        return cls(
            app_name=app_name,
            root_dir=root_dir,
            app_dir=app_dir,
            src_dir=app_dir / config.src_dir,
            assets_dir=app_dir / config.assets_dir,
            scan_dir=app_dir / config.effective_scan_dir,
            matcher=WhitelistMatcher(app_dir, patterns),
        )

    def validate(self) -> None:
        """
        Check that the app can be scanned.

        Raises:
            AppValidationError: If the app or its src directory is missing
            InvalidWhitelistError: If any whitelist pattern failed to compile
        """
        result = validate_app_directory(self.app_dir, self.src_dir, self.app_name)
        if not result.valid:
            raise AppValidationError(result.error_message)

        if self.matcher.invalid_patterns:
            raise InvalidWhitelistError(self.app_name, self.matcher.invalid_patterns)

        if not self.assets_dir.is_dir():
            logger.info(f"No assets directory found for '{self.app_name}'. Scanning {self.scan_dir}.")

    def collect(self, collector: FileCollector, config: SweepConfig) -> list[AssetFile]:
        """Collect assets and sources; sources are kept for usage detection."""
        assets = collector.collect_assets(self.scan_dir, self.app_dir, config.asset_extensions)
        self.sources = collector.collect_sources(self.src_dir, config.source_extensions)
        self._contents = None
        return assets

    @property
    def contents(self) -> SourceContentCache:
        if self._contents is None:
            self._contents = SourceContentCache(self.sources)
        return self._contents

    @property
    def detector(self) -> AssetUsageDetector:
        return AssetUsageDetector(self.contents, self.src_dir)


def list_apps(config: SweepConfig) -> list[str]:
    """
    List analyzable apps under the apps directory.

    An app is a non-hidden directory containing the configured src directory.
    """
    apps_dir = Path(config.root_dir or Path.cwd()) / config.apps_dir
    try:
        entries = list(apps_dir.iterdir())
    except OSError as e:
        logger.debug(f"Could not list apps in {apps_dir}: {e}")
        return []
    return sorted(
        entry.name
        for entry in entries
        if entry.is_dir() and not entry.name.startswith(".") and (entry / config.src_dir).is_dir()
    )
