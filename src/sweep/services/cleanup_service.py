"""
Cleanup Service for sweep.

Runs the full analysis of one app or of every app in a monorepo:
validation, Knip, file collection, whitelist and usage checks, and report
aggregation. Apps are analyzed one at a time, each in a fresh AppSession.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from sweep.core.config import SweepConfig
from sweep.core.errors import AppValidationError
from sweep.core.file_collector import FileCollector
from sweep.core.models import AssetFile, ExternalFindings, UnusedAssetRecord
from sweep.infrastructure.knip_runner import KnipRunner
from sweep.services.report import (
    STATUS_FAILED,
    STATUS_SKIPPED,
    STATUS_SUCCESS,
    AppReport,
    ReportAggregator,
    filter_findings,
)
from sweep.services.session import AppSession, list_apps

logger = logging.getLogger(__name__)


@dataclass
class BatchResult:
    """Outcome of an all-apps run."""

    analyzed: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return bool(self.analyzed) and not self.failed


class CleanupService:
    """
    Finds unused assets and Knip findings for apps of a project.

    Reports are kept in the aggregator across calls, so analyzing several
    apps (or re-running one) builds up a single cross-app report.
    """

    def __init__(
        self,
        config: SweepConfig,
        collector: Optional[FileCollector] = None,
        knip_runner: Optional[KnipRunner] = None,
        aggregator: Optional[ReportAggregator] = None,
    ):
        """
        Initialize the service.

        Args:
            config: Loaded configuration
            collector: File collector; built from config.exclude_dirs if None
            knip_runner: Knip runner; built from config.knip if None
            aggregator: Report store; a fresh one if None
        """
        self._config = config
        self._collector = collector or FileCollector(config.exclude_dirs)
        self._knip_runner = knip_runner or KnipRunner(config.knip)
        self._aggregator = aggregator or ReportAggregator()

    @property
    def config(self) -> SweepConfig:
        return self._config

    @property
    def aggregator(self) -> ReportAggregator:
        return self._aggregator

    def list_apps(self) -> list[str]:
        return list_apps(self._config)

    def create_session(self, app_name: str, app_dir: Optional[Path] = None) -> AppSession:
        return AppSession.create(self._config, app_name, app_dir)

    def check_unused_assets(
        self, session: AppSession, assets: list[AssetFile]
    ) -> tuple[list[UnusedAssetRecord], list[str]]:
        """
        Split assets into unused records and whitelisted paths.

        Whitelisted assets are never searched for.
        """
        unused: list[UnusedAssetRecord] = []
        whitelisted: list[str] = []
        detector = session.detector

        for asset in assets:
            if session.matcher.is_whitelisted(asset.path):
                whitelisted.append(asset.relative_path)
                continue
            if not detector.is_used(asset.path):
                unused.append(UnusedAssetRecord.from_asset(asset, session.root_dir))

        if whitelisted:
            logger.info(f"Skipped {len(whitelisted)} whitelisted asset(s)")
        return unused, whitelisted

    async def analyze_app(self, app_name: str, app_dir: Optional[Path] = None) -> AppReport:
        """
        Analyze a single app and store its report.

        Args:
            app_name: App name
            app_dir: Explicit app directory (for path targets)

        Returns:
            The stored AppReport

        Raises:
            AppValidationError: If the app cannot be analyzed; raised before
                any scanning, including for invalid whitelist patterns
        """
        session = self.create_session(app_name, app_dir)
        session.validate()
        logger.info(f"Running cleanup analysis: {session.app_name}")

        if self._knip_runner.enabled:
            raw_findings = await self._knip_runner.run(session.app_dir)
            findings = filter_findings(raw_findings, session.matcher)
            knip_status = STATUS_FAILED if findings.error else STATUS_SUCCESS
        else:
            findings = ExternalFindings()
            knip_status = STATUS_SKIPPED

        assets = session.collect(self._collector, self._config)
        unused, whitelisted = self.check_unused_assets(session, assets)

        report = AppReport(
            app_name=session.app_name,
            app_dir=session.app_dir,
            unused_assets=unused,
            findings=findings,
            knip_status=knip_status,
            whitelisted_assets=whitelisted,
        )
        self._aggregator.store(report)
        return report

    async def analyze_all(self) -> BatchResult:
        """
        Analyze every app under the apps directory, one after another.

        A failing app is recorded and the batch moves on to the next one.
        """
        result = BatchResult()
        apps = self.list_apps()
        if not apps:
            logger.error(f"No valid apps found in {self._config.apps_dir}")
            return result

        for app_name in apps:
            try:
                await self.analyze_app(app_name)
            except AppValidationError as e:
                logger.error(f"Error: {e}")
                result.failed[app_name] = str(e)
                continue
            result.analyzed.append(app_name)
        return result

    def save_report(self) -> Optional[Path]:
        """Write the aggregated JSON report unless disabled in config."""
        if not self._config.report.save_report:
            return None
        root = Path(self._config.root_dir or Path.cwd())
        return self._aggregator.save(root / self._config.report.json_output)
