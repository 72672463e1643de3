"""
Report aggregation for sweep.

Combines each app's unused assets with its whitelist-filtered Knip
findings and keeps one AppReport per app for the life of a run.
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from sweep.core.models import (
    DEPENDENCY_FINDING_KEYS,
    PATH_FINDING_KEYS,
    ExternalFindings,
    UnusedAssetRecord,
    format_file_size,
)
from sweep.core.whitelist import WhitelistMatcher

logger = logging.getLogger(__name__)

STATUS_SUCCESS = "success"
STATUS_FAILED = "failed"
STATUS_SKIPPED = "skipped"


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def filter_findings(findings: ExternalFindings, matcher: WhitelistMatcher) -> ExternalFindings:
    """
    Drop whitelisted items from the path-like finding categories.

    Files, exports and types are checked with the same matcher as assets.
    Dependencies are package names, not paths, and pass through untouched.
    Findings carrying an error are returned as-is.
    """
    if findings.error:
        return findings

    def keep(item: Any) -> bool:
        if isinstance(item, str):
            return not matcher.is_whitelisted(item)
        if isinstance(item, dict) and item.get("file"):
            return not matcher.is_whitelisted(str(item["file"]))
        return True

    filtered = ExternalFindings(
        **{key: [item for item in getattr(findings, key) if keep(item)] for key in PATH_FINDING_KEYS},
        **{key: list(getattr(findings, key)) for key in DEPENDENCY_FINDING_KEYS},
    )
    removed = findings.total - filtered.total
    if removed:
        logger.info(f"Whitelist removed {removed} Knip finding(s)")
    return filtered


@dataclass
class AppReport:
    """
    Results of one app's analysis.

    Attributes:
        app_name: App the report belongs to
        app_dir: App directory (asset paths in the JSON are relative to it)
        unused_assets: Assets neither whitelisted nor referenced
        findings: Knip findings after whitelist filtering
        knip_status: "success", "failed" or "skipped"
        whitelisted_assets: App-relative paths of assets skipped by the whitelist
    """

    app_name: str
    app_dir: Path
    unused_assets: list[UnusedAssetRecord] = field(default_factory=list)
    findings: ExternalFindings = field(default_factory=ExternalFindings)
    knip_status: str = STATUS_SKIPPED
    whitelisted_assets: list[str] = field(default_factory=list)
    timestamp: str = field(default_factory=_timestamp)

    @property
    def total_asset_bytes(self) -> int:
        return sum(asset.size_bytes for asset in self.unused_assets)

    @property
    def total_asset_size(self) -> str:
        return format_file_size(self.total_asset_bytes)

    @property
    def total_findings(self) -> int:
        return len(self.unused_assets) + self.findings.total

    def assets_by_size(self) -> list[UnusedAssetRecord]:
        return sorted(self.unused_assets, key=lambda a: a.size_bytes, reverse=True)

    def _asset_path(self, asset: UnusedAssetRecord) -> str:
        try:
            return asset.full_path.relative_to(self.app_dir).as_posix()
        except ValueError:
            return asset.path

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the per-app JSON layout."""
        findings = self.findings
        return {
            "timestamp": self.timestamp,
            "unused_assets": {
                "count": len(self.unused_assets),
                "total_size_bytes": self.total_asset_bytes,
                "total_size_formatted": self.total_asset_size,
                "files": [
                    {
                        "path": self._asset_path(asset),
                        "size_bytes": asset.size_bytes,
                        "size_formatted": asset.formatted_size,
                    }
                    for asset in self.unused_assets
                ],
            },
            "unused_files": {
                "count": len(findings.files),
                "files": list(findings.files),
            },
            "unused_dependencies": {
                "count": len(findings.dependencies) + len(findings.devDependencies),
                "dependencies": list(findings.dependencies),
                "devDependencies": list(findings.devDependencies),
            },
            "unused_exports": {
                "count": len(findings.exports) + len(findings.types),
                "exports": list(findings.exports),
                "types": list(findings.types),
            },
            "knip_analysis_status": self.knip_status,
            "knip_error": findings.error,
        }


class ReportAggregator:
    """
    Cross-app report store.

    Holds one AppReport per app name. Storing a report for an app that is
    already present replaces the earlier one.
    """

    def __init__(self):
        self._reports: dict[str, AppReport] = {}

    def store(self, report: AppReport) -> None:
        self._reports[report.app_name] = report

    def get(self, app_name: str) -> AppReport | None:
        return self._reports.get(app_name)

    @property
    def reports(self) -> dict[str, AppReport]:
        return dict(self._reports)

    def __len__(self) -> int:
        return len(self._reports)

    def totals(self) -> dict[str, int]:
        """Summed counts across all stored apps."""
        totals = {"assets": 0, "files": 0, "dependencies": 0, "exports": 0, "size_bytes": 0}
        for report in self._reports.values():
            findings = report.findings
            totals["assets"] += len(report.unused_assets)
            totals["files"] += len(findings.files)
            totals["dependencies"] += len(findings.dependencies) + len(findings.devDependencies)
            totals["exports"] += len(findings.exports) + len(findings.types)
            totals["size_bytes"] += report.total_asset_bytes
        return totals

    def to_dict(self) -> dict[str, Any]:
        """The JSON-serializable cross-app report."""
        return {
            "timestamp": _timestamp(),
            "total_apps_analyzed": len(self._reports),
            "apps_data": {name: report.to_dict() for name, report in self._reports.items()},
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)

    def save(self, path: Path | str) -> Path:
        """Write the JSON report and return its path."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.to_json() + "\n", encoding="utf-8")
        logger.debug(f"Saved report to {path}")
        return path
