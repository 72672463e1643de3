"""
Service Layer - CleanupService, per-app sessions, target resolution and reports.
"""

from sweep.services.cleanup_service import BatchResult, CleanupService
from sweep.services.report import AppReport, ReportAggregator, filter_findings
from sweep.services.session import AppSession, list_apps
from sweep.services.target_resolver import TargetResolution, resolve_target

__all__ = [
    # Service
    "CleanupService",
    "BatchResult",
    # Sessions
    "AppSession",
    "list_apps",
    # Target resolution
    "TargetResolution",
    "resolve_target",
    # Reports
    "AppReport",
    "ReportAggregator",
    "filter_findings",
]
