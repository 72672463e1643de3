"""
Tests for CleanupService orchestration and AppSession lifecycle.
"""

import json

import pytest

from sweep.core.config import WhitelistConfig, load_config
from sweep.core.errors import AppValidationError, InvalidWhitelistError
from sweep.core.file_collector import FileCollector
from sweep.core.models import ExternalFindings
from sweep.services.cleanup_service import CleanupService
from sweep.services.report import STATUS_FAILED, STATUS_SKIPPED, STATUS_SUCCESS
from sweep.services.session import AppSession, list_apps
from tests.support.project_factory import make_app

WEB_FILES = {
    "src/App.tsx": "import logo from './assets/logo.png';\n",
    "src/assets/logo.png": b"logo",
    "src/assets/mascot.png": b"mascot-bytes",
    "src/assets/favicon.ico": b"ico",
}


class FakeKnipRunner:
    """Stands in for KnipRunner without spawning processes."""

    def __init__(self, findings):
        self.findings = findings
        self.calls = []

    @property
    def enabled(self):
        return True

    async def run(self, app_dir):
        self.calls.append(app_dir)
        return self.findings


class ExplodingCollector(FileCollector):
    def collect_assets(self, scan_dir, app_dir, extensions):
        raise AssertionError("scanning must not start")


def _config(root, patterns=(), products=None):
    config = load_config(root, apply_env=False)
    config.whitelist = WhitelistConfig(patterns=list(patterns), products=products or {})
    return config


class TestAnalyzeApp:
    """Single app runs."""

    @pytest.mark.asyncio
    async def test_unused_and_whitelisted_assets(self, tmp_path):
        make_app(tmp_path, "web", WEB_FILES)
        service = CleanupService(_config(tmp_path, ["favicon.ico"]))

        report = await service.analyze_app("web")

        assert [a.path for a in report.unused_assets] == ["apps/web/src/assets/mascot.png"]
        assert report.unused_assets[0].size_bytes == len(b"mascot-bytes")
        assert report.whitelisted_assets == ["src/assets/favicon.ico"]
        assert report.knip_status == STATUS_SKIPPED
        assert service.aggregator.get("web") is report

    @pytest.mark.asyncio
    async def test_per_app_patterns_apply_only_to_that_app(self, tmp_path):
        make_app(tmp_path, "web", WEB_FILES)
        make_app(tmp_path, "admin", WEB_FILES)
        service = CleanupService(_config(tmp_path, ["favicon.ico"], products={"web": ["mascot.png"]}))

        web = await service.analyze_app("web")
        admin = await service.analyze_app("admin")

        assert web.unused_assets == []
        assert [a.path for a in admin.unused_assets] == ["apps/admin/src/assets/mascot.png"]

    @pytest.mark.asyncio
    async def test_invalid_whitelist_stops_before_scanning(self, tmp_path):
        make_app(tmp_path, "web", WEB_FILES)
        service = CleanupService(
            _config(tmp_path, ["regex:(a+)+"]), collector=ExplodingCollector()
        )

        with pytest.raises(InvalidWhitelistError) as exc_info:
            await service.analyze_app("web")

        assert exc_info.value.invalid_patterns[0].pattern == "regex:(a+)+"
        assert service.aggregator.get("web") is None

    @pytest.mark.asyncio
    async def test_missing_app(self, tmp_path):
        service = CleanupService(_config(tmp_path))

        with pytest.raises(AppValidationError, match="App 'nope' not found"):
            await service.analyze_app("nope")

    @pytest.mark.asyncio
    async def test_missing_src_directory(self, tmp_path):
        (tmp_path / "apps" / "web").mkdir(parents=True)
        service = CleanupService(_config(tmp_path))

        with pytest.raises(AppValidationError, match="src directory not found"):
            await service.analyze_app("web")

    @pytest.mark.asyncio
    async def test_explicit_app_directory(self, tmp_path):
        project = tmp_path / "site"
        (project / "src").mkdir(parents=True)
        (project / "src" / "index.js").write_text("export default 1;\n", encoding="utf-8")
        (project / "src" / "banner.svg").write_text("<svg/>", encoding="utf-8")
        service = CleanupService(_config(project))

        report = await service.analyze_app("site", app_dir=project)

        assert [a.path for a in report.unused_assets] == ["src/banner.svg"]

    @pytest.mark.asyncio
    async def test_knip_findings_filtered_except_dependencies(self, tmp_path):
        make_app(tmp_path, "web", WEB_FILES)
        runner = FakeKnipRunner(
            ExternalFindings(
                files=["src/legacy/old.ts", "src/keep.ts"],
                dependencies=["legacy"],
            )
        )
        service = CleanupService(_config(tmp_path, ["src/legacy/", "legacy"]), knip_runner=runner)

        report = await service.analyze_app("web")

        assert report.knip_status == STATUS_SUCCESS
        assert report.findings.files == ["src/keep.ts"]
        assert report.findings.dependencies == ["legacy"]
        assert runner.calls == [tmp_path.absolute() / "apps" / "web"]

    @pytest.mark.asyncio
    async def test_knip_failure_still_reports_assets(self, tmp_path):
        make_app(tmp_path, "web", WEB_FILES)
        runner = FakeKnipRunner(ExternalFindings.failed("All Knip execution attempts failed"))
        service = CleanupService(_config(tmp_path), knip_runner=runner)

        report = await service.analyze_app("web")

        assert report.knip_status == STATUS_FAILED
        assert report.to_dict()["knip_error"] == "All Knip execution attempts failed"
        assert len(report.unused_assets) == 2


class TestAnalyzeAll:
    """Multi-app batches."""

    @pytest.mark.asyncio
    async def test_batch_continues_after_failing_app(self, tmp_path):
        make_app(tmp_path, "web", WEB_FILES)
        make_app(tmp_path, "broken", WEB_FILES)
        service = CleanupService(_config(tmp_path, products={"broken": ["regex:(a|b)+"]}))

        result = await service.analyze_all()

        assert result.analyzed == ["web"]
        assert list(result.failed) == ["broken"]
        assert not result.success
        assert len(service.aggregator) == 1

    @pytest.mark.asyncio
    async def test_no_apps(self, tmp_path):
        service = CleanupService(_config(tmp_path))

        result = await service.analyze_all()

        assert result.analyzed == []
        assert not result.success

    @pytest.mark.asyncio
    async def test_save_report(self, tmp_path):
        make_app(tmp_path, "web", WEB_FILES)
        make_app(tmp_path, "admin", {"src/main.js": ""})
        service = CleanupService(_config(tmp_path))

        result = await service.analyze_all()
        saved = service.save_report()

        assert result.success
        assert saved == tmp_path.absolute() / "unused-assets-report.json"
        data = json.loads(saved.read_text(encoding="utf-8"))
        assert data["total_apps_analyzed"] == 2
        assert data["apps_data"]["web"]["unused_assets"]["count"] == 2

    def test_save_report_disabled(self, tmp_path):
        config = _config(tmp_path)
        config.report.save_report = False

        assert CleanupService(config).save_report() is None


class TestAppSession:
    """Session construction and app discovery."""

    def test_sessions_do_not_share_state(self, tmp_path):
        config = _config(tmp_path, ["logo.png"])

        first = AppSession.create(config, "web")
        second = AppSession.create(config, "web")
        first.matcher.is_whitelisted("src/logo.png")

        assert first.matcher is not second.matcher
        assert second.matcher.cache_size == 0
        assert first.contents is not second.contents

    def test_scan_dir_defaults_to_src(self, tmp_path):
        session = AppSession.create(_config(tmp_path), "web")

        assert session.scan_dir == tmp_path.absolute() / "apps" / "web" / "src"

    def test_list_apps(self, tmp_path):
        make_app(tmp_path, "web")
        make_app(tmp_path, "admin")
        make_app(tmp_path, ".cache")
        (tmp_path / "apps" / "docs").mkdir()
        (tmp_path / "apps" / "README.md").write_text("", encoding="utf-8")

        assert list_apps(_config(tmp_path)) == ["admin", "web"]
