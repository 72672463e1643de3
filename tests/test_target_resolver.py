"""
Tests for CLI target resolution.
"""

from sweep.services.target_resolver import ALL_APPS, resolve_target


class TestResolveTarget:
    def test_all(self, tmp_path):
        resolution = resolve_target("all", tmp_path)

        assert resolution.all_apps
        assert resolution.app_name == ALL_APPS
        assert resolution.root_dir == tmp_path.absolute()

    def test_all_is_case_insensitive(self, tmp_path):
        assert resolve_target("ALL", tmp_path).all_apps

    def test_current_directory(self, tmp_path):
        for target in (None, ".", "./", "  "):
            resolution = resolve_target(target, tmp_path)

            assert resolution.app_dir == tmp_path.absolute()
            assert resolution.root_dir == tmp_path.absolute()
            assert resolution.app_name == tmp_path.name
            assert not resolution.all_apps

    def test_existing_directory_is_its_own_project(self, tmp_path):
        (tmp_path / "apps" / "web").mkdir(parents=True)

        resolution = resolve_target("apps/web", tmp_path)

        assert resolution.app_name == "web"
        assert resolution.app_dir == tmp_path.absolute() / "apps" / "web"
        assert resolution.root_dir == resolution.app_dir

    def test_app_name(self, tmp_path):
        resolution = resolve_target("web", tmp_path)

        assert resolution.app_name == "web"
        assert resolution.app_dir is None
        assert resolution.root_dir == tmp_path.absolute()
