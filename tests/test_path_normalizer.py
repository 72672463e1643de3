"""
Tests for PathNormalizer and app directory validation.
"""

import logging

from sweep.core.path_utils import PathNormalizer, basename, validate_app_directory


class TestPathNormalizer:
    """Canonical app-relative forms."""

    def test_absolute_path_inside_app(self, tmp_path):
        normalizer = PathNormalizer(tmp_path)

        assert normalizer.normalize(str(tmp_path / "src" / "assets" / "logo.png")) == "src/assets/logo.png"

    def test_path_like_is_accepted(self, tmp_path):
        normalizer = PathNormalizer(tmp_path)

        assert normalizer.normalize(tmp_path / "src" / "logo.png") == "src/logo.png"

    def test_leading_dot_slash_is_stripped(self, tmp_path):
        assert PathNormalizer(tmp_path).normalize("./src/logo.png") == "src/logo.png"

    def test_backslashes_become_forward_slashes(self, tmp_path):
        assert PathNormalizer(tmp_path).normalize("src\\assets\\logo.png") == "src/assets/logo.png"

    def test_relative_path_is_kept(self, tmp_path):
        assert PathNormalizer(tmp_path).normalize("src/logo.png") == "src/logo.png"

    def test_empty_and_non_path_values(self, tmp_path):
        normalizer = PathNormalizer(tmp_path)

        assert normalizer.normalize("") == ""
        assert normalizer.normalize(None) == ""
        assert normalizer.normalize(42) == ""

    def test_outside_app_is_empty(self, tmp_path):
        app_dir = tmp_path / "apps" / "web"
        app_dir.mkdir(parents=True)
        normalizer = PathNormalizer(app_dir)

        assert normalizer.normalize(str(tmp_path / "other" / "logo.png")) == ""
        assert normalizer.normalize(str(tmp_path / "apps")) == ""

    def test_outside_app_warns_once_per_path(self, tmp_path, caplog):
        app_dir = tmp_path / "app"
        app_dir.mkdir()
        normalizer = PathNormalizer(app_dir)
        outside = str(tmp_path / "shared" / "logo.png")

        with caplog.at_level(logging.WARNING, logger="sweep"):
            normalizer.normalize(outside)
            normalizer.normalize(outside)
            normalizer.normalize(str(tmp_path / "shared" / "icon.svg"))

        warnings = [r for r in caplog.records if "Ignoring path outside app" in r.getMessage()]
        assert len(warnings) == 2
        assert outside in normalizer.warned_paths


class TestBasename:
    def test_basename_of_nested_path(self):
        assert basename("src/assets/logo.png") == "logo.png"

    def test_basename_of_plain_name(self):
        assert basename("logo.png") == "logo.png"


class TestValidateAppDirectory:
    """App directory validation messages."""

    def test_missing_app(self, tmp_path):
        result = validate_app_directory(tmp_path / "nope", tmp_path / "nope" / "src", "nope")

        assert not result.valid
        assert result.error_message == "App 'nope' not found"

    def test_missing_src(self, tmp_path):
        result = validate_app_directory(tmp_path, tmp_path / "src", "web")

        assert not result.valid
        assert result.error_message == "src directory not found for 'web'"

    def test_valid_app(self, tmp_path):
        (tmp_path / "src").mkdir()

        result = validate_app_directory(tmp_path, tmp_path / "src", "web")

        assert result.valid
        assert result.error_message is None
