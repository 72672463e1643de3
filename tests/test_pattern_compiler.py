"""
Tests for whitelist pattern classification and the regex safety gate.
"""

import re

import pytest

from sweep.core.errors import UnsafePatternError
from sweep.core.patterns import (
    MAX_REGEX_LENGTH,
    ExactBasename,
    ExactPath,
    RegexPattern,
    classify_pattern,
    compile_patterns,
    glob_to_regex,
    validate_regex_safety,
)


class TestClassifyPattern:
    """Each syntax lands in the right variant."""

    def test_plain_name_is_exact_basename(self):
        assert classify_pattern("logo.png") == ExactBasename("logo.png")

    def test_name_with_slash_is_exact_path(self):
        assert classify_pattern("src/assets/logo.png") == ExactPath("src/assets/logo.png")

    def test_regex_prefix(self):
        compiled = classify_pattern("regex:^src/.*[.]svg$")

        assert isinstance(compiled, RegexPattern)
        assert compiled.source == "regex:^src/.*[.]svg$"
        assert compiled.matches("src/icons/arrow.svg")
        assert not compiled.matches("src/icons/arrow.png")

    def test_regex_literal_with_flags(self):
        compiled = classify_pattern("/logo[.]png$/i")

        assert isinstance(compiled, RegexPattern)
        assert compiled.regex.flags & re.IGNORECASE
        assert compiled.matches("LOGO.PNG")

    def test_regex_literal_ignores_flags_without_python_counterpart(self):
        compiled = classify_pattern("/banner/gu")

        assert isinstance(compiled, RegexPattern)
        assert compiled.matches("hero-banner.jpg")

    def test_glob_is_anchored_regex(self):
        compiled = classify_pattern("*.svg")

        assert isinstance(compiled, RegexPattern)
        assert compiled.matches("arrow.svg")
        assert not compiled.matches("icons/arrow.svg")
        assert not compiled.matches("arrow.svg.bak")

    def test_question_mark_matches_single_character(self):
        compiled = classify_pattern("logo?.png")

        assert compiled.matches("logo1.png")
        assert not compiled.matches("logo12.png")
        assert not compiled.matches("logo/.png")

    def test_trailing_slash_covers_folder_and_descendants(self):
        compiled = classify_pattern("src/assets/icons/")

        assert compiled.matches("src/assets/icons")
        assert compiled.matches("src/assets/icons/arrow.svg")
        assert compiled.matches("src/assets/icons/sub/x.svg")
        assert not compiled.matches("src/assets/icons.svg")

    def test_absolute_looking_path_is_not_regex_literal(self):
        assert classify_pattern("/assets/logo.png") == ExactPath("/assets/logo.png")

    def test_empty_pattern_raises(self):
        with pytest.raises(ValueError):
            classify_pattern("")

    @pytest.mark.parametrize(
        "pattern",
        [
            "regex:(a+)+",
            "regex:(.*)+",
            "regex:(a|b)*",
            "regex:(x)\\1",
            "regex:foo(?=bar)",
            "regex:(?<!x)y",
            "regex:[unclosed",
            "regex:",
        ],
    )
    def test_rejected_regexes_raise(self, pattern):
        with pytest.raises(UnsafePatternError):
            classify_pattern(pattern)


class TestGlobToRegex:
    """Glob translation rules."""

    def test_single_star_stays_in_segment(self):
        assert glob_to_regex("*.png") == r"[^/]*\.png"

    def test_double_star_crosses_directories(self):
        assert re.fullmatch(glob_to_regex("src/**.png"), "src/a/b/c.png")

    def test_trailing_double_star_matches_folder_itself(self):
        regex = glob_to_regex("icons/**")

        assert re.fullmatch(regex, "icons")
        assert re.fullmatch(regex, "icons/a/b.svg")
        assert not re.fullmatch(regex, "iconsx")


class TestRegexSafety:
    """The denylist gate run before any regex is compiled."""

    def test_accepts_simple_body(self):
        validate_regex_safety(r"^src/(icons|logos)/[^/]+$")

    def test_rejects_over_long_body(self):
        with pytest.raises(UnsafePatternError, match="too long"):
            validate_regex_safety("a" * (MAX_REGEX_LENGTH + 1))

    def test_accepts_body_at_length_limit(self):
        validate_regex_safety("a" * MAX_REGEX_LENGTH)

    def test_reason_names_the_shape(self):
        with pytest.raises(UnsafePatternError, match="backreference"):
            validate_regex_safety(r"(a)\1")


class TestCompilePatterns:
    """Compiling a whole whitelist list."""

    def test_skips_comments_and_blank_entries(self):
        compiled = compile_patterns(["// legacy icons", "", None, "   ", "logo.png"])

        assert compiled.exact_basenames == {"logo.png"}
        assert not compiled.exact_paths
        assert not compiled.regexes
        assert compiled.is_valid

    def test_backslashes_are_normalized(self):
        compiled = compile_patterns(["src\\assets\\logo.png"])

        assert compiled.exact_paths == {"src/assets/logo.png"}

    def test_invalid_patterns_are_collected_not_dropped(self):
        compiled = compile_patterns(["logo.png", "regex:(a+)+", "/(a|b)+/"])

        assert not compiled.is_valid
        assert [p.pattern for p in compiled.invalid] == ["regex:(a+)+", "/(a|b)+/"]
        assert compiled.exact_basenames == {"logo.png"}

    @pytest.mark.parametrize("pattern", ["regex:(x)\\1", "/(a)\\1/"])
    def test_backreferences_rejected_through_compile(self, pattern):
        compiled = compile_patterns([pattern])

        assert not compiled.regexes
        assert [p.pattern for p in compiled.invalid] == [pattern]
        assert "backreference" in compiled.invalid[0].reason

    def test_regex_escapes_are_kept(self):
        compiled = compile_patterns(["regex:\\.png$", "/^og\\-/i"])

        assert compiled.is_valid
        assert [r.regex.pattern for r in compiled.regexes] == ["\\.png$", "^og\\-"]
        assert compiled.regexes[0].matches("src/logo.png")
        assert not compiled.regexes[0].matches("src/logo/png")

    def test_invalid_pattern_has_reason(self):
        compiled = compile_patterns(["regex:(a|b)+"])

        assert "quantified alternation" in compiled.invalid[0].reason

    def test_empty_input_is_empty_whitelist(self):
        compiled = compile_patterns([])

        assert compiled.is_empty
        assert compiled.is_valid
