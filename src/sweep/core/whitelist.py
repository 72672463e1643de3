"""
WhitelistMatcher module for sweep.

Answers "is this path whitelisted" for one app, using the patterns compiled
by :mod:`sweep.core.patterns` and a per-matcher verdict cache keyed by the
normalized path.
"""

import logging
from pathlib import Path
from typing import Iterable

from sweep.core.path_utils import PathNormalizer, basename
from sweep.core.patterns import CompiledWhitelist, InvalidPattern, compile_patterns

logger = logging.getLogger(__name__)


class WhitelistMatcher:
    """
    Whitelist lookups for a single app.

    Evaluation order for a path: exact path, exact basename, then every regex
    against both the normalized path and its basename. Verdicts are cached
    per normalized path, so equivalent spellings (absolute vs. relative,
    backslash vs. slash) share one entry.
    """

    def __init__(self, app_dir: Path | str, patterns: Iterable[object] = ()):
        """
        Initialize the matcher.

        Args:
            app_dir: App root that relative paths are resolved against
            patterns: Effective whitelist patterns (global followed by per-app)
        """
        self._normalizer = PathNormalizer(app_dir)
        self._compiled = CompiledWhitelist()
        self._cache: dict[str, bool] = {}
        self.recompile(patterns)

    def recompile(self, patterns: Iterable[object]) -> None:
        """Replace all compiled patterns and drop every cached verdict."""
        self._compiled = compile_patterns(patterns)
        self._cache = {}
        logger.debug(
            f"Compiled whitelist: {len(self._compiled.exact_paths)} paths, "
            f"{len(self._compiled.exact_basenames)} basenames, "
            f"{len(self._compiled.regexes)} regexes, "
            f"{len(self._compiled.invalid)} invalid"
        )

    @property
    def compiled(self) -> CompiledWhitelist:
        return self._compiled

    @property
    def invalid_patterns(self) -> list[InvalidPattern]:
        return list(self._compiled.invalid)

    @property
    def normalizer(self) -> PathNormalizer:
        return self._normalizer

    @property
    def cache_size(self) -> int:
        return len(self._cache)

    def is_whitelisted(self, file_path: object) -> bool:
        """
        Check whether a path is exempt from unused detection.

        Args:
            file_path: Absolute or relative path, any separator style

        Returns:
            True if any whitelist pattern matches
        """
        if self._compiled.is_empty:
            return False

        normalized = self._normalizer.normalize(file_path)
        if not normalized:
            return False

        cached = self._cache.get(normalized)
        if cached is not None:
            return cached

        verdict = self._evaluate(normalized)
        self._cache[normalized] = verdict
        return verdict

    def _evaluate(self, normalized: str) -> bool:
        compiled = self._compiled
        if normalized in compiled.exact_paths:
            return True

        name = basename(normalized)
        if name in compiled.exact_basenames:
            return True

        for pattern in compiled.regexes:
            if pattern.matches(normalized) or pattern.matches(name):
                logger.debug(f"'{normalized}' whitelisted by '{pattern.source}'")
                return True
        return False
