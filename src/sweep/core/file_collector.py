"""
FileCollector implementation for recursive directory collection.

Walks an app directory and returns the asset and source files the usage
detector works on. Excluded directories are gitignore-style patterns
(plain names like ``node_modules`` match at any depth).
"""

import logging
from pathlib import Path
from typing import Iterable, Iterator

import pathspec

from sweep.core.models import AssetFile, SourceFile

logger = logging.getLogger(__name__)


def _normalize_extensions(extensions: Iterable[str]) -> set[str]:
    normalized = set()
    for ext in extensions:
        ext = ext.strip().lower()
        if not ext:
            continue
        normalized.add(ext if ext.startswith(".") else f".{ext}")
    return normalized


class FileCollector:
    """
    Recursive file collection with:
    - Case-insensitive extension filtering
    - Directory exclusion via pathspec (gitignore syntax)
    - Deterministic, sorted traversal
    - Graceful handling of unreadable directories and files
    """

    DEFAULT_EXCLUDE_DIRS: list[str] = ["node_modules", ".git", "dist", "build", "coverage"]

    def __init__(self, exclude_dirs: list[str] | None = None):
        """
        Initialize the FileCollector.

        Args:
            exclude_dirs: Directory names or gitignore-style patterns to skip.
                          If None, defaults to common dependency/build folders.
        """
        patterns = exclude_dirs if exclude_dirs is not None else list(self.DEFAULT_EXCLUDE_DIRS)
        self._exclude_patterns = [p.strip() for p in patterns if p and p.strip()]
        self._spec = pathspec.PathSpec.from_lines(
            pathspec.patterns.GitWildMatchPattern, self._exclude_patterns
        )

    @property
    def exclude_patterns(self) -> list[str]:
        return list(self._exclude_patterns)

    def _is_excluded_dir(self, rel_dir: str) -> bool:
        return self._spec.match_file(f"{rel_dir}/")

    def walk(self, root_path: Path, extensions: Iterable[str]) -> Iterator[Path]:
        """
        Yield absolute paths of files under root_path with a matching extension.

        Args:
            root_path: Directory to walk
            extensions: Extensions including the dot (e.g. {'.png', '.svg'})
        """
        root_path = Path(root_path).absolute()
        if not root_path.is_dir():
            logger.warning(f"Could not read {root_path}: not a directory")
            return
        wanted = _normalize_extensions(extensions)
        yield from self._walk_directory(root_path, root_path, wanted)

    def _walk_directory(self, root: Path, current: Path, wanted: set[str]) -> Iterator[Path]:
        try:
            entries = sorted(current.iterdir(), key=lambda p: (not p.is_dir(), p.name))
        except PermissionError as e:
            logger.warning(f"Permission denied accessing directory: {current} - {e}")
            return
        except OSError as e:
            logger.warning(f"Could not read {current}: {e}")
            return

        for entry in entries:
            if entry.is_dir():
                rel_dir = entry.relative_to(root).as_posix()
                if self._is_excluded_dir(rel_dir):
                    logger.debug(f"Excluding directory: {entry}")
                    continue
                yield from self._walk_directory(root, entry, wanted)
            elif entry.suffix.lower() in wanted:
                yield entry

    def collect_assets(
        self, scan_dir: Path, app_dir: Path, extensions: Iterable[str]
    ) -> list[AssetFile]:
        """
        Collect asset files under scan_dir.

        Args:
            scan_dir: Directory to search for assets
            app_dir: App root used for the relative path of each asset
            extensions: Asset extensions

        Returns:
            AssetFile list in traversal order
        """
        app_dir = Path(app_dir).absolute()
        assets: list[AssetFile] = []
        for path in self.walk(scan_dir, extensions):
            try:
                size_bytes = path.stat().st_size
            except OSError as e:
                logger.warning(f"Skipping unreadable asset {path}: {e}")
                continue
            try:
                relative = path.relative_to(app_dir).as_posix()
            except ValueError:
                relative = path.as_posix()
            assets.append(AssetFile(path=path, size_bytes=size_bytes, relative_path=relative))
        logger.info(f"Found {len(assets)} asset files in {scan_dir}")
        return assets

    def collect_sources(self, src_dir: Path, extensions: Iterable[str]) -> list[SourceFile]:
        sources = [SourceFile(path=path) for path in self.walk(src_dir, extensions)]
        logger.info(f"Found {len(sources)} source files in {src_dir}")
        return sources
