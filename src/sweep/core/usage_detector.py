"""
Asset usage detection for sweep.

Decides whether an asset is referenced by searching the raw text of every
source file of the app. This is a textual heuristic, not semantic analysis:
coincidental substrings produce false positives, and paths built through
indirection it cannot anticipate produce false negatives.
"""

import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator

from sweep.core.models import SourceFile

logger = logging.getLogger(__name__)

# Static text glued directly to a ${...} placeholder in a template string
_TEMPLATE_FRAGMENT = re.compile(r"([\w.-]*)\$\{[^}]*\}([\w.-]*)")
_WORD_SPLIT = re.compile(r"[^0-9A-Za-z]+")

# Shortest stem token accepted by the template-fragment heuristic
MIN_TOKEN_LENGTH = 3

# Prefixes under which assets are conventionally referenced
CONVENTIONAL_PREFIXES = ("src/", "assets/", "./assets/", "/assets/")


@dataclass(frozen=True)
class CachedSource:
    """Text of one source file plus the template fragments found in it."""

    path: Path
    text: str
    fragments: tuple[tuple[str, str], ...]


class SourceContentCache:
    """
    Lazily loaded text of an app's source files.

    The first access reads every file once; later accesses reuse the result
    for the rest of the app's run. Unreadable files are skipped with a warning.
    """

    def __init__(self, source_files: Iterable[SourceFile]):
        self._source_files = list(source_files)
        self._entries: list[CachedSource] | None = None
        self._skipped: list[Path] = []

    @property
    def loaded(self) -> bool:
        return self._entries is not None

    @property
    def skipped_files(self) -> list[Path]:
        return list(self._skipped)

    def __len__(self) -> int:
        return len(self._load())

    def __iter__(self) -> Iterator[CachedSource]:
        return iter(self._load())

    def _load(self) -> list[CachedSource]:
        if self._entries is not None:
            return self._entries

        entries: list[CachedSource] = []
        for source in self._source_files:
            try:
                text = source.path.read_text(encoding="utf-8")
            except UnicodeDecodeError as e:
                logger.warning(f"Could not decode {source.path} as UTF-8, references in it are ignored: {e}")
                self._skipped.append(source.path)
                continue
            except OSError as e:
                logger.warning(f"Could not read {source.path}, references in it are ignored: {e}")
                self._skipped.append(source.path)
                continue
            fragments = tuple(
                (m.group(1), m.group(2))
                for m in _TEMPLATE_FRAGMENT.finditer(text)
                if m.group(1) or m.group(2)
            )
            entries.append(CachedSource(path=source.path, text=text, fragments=fragments))

        logger.debug(f"Cached {len(entries)} source files ({len(self._skipped)} skipped)")
        self._entries = entries
        return entries


@dataclass(frozen=True)
class AssetReferences:
    """Everything searched for when deciding whether one asset is used."""

    name: str
    stem: str
    search_strings: tuple[str, ...]
    placeholder: re.Pattern[str]
    tokens: frozenset[str]

    @classmethod
    def build(cls, asset_path: Path, src_dir: Path) -> "AssetReferences":
        name = asset_path.name
        stem = os.path.splitext(name)[0] or name
        relative = os.path.relpath(asset_path, src_dir)
        posix_relative = relative.replace("\\", "/")

        candidates = [name, stem, relative, posix_relative]
        candidates.extend(f"{prefix}{posix_relative}" for prefix in CONVENTIONAL_PREFIXES)
        # Keep order, drop duplicates and empty strings
        search_strings = tuple(dict.fromkeys(s for s in candidates if s))

        placeholder = re.compile(r"\$\{[^}]*" + re.escape(stem) + r"[^}]*\}")
        tokens = frozenset(
            t.lower() for t in _WORD_SPLIT.split(stem) if len(t) >= MIN_TOKEN_LENGTH
        )
        return cls(
            name=name,
            stem=stem,
            search_strings=search_strings,
            placeholder=placeholder,
            tokens=tokens,
        )

    def fragment_matches(self, prefix: str, suffix: str) -> bool:
        """
        True if ``prefix${...}suffix`` could produce this asset's basename.

        The fixed fragments must also contain one of the stem's word tokens,
        so a bare extension like ``${name}.png`` does not count.
        """
        if len(prefix) + len(suffix) >= len(self.name):
            return False
        if not (self.name.startswith(prefix) and self.name.endswith(suffix)):
            return False
        fixed = f"{prefix} {suffix}".lower()
        return any(token in fixed for token in self.tokens)


class AssetUsageDetector:
    """
    Checks assets against the cached source texts of one app.

    An asset is used as soon as one source file contains one of its search
    strings, matches its placeholder regex, or holds a template fragment that
    could build its name. Evaluation stops at the first hit.
    """

    def __init__(self, contents: SourceContentCache, src_dir: Path):
        self._contents = contents
        self._src_dir = Path(src_dir)

    def references_for(self, asset_path: Path) -> AssetReferences:
        return AssetReferences.build(Path(asset_path), self._src_dir)

    def is_used(self, asset_path: Path) -> bool:
        refs = self.references_for(asset_path)
        for source in self._contents:
            if self._source_references(source, refs):
                return True
        return False

    def find_reference(self, asset_path: Path) -> Path | None:
        """Return the first source file referencing the asset, if any."""
        refs = self.references_for(asset_path)
        for source in self._contents:
            if self._source_references(source, refs):
                return source.path
        return None

    @staticmethod
    def _source_references(source: CachedSource, refs: AssetReferences) -> bool:
        text = source.text
        for needle in refs.search_strings:
            if needle in text:
                return True
        if refs.placeholder.search(text):
            return True
        for prefix, suffix in source.fragments:
            if refs.fragment_matches(prefix, suffix):
                return True
        return False
