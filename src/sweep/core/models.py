"""
Data models shared by the collection, detection and reporting layers.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

_SIZE_UNITS = ("B", "KB", "MB", "GB")


def format_file_size(size_bytes: int) -> str:
    """
    Format a byte count as a short human-readable string.

    Uses 1024-based units and at most two decimals, dropping trailing zeros
    (``1536 -> "1.5 KB"``, ``2048 -> "2 KB"``).
    """
    if size_bytes <= 0:
        return "0 B"
    value = float(size_bytes)
    unit = 0
    while value >= 1024 and unit < len(_SIZE_UNITS) - 1:
        value /= 1024
        unit += 1
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{text} {_SIZE_UNITS[unit]}"


@dataclass(frozen=True)
class AssetFile:
    """
    A discovered asset file.

    Attributes:
        path: Absolute path to the file
        size_bytes: File size in bytes
        relative_path: Path relative to the app directory (forward slashes)
    """

    path: Path
    size_bytes: int
    relative_path: str


@dataclass(frozen=True)
class SourceFile:
    """A discovered source file. Its text is read lazily by the usage detector."""

    path: Path


@dataclass(frozen=True)
class UnusedAssetRecord:
    """An asset that is neither whitelisted nor referenced by any source file."""

    path: str
    full_path: Path
    size_bytes: int
    formatted_size: str

    @classmethod
    def from_asset(cls, asset: AssetFile, root_dir: Path) -> "UnusedAssetRecord":
        try:
            rel = asset.path.relative_to(root_dir)
        except ValueError:
            rel = asset.path
        return cls(
            path=rel.as_posix(),
            full_path=asset.path,
            size_bytes=asset.size_bytes,
            formatted_size=format_file_size(asset.size_bytes),
        )


# Finding categories reported by the external analyzer
PATH_FINDING_KEYS = ("files", "exports", "types")
DEPENDENCY_FINDING_KEYS = ("dependencies", "devDependencies")
FINDING_KEYS = ("files", "dependencies", "devDependencies", "exports", "types")


def finding_label(item: Any) -> str:
    """Return the display string for a finding (a path, a name or a record)."""
    if isinstance(item, str):
        return item
    if isinstance(item, dict):
        if item.get("file"):
            return str(item["file"])
        if item.get("name"):
            return str(item["name"])
    return str(item)


@dataclass
class ExternalFindings:
    """
    Findings reported by the external analyzer (Knip).

    Path-like categories hold strings or ``{"file": ...}`` records;
    dependency categories hold package names.
    """

    files: list[Any] = field(default_factory=list)
    dependencies: list[Any] = field(default_factory=list)
    devDependencies: list[Any] = field(default_factory=list)
    exports: list[Any] = field(default_factory=list)
    types: list[Any] = field(default_factory=list)
    error: str | None = None

    @classmethod
    def failed(cls, error: str) -> "ExternalFindings":
        return cls(error=error)

    @property
    def total(self) -> int:
        return sum(len(getattr(self, key)) for key in FINDING_KEYS)

    def items(self) -> list[tuple[str, list[Any]]]:
        return [(key, getattr(self, key)) for key in FINDING_KEYS]
