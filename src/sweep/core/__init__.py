"""
Core Layer - Configuration, whitelist patterns, path normalization, file
collection and asset usage detection.
"""

from sweep.core.config import (
    KnipConfig,
    LoggingConfig,
    ReportConfig,
    SweepConfig,
    WhitelistConfig,
    load_config,
)
from sweep.core.errors import (
    AppValidationError,
    InvalidWhitelistError,
    SweepError,
    UnsafePatternError,
)
from sweep.core.file_collector import FileCollector
from sweep.core.models import (
    AssetFile,
    ExternalFindings,
    SourceFile,
    UnusedAssetRecord,
    format_file_size,
)
from sweep.core.path_utils import PathNormalizer
from sweep.core.patterns import (
    CompiledWhitelist,
    ExactBasename,
    ExactPath,
    InvalidPattern,
    RegexPattern,
    classify_pattern,
    compile_patterns,
    glob_to_regex,
    validate_regex_safety,
)
from sweep.core.usage_detector import AssetUsageDetector, SourceContentCache
from sweep.core.whitelist import WhitelistMatcher

__all__ = [
    # Config
    "SweepConfig",
    "WhitelistConfig",
    "KnipConfig",
    "ReportConfig",
    "LoggingConfig",
    "load_config",
    # Errors
    "SweepError",
    "UnsafePatternError",
    "AppValidationError",
    "InvalidWhitelistError",
    # Models
    "AssetFile",
    "SourceFile",
    "UnusedAssetRecord",
    "ExternalFindings",
    "format_file_size",
    # Patterns
    "ExactPath",
    "ExactBasename",
    "RegexPattern",
    "InvalidPattern",
    "CompiledWhitelist",
    "classify_pattern",
    "compile_patterns",
    "glob_to_regex",
    "validate_regex_safety",
    # Matching and detection
    "PathNormalizer",
    "WhitelistMatcher",
    "FileCollector",
    "SourceContentCache",
    "AssetUsageDetector",
]
