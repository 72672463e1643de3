"""
Configuration module for sweep.

Supports loading from YAML/JSON project files and the ``sweep`` field of
package.json, with environment variable overrides. Default values are
loaded from defaults.yaml for maintainability.
"""

import json
import logging
import os
import re
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Optional

import yaml

logger = logging.getLogger(__name__)

# Path to the default configuration file
_DEFAULTS_CONFIG_PATH = Path(__file__).parent / "defaults.yaml"

# Cache for default values
_defaults_cache: dict[str, Any] | None = None

# Project config files, searched in order in the project root
CONFIG_FILES = (
    "sweep.config.yaml",
    "sweep.config.yml",
    "sweep.config.json",
    ".sweep.yaml",
    ".sweep.yml",
    ".sweep.json",
)

# package.json fields that may hold sweep settings
PACKAGE_JSON_FIELDS = ("sweep", "find-unused-assets", "findUnusedAssets")

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])([A-Z])")


def _load_defaults() -> dict[str, Any]:
    """Load default configuration values from defaults.yaml."""
    global _defaults_cache

    if _defaults_cache is not None:
        return _defaults_cache

    if not _DEFAULTS_CONFIG_PATH.exists():
        logger.warning(f"Defaults config not found: {_DEFAULTS_CONFIG_PATH}")
        _defaults_cache = {}
        return _defaults_cache

    try:
        content = _DEFAULTS_CONFIG_PATH.read_text(encoding="utf-8")
        _defaults_cache = yaml.safe_load(content) or {}
    except yaml.YAMLError as e:
        logger.error(f"Failed to parse defaults config: {e}")
        _defaults_cache = {}

    return _defaults_cache


def _get_default(section: str, key: str, fallback: Any = None) -> Any:
    """Get a default value from the defaults config."""
    defaults = _load_defaults()
    section_defaults = defaults.get(section, {})
    value = section_defaults.get(key, fallback)
    # Never hand out the cached list itself
    return list(value) if isinstance(value, list) else value


def _snake_case(key: str) -> str:
    return _CAMEL_BOUNDARY.sub(r"_\1", key).lower()


def _snake_keys(data: dict[str, Any]) -> dict[str, Any]:
    """Convert the keys of one mapping level from camelCase to snake_case."""
    return {_snake_case(str(k)): v for k, v in data.items()}


def _known_fields(cls: type, data: dict[str, Any], section: str) -> dict[str, Any]:
    names = {f.name for f in fields(cls)}
    known = {k: v for k, v in data.items() if k in names}
    for unknown in sorted(set(data) - names):
        logger.warning(f"Ignoring unknown config key '{section}.{unknown}'")
    return known


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge override into a copy of base; lists are replaced."""
    result = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = deep_merge(result[key], value)
        elif value is not None:
            result[key] = value
    return result


@dataclass
class WhitelistConfig:
    """Whitelist patterns: global ones and per-app ones keyed by app name."""

    patterns: list[str] = field(default_factory=list)
    products: dict[str, list[str]] = field(default_factory=dict)

    def patterns_for(self, app_name: str) -> list[str]:
        """Effective patterns of an app: global first, then per-app."""
        return [*self.patterns, *self.products.get(app_name, [])]


@dataclass
class KnipConfig:
    """Configuration for the Knip analyzer."""

    enabled: bool = field(default_factory=lambda: _get_default("knip", "enabled", False))
    cwd: Optional[str] = field(default_factory=lambda: _get_default("knip", "cwd", None))
    timeout: float = field(default_factory=lambda: _get_default("knip", "timeout", 60.0))
    commands: list[str] = field(
        default_factory=lambda: _get_default(
            "knip", "commands", ["npx knip --reporter json --no-exit-code"]
        )
    )


@dataclass
class ReportConfig:
    """Configuration for the JSON report file."""

    json_output: str = field(
        default_factory=lambda: _get_default("report", "json_output", "unused-assets-report.json")
    )
    save_report: bool = field(default_factory=lambda: _get_default("report", "save_report", True))


@dataclass
class LoggingConfig:
    """Configuration for logging."""

    level: str = field(default_factory=lambda: _get_default("logging", "level", "INFO"))
    format: str = field(default_factory=lambda: _get_default("logging", "format", "%(message)s"))


@dataclass
class SweepConfig:
    """Main configuration class for sweep."""

    root_dir: Optional[str] = None
    apps_dir: str = field(default_factory=lambda: _get_default("project", "apps_dir", "apps"))
    assets_dir: str = field(
        default_factory=lambda: _get_default("project", "assets_dir", "src/assets")
    )
    src_dir: str = field(default_factory=lambda: _get_default("project", "src_dir", "src"))
    scan_dir: Optional[str] = field(
        default_factory=lambda: _get_default("project", "scan_dir", None)
    )
    asset_extensions: list[str] = field(
        default_factory=lambda: _get_default("project", "asset_extensions", [".png", ".svg"])
    )
    source_extensions: list[str] = field(
        default_factory=lambda: _get_default(
            "project", "source_extensions", [".js", ".jsx", ".ts", ".tsx"]
        )
    )
    exclude_dirs: list[str] = field(
        default_factory=lambda: _get_default(
            "project", "exclude_dirs", ["node_modules", ".git", "dist", "build", "coverage"]
        )
    )
    whitelist: WhitelistConfig = field(default_factory=WhitelistConfig)
    knip: KnipConfig = field(default_factory=KnipConfig)
    report: ReportConfig = field(default_factory=ReportConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_file(cls, path: Path | str) -> "SweepConfig":
        """
        Load configuration from a YAML or JSON file.

        Args:
            path: Path to the configuration file (.yaml, .yml, or .json)

        Returns:
            SweepConfig instance with loaded values

        Raises:
            FileNotFoundError: If the config file doesn't exist
            ValueError: If the file format is unsupported
        """
        return cls._from_dict(read_config_file(path))

    @classmethod
    def _from_dict(cls, data: dict) -> "SweepConfig":
        """Create SweepConfig from a dictionary (snake_case or camelCase keys)."""
        data = _snake_keys(data or {})
        sections = {"whitelist", "knip", "report", "logging"}
        top_level = {k: v for k, v in data.items() if k not in sections}
        config = cls(**_known_fields(cls, top_level, "root"))

        if "whitelist" in data:
            config.whitelist = _whitelist_from_value(data["whitelist"])
        if isinstance(data.get("knip"), dict):
            config.knip = KnipConfig(**_known_fields(KnipConfig, _snake_keys(data["knip"]), "knip"))
        if isinstance(data.get("report"), dict):
            config.report = ReportConfig(
                **_known_fields(ReportConfig, _snake_keys(data["report"]), "report")
            )
        if isinstance(data.get("logging"), dict):
            config.logging = LoggingConfig(
                **_known_fields(LoggingConfig, _snake_keys(data["logging"]), "logging")
            )

        return config

    def apply_env_overrides(self) -> "SweepConfig":
        """
        Apply environment variable overrides to the configuration.

        Environment variables follow the pattern: SWEEP_<KEY> for project
        settings and SWEEP_<SECTION>_<KEY> for sections.
        Examples:
            - SWEEP_SRC_DIR
            - SWEEP_ASSET_EXTENSIONS (comma-separated)
            - SWEEP_KNIP_ENABLED
            - SWEEP_LOGGING_LEVEL

        Returns:
            Self with environment overrides applied
        """
        env_mappings = {
            # Project layout
            "SWEEP_ROOT_DIR": (None, "root_dir", str),
            "SWEEP_APPS_DIR": (None, "apps_dir", str),
            "SWEEP_ASSETS_DIR": (None, "assets_dir", str),
            "SWEEP_SRC_DIR": (None, "src_dir", str),
            "SWEEP_SCAN_DIR": (None, "scan_dir", str),
            "SWEEP_ASSET_EXTENSIONS": (None, "asset_extensions", _parse_list),
            "SWEEP_SOURCE_EXTENSIONS": (None, "source_extensions", _parse_list),
            "SWEEP_EXCLUDE_DIRS": (None, "exclude_dirs", _parse_list),
            # Knip
            "SWEEP_KNIP_ENABLED": ("knip", "enabled", _parse_bool),
            "SWEEP_KNIP_CWD": ("knip", "cwd", str),
            "SWEEP_KNIP_TIMEOUT": ("knip", "timeout", float),
            # Report
            "SWEEP_REPORT_JSON_OUTPUT": ("report", "json_output", str),
            "SWEEP_REPORT_SAVE_REPORT": ("report", "save_report", _parse_bool),
            # Logging
            "SWEEP_LOGGING_LEVEL": ("logging", "level", str),
        }

        for env_var, (section, key, converter) in env_mappings.items():
            value = os.environ.get(env_var)
            if value is not None:
                target = self if section is None else getattr(self, section)
                setattr(target, key, converter(value))

        return self

    @property
    def effective_scan_dir(self) -> str:
        return self.scan_dir or self.src_dir

    def to_dict(self) -> dict:
        """Convert configuration to a dictionary."""
        return asdict(self)

    def to_yaml(self) -> str:
        """Serialize configuration to YAML string."""
        return yaml.dump(self.to_dict(), default_flow_style=False, sort_keys=False)

    def to_json(self) -> str:
        """Serialize configuration to JSON string."""
        return json.dumps(self.to_dict(), indent=2)

    def save(self, path: Path | str) -> None:
        """
        Save configuration to a file.

        Args:
            path: Path to save the configuration (.yaml, .yml, or .json)

        Raises:
            ValueError: If the file format is unsupported
        """
        path = Path(path)

        if path.suffix in (".yaml", ".yml"):
            content = self.to_yaml()
        elif path.suffix == ".json":
            content = self.to_json()
        else:
            raise ValueError(f"Unsupported config file format: {path.suffix}")

        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")


def _whitelist_from_value(value: Any) -> WhitelistConfig:
    """A bare list means global patterns; a mapping has patterns/products."""
    if isinstance(value, list):
        return WhitelistConfig(patterns=[str(p) for p in value if p is not None])
    if not isinstance(value, dict):
        logger.warning(f"Ignoring whitelist of unsupported type {type(value).__name__}")
        return WhitelistConfig()
    patterns = value.get("patterns") or []
    products = value.get("products") or {}
    return WhitelistConfig(
        patterns=[str(p) for p in patterns if p is not None],
        products={
            str(app): [str(p) for p in (app_patterns or []) if p is not None]
            for app, app_patterns in products.items()
        },
    )


def _parse_bool(value: str) -> bool:
    """Parse a string to boolean."""
    return value.lower() in ("true", "1", "yes", "on")


def _parse_list(value: str) -> list[str]:
    """Parse a comma-separated string to a list."""
    return [item.strip() for item in value.split(",") if item.strip()]


def read_config_file(path: Path | str) -> dict[str, Any]:
    """Read a YAML or JSON config file into a dictionary."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    content = path.read_text(encoding="utf-8")

    if path.suffix in (".yaml", ".yml"):
        data = yaml.safe_load(content) or {}
    elif path.suffix == ".json":
        data = json.loads(content) if content.strip() else {}
    else:
        raise ValueError(f"Unsupported config file format: {path.suffix}")

    if not isinstance(data, dict):
        raise ValueError(f"Configuration file must contain a mapping: {path}")
    return data


def find_config_file(root_dir: Path | str) -> Path | None:
    """Return the first project config file present in root_dir."""
    for name in CONFIG_FILES:
        candidate = Path(root_dir) / name
        if candidate.is_file():
            return candidate
    return None


def load_package_json_config(root_dir: Path | str) -> dict[str, Any]:
    """Read sweep settings from the package.json of root_dir, if any."""
    pkg_path = Path(root_dir) / "package.json"
    if not pkg_path.is_file():
        return {}
    try:
        pkg = json.loads(pkg_path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.warning(f"Could not read {pkg_path}: {e}")
        return {}
    if not isinstance(pkg, dict):
        return {}
    for name in PACKAGE_JSON_FIELDS:
        value = pkg.get(name)
        if isinstance(value, dict):
            return value
    return {}


def load_config(
    root_dir: Optional[Path | str] = None,
    config_path: Optional[Path | str] = None,
    apply_env: bool = True,
) -> SweepConfig:
    """
    Load configuration for a project.

    Precedence (lowest to highest): defaults, package.json field, project
    config file, environment variables.

    Args:
        root_dir: Project root searched for config files. Defaults to cwd.
        config_path: Explicit config file; skips discovery when given.
        apply_env: Whether to apply environment variable overrides.

    Returns:
        SweepConfig instance
    """
    root = Path(root_dir or Path.cwd()).absolute()

    data: dict[str, Any] = {}
    pkg_data = load_package_json_config(root)
    if pkg_data:
        data = deep_merge(data, pkg_data)

    file_path = Path(config_path) if config_path else find_config_file(root)
    if file_path is not None:
        logger.debug(f"Loading config from {file_path}")
        data = deep_merge(data, read_config_file(file_path))

    config = SweepConfig._from_dict(data)

    if apply_env:
        config.apply_env_overrides()

    if not config.root_dir:
        config.root_dir = str(root)
    elif not Path(config.root_dir).is_absolute():
        config.root_dir = str((root / config.root_dir).absolute())

    return config
