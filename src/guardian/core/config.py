"""
Configuration module for Code Guardian.

Supports loading from YAML/JSON files with environment variable overrides.
Default values are loaded from defaults.yaml for maintainability.
"""

import json
import logging
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, Optional

import yaml

if TYPE_CHECKING:
    from guardian.services.scan_models import WorkspaceScanOptions

logger = logging.getLogger(__name__)

# Path to the default configuration file
_DEFAULTS_CONFIG_PATH = Path(__file__).parent / "defaults.yaml"

# Cache for default values
_defaults_cache: dict[str, Any] | None = None


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
    section_defaults = defaults.get(section) or {}
    return section_defaults.get(key, fallback)


@dataclass
class ScanConfig:
    """Configuration for workspace file discovery."""

    include_patterns: list[str] | None = field(
        default_factory=lambda: _get_default("scan", "include_patterns", None)
    )
    exclude_patterns: list[str] = field(
        default_factory=lambda: _get_default(
            "scan",
            "exclude_patterns",
            ["node_modules/", "dist/", "build/", "*.min.js", "vendor/", ".git/"],
        )
    )
    max_file_size: int = field(
        default_factory=lambda: _get_default("scan", "max_file_size", 512 * 1024)
    )
    scan_depth: int | None = field(default_factory=lambda: _get_default("scan", "scan_depth", None))
    max_workers: int = field(default_factory=lambda: _get_default("scan", "max_workers", 3))

    def to_scan_options(self, enable_real_time_scanning: bool = False) -> "WorkspaceScanOptions":
        """Build the scanner options described by this section."""
        from guardian.services.scan_models import WorkspaceScanOptions

        return WorkspaceScanOptions(
            include_patterns=list(self.include_patterns) if self.include_patterns else None,
            exclude_patterns=list(self.exclude_patterns),
            max_file_size=self.max_file_size,
            enable_real_time_scanning=enable_real_time_scanning,
            scan_depth=self.scan_depth,
            max_workers=self.max_workers,
        )


@dataclass
class AnalysisConfig:
    """Cache capacities for the analyzers."""

    security_cache_size: int = field(
        default_factory=lambda: _get_default("analysis", "security_cache_size", 100)
    )
    secret_cache_size: int = field(
        default_factory=lambda: _get_default("analysis", "secret_cache_size", 100)
    )
    quality_cache_size: int = field(
        default_factory=lambda: _get_default("analysis", "quality_cache_size", 100)
    )
    suggestion_cache_size: int = field(
        default_factory=lambda: _get_default("analysis", "suggestion_cache_size", 50)
    )
    rule_set_cache_size: int = field(
        default_factory=lambda: _get_default("analysis", "rule_set_cache_size", 100)
    )


@dataclass
class WatchConfig:
    """Configuration for real-time scanning."""

    enabled: bool = field(default_factory=lambda: _get_default("watch", "enabled", False))
    debounce_ms: int = field(default_factory=lambda: _get_default("watch", "debounce_ms", 500))
    slow_operation_ms: int = field(
        default_factory=lambda: _get_default("watch", "slow_operation_ms", 5000)
    )


@dataclass
class LoggingConfig:
    """Configuration for logging."""

    level: str = field(default_factory=lambda: _get_default("logging", "level", "WARNING"))
    format: str = field(
        default_factory=lambda: _get_default(
            "logging", "format", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )
    )


@dataclass
class GuardianConfig:
    """Main configuration class for Code Guardian."""

    scan: ScanConfig = field(default_factory=ScanConfig)
    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)
    watch: WatchConfig = field(default_factory=WatchConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_file(cls, path: Path | str) -> "GuardianConfig":
        """
        Load configuration from a YAML or JSON file.

        Args:
            path: Path to the configuration file (.yaml, .yml, or .json)

        Returns:
            GuardianConfig instance with loaded values

        Raises:
            FileNotFoundError: If the config file doesn't exist
            ValueError: If the file format is unsupported
        """
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

        return cls._from_dict(data)

    @classmethod
    def _from_dict(cls, data: dict) -> "GuardianConfig":
        """Create GuardianConfig from a dictionary."""
        config = cls()

        if "scan" in data:
            config.scan = ScanConfig(**data["scan"])
        if "analysis" in data:
            config.analysis = AnalysisConfig(**data["analysis"])
        if "watch" in data:
            config.watch = WatchConfig(**data["watch"])
        if "logging" in data:
            config.logging = LoggingConfig(**data["logging"])

        return config

    def apply_env_overrides(self) -> "GuardianConfig":
        """
        Apply environment variable overrides to the configuration.

        Environment variables follow the pattern: GUARDIAN_<SECTION>_<KEY>
        Examples:
            - GUARDIAN_SCAN_MAX_FILE_SIZE
            - GUARDIAN_SCAN_EXCLUDE_PATTERNS (comma separated)
            - GUARDIAN_WATCH_DEBOUNCE_MS
            - GUARDIAN_LOGGING_LEVEL

        Returns:
            Self with environment overrides applied
        """
        env_mappings = {
            # Scan config
            "GUARDIAN_SCAN_INCLUDE_PATTERNS": ("scan", "include_patterns", _parse_list),
            "GUARDIAN_SCAN_EXCLUDE_PATTERNS": ("scan", "exclude_patterns", _parse_list),
            "GUARDIAN_SCAN_MAX_FILE_SIZE": ("scan", "max_file_size", int),
            "GUARDIAN_SCAN_SCAN_DEPTH": ("scan", "scan_depth", int),
            "GUARDIAN_SCAN_MAX_WORKERS": ("scan", "max_workers", int),
            # Analysis config
            "GUARDIAN_ANALYSIS_SECURITY_CACHE_SIZE": ("analysis", "security_cache_size", int),
            "GUARDIAN_ANALYSIS_SECRET_CACHE_SIZE": ("analysis", "secret_cache_size", int),
            "GUARDIAN_ANALYSIS_QUALITY_CACHE_SIZE": ("analysis", "quality_cache_size", int),
            "GUARDIAN_ANALYSIS_SUGGESTION_CACHE_SIZE": ("analysis", "suggestion_cache_size", int),
            "GUARDIAN_ANALYSIS_RULE_SET_CACHE_SIZE": ("analysis", "rule_set_cache_size", int),
            # Watch config
            "GUARDIAN_WATCH_ENABLED": ("watch", "enabled", _parse_bool),
            "GUARDIAN_WATCH_DEBOUNCE_MS": ("watch", "debounce_ms", int),
            "GUARDIAN_WATCH_SLOW_OPERATION_MS": ("watch", "slow_operation_ms", int),
            # Logging config
            "GUARDIAN_LOGGING_LEVEL": ("logging", "level", str),
        }

        for env_var, (section, key, converter) in env_mappings.items():
            value = os.environ.get(env_var)
            if value is not None:
                section_obj = getattr(self, section)
                setattr(section_obj, key, converter(value))

        return self

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


def _parse_bool(value: str) -> bool:
    """Parse a string to boolean."""
    return value.lower() in ("true", "1", "yes", "on")


def _parse_list(value: str) -> list[str]:
    """Parse a comma separated string to a list of non-empty items."""
    return [item.strip() for item in value.split(",") if item.strip()]


def load_config(config_path: Optional[Path | str] = None, apply_env: bool = True) -> GuardianConfig:
    """
    Load configuration with optional environment variable overrides.

    Args:
        config_path: Optional path to config file. If None, uses defaults.
        apply_env: Whether to apply environment variable overrides.

    Returns:
        GuardianConfig instance
    """
    if config_path:
        config = GuardianConfig.from_file(config_path)
    else:
        config = GuardianConfig()

    if apply_env:
        config.apply_env_overrides()

    return config
