"""
Configuration — Centralized settings management

Config hierarchy (highest to lowest priority):
  1. Environment variables (RUNEDEX_DEBOUNCE, RUNEDEX_IO_WORKERS, RUNEDEX_LOG_LEVEL)
  2. Project config (<root>/.runedex/config.yaml)
  3. User config (~/.runedex/config.yaml)
  4. Defaults
"""

import logging
import os
import yaml
from pathlib import Path
from dataclasses import dataclass, field
from typing import Optional, Dict, Any, List

logger = logging.getLogger(__name__)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

# fnmatch patterns on paths relative to the root; '*' also matches '/'
DEFAULT_EXCLUDE_PATTERNS = [".git/*", "node_modules/*", "*/node_modules/*", ".runedex/*"]


def parse_patterns(value) -> List[str]:
    """Pattern list from YAML: a list, or one comma separated string."""
    if isinstance(value, str):
        return [p.strip() for p in value.split(",") if p.strip()]
    return [str(p) for p in value]


@dataclass
class IndexConfig:
    """Workspace scanning."""
    exclude_patterns: List[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDE_PATTERNS))
    io_workers: int = 4       # Threads reading files during a rebuild
    encoding: str = "utf-8"

    def validate(self) -> Optional[str]:
        """Validate config. Returns error message or None if valid."""
        if self.io_workers < 1:
            return f"io_workers must be >= 1, got {self.io_workers}"
        try:
            "".encode(self.encoding)
        except LookupError:
            return f"Unknown encoding '{self.encoding}'"
        return None


@dataclass
class EditorConfig:
    """Active editor handling."""
    debounce_seconds: float = 0.4   # Quiet period before the active file is reparsed

    def validate(self) -> Optional[str]:
        """Validate config. Returns error message or None if valid."""
        if self.debounce_seconds < 0:
            return f"debounce_seconds must be >= 0, got {self.debounce_seconds}"
        return None


@dataclass
class LoggingConfig:
    level: str = "WARNING"

    def validate(self) -> Optional[str]:
        """Validate config. Returns error message or None if valid."""
        if self.level.upper() not in LOG_LEVELS:
            return f"Unknown log level '{self.level}'. Valid: {', '.join(LOG_LEVELS)}"
        return None


@dataclass
class Config:
    """Application configuration."""
    index: IndexConfig = field(default_factory=IndexConfig)
    editor: EditorConfig = field(default_factory=EditorConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def validate(self) -> Optional[str]:
        """First error of any section, or None."""
        for section in (self.index, self.editor, self.logging):
            error = section.validate()
            if error:
                return error
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "index": {
                "exclude_patterns": list(self.index.exclude_patterns),
                "io_workers": self.index.io_workers,
                "encoding": self.index.encoding,
            },
            "editor": {
                "debounce_seconds": self.editor.debounce_seconds,
            },
            "logging": {
                "level": self.logging.level,
            },
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Config':
        """Create from dictionary."""
        index_data = data.get("index", {}) or {}
        editor_data = data.get("editor", {}) or {}
        logging_data = data.get("logging", {}) or {}

        return cls(
            index=IndexConfig(
                exclude_patterns=parse_patterns(index_data.get("exclude_patterns", DEFAULT_EXCLUDE_PATTERNS)),
                io_workers=int(index_data.get("io_workers", 4)),
                encoding=index_data.get("encoding", "utf-8"),
            ),
            editor=EditorConfig(
                debounce_seconds=float(editor_data.get("debounce_seconds", 0.4)),
            ),
            logging=LoggingConfig(
                level=str(logging_data.get("level", "WARNING")).upper(),
            ),
        )


class ConfigManager:
    """
    Manages configuration loading and persistence.

    Hierarchy:
      1. Environment
      2. Project config (.runedex/config.yaml)
      3. User config (~/.runedex/config.yaml)
      4. Defaults
    """

    USER_CONFIG_DIR = Path.home() / ".runedex"
    USER_CONFIG_FILE = USER_CONFIG_DIR / "config.yaml"
    PROJECT_CONFIG_DIR = ".runedex"
    PROJECT_CONFIG_FILE = "config.yaml"

    # key -> (section, setting, parser)
    KEYS = {
        "index.exclude_patterns": ("index", "exclude_patterns", parse_patterns),
        "index.io_workers": ("index", "io_workers", int),
        "index.encoding": ("index", "encoding", str),
        "editor.debounce_seconds": ("editor", "debounce_seconds", float),
        "logging.level": ("logging", "level", lambda v: v.upper()),
    }

    def __init__(self, project_dir: Optional[Path] = None):
        self.project_dir = Path(project_dir) if project_dir else Path.cwd()
        self._config: Optional[Config] = None

    @property
    def project_config_path(self) -> Path:
        return self.project_dir / self.PROJECT_CONFIG_DIR / self.PROJECT_CONFIG_FILE

    @property
    def user_config_path(self) -> Path:
        return self.USER_CONFIG_FILE

    def load(self) -> Config:
        """Load configuration from all sources."""
        if self._config is not None:
            return self._config

        # Start with defaults
        config_data: Dict[str, Any] = {}

        # Layer 1: User config
        config_data = self._merge(config_data, self._read(self.user_config_path))

        # Layer 2: Project config (higher priority)
        config_data = self._merge(config_data, self._read(self.project_config_path))

        # Layer 3: Environment overrides
        if os.environ.get("RUNEDEX_DEBOUNCE"):
            config_data.setdefault("editor", {})["debounce_seconds"] = os.environ["RUNEDEX_DEBOUNCE"]
        if os.environ.get("RUNEDEX_IO_WORKERS"):
            config_data.setdefault("index", {})["io_workers"] = os.environ["RUNEDEX_IO_WORKERS"]
        if os.environ.get("RUNEDEX_LOG_LEVEL"):
            config_data.setdefault("logging", {})["level"] = os.environ["RUNEDEX_LOG_LEVEL"]

        try:
            config = Config.from_dict(config_data)
        except (TypeError, ValueError) as e:
            logger.warning("Invalid configuration, using defaults: %s", e)
            config = Config()

        error = config.validate()
        if error:
            logger.warning("Invalid configuration, using defaults: %s", error)
            config = Config()

        self._config = config
        return self._config

    def _read(self, path: Path) -> Dict[str, Any]:
        if not path.exists():
            return {}
        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning("Ignoring malformed config %s: %s", path, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring config %s: not a mapping", path)
            return {}
        return data

    def save_project(self, config: Config):
        """Save configuration to project config file."""
        self.project_config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(self.project_config_path, 'w') as f:
            yaml.dump(config.to_dict(), f, default_flow_style=False)

        self._config = config

    def save_user(self, config: Config):
        """Save configuration to user config file."""
        self.USER_CONFIG_DIR.mkdir(parents=True, exist_ok=True)

        with open(self.user_config_path, 'w') as f:
            yaml.dump(config.to_dict(), f, default_flow_style=False)

        self._config = config

    def set(self, key: str, value: str, scope: str = "project") -> Optional[str]:
        """
        Set a configuration value.

        Args:
            key: Dot-separated key (e.g., "editor.debounce_seconds")
            value: Value to set
            scope: "project" or "user"

        Returns:
            Error message or None if successful
        """
        if key not in self.KEYS:
            return f"Unknown setting: {key}. Valid: {', '.join(sorted(self.KEYS))}"

        section, setting, parse = self.KEYS[key]
        try:
            parsed = parse(value)
        except ValueError:
            return f"Invalid value for {key}: {value}"

        config = Config.from_dict(self.load().to_dict())
        setattr(getattr(config, section), setting, parsed)
        error = getattr(config, section).validate()
        if error:
            return error

        if scope == "project":
            self.save_project(config)
        else:
            self.save_user(config)
        return None

    def get(self, key: str) -> Optional[str]:
        """Get a configuration value as text."""
        if key not in self.KEYS:
            return None
        section, setting, _ = self.KEYS[key]
        value = getattr(getattr(self.load(), section), setting)
        if isinstance(value, list):
            return ",".join(value)
        return str(value)

    def _merge(self, base: Dict, override: Dict) -> Dict:
        """Deep merge two dicts, override wins."""
        result = base.copy()
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge(result[key], value)
            else:
                result[key] = value
        return result

    def display(self) -> str:
        """Format config for display."""
        config = self.load()
        lines = [
            "Configuration:",
            "",
            "Index:",
            f"  Exclude patterns: {', '.join(config.index.exclude_patterns) or '(none)'}",
            f"  IO workers: {config.index.io_workers}",
            f"  Encoding: {config.index.encoding}",
            "",
            "Editor:",
            f"  Debounce: {config.editor.debounce_seconds}s",
            "",
            "Logging:",
            f"  Level: {config.logging.level}",
            "",
            "Config files:",
            f"  User: {self.user_config_path}",
            f"  Project: {self.project_config_path}",
        ]
        return "\n".join(lines)


# Convenience function
def get_config(project_dir: Optional[Path] = None) -> Config:
    """Load configuration for a project."""
    return ConfigManager(project_dir).load()
