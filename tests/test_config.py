"""
Tests for Config — layered settings

These tests validate:
- Config hierarchy (env > project > user > defaults)
- Validation returns messages instead of raising
- Malformed files fall back to defaults
"""

from runedex.config import (
    Config, ConfigManager, EditorConfig, IndexConfig, LoggingConfig, get_config,
)
from runedex.services.indexer import WorkspaceIndexer


class TestSections:
    """Section validation."""

    def test_defaults_are_valid(self):
        """Default configuration validates."""
        assert Config().validate() is None

    def test_io_workers(self):
        """At least one reader thread."""
        assert "io_workers" in IndexConfig(io_workers=0).validate()

    def test_encoding(self):
        """Unknown encodings are rejected."""
        assert "encoding" in IndexConfig(encoding="nope-42").validate()

    def test_debounce(self):
        """Negative debounce is rejected."""
        assert EditorConfig(debounce_seconds=-1).validate() is not None

    def test_log_level(self):
        """Only standard level names."""
        assert LoggingConfig(level="info").validate() is None
        assert "Unknown log level" in LoggingConfig(level="LOUD").validate()

    def test_round_trip(self):
        """to_dict and from_dict agree."""
        config = Config(editor=EditorConfig(debounce_seconds=0.1))
        assert Config.from_dict(config.to_dict()) == config


class TestConfigManager:
    """Configuration loading and saving."""

    def test_load_defaults(self, tmp_path):
        """Loads defaults when no config files exist."""
        config = ConfigManager(tmp_path).load()
        assert config.editor.debounce_seconds == 0.4
        assert config.index.io_workers == 4

    def test_save_and_load_project(self, tmp_path):
        """Saves and loads project config."""
        ConfigManager(tmp_path).save_project(Config(index=IndexConfig(io_workers=2)))

        loaded = ConfigManager(tmp_path).load()
        assert loaded.index.io_workers == 2
        assert (tmp_path / ".runedex" / "config.yaml").exists()

    def test_project_overrides_user(self, tmp_path):
        """Project config takes priority over user config."""
        user_config = tmp_path / "home" / "config.yaml"
        user_config.parent.mkdir(parents=True)
        user_config.write_text("editor:\n  debounce_seconds: 1.5\nlogging:\n  level: DEBUG\n")

        project_dir = tmp_path / "project"
        (project_dir / ".runedex").mkdir(parents=True)
        (project_dir / ".runedex" / "config.yaml").write_text("editor:\n  debounce_seconds: 0.2\n")

        manager = ConfigManager(project_dir)
        manager.USER_CONFIG_FILE = user_config
        config = manager.load()

        assert config.editor.debounce_seconds == 0.2
        assert config.logging.level == "DEBUG"

    def test_environment_overrides_files(self, tmp_path, monkeypatch):
        """Environment variables override config files."""
        (tmp_path / ".runedex").mkdir()
        (tmp_path / ".runedex" / "config.yaml").write_text("index:\n  io_workers: 2\n")
        monkeypatch.setenv("RUNEDEX_IO_WORKERS", "8")
        monkeypatch.setenv("RUNEDEX_LOG_LEVEL", "info")

        config = ConfigManager(tmp_path).load()

        assert config.index.io_workers == 8
        assert config.logging.level == "INFO"

    def test_malformed_file_ignored(self, tmp_path, caplog):
        """Broken YAML is logged and skipped."""
        (tmp_path / ".runedex").mkdir()
        (tmp_path / ".runedex" / "config.yaml").write_text("index: [unclosed\n")

        config = ConfigManager(tmp_path).load()

        assert config == Config()
        assert "Ignoring malformed config" in caplog.text

    def test_bad_value_falls_back(self, tmp_path, caplog):
        """Values of the wrong type give the defaults."""
        (tmp_path / ".runedex").mkdir()
        (tmp_path / ".runedex" / "config.yaml").write_text("index:\n  io_workers: many\n")

        assert ConfigManager(tmp_path).load() == Config()

    def test_out_of_range_value_falls_back(self, tmp_path, monkeypatch, caplog):
        """Values failing validation give the defaults."""
        monkeypatch.setenv("RUNEDEX_IO_WORKERS", "0")

        config = ConfigManager(tmp_path).load()

        assert config.index.io_workers == 4
        assert "io_workers must be >= 1" in caplog.text

    def test_out_of_range_value_does_not_stop_indexing(self, tmp_path, monkeypatch):
        """A rebuild with a rejected setting still indexes."""
        (tmp_path / "a.rs2").write_text("[proc,f]\n")
        monkeypatch.setenv("RUNEDEX_IO_WORKERS", "0")

        indexer = WorkspaceIndexer(tmp_path, config=ConfigManager(tmp_path).load())
        try:
            assert indexer.rebuild_all() == 1
        finally:
            indexer.close()

    def test_pattern_string(self, tmp_path):
        """A single pattern string is one pattern, not its characters."""
        (tmp_path / ".runedex").mkdir()
        (tmp_path / ".runedex" / "config.yaml").write_text("index:\n  exclude_patterns: \"*.bak\"\n")

        config = ConfigManager(tmp_path).load()

        assert config.index.exclude_patterns == ["*.bak"]

    def test_pattern_string_keeps_files_indexed(self, tmp_path):
        """Only the files matching the configured pattern are skipped."""
        (tmp_path / ".runedex").mkdir()
        (tmp_path / ".runedex" / "config.yaml").write_text("index:\n  exclude_patterns: \"*.bak, old/*\"\n")
        (tmp_path / "a.rs2").write_text("[proc,f]\n")
        (tmp_path / "old").mkdir()
        (tmp_path / "old" / "b.rs2").write_text("[proc,g]\n")

        config = ConfigManager(tmp_path).load()
        indexer = WorkspaceIndexer(tmp_path, config=config)
        try:
            assert config.index.exclude_patterns == ["*.bak", "old/*"]
            assert indexer.rebuild_all() == 1
        finally:
            indexer.close()


class TestGetSet:
    """Dotted key access."""

    def test_set_valid(self, tmp_path):
        """Can set valid configuration values."""
        manager = ConfigManager(tmp_path)
        assert manager.set("editor.debounce_seconds", "0.25") is None
        assert ConfigManager(tmp_path).get("editor.debounce_seconds") == "0.25"

    def test_set_list(self, tmp_path):
        """Lists are comma separated."""
        manager = ConfigManager(tmp_path)
        manager.set("index.exclude_patterns", "build/*, dist/*")
        assert manager.get("index.exclude_patterns") == "build/*,dist/*"

    def test_set_user_scope(self, tmp_path):
        """User scope writes the user file."""
        manager = ConfigManager(tmp_path / "project")
        assert manager.set("logging.level", "debug", scope="user") is None
        assert ConfigManager.USER_CONFIG_FILE.exists()

    def test_set_unknown_key(self, tmp_path):
        """Unknown keys are reported."""
        error = ConfigManager(tmp_path).set("editor.colour", "red")
        assert "Unknown setting" in error

    def test_set_unparseable(self, tmp_path):
        """Values that do not parse are reported."""
        error = ConfigManager(tmp_path).set("index.io_workers", "lots")
        assert "Invalid value" in error

    def test_set_invalid(self, tmp_path):
        """Values failing validation are reported and not saved."""
        manager = ConfigManager(tmp_path)
        assert "io_workers" in manager.set("index.io_workers", "0")
        assert not (tmp_path / ".runedex" / "config.yaml").exists()

    def test_get_unknown(self, tmp_path):
        """Unknown keys have no value."""
        assert ConfigManager(tmp_path).get("nope") is None

    def test_display(self, tmp_path):
        """Display lists every section."""
        text = ConfigManager(tmp_path).display()
        assert "Debounce: 0.4s" in text
        assert "IO workers: 4" in text

    def test_get_config(self, tmp_path):
        """Convenience loader."""
        assert get_config(tmp_path) == Config()
