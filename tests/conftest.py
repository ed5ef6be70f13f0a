"""
Shared pytest fixtures for the runedex test suite.

Provides workspaces built with RunedexTestFactory: real files under
tmp_path, a real indexer and a real query service.

Usage in tests:
    def test_something(runedex_factory):
        runedex_factory.write("scripts/a.rs2", "[proc,foo]")
        runedex_factory.build()

    def test_with_data(sample_workspace):
        # sample_workspace is already indexed
        sample_workspace.queries.lookup_identifier("add_coins", "PROC")
"""

import pytest

from runedex.config import ConfigManager
from tests.factories import RunedexTestFactory


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path, monkeypatch):
    """Keep the real user config and RUNEDEX_* variables out of every test."""
    user_dir = tmp_path / "home" / ".runedex"
    monkeypatch.setattr(ConfigManager, "USER_CONFIG_DIR", user_dir)
    monkeypatch.setattr(ConfigManager, "USER_CONFIG_FILE", user_dir / "config.yaml")
    for name in ("RUNEDEX_DEBOUNCE", "RUNEDEX_IO_WORKERS", "RUNEDEX_LOG_LEVEL", "RUNEDEX_PROJECT_PATH"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def runedex_factory(tmp_path):
    """
    Create an empty workspace factory.

    Use this when a test needs its own files. Call build() after writing.
    """
    factory = RunedexTestFactory(tmp_path)
    yield factory
    factory.close()


@pytest.fixture
def sample_workspace(tmp_path):
    """
    Create and index the sample workspace.

    Contains:
    - scripts/bank.rs2 (proc add_coins, timer bank_timer, queue bank_queue)
    - scripts/engine.rs2 (commands mes, settimer, queue, longqueue, inv_add)
    - content/items.obj (coins, gold_bar)
    """
    factory = RunedexTestFactory(tmp_path)
    factory.create_sample_workspace()
    factory.build()
    yield factory
    factory.close()
