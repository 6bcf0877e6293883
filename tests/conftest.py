"""Shared pytest fixtures for pathtarget tests."""
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Generator

import pytest
import yaml


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def source_dir(temp_dir: Path) -> Path:
    """Create a project tree with Apex classes and dependencies."""
    source = temp_dir / "project"
    source.mkdir()

    classes = source / "force-app" / "classes"
    classes.mkdir(parents=True)
    (classes / "Foo.cls").write_text("public class Foo {}")
    (classes / "FooTest.cls").write_text("@isTest\nprivate class FooTest {}")
    (classes / "Bar.cls").write_text("public class Bar {}\n" * 200)

    (source / "node_modules" / "lib").mkdir(parents=True)
    (source / "node_modules" / "lib" / "index.js").write_text("module.exports = {};")

    (source / "README.md").write_text("# Project")

    return source


@pytest.fixture
def sample_config() -> Dict[str, Any]:
    """Provide a sample pathtarget configuration."""
    return {
        "pathtarget": {
            "version": "1.0",
            "targets": {
                "patterns": [
                    "**/*.cls",
                    "!**/node_modules/**",
                ],
                "advanced": [
                    {
                        "name": "javascript-tests",
                        "base_patterns": ["**/*.js"],
                        "operator": "and",
                        "conditions": [
                            {"field": "name", "operator": "contains", "value": "test"},
                        ],
                    }
                ],
            },
            "logging": {
                "level": "DEBUG",
                "file": None,
            },
        }
    }


@pytest.fixture
def config_file(temp_dir: Path, sample_config: Dict[str, Any]) -> Path:
    """Create a configuration file."""
    config_path = temp_dir / "pathtarget.yaml"
    with open(config_path, "w") as f:
        yaml.dump(sample_config, f)
    return config_path


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep PATHTARGET_* variables from the host out of the tests."""
    for key in list(os.environ):
        if key.startswith("PATHTARGET_"):
            monkeypatch.delenv(key)
    yield


@pytest.fixture(autouse=True)
def restore_pathtarget_logger():
    """Undo handler and level changes made by setup_logging() in a test."""
    stdlib_logger = logging.getLogger("pathtarget")
    handlers = list(stdlib_logger.handlers)
    level = stdlib_logger.level
    propagate = stdlib_logger.propagate
    yield
    stdlib_logger.handlers[:] = handlers
    stdlib_logger.setLevel(level)
    stdlib_logger.propagate = propagate


@pytest.fixture(autouse=True)
def isolated_config_files(monkeypatch, tmp_path):
    """Point the system and user config locations at files that do not exist."""
    from pathtarget.core.config import ConfigManager

    monkeypatch.setattr(ConfigManager, "SYSTEM_CONFIG_FILE", tmp_path / "system" / "config.yaml")
    monkeypatch.setattr(ConfigManager, "USER_CONFIG_FILE", tmp_path / "user" / "config.yaml")
