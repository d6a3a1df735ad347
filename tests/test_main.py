import logging
import sys
import textwrap
from pathlib import Path

import pytest

from clidispatch.__main__ import bootstrap, find_config, main

CONFIG = """
name: tool
commands:
  - name: greet
    handler: main_handlers.greet
    positional_args:
      - name: who
"""

HANDLERS = '''
def greet(options, application):
    return 0 if options.positional_args[0] == "world" else 2
'''


@pytest.fixture(autouse=True)
def isolated(tmp_path, monkeypatch):
    """Run every test from an empty directory with an empty home."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setattr(Path, "home", lambda: home)
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("CLIDISPATCH_CONFIG", raising=False)
    monkeypatch.setattr(sys, "path", list(sys.path))
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield tmp_path
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


def write_project(directory: Path, name: str = "clidispatch.yaml") -> Path:
    (directory / "main_handlers.py").write_text(HANDLERS)
    config = directory / name
    config.write_text(textwrap.dedent(CONFIG))
    return config


def test_find_config_in_cwd(isolated):
    config = write_project(isolated)
    assert find_config().resolve() == config.resolve()


def test_find_config_from_environment(isolated, monkeypatch):
    other = isolated / "elsewhere"
    other.mkdir()
    config = write_project(other, "custom.yaml")
    monkeypatch.setenv("CLIDISPATCH_CONFIG", str(config))
    assert find_config() == config


def test_find_config_none():
    assert find_config() is None


def test_bootstrap_with_explicit_config(isolated):
    other = isolated / "project"
    other.mkdir()
    config = write_project(other, "tool.yaml")
    config_path, args = bootstrap([str(config), "greet", "world"])
    assert config_path == config
    assert args == ["greet", "world"]
    assert str(other.resolve()) in sys.path


def test_bootstrap_passes_args_through_when_discovered(isolated):
    config = write_project(isolated)
    config_path, args = bootstrap(["greet", "world"])
    assert config_path.resolve() == config.resolve()
    assert args == ["greet", "world"]


def test_main_runs_configured_application(isolated):
    write_project(isolated)
    sys.modules.pop("main_handlers", None)
    assert main(["greet", "world"]) == 0
    assert main(["greet", "moon"]) == 2


def test_main_logs_dispatch_to_file(isolated):
    write_project(isolated)
    sys.modules.pop("main_handlers", None)
    main(["greet", "world"])
    for handler in logging.getLogger().handlers:
        handler.flush()
    log_text = (isolated / "clidispatch.log").read_text()
    assert "Dispatching to 'greet'" in log_text


def test_main_without_config(capsys):
    assert main([]) == 1
    assert "No clidispatch config found." in capsys.readouterr().err
