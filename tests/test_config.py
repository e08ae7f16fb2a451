from __future__ import annotations

import json
from pathlib import Path

import pytest

from cmdengine.db import load_config
from cmdengine.security import AllowAllPermissions, GrantedPermissions, oracle_from_setting


def test_defaults(tmp_path: Path) -> None:
    config = load_config(tmp_path, environ={})

    assert config.log_level == "INFO"
    assert config.plugin_package == "plugins"
    assert config.load_plugins is True
    assert config.enable_completion is True
    assert config.prompt == "> "
    assert config.granted_permissions == ("*",)
    assert config.log_file_path is None
    assert config.database_path.name == "history.db"


def test_files_then_environment_precedence(tmp_path: Path) -> None:
    (tmp_path / ".env").write_text("LOG_LEVEL=debug\nPROMPT='$ '\n", encoding="utf-8")
    (tmp_path / "config.json").write_text(
        json.dumps({"log": {"level": "warning"}, "database_path": str(tmp_path / "a.db")}),
        encoding="utf-8",
    )

    config = load_config(tmp_path, environ={"DATABASE_PATH": str(tmp_path / "b.db"), "UNRELATED": "x"})

    assert config.log_level == "WARNING"
    assert config.prompt == "$ "
    assert config.database_path == (tmp_path / "b.db").resolve()
    assert "UNRELATED" not in config.extra


def test_toml_and_ini_sources(tmp_path: Path) -> None:
    (tmp_path / "config.ini").write_text("[engine]\nload_plugins = no\n", encoding="utf-8")
    (tmp_path / "config.toml").write_text('granted_permissions = ["storage.read", "net"]\n',
                                          encoding="utf-8")

    config = load_config(tmp_path, environ={})

    assert config.load_plugins is False
    assert config.granted_permissions == ("storage.read", "net")


def test_invalid_values_name_the_key(tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="LOAD_PLUGINS"):
        load_config(tmp_path, environ={"LOAD_PLUGINS": "sometimes"})
    with pytest.raises(ValueError, match="LOG_LEVEL"):
        load_config(tmp_path, environ={"LOG_LEVEL": "loud"})
    with pytest.raises(ValueError, match="PLUGIN_PACKAGE"):
        load_config(tmp_path, environ={"PLUGIN_PACKAGE": "not a module"})


def test_oracle_from_setting() -> None:
    assert isinstance(oracle_from_setting(("*",)), AllowAllPermissions)
    assert isinstance(oracle_from_setting(None), AllowAllPermissions)

    oracle = oracle_from_setting(("storage.read",))
    assert isinstance(oracle, GrantedPermissions)
    assert oracle.is_granted(None, "storage.read")
    assert not oracle.is_granted(None, "storage.write")
