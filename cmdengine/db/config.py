#!/usr/bin/env python3
# cmdengine/db/config.py
from __future__ import annotations

"""
Configuration loader (stdlib-only).

Precedence (low → high):
  1) Built-in defaults
  2) Files in CWD: .env, config.ini, config.json, config.toml
  3) Environment variables (recognized keys only)

Validation:
  - DATABASE_PATH: normalized path (no creation here)
  - LOG_FILE_PATH: None or normalized path
  - LOG_LEVEL: one of {'DEBUG','INFO','WARNING','ERROR','CRITICAL'}
  - LOAD_PLUGINS / ENABLE_COMPLETION: bool
  - PLUGIN_PACKAGE: dotted module name
  - PROMPT: str
  - GRANTED_PERMISSIONS: comma-separated identifiers, '*' grants all
"""

from dataclasses import dataclass, field
from typing import Any, Mapping
from pathlib import Path
import configparser
import json
import os
import re
import tomllib  # stdlib in 3.11+

# ---------- defaults ----------


def _default_database_path() -> str:
    if os.name == "nt":
        base = os.environ.get("LOCALAPPDATA") or str(Path.home() / "AppData" / "Local")
        return str(Path(base) / "cmdengine" / "history.db")
    # POSIX
    return str(Path.home() / ".local" / "share" / "cmdengine" / "history.db")


DEFAULTS: dict[str, Any] = {
    "DATABASE_PATH": _default_database_path(),
    "LOG_FILE_PATH": None,
    "LOG_LEVEL": "INFO",
    "PLUGIN_PACKAGE": "plugins",
    "LOAD_PLUGINS": True,
    "PROMPT": "> ",
    "ENABLE_COMPLETION": True,
    "GRANTED_PERMISSIONS": "*",
}


# ---------- data model ----------

@dataclass(frozen=True)
class AppConfig:
    database_path: Path
    log_file_path: Path | None
    log_level: str
    plugin_package: str
    load_plugins: bool
    prompt: str
    enable_completion: bool
    granted_permissions: tuple[str, ...]

    # Unrecognized file keys preserved for debugging/forward-compat
    extra: dict[str, Any] = field(default_factory=dict)


# ---------- file loaders (stdlib) ----------

def _load_env_file(path: Path) -> dict[str, str]:
    """Very small .env parser: KEY=VALUE, supports quotes; ignores comments/blank lines."""
    out: dict[str, str] = {}
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return out

    line_re = re.compile(r"""^\s*([A-Za-z_][A-Za-z0-9_]*)\s*=\s*(.*?)\s*$""")
    for raw in text.splitlines():
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        m = line_re.match(line)
        if not m:
            continue
        k, v = m.group(1), m.group(2)
        if (v.startswith("'") and v.endswith("'")) or (v.startswith('"') and v.endswith('"')):
            v = v[1:-1]
        out[k] = v
    return out


def _load_ini_file(path: Path) -> dict[str, str]:
    cfg = configparser.ConfigParser()
    cfg.read(path, encoding="utf-8")  # missing files are skipped
    flat: dict[str, str] = {}
    for sec in cfg.sections():
        for k, v in cfg.items(sec):
            flat[k.upper()] = v
    return flat


def _load_json_file(path: Path) -> dict[str, Any]:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (FileNotFoundError, json.JSONDecodeError):
        return {}


def _load_toml_file(path: Path) -> dict[str, Any]:
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except (FileNotFoundError, tomllib.TOMLDecodeError):
        return {}


def _flatten_mapping(obj: Any, prefix: str = "") -> dict[str, Any]:
    """
    Flatten nested dicts to UPPER_SNAKE keys.
    Example: {'log': {'level': 'debug'}} -> {'LOG_LEVEL': 'debug'}
    """
    flat: dict[str, Any] = {}
    if isinstance(obj, Mapping):
        for k, v in obj.items():
            key = f"{prefix}_{k}" if prefix else str(k)
            if isinstance(v, Mapping):
                flat.update(_flatten_mapping(v, key))
            else:
                flat[str(key).upper()] = v
    return flat


def _find_config_files(base: Path | None = None) -> list[Path]:
    cwd = base or Path.cwd()
    return [
        cwd / ".env",
        cwd / "config.ini",
        cwd / "config.json",
        cwd / "config.toml",
    ]


# ---------- normalization & coercion ----------

_BOOL_TRUE = {"1", "true", "yes", "y", "on"}
_BOOL_FALSE = {"0", "false", "no", "n", "off"}


def _as_bool(key: str, val: Any) -> bool:
    if isinstance(val, bool):
        return val
    s = str(val).strip().lower()
    if s in _BOOL_TRUE:
        return True
    if s in _BOOL_FALSE:
        return False
    raise ValueError(f"{key}: expected boolean, got {val!r}")


def _as_opt_str(val: Any) -> str | None:
    return None if val is None or str(val).strip().lower() in {"", "none"} else str(val)


def _as_log_level(val: Any) -> str:
    lv = _as_opt_str(val) or "INFO"
    up = lv.upper()
    allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
    if up not in allowed:
        raise ValueError(f"LOG_LEVEL must be one of {sorted(allowed)}, got {lv!r}")
    return up


def _as_path(val: Any) -> Path:
    # expand both ~ and env vars
    s = os.path.expandvars(os.path.expanduser(str(val)))
    return Path(s).resolve()


def _as_opt_path(val: Any) -> Path | None:
    v = _as_opt_str(val)
    return None if v is None else _as_path(v)


def _as_list(val: Any) -> tuple[str, ...]:
    if isinstance(val, (list, tuple)):
        items = [str(v) for v in val]
    else:
        items = str(val or "").split(",")
    return tuple(i.strip() for i in items if i.strip())


# ---------- merge & load ----------

def _normalize_keys(d: Mapping[str, Any]) -> dict[str, Any]:
    return {str(k).upper(): v for k, v in d.items()}


def _merge_sources(base: Path | None = None, environ: Mapping[str, str] | None = None) -> dict[str, Any]:
    merged: dict[str, Any] = dict(DEFAULTS)

    for file in _find_config_files(base):
        if file.name == ".env":
            merged.update(_normalize_keys(_load_env_file(file)))
        elif file.suffix == ".ini":
            merged.update(_normalize_keys(_load_ini_file(file)))
        elif file.suffix == ".json":
            merged.update(_normalize_keys(_flatten_mapping(_load_json_file(file))))
        elif file.suffix == ".toml":
            merged.update(_normalize_keys(_flatten_mapping(_load_toml_file(file))))

    # Environment variables override all, but only for keys we know
    env = os.environ if environ is None else environ
    merged.update({k: v for k, v in env.items() if k in DEFAULTS})
    return merged


def _validate_and_build(config: dict[str, Any]) -> AppConfig:
    plugin_package = str(config.get("PLUGIN_PACKAGE") or DEFAULTS["PLUGIN_PACKAGE"]).strip()
    if not re.fullmatch(r"[A-Za-z_][\w]*(\.[A-Za-z_][\w]*)*", plugin_package):
        raise ValueError(f"PLUGIN_PACKAGE must be a dotted module name, got {plugin_package!r}")

    prompt = config.get("PROMPT")
    recognized = set(DEFAULTS.keys())

    return AppConfig(
        database_path=_as_path(config.get("DATABASE_PATH") or DEFAULTS["DATABASE_PATH"]),
        log_file_path=_as_opt_path(config.get("LOG_FILE_PATH")),
        log_level=_as_log_level(config.get("LOG_LEVEL")),
        plugin_package=plugin_package,
        load_plugins=_as_bool("LOAD_PLUGINS", config.get("LOAD_PLUGINS", True)),
        prompt=DEFAULTS["PROMPT"] if prompt is None else str(prompt),
        enable_completion=_as_bool("ENABLE_COMPLETION", config.get("ENABLE_COMPLETION", True)),
        granted_permissions=_as_list(config.get("GRANTED_PERMISSIONS")),
        extra={k: v for k, v in config.items() if k not in recognized},
    )


# ---------- public API ----------

def load_config(base: Path | None = None, environ: Mapping[str, str] | None = None) -> AppConfig:
    """
    Load, merge, normalize, and validate configuration.
    No filesystem side-effects (no directory creation).
    """
    return _validate_and_build(_merge_sources(base, environ))
