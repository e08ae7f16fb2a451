#!/usr/bin/env python3
# cmdengine/boot/boot.py
from __future__ import annotations
"""
Boot sequence for the command engine.

Wires configuration -> logger -> audit store -> registry -> engine -> plugins,
printing a [  OK  ] / [FAILED] line per step. A failing step re-raises.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Mapping
import logging
import platform

from cmdengine.commands import CommandRegistry
from cmdengine.db import AppConfig, SQLiteAuditStore, load_config
from cmdengine.interface.handler import CommandExecutionEngine
from cmdengine.interface.loader import load_commands
from cmdengine.security import oracle_from_setting
from cmdengine.ui import colorize, init_logger, print_line


@dataclass(slots=True)
class BootState:
    config: AppConfig
    logger: logging.Logger
    store: SQLiteAuditStore
    registry: CommandRegistry
    engine: CommandExecutionEngine
    loaded_count: int


def _step(label: str, fn: Callable[[], Any], *, quiet: bool = False) -> Any:
    """Run a boot step with status output."""
    try:
        out = fn()
    except Exception as exc:
        print_line(
            colorize(f"[FAILED] {label} ({type(exc).__name__}: {exc})", "red")
        )
        raise
    if not quiet:
        print_line(colorize(f"[  OK  ] {label}", "green"))
    return out


def boot_sequence(
    base: Path | None = None,
    environ: Mapping[str, str] | None = None,
    *,
    quiet: bool = False,
) -> BootState:
    _step(
        f"Detect environment: {platform.system()} {platform.release()} / Python {platform.python_version()}",
        lambda: None,
        quiet=quiet,
    )

    # ---------- config ----------
    config = _step("Load configuration", lambda: load_config(base, environ), quiet=quiet)

    # ---------- logging ----------
    logger = _step(
        "Initialize logger",
        lambda: init_logger(
            "cmdengine",
            level=config.log_level,
            logfile=str(config.log_file_path) if config.log_file_path else None,
        ),
        quiet=quiet,
    )

    # ---------- storage ----------
    store = _step(
        f"Open audit database ({config.database_path})",
        lambda: SQLiteAuditStore(config.database_path),
        quiet=quiet,
    )

    # ---------- engine ----------
    registry = CommandRegistry(permission_oracle=oracle_from_setting(config.granted_permissions))
    engine = _step(
        "Register built-in commands",
        lambda: CommandExecutionEngine(registry, store=store),
        quiet=quiet,
    )

    # ---------- plugins ----------
    if config.load_plugins:
        report = _step(
            f"Load commands package '{config.plugin_package}'",
            lambda: load_commands(registry, config.plugin_package),
            quiet=quiet,
        )
        for group, description in sorted(report.descriptions.items()):
            logger.debug("Plugin group %s: %s", group, description or "(no description)")
    else:
        _step("Skip plugin loading (config)", lambda: None, quiet=quiet)

    loaded_count = _step("Count command definitions", lambda: len(registry.all()), quiet=quiet)
    _step("Boot complete", lambda: None, quiet=quiet)

    return BootState(
        config=config,
        logger=logger,
        store=store,
        registry=registry,
        engine=engine,
        loaded_count=loaded_count,
    )
