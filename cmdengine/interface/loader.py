#!/usr/bin/env python3
# cmdengine/interface/loader.py
from __future__ import annotations

"""
Dynamic command loader.

Features:
- Imports all modules under a given package (default: 'plugins').
- Supports 'entrypoint.py' inside a subpackage exporting COMMAND/COMMANDS.
- Plain modules may export COMMAND/COMMANDS as well.
- Collects group descriptions from CATEGORY_DESCRIPTION or the module docstring.
"""

import importlib
import logging
import pkgutil
from dataclasses import dataclass, field
from pathlib import Path
from types import ModuleType
from typing import Iterable

from cmdengine.commands import CommandDefinition, CommandRegistry

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class LoadReport:
    modules: int = 0
    commands: int = 0
    descriptions: dict[str, str] = field(default_factory=dict)


def _register_from_module(registry: CommandRegistry, module: ModuleType) -> int:
    """Register COMMAND/COMMANDS exported by a module, if present."""
    registered_count = 0
    obj = getattr(module, "COMMAND", None)
    if isinstance(obj, CommandDefinition):
        registry.register(obj)
        registered_count += 1
    objs = getattr(module, "COMMANDS", None)
    if isinstance(objs, Iterable):
        for item in objs:
            if isinstance(item, CommandDefinition):
                registry.register(item)
                registered_count += 1
    return registered_count


def _group_description(module: ModuleType) -> str:
    """
    Group description is taken from:
      1) <group>.CATEGORY_DESCRIPTION (string), or
      2) <group> module docstring, else "".
    """
    value = getattr(module, "CATEGORY_DESCRIPTION", None)
    if isinstance(value, str):
        return value.strip()
    return (module.__doc__ or "").strip()


def load_commands(registry: CommandRegistry, commands_package: str = "plugins") -> LoadReport:
    """
    Import all modules under the given package and register their commands.

    Supported layouts:
      1) Plain modules: plugins/foo.py -> import plugins.foo
      2) Packages with an entrypoint: plugins/bar/entrypoint.py
         -> import plugins.bar.entrypoint

    Works with regular and namespace packages. Import errors propagate.
    """
    package = importlib.import_module(commands_package)
    package_paths = [str(p) for p in getattr(package, "__path__", [])]

    if not package_paths:
        raise RuntimeError(
            f"'{commands_package}' must be a package (folder) with modules."
        )

    report = LoadReport()

    for base_path in package_paths:
        for modinfo in pkgutil.iter_modules([base_path]):
            module_name = modinfo.name
            if module_name.startswith("_"):
                continue

            qualified = f"{commands_package}.{module_name}"
            if modinfo.ispkg:
                group = importlib.import_module(qualified)
                report.descriptions[module_name] = _group_description(group)
                if (Path(base_path) / module_name / "entrypoint.py").exists():
                    module = importlib.import_module(f"{qualified}.entrypoint")
                else:
                    module = group
            else:
                module = importlib.import_module(qualified)

            report.modules += 1
            report.commands += _register_from_module(registry, module)

    logger.info("Loaded %d commands from %d plugin modules", report.commands, report.modules)
    return report
