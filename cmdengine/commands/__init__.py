#!/usr/bin/env python3
# cmdengine/commands/__init__.py
from __future__ import annotations

"""
Package for command definitions and the command registry.

Provides:
- Data structures and protocols (`CommandDefinition`, `CommandResult`, `CommandExecutor`, ...).
- Error hierarchy (`CommandError` and its subclasses).
- In-memory registry and decorator (`CommandRegistry`, `command`, `build_usage`).

Built-in commands live in `cmdengine.commands.builtins` and are registered
by the execution engine.
"""


# Re-export from submodules
from .command_types import (
    CommandCategory,
    CommandDefinition,
    CommandExecutor,
    CommandParameter,
    CommandResult,
    CommandSuggestion,
    ParameterType,
    ParsedCommand,
    UsageStats,
)
from .errors import (
    CommandError,
    CommandExecutionError,
    CommandNotFoundError,
    CommandPermissionError,
    CommandValidationError,
)
from .commands import CLI_TITLE, CommandRegistry, build_usage, command

__all__ = [
    "CommandCategory",
    "CommandDefinition",
    "CommandExecutor",
    "CommandParameter",
    "CommandResult",
    "CommandSuggestion",
    "ParameterType",
    "ParsedCommand",
    "UsageStats",
    "CommandError",
    "CommandExecutionError",
    "CommandNotFoundError",
    "CommandPermissionError",
    "CommandValidationError",
    "CLI_TITLE",
    "CommandRegistry",
    "build_usage",
    "command",
]
