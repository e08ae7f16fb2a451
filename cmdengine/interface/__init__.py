#!/usr/bin/env python3
# cmdengine/interface/__init__.py
from __future__ import annotations

"""
Package for command parsing, execution and the interactive console.

Provides:
- Parser utilities: tokenizing, flag classification, validation, completion.
- The execution engine with auditing and usage statistics.
- Dynamic command loader for the plugins package.
- CLI frontends with history and completion (prompt_toolkit / readline / plain).
"""


# Parser FIRST (handler depends on it)
from .parser import CommandParser, tokenize, validate_value

# Execution engine
from .handler import CommandExecutionEngine

# Loader
from .loader import LoadReport, load_commands

# CLI frontends (after the engine is available)
from .cli import (
    BaseCLI,
    PromptToolkitCLI,
    ReadlineCLI,
    make_cli,
    run_repl,
    HISTORY_FILE_PATH,
)

__all__ = [
    # parser
    "CommandParser",
    "tokenize",
    "validate_value",
    # handler
    "CommandExecutionEngine",
    # loader
    "LoadReport",
    "load_commands",
    # cli
    "BaseCLI",
    "PromptToolkitCLI",
    "ReadlineCLI",
    "make_cli",
    "run_repl",
    "HISTORY_FILE_PATH",
]
