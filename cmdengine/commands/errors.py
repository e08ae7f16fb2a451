#!/usr/bin/env python3
# cmdengine/commands/errors.py
from __future__ import annotations

"""Exceptions raised while parsing, authorizing and running commands."""


class CommandError(Exception):
    """Base class; `kind` tags the failure for rendering and auditing."""

    kind = "error"

    @property
    def message(self) -> str:
        return str(self.args[0]) if self.args else ""


class CommandValidationError(CommandError):
    kind = "validation"


class CommandNotFoundError(CommandError):
    kind = "not_found"

    def __init__(self, name: str) -> None:
        super().__init__(f"Command '{name}' not found")
        self.name = name


class CommandPermissionError(CommandError):
    kind = "permission"

    def __init__(self, missing: list[str]) -> None:
        super().__init__(f"Missing required permissions: {', '.join(missing)}")
        self.missing = list(missing)


class CommandExecutionError(CommandError):
    kind = "execution"
