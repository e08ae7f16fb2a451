#!/usr/bin/env python3
# cmdengine/commands/commands.py
from __future__ import annotations

"""
Command registry and decorator utilities.

This module provides:
- CommandRegistry: in-memory catalog of commands, aliases and categories,
  with search, autocomplete, permission checks and help rendering.
- command: decorator building a CommandDefinition from a plain function.
"""

import threading
from typing import Any, Callable, Iterable, Sequence

from cmdengine.commands.command_types import (
    CommandCategory,
    CommandDefinition,
    CommandParameter,
    CommandSuggestion,
    ParameterType,
    UsageStats,
)
from cmdengine.security import AllowAllPermissions, PermissionOracle

# Help banner shown by overall_help()
CLI_TITLE = "Command Line Interface"

RegistryObserver = Callable[[list[CommandDefinition]], None]


def _split_current_token(raw_input: str) -> list[str]:
    """
    Split on whitespace; trailing whitespace appends an empty token so the
    caller completes a new word rather than the previous one.
    """
    parts = raw_input.split()
    if not parts or raw_input[-1].isspace():
        parts.append("")
    return parts


class CommandRegistry:
    """Holds all command definitions and provides lookup utilities."""

    def __init__(self, permission_oracle: PermissionOracle | None = None) -> None:
        # One lock guards every index so readers never see a half-applied registration
        self._lock = threading.RLock()
        # Primary name -> definition
        self._commands_by_name: dict[str, CommandDefinition] = {}
        # Alias -> primary name
        self._alias_to_primary: dict[str, str] = {}
        # Category -> definitions, in registration order
        self._commands_by_category: dict[CommandCategory, list[CommandDefinition]] = {}
        # Command name -> rolling usage statistics
        self._usage: dict[str, UsageStats] = {}
        self._observers: list[RegistryObserver] = []
        self.permission_oracle: PermissionOracle = permission_oracle or AllowAllPermissions()

    # ---------------- Registration ----------------

    def register(self, definition: CommandDefinition) -> None:
        """
        Register a definition and its aliases. Last write wins on name or
        alias collisions; a replaced definition stays in its category bucket.
        """
        with self._lock:
            self._commands_by_name[definition.name] = definition
            for alias in definition.aliases:
                self._alias_to_primary[alias] = definition.name
            self._commands_by_category.setdefault(definition.category, []).append(definition)
            snapshot = list(self._commands_by_name.values())
            observers = list(self._observers)

        for observer in observers:
            observer(snapshot)

    def register_all(self, definitions: Iterable[CommandDefinition]) -> int:
        count = 0
        for definition in definitions:
            self.register(definition)
            count += 1
        return count

    def subscribe(self, observer: RegistryObserver) -> None:
        """Call `observer` with the full command list after every registration."""
        with self._lock:
            self._observers.append(observer)

    # ---------------- Lookup ----------------

    def resolve(self, name: str) -> CommandDefinition | None:
        """Return the definition by alias or primary name, or None if not found."""
        with self._lock:
            primary = self._alias_to_primary.get(name, name)
            return self._commands_by_name.get(primary)

    def all(self) -> list[CommandDefinition]:
        """Return only primary commands (avoid duplicates in UIs)."""
        with self._lock:
            return list(self._commands_by_name.values())

    def by_category(self, category: CommandCategory) -> list[CommandDefinition]:
        with self._lock:
            return list(self._commands_by_category.get(category, ()))

    def names(self) -> list[str]:
        """Return all primary names and aliases."""
        with self._lock:
            return [*self._commands_by_name.keys(), *self._alias_to_primary.keys()]

    # ---------------- Search / completion ----------------

    def search(self, query: str) -> list[CommandSuggestion]:
        """Rank commands against `query`; best matches first, zero scores dropped."""
        lowered = query.lower()
        suggestions: list[CommandSuggestion] = []
        for definition in self.all():
            name = definition.name.lower()
            if name == lowered:
                score = 100
            elif name.startswith(lowered):
                score = 50
            elif any(lowered in alias.lower() for alias in definition.aliases):
                score = 30
            elif lowered in name:
                score = 25
            elif lowered in definition.description.lower():
                score = 10
            else:
                continue
            suggestions.append(CommandSuggestion(
                text=definition.name,
                description=definition.description,
                category=definition.category,
                score=score,
            ))
        # sorted() is stable, so ties keep catalog order
        return sorted(suggestions, key=lambda s: s.score, reverse=True)

    def autocomplete(self, partial_input: str) -> list[str]:
        """
        Complete a command name (first token) or an ENUM value of the
        command named by the first token (later tokens).
        """
        parts = _split_current_token(partial_input)
        current = parts[-1].lower()

        if len(parts) <= 1:
            with self._lock:
                universe = [*self._commands_by_name.keys(), *self._alias_to_primary.keys()]
            return sorted(w for w in universe if w.lower().startswith(current))

        definition = self.resolve(parts[0])
        if definition is None:
            return []
        return [
            option
            for param in definition.parameters
            if param.type is ParameterType.ENUM
            for option in param.options
            if option.lower().startswith(current)
        ]

    # ---------------- Permissions ----------------

    def permission_gap(self, context: Any, definition: CommandDefinition) -> list[str]:
        """Return the required permissions the oracle does not currently grant."""
        return [
            permission
            for permission in definition.permissions
            if not self.permission_oracle.is_granted(context, permission)
        ]

    # ---------------- Usage statistics ----------------

    def record_usage(self, name: str, category: str, *, success: bool,
                     execution_time_ms: int, now_ms: int) -> UsageStats:
        """Fold one invocation into the rolling statistics for `name`."""
        with self._lock:
            current = self._usage.get(name) or UsageStats(command=name, category=category)
            updated = current.record(
                success=success, execution_time_ms=execution_time_ms, now_ms=now_ms)
            self._usage[name] = updated
            return updated

    def usage(self, name: str) -> UsageStats | None:
        with self._lock:
            return self._usage.get(name)

    def all_usage(self) -> list[UsageStats]:
        with self._lock:
            return sorted(self._usage.values(), key=lambda u: u.usage_count, reverse=True)

    # ---------------- Help ----------------

    def help_text(self, name: str) -> str:
        """Render detailed help for a command or alias."""
        definition = self.resolve(name)
        if definition is None:
            return f"Command '{name}' not found"

        lines = [f"{definition.name} - {definition.description}", "", f"Usage: {definition.usage}"]

        if definition.parameters:
            lines += ["", "Parameters:"]
            for param in definition.parameters:
                required = " (required)" if param.required else ""
                default = f" [default: {param.default}]" if param.default is not None else ""
                lines.append(f"  {param.name}: {param.description}{required}{default}")
                if param.options:
                    lines.append(f"    Options: {', '.join(param.options)}")

        if definition.examples:
            lines += ["", "Examples:"]
            lines += [f"  {example}" for example in definition.examples]

        if definition.aliases:
            lines += ["", f"Aliases: {', '.join(definition.aliases)}"]

        if definition.permissions:
            lines += ["", f"Required permissions: {', '.join(definition.permissions)}"]

        return "\n".join(lines)

    def category_help(self, category: CommandCategory) -> str:
        definitions = self.by_category(category)
        if not definitions:
            return f"No commands found in category {category.display_name}"

        lines = [f"{category.display_name} Commands:", ""]
        for definition in definitions:
            lines.append(f"  {definition.name:<15} - {definition.description}")
        return "\n".join(lines)

    def overall_help(self) -> str:
        lines = [CLI_TITLE, "", "Available Categories:"]
        for category in CommandCategory:
            count = len(self.by_category(category))
            if count > 0:
                lines.append(f"  {category.display_name:<15} - {count} commands")
        lines += [
            "",
            "Use 'help <category>' to see commands in a specific category",
            "Use 'help <command>' to see detailed help for a command",
            "Use 'commands' to see all available commands",
        ]
        return "\n".join(lines)


def command(
    *,
    name: str | None = None,
    category: CommandCategory = CommandCategory.USER,
    description: str | None = None,
    usage: str | None = None,
    examples: Sequence[str] = (),
    parameters: Sequence[CommandParameter] = (),
    aliases: Sequence[str] = (),
    permissions: Sequence[str] = (),
    min_platform_version: int = 1,
) -> Callable[[Callable[..., Any]], CommandDefinition]:
    """
    Decorator turning an executor function into a CommandDefinition.

    - Function name is transformed from snake_case to kebab-case for `name` if not provided.
    - The docstring is used as description when none is given.
    - Usage defaults to the name followed by its declared parameters.
    """

    def wrapper(func: Callable[..., Any]) -> CommandDefinition:
        command_name = name or func.__name__.replace("_", "-")
        return CommandDefinition(
            name=command_name,
            category=category,
            description=(description or (func.__doc__ or "")).strip(),
            usage=usage or build_usage(command_name, parameters),
            executor=func,
            examples=tuple(examples),
            parameters=tuple(parameters),
            aliases=tuple(aliases),
            permissions=tuple(permissions),
            min_platform_version=min_platform_version,
            module=func.__module__,
        )

    return wrapper


def build_usage(command_name: str, parameters: Sequence[CommandParameter]) -> str:
    """
    Render a compact usage string from declared parameters.

    Examples:
        'ls [--path=<path>] [--all]'
    """
    usage_parts: list[str] = []
    for param in parameters:
        if param.type is ParameterType.BOOLEAN:
            token = f"--{param.name}"
        else:
            token = f"--{param.name}=<{param.name}>"
        usage_parts.append(token if param.required else f"[{token}]")
    return f"{command_name} " + " ".join(usage_parts) if usage_parts else command_name

