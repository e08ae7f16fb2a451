#!/usr/bin/env python3
# cmdengine/commands/builtins.py
from __future__ import annotations

"""
Built-in commands registered by the execution engine.

help, echo, clear/cls and commands work against the registry alone;
history and stats read the audit store and the rolling usage statistics.
"""

from datetime import datetime
from itertools import groupby
from typing import Any, Mapping, Sequence

from cmdengine.commands.command_types import (
    CommandCategory,
    CommandDefinition,
    CommandParameter,
    CommandResult,
    ParameterType,
)
from cmdengine.commands.commands import CommandRegistry, command
from cmdengine.ui import format_table

# Sentinel output the console reacts to by clearing the screen
CLEAR_SCREEN = "CLEAR_SCREEN"

DEFAULT_HISTORY_LIMIT = 20


def _format_timestamp(timestamp_ms: int) -> str:
    return datetime.fromtimestamp(timestamp_ms / 1000).strftime("%Y-%m-%d %H:%M:%S")


def builtin_commands(registry: CommandRegistry, store: Any | None = None) -> list[CommandDefinition]:
    """Build the built-in command set bound to `registry` and `store`."""

    # ---------------- help ----------------

    @command(
        name="help",
        category=CommandCategory.UTILITY,
        description="Show help for a command or category",
        usage="help [command|category]",
        examples=("help", "help echo", "help system"),
        parameters=(
            CommandParameter("topic", description="Command or category to describe"),
        ),
        aliases=("man",),
    )
    def show_help(context: Any, parameters: Mapping[str, str], arguments: Sequence[str]) -> CommandResult:
        topic = parameters.get("topic")
        if topic == "true":
            # bare --topic flag
            topic = None
        topic = topic or (arguments[0] if arguments else None)
        if not topic:
            return CommandResult(output=registry.overall_help())

        if registry.resolve(topic) is not None:
            return CommandResult(output=registry.help_text(topic))

        category = CommandCategory.lookup(topic)
        if category is not None:
            return CommandResult(output=registry.category_help(category))

        return CommandResult(success=False, output=f"Unknown command or category: {topic}")

    # ---------------- echo ----------------

    @command(
        category=CommandCategory.UTILITY,
        description="Display text",
        usage="echo <text>",
        examples=("echo Hello World", 'echo "This is a test"'),
        parameters=(
            CommandParameter("text", description="Text to display"),
        ),
    )
    def echo(context: Any, parameters: Mapping[str, str], arguments: Sequence[str]) -> CommandResult:
        return CommandResult(output=parameters.get("text") or " ".join(arguments))

    # ---------------- clear ----------------

    @command(
        category=CommandCategory.UTILITY,
        description="Clear the screen",
        usage="clear",
        examples=("clear",),
        aliases=("cls",),
    )
    def clear(context: Any, parameters: Mapping[str, str], arguments: Sequence[str]) -> CommandResult:
        return CommandResult(output=CLEAR_SCREEN)

    # ---------------- commands ----------------

    @command(
        name="commands",
        category=CommandCategory.UTILITY,
        description="List all available commands",
        usage="commands [--category=<category>]",
        examples=("commands", "commands --category=system"),
        parameters=(
            CommandParameter(
                "category",
                type=ParameterType.ENUM,
                description="Filter by command category",
                options=tuple(c.name.lower() for c in CommandCategory),
            ),
        ),
    )
    def list_commands(context: Any, parameters: Mapping[str, str], arguments: Sequence[str]) -> CommandResult:
        category_filter = None
        if parameters.get("category"):
            category_filter = CommandCategory.lookup(parameters["category"])

        definitions = registry.by_category(category_filter) if category_filter else registry.all()
        prefix = "" if category_filter else "  "

        lines = [f"{category_filter.display_name} Commands:" if category_filter else "All Available Commands:", ""]
        # group in category declaration order, names sorted within each group
        order = {c: i for i, c in enumerate(CommandCategory)}
        ordered = sorted(definitions, key=lambda d: (order[d.category], d.name))
        for category, group in groupby(ordered, key=lambda d: d.category):
            if category_filter is None:
                lines.append(f"{category.display_name}:")
            for definition in group:
                lines.append(f"{prefix}{definition.name:<15} - {definition.description}")
                if definition.aliases:
                    lines.append(f"{prefix}{' ' * 15} Aliases: {', '.join(definition.aliases)}")
            if category_filter is None:
                lines.append("")
        lines.append("Use 'help <command>' for detailed information about a specific command")
        return CommandResult(output="\n".join(lines))

    # ---------------- history ----------------

    @command(
        category=CommandCategory.UTILITY,
        description="Show recently executed commands",
        examples=("history", "history --limit=5"),
        parameters=(
            CommandParameter("limit", type=ParameterType.INTEGER,
                             description="Number of entries to show",
                             default=str(DEFAULT_HISTORY_LIMIT),
                             validator=lambda v: int(v) > 0),
            CommandParameter("session", description="Only show entries from this session"),
        ),
    )
    def history(context: Any, parameters: Mapping[str, str], arguments: Sequence[str]) -> CommandResult:
        if store is None:
            return CommandResult(success=False, output="Command history is not available")

        limit = int(parameters.get("limit") or DEFAULT_HISTORY_LIMIT)
        rows = store.recent_history(limit=limit, session_id=parameters.get("session"))
        if not rows:
            return CommandResult(output="No commands in history")

        table = format_table(
            [
                [
                    _format_timestamp(row["timestamp"]),
                    row["command"],
                    " ".join(p for p in (row["sub_command"], row["arguments"]) if p),
                    "ok" if row["success"] else "failed",
                    f"{row['execution_time_ms']} ms",
                ]
                for row in rows
            ],
            headers=["Time", "Command", "Arguments", "Status", "Duration"],
            max_cell_width=40,
        )
        return CommandResult(output=table, data={"count": len(rows)})

    # ---------------- stats ----------------

    @command(
        category=CommandCategory.UTILITY,
        description="Show per-command usage statistics",
        examples=("stats",),
    )
    def stats(context: Any, parameters: Mapping[str, str], arguments: Sequence[str]) -> CommandResult:
        usage = registry.all_usage()
        if not usage:
            return CommandResult(output="No usage statistics recorded yet")

        table = format_table(
            [
                [
                    u.command,
                    u.category,
                    u.usage_count,
                    f"{u.success_rate * 100:.0f}%",
                    f"{u.average_execution_time_ms:.1f} ms",
                ]
                for u in usage
            ],
            headers=["Command", "Category", "Uses", "Success", "Avg time"],
        )
        return CommandResult(output=table)

    return [show_help, echo, clear, list_commands, history, stats]
