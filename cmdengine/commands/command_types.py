#!/usr/bin/env python3
# cmdengine/commands/command_types.py
from __future__ import annotations

"""
Command data structures and protocols.

This module defines:
- CommandCategory / ParameterType: closed enumerations used by definitions.
- CommandParameter: a declared, typed parameter of a command.
- CommandExecutor: the callable protocol for any command body.
- CommandDefinition: a registered command with metadata and its executor.
- CommandResult: a normalized result container for command outputs.
- ParsedCommand: the structured form of one raw input line.
- CommandSuggestion: a ranked search hit.
- UsageStats: rolling per-command usage statistics.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Mapping, Protocol, Sequence


class CommandCategory(Enum):
    """Command groups with a display name and a presentation color."""

    SYSTEM = ("System", "#0078D4")
    NET = ("Network", "#00BCF2")
    APP = ("Applications", "#00CC6A")
    FILE = ("Files", "#FFB900")
    DEV = ("Development", "#8764B8")
    AI = ("AI Assistant", "#FF4842")
    UTILITY = ("Utilities", "#737373")
    USER = ("User Scripts", "#00B294")

    @property
    def display_name(self) -> str:
        return self.value[0]

    @property
    def color(self) -> str:
        return self.value[1]

    @classmethod
    def lookup(cls, text: str) -> "CommandCategory | None":
        """Find a category by enum name or display name (case-insensitive)."""
        lowered = text.strip().lower()
        for category in cls:
            if lowered in (category.name.lower(), category.display_name.lower()):
                return category
        return None


class ParameterType(Enum):
    STRING = "string"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    ENUM = "enum"
    PATH = "path"
    IP_ADDRESS = "ip_address"
    MAC_ADDRESS = "mac_address"
    PACKAGE_NAME = "package_name"
    URL = "url"


@dataclass(frozen=True, slots=True)
class CommandParameter:
    """
    A declared parameter of a command.

    Attributes:
        name: Flag name, bound as --name / -n on the command line.
        type: Declared value type, checked by the parser.
        description: Short, user-facing description.
        required: Parsing fails when a required parameter is absent.
        default: Value filled in when an optional parameter is absent.
        options: Allowed values (ENUM membership and value completion).
        validator: Extra predicate run after the type check.
    """

    name: str
    type: ParameterType = ParameterType.STRING
    description: str = ""
    required: bool = False
    default: str | None = None
    options: tuple[str, ...] = ()
    validator: Callable[[str], bool] | None = field(default=None, compare=False)


@dataclass(slots=True)
class CommandResult:
    """
    Normalized result container from command execution.

    Attributes:
        success: True if the command completed successfully.
        output: Human-readable output text.
        execution_time_ms: Wall-clock duration, patched in by the engine.
        data: Optional machine-readable extras.
        suggestions: Follow-up hints for the user.
    """

    success: bool = True
    output: str = ""
    execution_time_ms: int = 0
    data: dict[str, Any] = field(default_factory=dict)
    suggestions: list[str] = field(default_factory=list)

    def __str__(self) -> str:
        # Keep CLI printing predictable
        return self.output if self.output else ("ok" if self.success else "error")


class CommandExecutor(Protocol):
    """Protocol for any command body."""

    def __call__(
        self,
        context: Any,
        parameters: Mapping[str, str],
        arguments: Sequence[str],
    ) -> CommandResult | Any:  # pragma: no cover - signature only
        ...


@dataclass(frozen=True, slots=True)
class CommandDefinition:
    """
    A registered command with metadata and the executor to run.

    Important fields:
        name: Primary unique command name.
        category: Logical group for help and listings.
        executor: Function implementing the command.
        parameters: Declared parameters in display order.
        aliases: Extra names resolving to the same command.
        permissions: Permission identifiers that must be granted.
        min_platform_version: Lowest platform version the command supports.
    """

    name: str
    category: CommandCategory
    description: str
    usage: str
    executor: CommandExecutor = field(compare=False, repr=False)
    examples: tuple[str, ...] = ()
    parameters: tuple[CommandParameter, ...] = ()
    aliases: tuple[str, ...] = ()
    permissions: tuple[str, ...] = ()
    min_platform_version: int = 1
    module: str = field(default="", compare=False, repr=False)

    def parameter(self, name: str) -> CommandParameter | None:
        """Return the declared parameter called `name`, if any."""
        for param in self.parameters:
            if param.name == name:
                return param
        return None


@dataclass(frozen=True, slots=True)
class ParsedCommand:
    command_name: str
    raw_input: str
    sub_command: str | None = None
    parameters: Mapping[str, str] = field(default_factory=dict)
    arguments: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class CommandSuggestion:
    text: str
    description: str
    category: CommandCategory
    score: int = 0


@dataclass(frozen=True, slots=True)
class UsageStats:
    """Rolling statistics for one command name."""

    command: str
    category: str
    usage_count: int = 0
    last_used_ms: int = 0
    success_rate: float = 0.0
    average_execution_time_ms: float = 0.0
    total_execution_time_ms: int = 0

    def record(self, *, success: bool, execution_time_ms: int, now_ms: int) -> "UsageStats":
        """Return the statistics after one more invocation."""
        old_count = self.usage_count
        new_count = old_count + 1
        success_rate = (self.success_rate * old_count + (1 if success else 0)) / new_count
        average = (self.average_execution_time_ms * old_count + execution_time_ms) / new_count
        return UsageStats(
            command=self.command,
            category=self.category,
            usage_count=new_count,
            last_used_ms=now_ms,
            success_rate=success_rate,
            average_execution_time_ms=average,
            total_execution_time_ms=self.total_execution_time_ms + execution_time_ms,
        )
