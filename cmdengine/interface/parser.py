#!/usr/bin/env python3
# cmdengine/interface/parser.py
from __future__ import annotations

"""
Command line parsing.

Responsibilities:
- Tokenize a command line, honoring single and double quotes.
- Classify tokens into command name, sub-command, --long / -x flags and
  positional arguments.
- Validate bound values against the command's declared parameters.
- Offer completions and render user-facing error text.

Grammar:
    name [sub] [--flag[=value] | --flag value | -x | positional]*
"""

import re
from urllib.parse import urlparse

from cmdengine.commands import (
    CommandDefinition,
    CommandParameter,
    CommandRegistry,
    ParameterType,
    ParsedCommand,
)
from cmdengine.commands.errors import (
    CommandError,
    CommandNotFoundError,
    CommandValidationError,
)

_LONG_FLAG_RE = re.compile(r"--([a-zA-Z][a-zA-Z0-9-]*)(?:=(\S+))?")
_SHORT_FLAG_RE = re.compile(r"-([a-zA-Z])")
_MAC_RE = re.compile(r"([0-9A-Fa-f]{2}[:-]){5}[0-9A-Fa-f]{2}")
_PACKAGE_RE = re.compile(r"[a-zA-Z][a-zA-Z0-9_]*(?:\.[a-zA-Z][a-zA-Z0-9_]*)*")
_INTEGER_RE = re.compile(r"[+-]?[0-9]+")

_BOOLEAN_WORDS = {"true", "false", "1", "0", "yes", "no"}
_QUOTES = {'"', "'"}


def tokenize(command_line: str) -> list[str]:
    """
    Split a raw command line into tokens.

    A quote opens a quoted run that only the same quote character closes;
    the other quote character is literal inside it. Quotes are stripped.
    """
    text = command_line.strip()
    if not text:
        raise CommandValidationError("Empty command")

    tokens: list[str] = []
    current: list[str] = []
    in_quotes = False
    quote_char = '"'

    for char in text:
        if char in _QUOTES:
            if not in_quotes:
                in_quotes = True
                quote_char = char
            elif char == quote_char:
                in_quotes = False
            else:
                current.append(char)
        elif char.isspace() and not in_quotes:
            if current:
                tokens.append("".join(current))
                current.clear()
        else:
            current.append(char)

    if in_quotes:
        raise CommandValidationError("Unclosed quote in command")
    if current:
        tokens.append("".join(current))
    if not tokens:
        raise CommandValidationError("Invalid command format")
    return tokens


# ---------------------------------------------------------------------------
# Value checks
# ---------------------------------------------------------------------------

def is_valid_ip_address(value: str) -> bool:
    parts = value.split(".")
    if len(parts) != 4:
        return False
    return all(_INTEGER_RE.fullmatch(p) and 0 <= int(p) <= 255 for p in parts)


def is_valid_mac_address(value: str) -> bool:
    return _MAC_RE.fullmatch(value) is not None


def is_valid_url(value: str) -> bool:
    try:
        parsed = urlparse(value)
    except ValueError:
        return False
    if not parsed.scheme or not re.fullmatch(r"[A-Za-z][A-Za-z0-9+.-]*", parsed.scheme):
        return False
    if parsed.scheme in ("http", "https", "ftp", "ws", "wss"):
        return bool(parsed.netloc)
    return bool(parsed.netloc or parsed.path)


def is_valid_package_name(value: str) -> bool:
    return _PACKAGE_RE.fullmatch(value) is not None


def validate_value(param: CommandParameter, value: str) -> None:
    """Raise CommandValidationError when `value` is not acceptable for `param`."""
    name = param.name
    kind = param.type

    if kind is ParameterType.INTEGER and not _INTEGER_RE.fullmatch(value):
        raise CommandValidationError(f"Parameter '{name}' must be an integer")
    if kind is ParameterType.BOOLEAN and value.lower() not in _BOOLEAN_WORDS:
        raise CommandValidationError(f"Parameter '{name}' must be a boolean value")
    if kind is ParameterType.ENUM and param.options and value not in param.options:
        raise CommandValidationError(
            f"Parameter '{name}' must be one of: {', '.join(param.options)}")
    if kind is ParameterType.IP_ADDRESS and not is_valid_ip_address(value):
        raise CommandValidationError(f"Parameter '{name}' must be a valid IP address")
    if kind is ParameterType.MAC_ADDRESS and not is_valid_mac_address(value):
        raise CommandValidationError(f"Parameter '{name}' must be a valid MAC address")
    if kind is ParameterType.URL and not is_valid_url(value):
        raise CommandValidationError(f"Parameter '{name}' must be a valid URL")
    if kind is ParameterType.PACKAGE_NAME and not is_valid_package_name(value):
        raise CommandValidationError(f"Parameter '{name}' must be a valid package name")
    if kind is ParameterType.PATH and (".." in value or "//" in value):
        raise CommandValidationError(f"Parameter '{name}' contains invalid path characters")

    if param.validator is not None and not param.validator(value):
        raise CommandValidationError(f"Parameter '{name}' failed validation")


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------

class CommandParser:
    """Turns raw input into validated ParsedCommand objects."""

    def __init__(self, registry: CommandRegistry) -> None:
        self.registry = registry

    def parse(self, raw_input: str) -> ParsedCommand:
        """Tokenize, classify and validate `raw_input`."""
        tokens = tokenize(raw_input)
        definition, parsed = self.classify(tokens, raw_input=raw_input.strip())
        return self.validate(definition, parsed)

    def classify(self, tokens: list[str], *, raw_input: str = "") -> tuple[CommandDefinition, ParsedCommand]:
        """Resolve the command and sort the remaining tokens into flags, sub-command and arguments."""
        command_name, *rest = tokens
        definition = self.registry.resolve(command_name)
        if definition is None:
            raise CommandNotFoundError(command_name)

        parameters: dict[str, str] = {}
        arguments: list[str] = []
        sub_command: str | None = None

        i = 0
        while i < len(rest):
            token = rest[i]
            if token.startswith("--"):
                match = _LONG_FLAG_RE.fullmatch(token)
                if not match:
                    raise CommandValidationError(f"Invalid parameter format: {token}")
                flag, value = match.group(1), match.group(2)
                if value is not None:
                    parameters[flag] = value
                elif i + 1 < len(rest) and not rest[i + 1].startswith("-"):
                    parameters[flag] = rest[i + 1]
                    i += 1
                else:
                    parameters[flag] = "true"
            elif token.startswith("-"):
                match = _SHORT_FLAG_RE.fullmatch(token)
                if not match:
                    raise CommandValidationError(f"Invalid flag format: {token}")
                parameters[match.group(1)] = "true"
            elif sub_command is None:
                sub_command = token
            else:
                arguments.append(token)
            i += 1

        parsed = ParsedCommand(
            command_name=definition.name,
            raw_input=raw_input or " ".join(tokens),
            sub_command=sub_command,
            parameters=parameters,
            arguments=tuple(arguments),
        )
        return definition, parsed

    def validate(self, definition: CommandDefinition, parsed: ParsedCommand) -> ParsedCommand:
        """
        Check bound parameters against the definition, then fill defaults
        for unset optional parameters. Defaults are not re-validated.
        """
        bound = dict(parsed.parameters)

        for param in definition.parameters:
            if param.required and param.name not in bound:
                raise CommandValidationError(f"Required parameter '--{param.name}' is missing")

        for name, value in bound.items():
            param = definition.parameter(name)
            if param is None:
                raise CommandValidationError(f"Unknown parameter '--{name}'")
            validate_value(param, value)

        for param in definition.parameters:
            if not param.required and param.name not in bound and param.default is not None:
                bound[param.name] = param.default

        return ParsedCommand(
            command_name=parsed.command_name,
            raw_input=parsed.raw_input,
            sub_command=parsed.sub_command,
            parameters=bound,
            arguments=parsed.arguments,
        )

    # ---------------- Completion ----------------

    def suggest(self, partial_input: str) -> list[str]:
        """Completions for the word being typed at the end of `partial_input`."""
        text = partial_input.lstrip()
        if not text.strip():
            return self.registry.autocomplete("")

        try:
            tokens = tokenize(text)
        except CommandValidationError:
            return []
        if text[-1].isspace():
            tokens.append("")

        if len(tokens) <= 1:
            return self.registry.autocomplete(tokens[0])

        definition = self.registry.resolve(tokens[0])
        if definition is None:
            return []

        last = tokens[-1]
        if last.startswith("--"):
            return [f"--{p.name}" for p in definition.parameters if f"--{p.name}".startswith(last)]
        return self.registry.autocomplete(text)

    # ---------------- Error rendering ----------------

    def format_error(self, error: Exception) -> str:
        """Render an exception as user-facing text."""
        if isinstance(error, CommandNotFoundError):
            similar = ", ".join(s.text for s in self.registry.search(error.name)[:3])
            if similar:
                return f"{error.message}\n\nDid you mean: {similar}"
            return f"{error.message}\n\nUse 'help' to see all available commands"

        if isinstance(error, CommandError) and error.kind == "validation":
            return error.message or "Command validation failed"

        if isinstance(error, CommandError) and error.kind == "permission":
            return f"{error.message}\n\nPlease grant the required permissions and try again"

        if isinstance(error, CommandError) and error.kind == "execution":
            return error.message

        return f"Command parsing error: {error}"
