#!/usr/bin/env python3
# cmdengine/interface/handler.py
from __future__ import annotations

"""
Command dispatch with auditing.

CommandExecutionEngine.execute() runs one input line through:
  parse -> permission check -> invoke -> measure -> audit -> statistics

No exception escapes execute(): every failure comes back as a timed,
audited CommandResult with success=False and user-facing error text.
Audit persistence failures are logged and otherwise ignored.
"""

import dataclasses
import logging
import time
from typing import Any

from cmdengine.commands import (
    CommandCategory,
    CommandDefinition,
    CommandError,
    CommandExecutionError,
    CommandPermissionError,
    CommandRegistry,
    CommandResult,
    CommandSuggestion,
    ParsedCommand,
)
from cmdengine.commands.builtins import builtin_commands
from cmdengine.db.db import AuditStore, now_ms
from cmdengine.db.output import OutputManager, PREVIEW_LENGTH
from cmdengine.interface.parser import CommandParser

logger = logging.getLogger(__name__)

UNKNOWN_COMMAND_TYPE = "UNKNOWN"


def _normalize_result(result: Any) -> CommandResult:
    """Wrap plain return values from command bodies in a CommandResult."""
    if isinstance(result, CommandResult):
        return result
    return CommandResult(success=True, output="" if result is None else str(result))


class CommandExecutionEngine:
    """Parses, authorizes, runs and audits command lines against a registry."""

    def __init__(
        self,
        registry: CommandRegistry,
        *,
        parser: CommandParser | None = None,
        store: AuditStore | None = None,
        output_manager: Any = OutputManager,
    ) -> None:
        self.registry = registry
        self.parser = parser or CommandParser(registry)
        self.store = store
        self.output_manager = output_manager
        registry.register_all(builtin_commands(registry, store))

    # ---------------- Execution ----------------

    def execute(self, context: Any, raw_input: str, session_id: str) -> CommandResult:
        """Run one command line and return its result; never raises."""
        start = time.perf_counter()
        parsed: ParsedCommand | None = None
        definition: CommandDefinition | None = None

        try:
            parsed = self.parser.parse(raw_input)
            definition = self.registry.resolve(parsed.command_name)
            result = self._invoke(context, definition, parsed)
        except Exception as exc:
            if not isinstance(exc, CommandError):
                logger.debug("Unexpected failure for %r", raw_input, exc_info=True)
            result = CommandResult(success=False, output=self.parser.format_error(exc))

        elapsed_ms = int((time.perf_counter() - start) * 1000)

        self._persist(raw_input, parsed, definition, session_id, elapsed_ms, result)
        self._update_statistics(raw_input, parsed, definition, elapsed_ms, result)

        return dataclasses.replace(result, execution_time_ms=elapsed_ms)

    def _invoke(self, context: Any, definition: CommandDefinition | None,
                parsed: ParsedCommand) -> CommandResult:
        if definition is None:
            # resolved during parsing; only a concurrent re-registration can get here
            raise CommandExecutionError(f"Command '{parsed.command_name}' is no longer registered")

        missing = self.registry.permission_gap(context, definition)
        if missing:
            raise CommandPermissionError(missing)

        positional = [parsed.sub_command, *parsed.arguments] if parsed.sub_command else list(parsed.arguments)
        try:
            raw = definition.executor(context, dict(parsed.parameters), positional)
        except Exception as exc:
            logger.debug("Command '%s' raised", definition.name, exc_info=True)
            raise CommandExecutionError(str(exc) or type(exc).__name__) from exc
        return _normalize_result(raw)

    # ---------------- Audit trail ----------------

    def _persist(self, raw_input: str, parsed: ParsedCommand | None,
                 definition: CommandDefinition | None, session_id: str,
                 elapsed_ms: int, result: CommandResult) -> None:
        if self.store is None:
            return

        output = result.output or ""
        try:
            command_id = self.store.insert_command_history(
                command=parsed.command_name if parsed else raw_input,
                command_type=definition.category.name if definition else UNKNOWN_COMMAND_TYPE,
                sub_command=parsed.sub_command if parsed else None,
                arguments=" ".join(parsed.arguments) if parsed else None,
                session_id=session_id,
                execution_time_ms=elapsed_ms,
                success=result.success,
                output_preview=self.output_manager.make_preview(output),
            )
            if len(output) > PREVIEW_LENGTH:
                processed = self.output_manager.process(output)
                self.store.insert_command_output(
                    command_id=command_id,
                    full_output=processed.full_output,
                    output_type=processed.output_type,
                    compressed=processed.compressed,
                )
        except Exception as exc:
            logger.warning("Failed to save command history: %s", exc)
            logger.debug("Audit persistence failure", exc_info=True)

    def _update_statistics(self, raw_input: str, parsed: ParsedCommand | None,
                           definition: CommandDefinition | None, elapsed_ms: int,
                           result: CommandResult) -> None:
        name = parsed.command_name if parsed else raw_input.strip()
        category = definition.category.name if definition else UNKNOWN_COMMAND_TYPE
        stats = self.registry.record_usage(
            name, category, success=result.success, execution_time_ms=elapsed_ms, now_ms=now_ms())

        if self.store is None:
            return
        try:
            self.store.upsert_command_usage(stats)
        except Exception as exc:
            logger.warning("Failed to save usage statistics: %s", exc)
            logger.debug("Usage persistence failure", exc_info=True)

    # ---------------- Passthroughs ----------------

    def suggestions(self, partial_input: str) -> list[str]:
        try:
            return self.parser.suggest(partial_input)
        except Exception:
            logger.debug("Suggestion lookup failed for %r", partial_input, exc_info=True)
            return []

    def search(self, query: str) -> list[CommandSuggestion]:
        return self.registry.search(query)

    def help(self, name: str | None = None) -> str:
        return self.registry.help_text(name) if name else self.registry.overall_help()

    def list_commands(self) -> list[CommandDefinition]:
        return self.registry.all()

    def commands_by_category(self, category: CommandCategory) -> list[CommandDefinition]:
        return self.registry.by_category(category)
