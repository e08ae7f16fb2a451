from __future__ import annotations

import logging
from pathlib import Path

import pytest

from cmdengine.commands import (
    CommandCategory,
    CommandParameter,
    CommandRegistry,
    CommandResult,
    UsageStats,
)
from cmdengine.commands.builtins import CLEAR_SCREEN
from cmdengine.db import SQLiteAuditStore
from cmdengine.interface import CommandExecutionEngine
from cmdengine.security import GrantedPermissions

from conftest import make_definition


class RecordingStore:
    """In-memory audit store capturing what the engine writes."""

    def __init__(self) -> None:
        self.history: list[dict] = []
        self.outputs: list[dict] = []
        self.usage: dict[str, UsageStats] = {}

    def insert_command_history(self, **record) -> str:
        self.history.append(record)
        return f"h{len(self.history)}"

    def insert_command_output(self, **record) -> str:
        self.outputs.append(record)
        return f"o{len(self.outputs)}"

    def upsert_command_usage(self, stats: UsageStats) -> None:
        self.usage[stats.command] = stats


class BrokenStore(RecordingStore):
    def insert_command_history(self, **record) -> str:
        raise RuntimeError("disk full")

    def upsert_command_usage(self, stats: UsageStats) -> None:
        raise RuntimeError("disk full")


@pytest.fixture
def store() -> RecordingStore:
    return RecordingStore()


@pytest.fixture
def engine(registry: CommandRegistry, store: RecordingStore) -> CommandExecutionEngine:
    return CommandExecutionEngine(registry, store=store)


def test_builtins_registered(engine: CommandExecutionEngine) -> None:
    for name in ("help", "echo", "clear", "cls", "commands", "history", "stats"):
        assert engine.registry.resolve(name) is not None


def test_echo_success_is_audited(engine: CommandExecutionEngine, store: RecordingStore) -> None:
    result = engine.execute(None, 'echo "hello world" again', "s1")

    assert result.success is True
    assert result.output == "hello world again"
    assert result.execution_time_ms >= 0

    record = store.history[-1]
    assert record["command"] == "echo"
    assert record["command_type"] == "UTILITY"
    assert record["sub_command"] == "hello world"
    assert record["arguments"] == "again"
    assert record["session_id"] == "s1"
    assert record["success"] is True
    assert record["output_preview"] == "hello world again"
    assert store.outputs == []


def test_not_found_is_failed_and_audited_under_raw_input(
    engine: CommandExecutionEngine, store: RecordingStore
) -> None:
    result = engine.execute(None, "ehco hi", "s1")

    assert result.success is False
    assert result.output.startswith("Command 'ehco' not found")
    record = store.history[-1]
    assert record["command"] == "ehco hi"
    assert record["command_type"] == "UNKNOWN"
    assert record["sub_command"] is None
    assert record["success"] is False


def test_validation_error_is_returned_not_raised(engine: CommandExecutionEngine) -> None:
    result = engine.execute(None, 'echo "unterminated', "s1")
    assert result.success is False
    assert result.output == "Unclosed quote in command"


def test_permission_denied(store: RecordingStore) -> None:
    registry = CommandRegistry(permission_oracle=GrantedPermissions())
    registry.register(make_definition("wipe", permissions=["storage.write"]))
    engine = CommandExecutionEngine(registry, store=store)

    result = engine.execute(None, "wipe", "s1")

    assert result.success is False
    assert result.output.startswith("Missing required permissions: storage.write")
    assert store.history[-1]["command"] == "wipe"
    assert store.history[-1]["command_type"] == "UTILITY"


def test_executor_exception_becomes_failed_result(
    registry: CommandRegistry, store: RecordingStore
) -> None:
    def explode(context, parameters, arguments):
        raise ValueError("kaboom")

    registry.register(make_definition("boom", executor=explode))
    engine = CommandExecutionEngine(registry, store=store)

    result = engine.execute(None, "boom", "s1")
    assert result.success is False
    assert result.output == "kaboom"
    assert store.history[-1]["success"] is False


def test_raising_validator_is_returned_and_audited(
    registry: CommandRegistry, store: RecordingStore
) -> None:
    registry.register(make_definition(
        "even", parameters=[CommandParameter("n", validator=lambda v: int(v) % 2 == 0)]))
    engine = CommandExecutionEngine(registry, store=store)

    result = engine.execute(None, "even --n=abc", "s1")

    assert result.success is False
    assert result.output.startswith("Command parsing error: invalid literal for int()")
    assert store.history[-1]["command"] == "even --n=abc"
    assert store.history[-1]["success"] is False
    assert registry.usage("even --n=abc").success_rate == 0.0


class RaisingOracle:
    def is_granted(self, context, permission: str) -> bool:
        raise RuntimeError("permission service down")


def test_raising_permission_oracle_is_returned_and_audited(store: RecordingStore) -> None:
    registry = CommandRegistry(permission_oracle=RaisingOracle())
    registry.register(make_definition("guarded", permissions=["storage.read"]))
    engine = CommandExecutionEngine(registry, store=store)

    result = engine.execute(None, "guarded", "s1")

    assert result.success is False
    assert result.output == "Command parsing error: permission service down"
    assert store.history[-1]["command"] == "guarded"
    assert store.history[-1]["command_type"] == "UTILITY"
    assert store.usage["guarded"].success_rate == 0.0


def test_plain_return_values_are_normalized(registry: CommandRegistry) -> None:
    registry.register(make_definition("num", executor=lambda c, p, a: 42))
    registry.register(make_definition("nothing", executor=lambda c, p, a: None))
    engine = CommandExecutionEngine(registry)

    assert engine.execute(None, "num", "s").output == "42"
    nothing = engine.execute(None, "nothing", "s")
    assert nothing.success is True and nothing.output == ""


def test_context_parameters_and_positionals_are_forwarded(registry: CommandRegistry) -> None:
    seen = {}

    def capture(context, parameters, arguments):
        seen.update(context=context, parameters=dict(parameters), arguments=list(arguments))
        return CommandResult(output="ok", execution_time_ms=99999)

    registry.register(make_definition(
        "cap", executor=capture,
        parameters=[CommandParameter("level", default="1")],
    ))
    engine = CommandExecutionEngine(registry)
    ctx = object()

    result = engine.execute(ctx, "cap first second", "s")

    assert seen == {"context": ctx, "parameters": {"level": "1"}, "arguments": ["first", "second"]}
    assert result.execution_time_ms != 99999


def test_long_output_persists_full_record(registry: CommandRegistry, store: RecordingStore) -> None:
    long_text = "line of output\n" * 400
    registry.register(make_definition("dump", executor=lambda c, p, a: long_text))
    engine = CommandExecutionEngine(registry, store=store)

    engine.execute(None, "dump", "s1")

    assert store.history[-1]["output_preview"] == long_text[:200] + "..."
    full = store.outputs[-1]
    assert full["command_id"] == "h1"
    assert full["compressed"] is True
    assert full["output_type"] == "COMPRESSED"


def test_storage_failure_does_not_affect_result(
    registry: CommandRegistry, caplog: pytest.LogCaptureFixture
) -> None:
    engine = CommandExecutionEngine(registry, store=BrokenStore())

    with caplog.at_level(logging.WARNING, logger="cmdengine.interface.handler"):
        result = engine.execute(None, "echo still works", "s1")

    assert result.success is True
    assert result.output == "still works"
    assert "Failed to save command history" in caplog.text
    assert registry.usage("echo").usage_count == 1


def test_usage_statistics_track_success_and_failure(
    engine: CommandExecutionEngine, store: RecordingStore
) -> None:
    engine.execute(None, "echo a", "s")
    engine.execute(None, "echo --bogus", "s")
    engine.execute(None, "echo b", "s")

    stats = engine.registry.usage("echo")
    assert stats.usage_count == 2
    assert stats.success_rate == 1.0
    assert store.usage["echo"] == stats
    assert engine.registry.usage("echo --bogus").success_rate == 0.0


def test_clear_and_help_builtins(engine: CommandExecutionEngine) -> None:
    assert engine.execute(None, "cls", "s").output == CLEAR_SCREEN

    assert "Command Line Interface" in engine.execute(None, "help", "s").output
    assert engine.execute(None, "help echo", "s").output.startswith("echo - Display text")
    assert engine.execute(None, "help --topic=utilities", "s").output.startswith("Utilities Commands:")
    unknown = engine.execute(None, "help nothing", "s")
    assert unknown.success is False
    assert unknown.output == "Unknown command or category: nothing"
    assert engine.execute(None, "help --topic", "s").output == engine.help()


def test_commands_listing(engine: CommandExecutionEngine) -> None:
    engine.registry.register(make_definition("device", category=CommandCategory.SYSTEM,
                                             description="Show device information"))

    everything = engine.execute(None, "commands", "s").output
    assert everything.startswith("All Available Commands:")
    assert "System:" in everything
    assert "  device          - Show device information" in everything
    assert "Aliases: cls" in everything
    assert everything.endswith("Use 'help <command>' for detailed information about a specific command")

    system_only = engine.execute(None, "commands --category system", "s").output
    assert system_only.startswith("System Commands:")
    assert "echo" not in system_only

    bad = engine.execute(None, "commands --category=nope", "s")
    assert bad.success is False
    assert "must be one of" in bad.output


def test_history_and_stats_builtins(registry: CommandRegistry, tmp_path: Path) -> None:
    store = SQLiteAuditStore(tmp_path / "audit.db")
    engine = CommandExecutionEngine(registry, store=store)

    engine.execute(None, "echo first", "alpha")
    engine.execute(None, "echo second", "beta")

    history = engine.execute(None, "history --session=alpha", "alpha")
    assert history.success is True
    assert "first" in history.output
    assert "second" not in history.output

    stats = engine.execute(None, "stats", "alpha")
    assert "echo" in stats.output
    assert "history" in stats.output


def test_passthroughs(engine: CommandExecutionEngine) -> None:
    assert engine.suggestions("ec") == ["echo"]
    assert engine.search("echo")[0].text == "echo"
    assert engine.help("echo").startswith("echo - Display text")
    assert {d.name for d in engine.list_commands()} >= {"help", "echo", "clear"}
    assert all(d.category is CommandCategory.UTILITY
               for d in engine.commands_by_category(CommandCategory.UTILITY))
