from __future__ import annotations

import threading

from cmdengine.commands import (
    CommandCategory,
    CommandParameter,
    CommandRegistry,
    ParameterType,
    build_usage,
    command,
)
from cmdengine.security import GrantedPermissions

from conftest import make_definition


def test_alias_resolves_to_same_definition(registry: CommandRegistry) -> None:
    clear = make_definition("clear", aliases=["cls"])
    registry.register(clear)

    assert registry.resolve("cls") is registry.resolve("clear")
    assert registry.resolve("cls").executor is clear.executor
    assert registry.resolve("missing") is None


def test_reregistration_replaces_but_keeps_category_bucket(registry: CommandRegistry) -> None:
    first = make_definition("ping", category=CommandCategory.NET, description="first")
    second = make_definition("ping", category=CommandCategory.SYSTEM, description="second")
    registry.register(first)
    registry.register(second)

    assert registry.resolve("ping") is second
    assert [d.name for d in registry.all()] == ["ping"]
    assert first in registry.by_category(CommandCategory.NET)
    assert second in registry.by_category(CommandCategory.SYSTEM)


def test_search_ranking(registry: CommandRegistry) -> None:
    registry.register(make_definition("helpdesk", description="open a ticket"))
    registry.register(make_definition("help", description="show help"))

    hits = registry.search("help")
    assert [h.text for h in hits] == ["help", "helpdesk"]
    assert [h.score for h in hits] == [100, 50]
    assert registry.search("xyz") == []


def test_search_ties_keep_registration_order() -> None:
    forward = CommandRegistry()
    forward.register(make_definition("netstat"))
    forward.register(make_definition("netcat"))
    backward = CommandRegistry()
    backward.register(make_definition("netcat"))
    backward.register(make_definition("netstat"))

    assert [(h.text, h.score) for h in forward.search("net")] == [("netstat", 50), ("netcat", 50)]
    assert [h.text for h in backward.search("net")] == ["netcat", "netstat"]


def test_search_scores_alias_contains_and_description(registry: CommandRegistry) -> None:
    registry.register(make_definition("clear", aliases=["cls"], description="wipe the screen"))
    registry.register(make_definition("reclass", description="unrelated"))

    assert [(h.text, h.score) for h in registry.search("cl")] == [("clear", 50), ("reclass", 25)]
    assert [(h.text, h.score) for h in registry.search("ls")] == [("clear", 30)]
    assert [(h.text, h.score) for h in registry.search("screen")] == [("clear", 10)]


def test_autocomplete_names_and_enum_options(registry: CommandRegistry) -> None:
    registry.register(make_definition("clear", aliases=["cls"]))
    registry.register(make_definition(
        "commands",
        parameters=[CommandParameter("category", type=ParameterType.ENUM,
                                     options=("system", "network", "files"))],
    ))

    assert registry.autocomplete("c") == ["clear", "cls", "commands"]
    assert registry.autocomplete("CL") == ["clear", "cls"]
    assert registry.autocomplete("commands s") == ["system"]
    assert registry.autocomplete("commands ") == ["system", "network", "files"]
    assert registry.autocomplete("nothing here") == []


def test_permission_gap_uses_oracle() -> None:
    oracle = GrantedPermissions(["storage.read"])
    registry = CommandRegistry(permission_oracle=oracle)
    definition = make_definition("wipe", permissions=["storage.read", "storage.write"])

    assert registry.permission_gap(None, definition) == ["storage.write"]
    oracle.grant("storage.write")
    assert registry.permission_gap(None, definition) == []


def test_record_usage_incremental_statistics(registry: CommandRegistry) -> None:
    registry.record_usage("echo", "UTILITY", success=True, execution_time_ms=10, now_ms=1)
    registry.record_usage("echo", "UTILITY", success=False, execution_time_ms=20, now_ms=2)
    stats = registry.record_usage("echo", "UTILITY", success=True, execution_time_ms=30, now_ms=3)

    assert stats.usage_count == 3
    assert abs(stats.success_rate - 2 / 3) < 1e-9
    assert abs(stats.average_execution_time_ms - 20.0) < 1e-9
    assert stats.total_execution_time_ms == 60
    assert stats.last_used_ms == 3
    assert registry.usage("echo") == stats


def test_observers_receive_snapshot(registry: CommandRegistry) -> None:
    seen: list[list[str]] = []
    registry.subscribe(lambda defs: seen.append(sorted(d.name for d in defs)))

    registry.register(make_definition("a"))
    registry.register(make_definition("b"))

    assert seen == [["a"], ["a", "b"]]


def test_concurrent_registration_and_lookup(registry: CommandRegistry) -> None:
    def writer(offset: int) -> None:
        for i in range(50):
            registry.register(make_definition(f"cmd{offset}-{i}", aliases=[f"alias{offset}-{i}"]))

    threads = [threading.Thread(target=writer, args=(n,)) for n in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(registry.all()) == 200
    for n in range(4):
        for i in range(50):
            assert registry.resolve(f"alias{n}-{i}").name == f"cmd{n}-{i}"


def test_help_rendering(registry: CommandRegistry) -> None:
    registry.register(make_definition(
        "echo",
        description="Display text",
        parameters=[CommandParameter("text", description="Text to display", required=True)],
        aliases=["say"],
    ))

    text = registry.help_text("say")
    assert text.startswith("echo - Display text")
    assert "  text: Text to display (required)" in text
    assert "Aliases: say" in text
    assert registry.help_text("nope") == "Command 'nope' not found"

    assert "echo" in registry.category_help(CommandCategory.UTILITY)
    assert registry.category_help(CommandCategory.AI) == "No commands found in category AI Assistant"
    assert "Utilities" in registry.overall_help()


def test_command_decorator_builds_definition() -> None:
    @command(
        category=CommandCategory.FILE,
        parameters=(
            CommandParameter("path", type=ParameterType.PATH, required=True),
            CommandParameter("all", type=ParameterType.BOOLEAN),
        ),
    )
    def list_dir(context, parameters, arguments):
        """List a directory."""
        return "ok"

    assert list_dir.name == "list-dir"
    assert list_dir.description == "List a directory."
    assert list_dir.usage == "list-dir --path=<path> [--all]"
    assert list_dir.executor(None, {}, []) == "ok"
    assert build_usage("pwd", ()) == "pwd"
