from __future__ import annotations

from typing import Any, Sequence

import pytest

from cmdengine.commands import (
    CommandCategory,
    CommandDefinition,
    CommandParameter,
    CommandRegistry,
    CommandResult,
)


def make_definition(
    name: str,
    *,
    category: CommandCategory = CommandCategory.UTILITY,
    description: str = "",
    parameters: Sequence[CommandParameter] = (),
    aliases: Sequence[str] = (),
    permissions: Sequence[str] = (),
    executor: Any = None,
) -> CommandDefinition:
    def _default(context, parameters, arguments):
        return CommandResult(output=f"{name} ran")

    return CommandDefinition(
        name=name,
        category=category,
        description=description or f"{name} command",
        usage=name,
        executor=executor or _default,
        parameters=tuple(parameters),
        aliases=tuple(aliases),
        permissions=tuple(permissions),
    )


@pytest.fixture
def registry() -> CommandRegistry:
    return CommandRegistry()
