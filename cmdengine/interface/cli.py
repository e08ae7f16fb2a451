#!/usr/bin/env python3
# cmdengine/interface/cli.py
from __future__ import annotations

"""
Interactive input frontends and the REPL loop.

Selection order:
    1) prompt_toolkit (live completion + history)
    2) readline / pyreadline3 (basic completion + history)
    3) plain input (last resort)
"""

import logging
import uuid
from pathlib import Path
from typing import Any, Callable, Optional

from cmdengine.commands.builtins import CLEAR_SCREEN
from cmdengine.interface.handler import CommandExecutionEngine
from cmdengine.ui import clear_screen, colorize, print_line

logger = logging.getLogger(__name__)

# History location in the user home directory
HISTORY_FILE_PATH = Path.home() / ".cmdengine_history"

EXIT_WORDS = frozenset({"exit", "quit"})

Suggester = Callable[[str], list[str]]


def _current_prefix(text_before_cursor: str) -> str:
    """The word being typed; empty right after whitespace."""
    if not text_before_cursor or text_before_cursor[-1].isspace():
        return ""
    return text_before_cursor.split()[-1]


class BaseCLI:
    """
    Plain input frontend and base class for the richer ones.

    Subclasses override:
        - setup()
        - get_line()
        - teardown()
    """

    def __init__(self, prompt: str = "> ") -> None:
        self.prompt = prompt

    def setup(self) -> None:
        pass

    def get_line(self) -> str:
        return input(self.prompt)

    def teardown(self) -> None:
        pass

    def __enter__(self) -> "BaseCLI":
        self.setup()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            self.teardown()
        except OSError:
            logger.debug("CLI teardown failed", exc_info=True)


# ===== Preferred: prompt_toolkit =====
class PromptToolkitCLI(BaseCLI):
    """Line editor with history and live completion."""

    def __init__(self, suggester: Suggester | None, prompt: str = "> ") -> None:
        super().__init__(prompt)
        from prompt_toolkit import PromptSession
        from prompt_toolkit.completion import Completer, Completion
        from prompt_toolkit.history import FileHistory

        class _Completer(Completer):
            def get_completions(self, document, complete_event):
                text_before_cursor = document.text_before_cursor
                replace_len = len(_current_prefix(text_before_cursor))
                for word in suggester(text_before_cursor):
                    # replace exactly the current token
                    yield Completion(word, start_position=-replace_len)

        HISTORY_FILE_PATH.touch(exist_ok=True)
        self._session = PromptSession(
            history=FileHistory(str(HISTORY_FILE_PATH)),
            completer=_Completer() if suggester else None,
            complete_while_typing=suggester is not None,
        )

    def get_line(self) -> str:
        return self._session.prompt(self.prompt)


# ===== Fallback: readline / pyreadline3 =====
class ReadlineCLI(BaseCLI):
    """Fallback editor with basic completion and history."""

    def __init__(self, suggester: Suggester | None, prompt: str = "> ") -> None:
        super().__init__(prompt)
        import readline

        self.readline = readline
        self.suggester = suggester

    def setup(self) -> None:
        HISTORY_FILE_PATH.touch(exist_ok=True)
        try:
            self.readline.read_history_file(str(HISTORY_FILE_PATH))
        except OSError:
            pass

        if self.suggester is None:
            return

        # '=' and '-' belong to flag tokens
        self.readline.set_completer_delims(" \t\n")

        def _complete(text_fragment: str, state_index: int) -> Optional[str]:
            buffer_text = self.readline.get_line_buffer()
            matches = [w for w in self.suggester(buffer_text) if w.startswith(text_fragment)]
            return matches[state_index] if state_index < len(matches) else None

        self.readline.set_completer(_complete)
        self.readline.parse_and_bind("tab: complete")

    def teardown(self) -> None:
        self.readline.write_history_file(str(HISTORY_FILE_PATH))


def make_cli(engine: CommandExecutionEngine | None = None, *, prompt: str = "> ",
             enable_completion: bool = True) -> BaseCLI:
    """Select the best available CLI frontend at runtime."""
    suggester = engine.suggestions if engine is not None and enable_completion else None
    try:
        return PromptToolkitCLI(suggester, prompt)
    except ImportError:
        pass
    try:
        return ReadlineCLI(suggester, prompt)
    except ImportError:
        return BaseCLI(prompt)


def run_repl(engine: CommandExecutionEngine, cli: BaseCLI, *, context: Any = None,
             session_id: str | None = None) -> None:
    """Read, execute and print until exit/quit, Ctrl-C or Ctrl-D."""
    session_id = session_id or str(uuid.uuid4())
    logger.debug("Starting session %s", session_id)

    with cli:
        while True:
            try:
                line = cli.get_line()
            except (EOFError, KeyboardInterrupt):
                print_line()
                break

            stripped = line.strip()
            if not stripped:
                continue
            if stripped.lower() in EXIT_WORDS:
                break

            result = engine.execute(context, stripped, session_id)
            if result.output == CLEAR_SCREEN:
                clear_screen()
            elif result.success:
                if result.output:
                    print_line(result.output)
            else:
                print_line(colorize(result.output, "red"))
