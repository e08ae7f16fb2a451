#!/usr/bin/env python3
# cmdengine/__main__.py
from __future__ import annotations
"""Entry point: `python -m cmdengine` boots the engine and runs the console."""

import sys

from cmdengine.boot import boot_sequence
from cmdengine.interface.cli import make_cli, run_repl
from cmdengine.ui import print_line


def main() -> int:
    state = boot_sequence()
    print_line(f"{state.loaded_count} commands available. Type 'help' to get started, 'exit' to leave.")
    cli = make_cli(
        state.engine,
        prompt=state.config.prompt,
        enable_completion=state.config.enable_completion,
    )
    run_repl(state.engine, cli)
    return 0


if __name__ == "__main__":
    sys.exit(main())
