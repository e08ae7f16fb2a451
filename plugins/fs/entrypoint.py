# plugins/fs/entrypoint.py
from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Any, Mapping, Sequence

from cmdengine.commands import (
    CommandCategory,
    CommandParameter,
    CommandResult,
    ParameterType,
    command,
)
from cmdengine.ui import format_table

READ_PERMISSION = "storage.read"


# -------------------------- helpers --------------------------

def _fmt_size(n: int) -> str:
    units = ["B", "KB", "MB", "GB", "TB"]
    i = 0
    f = float(n)
    while f >= 1024 and i < len(units) - 1:
        f /= 1024.0
        i += 1
    return f"{f:.1f} {units[i]}"


def _target(parameters: Mapping[str, str], arguments: Sequence[str], key: str, fallback: str = "") -> Path:
    return Path(parameters.get(key) or (arguments[0] if arguments else fallback)).expanduser()


# ----------------------- commands -----------------------

@command(
    category=CommandCategory.FILE,
    description="Print the current working directory",
)
def pwd(context: Any, parameters: Mapping[str, str], arguments: Sequence[str]) -> str:
    return str(Path.cwd())


@command(
    category=CommandCategory.FILE,
    description="List directory contents",
    usage="ls [path] [--path=<path>] [--all]",
    examples=("ls", "ls src", "ls --path=docs --all"),
    parameters=(
        CommandParameter("path", type=ParameterType.PATH, description="Directory to list"),
        CommandParameter("all", type=ParameterType.BOOLEAN, description="Include hidden entries"),
    ),
    aliases=("dir",),
    permissions=(READ_PERMISSION,),
)
def ls(context: Any, parameters: Mapping[str, str], arguments: Sequence[str]) -> CommandResult:
    target = _target(parameters, arguments, "path", ".")
    if not target.exists():
        return CommandResult(success=False, output=f"Path not found: {target}")
    show_dir = target if target.is_dir() else target.parent
    show_hidden = parameters.get("all", "false").lower() in ("true", "1", "yes")

    rows = []
    for entry in sorted(show_dir.iterdir(), key=lambda x: (not x.is_dir(), x.name.lower())):
        if entry.name.startswith(".") and not show_hidden:
            continue
        stat = entry.stat()
        rows.append([
            entry.name,
            "<DIR>" if entry.is_dir() else "FILE",
            "" if entry.is_dir() else _fmt_size(stat.st_size),
            datetime.fromtimestamp(stat.st_mtime).strftime("%Y-%m-%d %H:%M"),
        ])

    if not rows:
        return CommandResult(output=f"{show_dir} is empty", data={"count": 0})
    table = format_table(rows, headers=["Name", "Type", "Size", "Modified"])
    return CommandResult(output=table, data={"count": len(rows)})


@command(
    category=CommandCategory.FILE,
    description="Print the contents of a text file",
    usage="cat <file> [--lines=<n>]",
    examples=("cat README.md", "cat notes.txt --lines=20"),
    parameters=(
        CommandParameter("file", type=ParameterType.PATH, description="File to read"),
        CommandParameter("lines", type=ParameterType.INTEGER,
                         description="Only print the first N lines",
                         validator=lambda v: int(v) > 0),
    ),
    aliases=("type",),
    permissions=(READ_PERMISSION,),
)
def cat(context: Any, parameters: Mapping[str, str], arguments: Sequence[str]) -> CommandResult:
    target = _target(parameters, arguments, "file")
    if not str(target) or str(target) == ".":
        return CommandResult(success=False, output="No file specified")
    if not target.is_file():
        return CommandResult(success=False, output=f"File not found: {target}")

    text = target.read_text(encoding="utf-8", errors="replace")
    if parameters.get("lines"):
        text = "\n".join(text.splitlines()[: int(parameters["lines"])])
    return CommandResult(output=text)


COMMANDS = [pwd, ls, cat]
