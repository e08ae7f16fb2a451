# plugins/system/entrypoint.py
from __future__ import annotations

import os
import platform
import sys
import time
from datetime import datetime
from pathlib import Path
from typing import Any, Mapping, Sequence

import cmdengine
from cmdengine.commands import (
    CommandCategory,
    CommandParameter,
    CommandResult,
    ParameterType,
    command,
)

# Process start, used when the OS does not expose its own uptime
_STARTED_AT = time.monotonic()


def _fmt_duration(seconds: float) -> str:
    total = int(seconds)
    days, rest = divmod(total, 86400)
    hours, rest = divmod(rest, 3600)
    minutes, secs = divmod(rest, 60)
    parts = [f"{days}d"] if days else []
    parts.append(f"{hours:02d}:{minutes:02d}:{secs:02d}")
    return " ".join(parts)


def _system_uptime() -> float | None:
    """Seconds since boot from /proc/uptime, or None where unavailable."""
    try:
        return float(Path("/proc/uptime").read_text(encoding="ascii").split()[0])
    except (OSError, ValueError, IndexError):
        return None


# ---------- device ----------
@command(
    category=CommandCategory.SYSTEM,
    description="Show device information",
    examples=("device", "device --type=specs", "device --type=build"),
    parameters=(
        CommandParameter(
            "type",
            type=ParameterType.ENUM,
            description="Information type to display",
            default="info",
            options=("info", "specs", "build"),
        ),
    ),
    aliases=("dev", "deviceinfo"),
)
def device(context: Any, parameters: Mapping[str, str], arguments: Sequence[str]) -> CommandResult:
    kind = parameters.get("type", "info")
    uname = platform.uname()

    if kind == "specs":
        rows = {
            "Machine": uname.machine or "unknown",
            "Processor": uname.processor or "unknown",
            "CPU cores": str(os.cpu_count() or "unknown"),
            "Byte order": sys.byteorder,
        }
    elif kind == "build":
        rows = {
            "System": uname.system,
            "Release": uname.release,
            "Version": uname.version,
            "Python": f"{platform.python_implementation()} {platform.python_version()}",
        }
    else:
        rows = {
            "Host": uname.node,
            "System": f"{uname.system} {uname.release}",
            "Architecture": uname.machine or "unknown",
        }

    output = "\n".join(f"{key + ':':<14}{value}" for key, value in rows.items())
    return CommandResult(output=output, data=dict(rows))


# ---------- date ----------
@command(
    category=CommandCategory.SYSTEM,
    description="Show the current date and time",
    examples=("date", 'date --format="%H:%M"'),
    parameters=(
        CommandParameter(
            "format",
            description="strftime format string",
            default="%Y-%m-%d %H:%M:%S",
        ),
    ),
    aliases=("time", "datetime"),
)
def date(context: Any, parameters: Mapping[str, str], arguments: Sequence[str]) -> CommandResult:
    fmt = parameters.get("format") or "%Y-%m-%d %H:%M:%S"
    now = datetime.now().astimezone()
    return CommandResult(output=now.strftime(fmt), data={"timestamp": now.isoformat()})


# ---------- version ----------
@command(
    category=CommandCategory.SYSTEM,
    description="Show engine and runtime versions",
    aliases=("ver", "v"),
)
def version(context: Any, parameters: Mapping[str, str], arguments: Sequence[str]) -> str:
    return (
        f"cmdengine {cmdengine.__version__}\n"
        f"Python {platform.python_version()} on {platform.system()} {platform.release()}"
    )


# ---------- uptime ----------
@command(
    category=CommandCategory.SYSTEM,
    description="Show system uptime",
)
def uptime(context: Any, parameters: Mapping[str, str], arguments: Sequence[str]) -> CommandResult:
    system_seconds = _system_uptime()
    session_seconds = time.monotonic() - _STARTED_AT
    lines = []
    if system_seconds is not None:
        lines.append(f"System uptime:  {_fmt_duration(system_seconds)}")
    lines.append(f"Engine uptime:  {_fmt_duration(session_seconds)}")
    return CommandResult(output="\n".join(lines), data={"system_seconds": system_seconds})


COMMANDS = [device, date, version, uptime]
