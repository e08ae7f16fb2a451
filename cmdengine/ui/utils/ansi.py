#!/usr/bin/env python3
# cmdengine/ui/utils/ansi.py
from __future__ import annotations

import os
import re

# ---- Core SGR maps ----------------------------------------------------------

ANSI = {
    "reset": "\x1b[0m",

    # styles
    "bold": "\x1b[1m",
    "dim": "\x1b[2m",
    "underline": "\x1b[4m",

    # fg 8-color
    "red": "\x1b[31m",
    "green": "\x1b[32m",
    "yellow": "\x1b[33m",
    "blue": "\x1b[34m",
    "magenta": "\x1b[35m",
    "cyan": "\x1b[36m",
    "white": "\x1b[37m",
    "bright_black": "\x1b[90m",
}

ANSI_REGEX = re.compile(r"\x1b\[[0-9;]*[A-Za-z]")
_HEX_RE = re.compile(r"#[0-9A-Fa-f]{6}")


# ---- Utilities --------------------------------------------------------------

def strip_ansi(text: str) -> str:
    """Remove ANSI escape sequences from text."""
    return ANSI_REGEX.sub("", text)


def ansi_supported() -> bool:
    """True when the current terminal is expected to render ANSI escapes."""
    if os.environ.get("NO_COLOR"):
        return False
    if os.name != "nt":
        return True
    return bool(
        os.environ.get("WT_SESSION")                  # Windows Terminal
        or os.environ.get("ANSICON")
        or os.environ.get("ConEmuANSI") == "ON"
        or os.environ.get("TERM", "").startswith(("xterm", "vt100"))
    )


def clear_screen() -> None:
    """Clear the terminal screen on Windows and POSIX."""
    os.system("cls" if os.name == "nt" else "clear")


# ---- Color builders ---------------------------------------------------------

def hex_color(hex_code: str) -> str:
    """Return a true-color foreground SGR from '#RRGGBB'."""
    if not _HEX_RE.fullmatch(hex_code):
        raise ValueError("hex_code must be like '#RRGGBB'.")
    r, g, b = (int(hex_code[i:i + 2], 16) for i in (1, 3, 5))
    return f"\x1b[38;2;{r};{g};{b}m"


def colorize(text: str, *styles: str) -> str:
    """
    Wrap text with one or more styles: keys from ANSI ('red', 'bold') or
    '#RRGGBB' colors. Always auto-resets at the end.
    """
    seq = "".join(
        hex_color(s) if _HEX_RE.fullmatch(s) else ANSI[s]
        for s in styles
        if s in ANSI or _HEX_RE.fullmatch(s)
    )
    return f"{seq}{text}{ANSI['reset']}" if seq else text
