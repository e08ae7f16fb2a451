#!/usr/bin/env python3
# cmdengine/ui/utils/__init__.py
from __future__ import annotations
from .ansi import (
    ANSI,
    strip_ansi,
    ansi_supported,
    clear_screen,
    colorize,
    hex_color,
)
from .console import PRINT_MUTEX, print_line

__all__ = [
    "ANSI",
    "strip_ansi",
    "ansi_supported",
    "clear_screen",
    "colorize",
    "hex_color",
    "PRINT_MUTEX",
    "print_line",
]
