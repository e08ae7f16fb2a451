#!/usr/bin/env python3
# cmdengine/ui/__init__.py
from __future__ import annotations
# Re-export convenient top-level API
from .utils import (
    ANSI,
    strip_ansi,
    ansi_supported,
    clear_screen,
    PRINT_MUTEX,
    print_line,
    colorize,
    hex_color,
)
from .static import (
    format_table,
    init_logger,
    ColorizingStreamHandler,
    PlainFormatter,
)

__all__ = [
    "ANSI",
    "strip_ansi",
    "ansi_supported",
    "clear_screen",
    "colorize",
    "hex_color",
    "PRINT_MUTEX",
    "print_line",
    "format_table",
    "init_logger",
    "ColorizingStreamHandler",
    "PlainFormatter",
]
