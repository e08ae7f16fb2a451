#!/usr/bin/env python3
# cmdengine/db/__init__.py
from __future__ import annotations

"""
Package for persistence and configuration.

Provides:
- Configuration loader with environment variable overrides (`config`).
- Output sizing / compression policy for the audit log (`output`).
- SQLite audit trail: history, full outputs, usage statistics (`db`).
"""


from .config import AppConfig, load_config
from .output import (
    OutputManager,
    ProcessedOutput,
    compress,
    decompress,
    make_preview,
    process,
    PREVIEW_LENGTH,
    COMPRESSION_THRESHOLD,
    MAX_OUTPUT_SIZE,
)
from .db import AuditStore, SQLiteAuditStore, now_ms

__all__ = [
    "AppConfig",
    "load_config",
    "OutputManager",
    "ProcessedOutput",
    "compress",
    "decompress",
    "make_preview",
    "process",
    "PREVIEW_LENGTH",
    "COMPRESSION_THRESHOLD",
    "MAX_OUTPUT_SIZE",
    "AuditStore",
    "SQLiteAuditStore",
    "now_ms",
]
