#!/usr/bin/env python3
# cmdengine/__init__.py
from __future__ import annotations
"""
Command interpretation and execution engine.

Avoid eager imports that trigger package initialization cascades; the
subpackages expose their APIs through their own __init__.py files:

- cmdengine.commands   definitions, registry, errors, built-ins
- cmdengine.interface  parser, execution engine, plugin loader, console
- cmdengine.db         configuration, output policy, SQLite audit store
- cmdengine.security   permission oracles
- cmdengine.ui         console helpers and logging
- cmdengine.boot       startup wiring
"""

__version__ = "0.1.0"
