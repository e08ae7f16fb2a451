#!/usr/bin/env python3
# cmdengine/security/permissions.py
from __future__ import annotations

"""
Permission oracles consulted before a command body runs.

An oracle answers one question: is `permission` currently granted for
this execution context? The engine treats every "no" the same way.
"""

import threading
from typing import Any, Iterable, Protocol


class PermissionOracle(Protocol):
    def is_granted(self, context: Any, permission: str) -> bool:  # pragma: no cover - signature only
        ...


class AllowAllPermissions:
    """Grants everything (used when no permission policy is configured)."""

    def is_granted(self, context: Any, permission: str) -> bool:
        return True


class GrantedPermissions:
    """Set-backed oracle; grants can change at runtime."""

    def __init__(self, granted: Iterable[str] = ()) -> None:
        self._lock = threading.Lock()
        self._granted: set[str] = {p.strip() for p in granted if p.strip()}

    def grant(self, permission: str) -> None:
        with self._lock:
            self._granted.add(permission)

    def revoke(self, permission: str) -> None:
        with self._lock:
            self._granted.discard(permission)

    def granted(self) -> list[str]:
        with self._lock:
            return sorted(self._granted)

    def is_granted(self, context: Any, permission: str) -> bool:
        with self._lock:
            return permission in self._granted


def oracle_from_setting(value: Iterable[str] | None) -> PermissionOracle:
    """Build an oracle from the GRANTED_PERMISSIONS setting ('*' grants all)."""
    if value is None:
        return AllowAllPermissions()
    items = [v.strip() for v in value if v.strip()]
    if "*" in items:
        return AllowAllPermissions()
    return GrantedPermissions(items)
