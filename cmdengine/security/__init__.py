#!/usr/bin/env python3
# cmdengine/security/__init__.py
from __future__ import annotations

"""
Package for command authorization.

Provides:
- The permission-oracle protocol consulted before a command runs (`PermissionOracle`).
- Ready-made oracles (`AllowAllPermissions`, `GrantedPermissions`).
- A factory mapping the GRANTED_PERMISSIONS setting to an oracle (`oracle_from_setting`).
"""


from .permissions import (
    PermissionOracle,
    AllowAllPermissions,
    GrantedPermissions,
    oracle_from_setting,
)

__all__ = [
    "PermissionOracle",
    "AllowAllPermissions",
    "GrantedPermissions",
    "oracle_from_setting",
]
