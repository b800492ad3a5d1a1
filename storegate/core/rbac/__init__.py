"""RBAC (Role-Based Access Control) evaluation for the storegate back office.

This module defines the permission model, the compiled permission indices and
the evaluation engine queried by screens and route guards.
"""

from .aliases import DEFAULT_ALIAS_TABLE, ModuleAliasTable
from .catalog import PermissionCatalog, RoleResolver
from .checker import PermissionChecker
from .codec import JsonActionListCodec, decode_actions
from .errors import CatalogLoadError, StoreGateError
from .index import IndexBuilder, PermissionIndex
from .models import Permission, Role, User
from .session import SessionPhase, SessionState, get_session, reset_session
from .signals import DanglingRoleReference, MalformedActionList, UnknownAliasLookup

__all__ = [
    "Permission",
    "Role",
    "User",
    "ModuleAliasTable",
    "DEFAULT_ALIAS_TABLE",
    "PermissionCatalog",
    "RoleResolver",
    "JsonActionListCodec",
    "decode_actions",
    "IndexBuilder",
    "PermissionIndex",
    "PermissionChecker",
    "SessionPhase",
    "SessionState",
    "get_session",
    "reset_session",
    "StoreGateError",
    "CatalogLoadError",
    "MalformedActionList",
    "DanglingRoleReference",
    "UnknownAliasLookup",
]
