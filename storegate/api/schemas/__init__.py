"""Pydantic schemas for the storegate API."""

from .common import ErrorResponse
from .session import (
    CheckResult,
    ModuleAccessResult,
    MyPermissions,
    NavItemInfo,
    PermissionInfo,
    PermissionPayload,
    RolePayload,
    SessionPayload,
    SessionPublished,
    SessionStatus,
    UserPayload,
)

__all__ = [
    "ErrorResponse",
    "PermissionPayload",
    "RolePayload",
    "UserPayload",
    "SessionPayload",
    "SessionStatus",
    "SessionPublished",
    "PermissionInfo",
    "CheckResult",
    "ModuleAccessResult",
    "MyPermissions",
    "NavItemInfo",
]
