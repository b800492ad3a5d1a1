"""Schemas for the session and permission query endpoints."""

from typing import Any, List, Optional, Union

from pydantic import BaseModel, Field

from storegate.core.rbac.catalog import PermissionCatalog
from storegate.core.rbac.models import Permission, User
from storegate.core.rbac.signals import SignalHandler

RecordId = Union[int, str]


class PermissionPayload(BaseModel):
    """Permission record as sent by the server.

    ``actions`` is usually a JSON-encoded string such as ``'["view"]'``. It is
    left untyped so that undecodable values reach the codec and fail closed
    instead of rejecting the whole payload.
    """
    id: Optional[RecordId] = None
    name: str = Field(..., min_length=1)
    module: str = ""
    category: str = ""
    description: str = ""
    actions: Any = None


class RolePayload(BaseModel):
    id: RecordId
    name: str = ""
    description: str = ""
    permissions: List[Union[PermissionPayload, str]] = Field(default_factory=list)


class UserPayload(BaseModel):
    id: RecordId
    username: str = ""
    email: str = ""
    full_name: str = ""
    role_id: Optional[RecordId] = None
    is_active: bool = True

    def to_user(self) -> User:
        return User(**self.model_dump())


class SessionPayload(BaseModel):
    """Authenticated user plus the catalog loaded for them.

    ``permissions`` may be omitted when every role embeds its permission
    records; the catalog is then assembled from the roles.
    """
    user: UserPayload
    permissions: Optional[List[PermissionPayload]] = None
    roles: List[RolePayload] = Field(default_factory=list)

    def to_user(self) -> User:
        return self.user.to_user()

    def to_catalog(self, on_signal: Optional[SignalHandler] = None) -> PermissionCatalog:
        permissions = None
        if self.permissions is not None:
            permissions = [p.model_dump(exclude_none=True) for p in self.permissions]
        return PermissionCatalog.from_records(
            permissions,
            [r.model_dump(exclude_none=True) for r in self.roles],
            on_signal=on_signal,
        )


class PermissionInfo(BaseModel):
    id: Optional[RecordId] = None
    name: str
    module: str
    category: str = ""
    description: str = ""
    actions: List[str] = Field(default_factory=list)

    @classmethod
    def from_permission(cls, perm: Permission) -> "PermissionInfo":
        return cls(
            id=perm.id,
            name=perm.name,
            module=perm.module,
            category=perm.category,
            description=perm.description,
            actions=list(perm.actions),
        )


class DegradedInfo(BaseModel):
    user_id: Optional[RecordId] = None
    role_id: Optional[RecordId] = None


class SessionStatus(BaseModel):
    phase: str
    is_loaded: bool
    user_id: Optional[RecordId] = None
    role_id: Optional[RecordId] = None
    generation: int = 0
    permission_count: int = 0
    degraded: Optional[DegradedInfo] = None


class SessionPublished(BaseModel):
    published: bool
    status: SessionStatus
    malformed: List[str] = Field(default_factory=list)


class CheckResult(BaseModel):
    allowed: bool


class ModuleAccessResult(BaseModel):
    label: str
    allowed: bool
    modules: List[str] = Field(default_factory=list)


class MyPermissions(BaseModel):
    permissions: List[PermissionInfo]
    labels: List[str] = Field(default_factory=list)


class NavItemInfo(BaseModel):
    path: str
    label: str
    children: List["NavItemInfo"] = Field(default_factory=list)

