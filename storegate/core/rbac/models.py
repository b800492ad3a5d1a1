"""Immutable permission, role and user records.

A permission is the atomic grant unit: a globally unique ``name``, a free-form
``module`` taxonomy key and the list of ``actions`` it allows. Roles bundle
permissions; a user holds at most one role and has no direct grants.
"""

from dataclasses import dataclass
from typing import Hashable, Iterable, Optional, Tuple


def dedupe_actions(actions: Iterable[str]) -> Tuple[str, ...]:
    """Drop repeated action names, keeping first-seen order."""
    seen: list[str] = []
    for action in actions:
        if action not in seen:
            seen.append(action)
    return tuple(seen)


@dataclass(frozen=True)
class Permission:
    id: Hashable
    name: str
    module: str
    description: str = ""
    actions: Tuple[str, ...] = ()
    category: str = ""

    def __post_init__(self):
        if not isinstance(self.name, str) or not self.name:
            raise ValueError("Permission name must be a non-empty string.")
        if not isinstance(self.module, str):
            raise ValueError("Permission module must be a string.")
        object.__setattr__(self, "actions", dedupe_actions(self.actions))

    def allows(self, action: str) -> bool:
        return action in self.actions


@dataclass(frozen=True)
class Role:
    id: Hashable
    name: str
    description: str = ""
    permissions: Tuple[Permission, ...] = ()

    def __post_init__(self):
        if not isinstance(self.permissions, tuple):
            object.__setattr__(self, "permissions", tuple(self.permissions))

    @property
    def permission_names(self) -> Tuple[str, ...]:
        return tuple(p.name for p in self.permissions)


@dataclass(frozen=True)
class User:
    id: Hashable
    username: str = ""
    email: str = ""
    full_name: str = ""
    role_id: Optional[Hashable] = None
    is_active: bool = True

    @property
    def has_role(self) -> bool:
        return self.role_id is not None
