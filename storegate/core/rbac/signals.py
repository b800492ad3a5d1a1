"""Degraded-state signals for the authorization layer.

These are plain records, not exceptions. Lookup and decode failures are
recovered locally to the most restrictive outcome; the records exist so the
failure can be logged and, for a dangling role reference, surfaced to the
hosting application.
"""

from dataclasses import dataclass
from typing import Any, Callable, Hashable, Optional, Union


@dataclass(frozen=True)
class MalformedActionList:
    """A permission's action field could not be decoded."""

    permission_name: str
    raw: Any = None


@dataclass(frozen=True)
class DanglingRoleReference:
    """The user's role id matches no loaded role."""

    user_id: Hashable
    role_id: Optional[Hashable]


@dataclass(frozen=True)
class UnknownAliasLookup:
    """Module access was asked for a label absent from the alias table."""

    label: Any


Signal = Union[MalformedActionList, DanglingRoleReference, UnknownAliasLookup]
SignalHandler = Callable[[Signal], None]
