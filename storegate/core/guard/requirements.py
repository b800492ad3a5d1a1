"""Permission requirement descriptors for guarded views.

A requirement is checked against a PermissionChecker. Screens use whichever
addressing scheme they were written against: a flat permission name, a
module + action pair, or a display label.
"""

from dataclasses import dataclass
from typing import Protocol, Tuple, Union

from storegate.core.rbac.checker import PermissionChecker


class Requirement(Protocol):
    def is_satisfied(self, checker: PermissionChecker) -> bool:
        ...


@dataclass(frozen=True)
class NamedPermission:
    """Requires a permission by its unique name."""

    name: str

    def is_satisfied(self, checker: PermissionChecker) -> bool:
        return checker.has_permission(self.name)

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class ModuleAction:
    """Requires an action on a module key."""

    module: str
    action: str

    def is_satisfied(self, checker: PermissionChecker) -> bool:
        return checker.can_perform(self.module, self.action)

    def __str__(self) -> str:
        return f"{self.module}:{self.action}"


@dataclass(frozen=True)
class ModuleAccess:
    """Requires access to a display-label area."""

    label: str

    def is_satisfied(self, checker: PermissionChecker) -> bool:
        return checker.has_module_access(self.label)

    def __str__(self) -> str:
        return f"@{self.label}"


@dataclass(frozen=True)
class AnyOf:
    """Satisfied when at least one nested requirement is."""

    requirements: Tuple["RequirementLike", ...]

    def __init__(self, *requirements: "RequirementLike"):
        object.__setattr__(self, "requirements", tuple(as_requirement(r) for r in requirements))

    def is_satisfied(self, checker: PermissionChecker) -> bool:
        return any(r.is_satisfied(checker) for r in self.requirements)

    def __str__(self) -> str:
        return " | ".join(str(r) for r in self.requirements)


@dataclass(frozen=True)
class AllOf:
    """Satisfied when every nested requirement is (and there is at least one)."""

    requirements: Tuple["RequirementLike", ...]

    def __init__(self, *requirements: "RequirementLike"):
        object.__setattr__(self, "requirements", tuple(as_requirement(r) for r in requirements))

    def is_satisfied(self, checker: PermissionChecker) -> bool:
        return bool(self.requirements) and all(r.is_satisfied(checker) for r in self.requirements)

    def __str__(self) -> str:
        return " & ".join(str(r) for r in self.requirements)


RequirementLike = Union[Requirement, str]


def parse_requirement(text: str) -> Requirement:
    """Parse a requirement string.

    ``"inventory:update"`` is a module + action pair, ``"@Inventory"`` a
    display label, anything else a permission name such as ``"users.create"``.

    Raises:
        ValueError: On an empty string or a malformed pair
    """
    if not isinstance(text, str) or not text.strip():
        raise ValueError(f"Invalid requirement: {text!r}")
    text = text.strip()

    if text.startswith("@"):
        label = text[1:].strip()
        if not label:
            raise ValueError(f"Invalid requirement: {text!r}")
        return ModuleAccess(label)

    if ":" in text:
        parts = text.split(":")
        if len(parts) != 2 or not all(parts):
            raise ValueError(f"Invalid requirement format: {text}")
        return ModuleAction(parts[0], parts[1])

    return NamedPermission(text)


def as_requirement(value: RequirementLike) -> Requirement:
    """Accept either a requirement object or a requirement string."""
    if isinstance(value, str):
        return parse_requirement(value)
    if not hasattr(value, "is_satisfied"):
        raise TypeError(f"Not a permission requirement: {value!r}")
    return value
