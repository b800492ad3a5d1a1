"""Compiled permission indices.

The index builder turns a resolved permission list into the three lookup
structures queried by the evaluation engine:

- ``by_name``: permission name -> Permission
- ``by_module_action``: module key -> union of the actions of every
  permission sharing that module
- ``by_display_module``: display label -> permissions whose module the alias
  table maps under that label

All of them, plus the taxonomy grouping used for reporting, live on one
frozen PermissionIndex. Publishing a new index is a single reference swap, so
a reader sees either the old maps or the new maps, never a mix.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, FrozenSet, Iterable, List, Mapping, Tuple

from .aliases import DEFAULT_ALIAS_TABLE, ModuleAliasTable
from .models import Permission

# Reporting bucket for permissions with a blank module key
UNGROUPED_MODULE = "Other"


def _frozen(mapping: dict) -> Mapping:
    return MappingProxyType(mapping)


@dataclass(frozen=True, eq=False)
class PermissionIndex:
    """One immutable compile of a user's permissions."""

    permissions: Tuple[Permission, ...] = ()
    by_name: Mapping[str, Permission] = field(default_factory=lambda: _frozen({}))
    by_module_action: Mapping[str, FrozenSet[str]] = field(default_factory=lambda: _frozen({}))
    by_display_module: Mapping[str, Tuple[Permission, ...]] = field(default_factory=lambda: _frozen({}))
    by_module: Mapping[str, Tuple[Permission, ...]] = field(default_factory=lambda: _frozen({}))
    aliases: ModuleAliasTable = DEFAULT_ALIAS_TABLE
    generation: int = 0

    @property
    def is_empty(self) -> bool:
        return not self.permissions


EMPTY_INDEX = PermissionIndex()


class IndexBuilder:
    """Compiles permission lists into PermissionIndex snapshots."""

    def __init__(self, aliases: ModuleAliasTable = DEFAULT_ALIAS_TABLE):
        self.aliases = aliases

    def build(self, permissions: Iterable[Permission], *, generation: int = 0) -> PermissionIndex:
        """Build every map from the same permission list.

        Args:
            permissions: Resolved permissions, in catalog order
            generation: Sequence number of the publish this index belongs to

        Returns:
            A fully populated, immutable PermissionIndex
        """
        perms = tuple(permissions)
        return PermissionIndex(
            permissions=perms,
            by_name=self.build_by_name(perms),
            by_module_action=self.build_by_module_action(perms),
            by_display_module=self.build_by_display_module(perms),
            by_module=self.build_by_module(perms),
            aliases=self.aliases,
            generation=generation,
        )

    @staticmethod
    def build_by_name(permissions: Iterable[Permission]) -> Mapping[str, Permission]:
        by_name: Dict[str, Permission] = {}
        for perm in permissions:
            by_name.setdefault(perm.name, perm)
        return _frozen(by_name)

    @staticmethod
    def build_by_module_action(permissions: Iterable[Permission]) -> Mapping[str, FrozenSet[str]]:
        # Several permissions may share a module with different action subsets
        actions: Dict[str, set] = {}
        for perm in permissions:
            actions.setdefault(perm.module, set()).update(perm.actions)
        return _frozen({module: frozenset(acts) for module, acts in actions.items()})

    def build_by_display_module(
        self, permissions: Iterable[Permission]
    ) -> Mapping[str, Tuple[Permission, ...]]:
        grouped: Dict[str, List[Permission]] = {}
        for perm in permissions:
            for label in self.aliases.labels_for(perm.module):
                grouped.setdefault(label, []).append(perm)
        return _frozen({label: tuple(perms) for label, perms in grouped.items()})

    @staticmethod
    def build_by_module(permissions: Iterable[Permission]) -> Mapping[str, Tuple[Permission, ...]]:
        grouped: Dict[str, List[Permission]] = {}
        for perm in permissions:
            grouped.setdefault(perm.module or UNGROUPED_MODULE, []).append(perm)
        return _frozen({module: tuple(perms) for module, perms in grouped.items()})
