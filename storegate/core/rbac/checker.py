"""Permission evaluation against a compiled PermissionIndex.

Three addressing schemes are answered from one snapshot:

- module + action pairs (``can_perform``)
- flat permission names (``has_permission``)
- display labels from the navigation vocabulary (``has_module_access``)

Every query is synchronous and side-effect free, and fails closed: unknown,
empty or non-string arguments answer ``False`` or an empty result.
"""

from typing import Iterable, List, Mapping, Optional, Tuple

from .index import EMPTY_INDEX, PermissionIndex
from .models import Permission
from .signals import SignalHandler, UnknownAliasLookup


def _is_key(value) -> bool:
    return isinstance(value, str) and bool(value)


class PermissionChecker:
    """Answers permission queries for one published snapshot.

    A checker is bound to the snapshot it was created with. Take one checker
    per render pass so that every answer in that pass comes from the same
    compile, even if a reload publishes in between.
    """

    __slots__ = ("_index", "_on_signal")

    def __init__(
        self,
        index: Optional[PermissionIndex] = None,
        *,
        on_signal: Optional[SignalHandler] = None,
    ):
        self._index = index if index is not None else EMPTY_INDEX
        self._on_signal = on_signal

    @property
    def index(self) -> PermissionIndex:
        return self._index

    @property
    def generation(self) -> int:
        return self._index.generation

    def can_perform(self, module: str, action: str) -> bool:
        """Check whether ``action`` is granted on ``module``.

        The action set of a module is the union of the actions of every
        granted permission sharing that module key. Matching is exact and
        case-sensitive.
        """
        if not _is_key(module) or not _is_key(action):
            return False
        actions = self._index.by_module_action.get(module)
        return actions is not None and action in actions

    def has_permission(self, name: str) -> bool:
        """Check for a granted permission by its unique name."""
        if not _is_key(name):
            return False
        return name in self._index.by_name

    def has_module_access(self, label: str) -> bool:
        """Check access to a UI area by its display label.

        True when the label maps to at least one module key whose aggregated
        action set is non-empty. A label missing from the alias table is a
        normal denial.
        """
        if not _is_key(label):
            return False
        modules = self._index.aliases.modules_for(label)
        if not modules:
            if self._on_signal is not None:
                self._on_signal(UnknownAliasLookup(label=label))
            return False
        by_module_action = self._index.by_module_action
        return any(by_module_action.get(module) for module in modules)

    def get_user_permissions(self) -> Tuple[Permission, ...]:
        """The user's permissions in catalog order."""
        return self._index.permissions

    def get_permissions_by_module(self) -> Mapping[str, Tuple[Permission, ...]]:
        """Permissions grouped by their own ``module`` key.

        This is the data taxonomy used by reporting views, independent of the
        display-label grouping behind ``has_module_access``.
        """
        return self._index.by_module

    def has_any_permission(self, names: Iterable[str]) -> bool:
        """Check if user has any of the given permissions."""
        if isinstance(names, str):
            return False
        return any(self.has_permission(n) for n in names)

    def has_all_permissions(self, names: Iterable[str]) -> bool:
        """Check if user has all of the given permissions (none given: False)."""
        if isinstance(names, str):
            return False
        names = list(names)
        return bool(names) and all(self.has_permission(n) for n in names)

    def has_permission_action(self, name: str, action: str) -> bool:
        """Check one named permission's own action list."""
        if not _is_key(name) or not _is_key(action):
            return False
        perm = self._index.by_name.get(name)
        return perm is not None and perm.allows(action)

    def get_display_permissions(self, label: str) -> Tuple[Permission, ...]:
        """Permissions grouped under a display label."""
        if not _is_key(label):
            return ()
        return self._index.by_display_module.get(label, ())

    def accessible_modules(self, action: str) -> List[str]:
        """Module keys on which ``action`` is granted, sorted."""
        if not _is_key(action):
            return []
        return sorted(
            module
            for module, actions in self._index.by_module_action.items()
            if _is_key(module) and action in actions
        )

    def accessible_labels(self) -> List[str]:
        """Display labels, in alias-table order, the user may open."""
        return [label for label in self._index.aliases if self.has_module_access(label)]
