"""Display-label to module-key alias table.

Navigation code asks "may this user open the Inventory area?" using the
labels shown in the sidebar, while permissions carry a taxonomy key such as
``inventory`` or ``purchase_orders``. The alias table maps each label to one
or more module keys. It is frozen once built.
"""

from types import MappingProxyType
from typing import Iterable, Mapping, Tuple


class ModuleAliasTable:
    """Immutable mapping from display labels to module keys."""

    __slots__ = ("_labels", "_modules")

    def __init__(self, mapping: Mapping[str, Iterable[str]]):
        labels: dict[str, Tuple[str, ...]] = {}
        modules: dict[str, list[str]] = {}

        for label, keys in mapping.items():
            if not isinstance(label, str) or not label:
                raise ValueError(f"Alias label must be a non-empty string, got {label!r}")
            if isinstance(keys, str):
                keys = (keys,)

            ordered: list[str] = []
            for key in keys:
                if not isinstance(key, str) or not key:
                    raise ValueError(f"Module key for {label!r} must be a non-empty string")
                if key not in ordered:
                    ordered.append(key)
                    modules.setdefault(key, []).append(label)
            labels[label] = tuple(ordered)

        self._labels = MappingProxyType(labels)
        self._modules = MappingProxyType({k: tuple(v) for k, v in modules.items()})

    def __contains__(self, label: object) -> bool:
        return label in self._labels

    def __iter__(self):
        return iter(self._labels)

    def __len__(self) -> int:
        return len(self._labels)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ModuleAliasTable):
            return NotImplemented
        return dict(self._labels) == dict(other._labels)

    def __hash__(self) -> int:
        return hash(tuple(sorted(self._labels.items())))

    def __repr__(self) -> str:
        return f"ModuleAliasTable({dict(self._labels)!r})"

    @property
    def labels(self) -> Mapping[str, Tuple[str, ...]]:
        """Read-only view of label -> module keys."""
        return self._labels

    def modules_for(self, label: str) -> Tuple[str, ...]:
        """Module keys behind a display label; empty for unknown labels."""
        if not isinstance(label, str):
            return ()
        return self._labels.get(label, ())

    def labels_for(self, module: str) -> Tuple[str, ...]:
        """Display labels that reference a module key."""
        if not isinstance(module, str):
            return ()
        return self._modules.get(module, ())


# Sidebar vocabulary of the retail back office
DEFAULT_MODULE_ALIASES: dict[str, Tuple[str, ...]] = {
    "Dashboard": ("dashboard",),
    "Point of Sale": ("pos",),
    "Sales": ("sales",),
    "Discounts": ("discounts",),
    "Catalog": ("products", "categories", "suppliers", "customers"),
    "Inventory": ("inventory", "storage_locations", "purchase_orders", "stock_transfers"),
    "Locations": ("stores", "warehouses"),
    "Administration": ("users", "roles", "permissions"),
    "Reports": ("reports",),
    "Settings": ("settings",),
}

DEFAULT_ALIAS_TABLE = ModuleAliasTable(DEFAULT_MODULE_ALIASES)
