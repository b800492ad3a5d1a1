"""Sidebar navigation filtered by permission.

Each entry names the permission that unlocks it. A group is shown only when
it is itself permitted and at least one of its children survives.
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from storegate.core.rbac.checker import PermissionChecker

from .requirements import RequirementLike, as_requirement


@dataclass(frozen=True)
class NavItem:
    path: str
    label: str
    permission: Optional[RequirementLike] = None
    children: Tuple["NavItem", ...] = ()

    def is_visible(self, checker: PermissionChecker) -> bool:
        if self.permission is None:
            return True
        return as_requirement(self.permission).is_satisfied(checker)


DEFAULT_NAVIGATION: Tuple[NavItem, ...] = (
    NavItem("/dashboard", "Dashboard", "dashboard.view"),
    NavItem("/pos", "Point of Sale", "pos.view"),
    NavItem("/sales", "Sales", "sales.view"),
    NavItem("/discounts", "Discounts", "discounts.view"),
    NavItem("/products", "Catalog", "products.view", children=(
        NavItem("/products", "Products", "products.view"),
        NavItem("/categories", "Categories", "categories.view"),
        NavItem("/suppliers", "Suppliers", "suppliers.view"),
        NavItem("/customers", "Customers", "customers.view"),
    )),
    NavItem("/inventory", "Inventory", "inventory.view", children=(
        NavItem("/inventory", "Stock Overview", "inventory.view"),
        NavItem("/storage-locations", "Storage Locations", "storage_locations.view"),
        NavItem("/purchase-orders", "Purchase Orders", "purchase_orders.view"),
        NavItem("/stock-transfers", "Stock Transfers", "stock_transfers.view"),
    )),
    NavItem("/stores", "Locations", "stores.view", children=(
        NavItem("/stores", "Stores", "stores.view"),
        NavItem("/warehouses", "Warehouses", "warehouses.view"),
    )),
    NavItem("/users", "Administration", "users.view", children=(
        NavItem("/users", "Users", "users.view"),
        NavItem("/roles", "Roles", "roles.view"),
        NavItem("/permissions", "Permissions", "permissions.view"),
    )),
    NavItem("/reports", "Reports", "reports.view", children=(
        NavItem("/reports/sales", "Sales Report", "reports.sales"),
        NavItem("/reports/inventory", "Inventory Report", "reports.inventory"),
        NavItem("/reports/users", "Sales per Cashier", "reports.users"),
    )),
    NavItem("/settings", "Settings", "settings.view"),
)


def visible_navigation(
    items: Iterable[NavItem],
    checker: PermissionChecker,
) -> List[NavItem]:
    """Filter navigation entries down to what the checker permits."""
    visible: List[NavItem] = []
    for item in items:
        if not item.is_visible(checker):
            continue
        if item.children:
            children = visible_navigation(item.children, checker)
            if not children:
                continue
            item = NavItem(item.path, item.label, item.permission, tuple(children))
        visible.append(item)
    return visible
