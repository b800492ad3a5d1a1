"""Default retail permission catalog and roles.

Defines the back-office permission records in the same shape the server
sends them (actions as JSON-encoded strings), and the 4 standard roles:
1. Admin - Every permission
2. Manager - Store operations, catalog and stock management
3. Cashier - Point of sale only
4. Warehouse - Stock movements and purchasing
"""

import json
from typing import Any, Dict, List

from .catalog import PermissionCatalog
from .codec import ActionListCodec


def _record(name: str, module: str, category: str, description: str, *actions: str) -> Dict[str, Any]:
    """Build a permission record with an encoded action list."""
    return {
        "name": name,
        "module": module,
        "category": category,
        "description": description,
        "actions": json.dumps(list(actions)),
    }


def _crud(module: str, noun: str) -> List[Dict[str, Any]]:
    return [
        _record(f"{module}.view", module, "view", f"View {noun}", "view"),
        _record(f"{module}.create", module, "create", f"Create {noun}", "create"),
        _record(f"{module}.update", module, "edit", f"Edit {noun}", "update"),
        _record(f"{module}.delete", module, "delete", f"Delete {noun}", "delete"),
    ]


DEFAULT_PERMISSIONS: List[Dict[str, Any]] = [
    _record("dashboard.view", "dashboard", "view", "Open the dashboard", "view"),
    _record("pos.view", "pos", "view", "Open the point of sale", "view"),
    _record("pos.create", "pos", "create", "Ring up sales at the point of sale", "create"),
    *_crud("sales", "sales"),
    *_crud("discounts", "discounts"),
    *_crud("products", "products"),
    *_crud("categories", "categories"),
    *_crud("suppliers", "suppliers"),
    *_crud("customers", "customers"),
    _record("inventory.view", "inventory", "view", "View stock levels", "view"),
    _record("inventory.update", "inventory", "edit", "Adjust stock levels", "update"),
    *_crud("storage_locations", "storage locations"),
    *_crud("purchase_orders", "purchase orders"),
    *_crud("stock_transfers", "stock transfers"),
    *_crud("stores", "stores"),
    *_crud("warehouses", "warehouses"),
    *_crud("users", "users"),
    *_crud("roles", "roles"),
    _record("permissions.view", "permissions", "view", "View permissions", "view"),
    _record("reports.view", "reports", "view", "Open every report", "view"),
    _record("reports.sales", "reports", "view", "View the sales report", "view"),
    _record("reports.inventory", "reports", "view", "View the inventory report", "view"),
    _record("reports.users", "reports", "view", "View sales per cashier", "view"),
    _record("settings.view", "settings", "view", "View system settings", "view"),
    _record("settings.update", "settings", "edit", "Change system settings", "update"),
]

for _id, _perm in enumerate(DEFAULT_PERMISSIONS, start=1):
    _perm["id"] = _id


ADMIN_PERMISSIONS = [p["name"] for p in DEFAULT_PERMISSIONS]

MANAGER_PERMISSIONS = [
    "dashboard.view",
    "sales.view", "sales.create", "sales.update",
    "discounts.view", "discounts.create", "discounts.update",
    "products.view", "products.create", "products.update",
    "categories.view", "categories.create", "categories.update",
    "suppliers.view", "suppliers.create", "suppliers.update",
    "customers.view", "customers.create", "customers.update",
    "inventory.view", "inventory.update",
    "storage_locations.view", "storage_locations.create", "storage_locations.update",
    "purchase_orders.view", "purchase_orders.create", "purchase_orders.update",
    "stock_transfers.view", "stock_transfers.create", "stock_transfers.update",
    "stores.view", "warehouses.view", "users.view", "reports.view",
]

# The point of sale reads stores, products and customers through pos.*
# without exposing those menus.
CASHIER_PERMISSIONS = [
    "dashboard.view", "pos.view", "pos.create", "reports.view",
]

WAREHOUSE_PERMISSIONS = [
    "dashboard.view", "products.view", "inventory.view", "inventory.update",
    "storage_locations.view", "storage_locations.create", "storage_locations.update",
    "purchase_orders.view", "purchase_orders.create", "purchase_orders.update",
    "stock_transfers.view", "stock_transfers.create", "stock_transfers.update",
    "warehouses.view", "suppliers.view", "reports.view",
]


DEFAULT_ROLES: Dict[str, dict] = {
    "admin": {
        "id": 1,
        "name": "admin",
        "description": "Administrator with full access",
        "permissions": ADMIN_PERMISSIONS,
    },
    "manager": {
        "id": 2,
        "name": "manager",
        "description": "Store manager with operational access",
        "permissions": MANAGER_PERMISSIONS,
    },
    "cashier": {
        "id": 3,
        "name": "cashier",
        "description": "Cashier with point of sale access",
        "permissions": CASHIER_PERMISSIONS,
    },
    "warehouse": {
        "id": 4,
        "name": "warehouse",
        "description": "Warehouse staff with inventory access",
        "permissions": WAREHOUSE_PERMISSIONS,
    },
}


def get_default_role_permissions(role_key: str) -> List[str]:
    """Get permission names for a default role."""
    role = DEFAULT_ROLES.get(role_key)
    if not role:
        raise ValueError(f"Unknown default role: {role_key}")
    return list(role["permissions"])


def build_default_catalog(codec: ActionListCodec = None) -> PermissionCatalog:
    """Build the default catalog through the same decode path as server data."""
    return PermissionCatalog.from_records(
        DEFAULT_PERMISSIONS,
        list(DEFAULT_ROLES.values()),
        codec=codec,
    )
