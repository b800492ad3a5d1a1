"""Guarded back-office pages.

Each page is only rendered once the session's permissions are published and
satisfy its requirement.
"""

from fastapi import APIRouter

from storegate.api.guard import guarded
from storegate.core.guard.requirements import AnyOf, ModuleAccess, ModuleAction

router = APIRouter(prefix="/pages", tags=["pages"])


@router.get("/dashboard")
@guarded(ModuleAccess("Dashboard"))
def dashboard_page():
    return {"page": "dashboard"}


@router.get("/pos")
@guarded("pos.view")
def pos_page():
    return {"page": "pos"}


@router.get("/inventory")
@guarded(ModuleAction("inventory", "view"))
def inventory_page():
    return {"page": "inventory"}


@router.get("/stock-adjustments")
@guarded("inventory:update")
def stock_adjustments_page():
    return {"page": "stock-adjustments"}


@router.get("/users")
@guarded("users.view")
def users_page():
    return {"page": "users"}


@router.get("/reports/sales")
@guarded(AnyOf("reports.view", "reports.sales"))
def sales_report_page():
    return {"page": "reports/sales"}


@router.get("/settings")
@guarded("settings.view")
def settings_page():
    return {"page": "settings"}
