"""Permission query API endpoints.

Every endpoint reads one checker, taken at the start of the request, so all
answers in a response come from the same published snapshot.
"""

from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, Query

from storegate.api.deps import get_checker
from storegate.api.schemas.session import (
    CheckResult,
    ModuleAccessResult,
    MyPermissions,
    NavItemInfo,
    PermissionInfo,
)
from storegate.core.guard.navigation import DEFAULT_NAVIGATION, NavItem, visible_navigation
from storegate.core.rbac.checker import PermissionChecker

router = APIRouter(prefix="/permissions", tags=["permissions"])


def _nav_info(item: NavItem) -> NavItemInfo:
    return NavItemInfo(
        path=item.path,
        label=item.label,
        children=[_nav_info(child) for child in item.children],
    )


@router.get("/me", response_model=MyPermissions)
async def my_permissions(checker: PermissionChecker = Depends(get_checker)):
    """The current user's permissions in catalog order."""
    return MyPermissions(
        permissions=[PermissionInfo.from_permission(p) for p in checker.get_user_permissions()],
        labels=checker.accessible_labels(),
    )


@router.get("/me/modules", response_model=Dict[str, List[PermissionInfo]])
async def my_permissions_by_module(checker: PermissionChecker = Depends(get_checker)):
    """The current user's permissions grouped by module key."""
    return {
        module: [PermissionInfo.from_permission(p) for p in perms]
        for module, perms in checker.get_permissions_by_module().items()
    }


@router.get("/check", response_model=CheckResult)
async def check_action(
    module: str = Query(..., description="Module key, e.g. inventory"),
    action: str = Query(..., description="Action name, e.g. update"),
    checker: PermissionChecker = Depends(get_checker),
):
    """Check a module + action pair."""
    return CheckResult(allowed=checker.can_perform(module, action))


@router.get("/check/{name}", response_model=CheckResult)
async def check_permission(
    name: str,
    action: Optional[str] = Query(None, description="Also require this action on the permission itself"),
    checker: PermissionChecker = Depends(get_checker),
):
    """Check a permission by name."""
    if action is not None:
        return CheckResult(allowed=checker.has_permission_action(name, action))
    return CheckResult(allowed=checker.has_permission(name))


@router.get("/module-access", response_model=ModuleAccessResult)
async def check_module_access(
    label: str = Query(..., description="Display label, e.g. Inventory"),
    checker: PermissionChecker = Depends(get_checker),
):
    """Check access to a display-label area."""
    allowed = checker.has_module_access(label)
    modules = list(checker.index.aliases.modules_for(label)) if allowed else []
    return ModuleAccessResult(label=label, allowed=allowed, modules=modules)


@router.get("/navigation", response_model=List[NavItemInfo])
async def navigation(checker: PermissionChecker = Depends(get_checker)):
    """Sidebar entries the current user may see."""
    return [_nav_info(item) for item in visible_navigation(DEFAULT_NAVIGATION, checker)]
