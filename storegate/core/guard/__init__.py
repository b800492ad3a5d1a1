"""Route guarding for storegate.

Implements the per-navigation guard state machine and permission-filtered
navigation.
"""

from .states import GuardState, GuardTransition, VALID_TRANSITIONS
from .requirements import AllOf, AnyOf, ModuleAccess, ModuleAction, NamedPermission, parse_requirement
from .machine import GuardTransitionError, Placeholder, Redirect, Rendered, RouteGuard
from .navigation import DEFAULT_NAVIGATION, NavItem, visible_navigation

__all__ = [
    "GuardState",
    "GuardTransition",
    "VALID_TRANSITIONS",
    "NamedPermission",
    "ModuleAction",
    "ModuleAccess",
    "AnyOf",
    "AllOf",
    "parse_requirement",
    "RouteGuard",
    "GuardTransitionError",
    "Placeholder",
    "Rendered",
    "Redirect",
    "DEFAULT_NAVIGATION",
    "NavItem",
    "visible_navigation",
]
