"""Pytest configuration and shared fixtures."""

import pytest

from storegate.core.rbac.catalog import PermissionCatalog
from storegate.core.rbac.index import IndexBuilder
from storegate.core.rbac.models import Role, User
from storegate.core.rbac.roles import build_default_catalog
from storegate.core.rbac.session import SessionState, reset_session
from tests.factories import make_permission, make_record


@pytest.fixture
def inventory_permissions():
    """Two permissions sharing the inventory module with different actions."""
    return [
        make_permission("inventory.read", "inventory", ["read"]),
        make_permission("inventory.write", "inventory", ["read", "write"]),
    ]


@pytest.fixture
def sample_catalog():
    """Small catalog with two roles of different sizes."""
    perms = [
        make_permission("dashboard.view", "dashboard", ["view"]),
        make_permission("user_management.create", "user_management", ["create", "read"]),
        make_permission("inventory.view", "inventory", ["view"]),
        make_permission("inventory.update", "inventory", ["update"]),
        make_permission("system_settings", "settings", []),
        make_permission("reports.view", "", ["view"]),
    ]
    roles = [
        Role(id="role-a", name="RoleA", permissions=tuple(perms[:5])),
        Role(id="role-b", name="RoleB", permissions=(perms[2], perms[0])),
        Role(id="empty", name="Empty"),
    ]
    return PermissionCatalog(perms, roles)


@pytest.fixture
def default_catalog():
    """The built-in retail catalog."""
    return build_default_catalog()


@pytest.fixture
def builder():
    return IndexBuilder()


@pytest.fixture
def user_a():
    return User(id=1, username="alice", role_id="role-a")


@pytest.fixture
def session():
    """A fresh process-wide session."""
    return reset_session()


@pytest.fixture
def local_session():
    """A session not registered as the process-wide one."""
    return SessionState()


@pytest.fixture
def session_payload():
    """Login payload for a cashier, in the shape the server sends it."""
    return {
        "user": {"id": 7, "username": "kasir1", "role_id": 3},
        "permissions": [
            make_record("dashboard.view", "dashboard", ["view"], id=1),
            make_record("pos.view", "pos", ["view"], id=2),
            make_record("pos.create", "pos", ["create"], id=3),
            make_record("inventory.update", "inventory", ["update"], id=4),
            make_record("settings.view", "settings", ["view"], id=5),
        ],
        "roles": [
            {"id": 3, "name": "cashier", "permissions": ["dashboard.view", "pos.view", "pos.create"]},
            {"id": 4, "name": "warehouse", "permissions": ["dashboard.view", "inventory.update"]},
            {"id": 1, "name": "admin", "permissions": [
                "dashboard.view", "pos.view", "pos.create", "inventory.update", "settings.view",
            ]},
        ],
    }


@pytest.fixture
def client():
    """Test client over a freshly built application."""
    from fastapi.testclient import TestClient

    from storegate.api.main import create_app

    app = create_app()
    with TestClient(app, follow_redirects=False) as c:
        yield c
    reset_session()
