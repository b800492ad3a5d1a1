"""Tests for API schemas and the guard response adapter."""

import pytest
from pydantic import ValidationError

from storegate.api.guard import guarded, outcome_to_response
from storegate.api.schemas.session import PermissionInfo, SessionPayload
from storegate.core.guard.machine import Placeholder, Redirect, Rendered
from storegate.core.guard.requirements import NamedPermission


class TestSessionPayload:
    """Test converting payloads into domain objects."""

    def test_to_user(self, session_payload):
        """Test the user record."""
        user = SessionPayload(**session_payload).to_user()
        assert user.id == 7
        assert user.role_id == 3
        assert user.is_active

    def test_to_catalog(self, session_payload):
        """Test the catalog is decoded from the encoded records."""
        catalog = SessionPayload(**session_payload).to_catalog()
        assert len(catalog) == 5
        assert catalog.get_permission("pos.create").actions == ("create",)
        assert catalog.get_role(3).permission_names == ("dashboard.view", "pos.view", "pos.create")

    def test_untyped_actions_reach_codec(self, session_payload):
        """Test an undecodable action value does not fail validation."""
        session_payload["permissions"][0]["actions"] = 17
        catalog = SessionPayload(**session_payload).to_catalog()
        assert catalog.get_permission("dashboard.view").actions == ()
        assert "dashboard.view" in catalog.malformed

    def test_missing_id_defaults_to_name(self, session_payload):
        """Test a permission without an id is identified by its name."""
        del session_payload["permissions"][0]["id"]
        catalog = SessionPayload(**session_payload).to_catalog()
        assert catalog.get_permission("dashboard.view").id == "dashboard.view"

    def test_name_required(self, session_payload):
        """Test permission records need a name."""
        session_payload["permissions"][0]["name"] = ""
        with pytest.raises(ValidationError):
            SessionPayload(**session_payload)

    def test_permission_info(self, default_catalog):
        """Test permission output records."""
        info = PermissionInfo.from_permission(default_catalog.get_permission("inventory.update"))
        assert info.module == "inventory"
        assert info.actions == ["update"]
        assert info.category == "edit"


class TestGuardResponses:
    """Test mapping guard outcomes onto responses."""

    def test_placeholder(self):
        """Test the loading placeholder is a 202 with Retry-After."""
        response = outcome_to_response(Placeholder("Loading"), retry_after=2)
        assert response.status_code == 202
        assert response.headers["retry-after"] == "2"

    def test_redirect(self):
        """Test a denial is a 303 to the fallback."""
        response = outcome_to_response(Redirect("/"), retry_after=1)
        assert response.status_code == 303
        assert response.headers["location"] == "/"

    def test_rendered(self):
        """Test a grant returns the view's content."""
        assert outcome_to_response(Rendered({"page": "x"}), retry_after=1) == {"page": "x"}

    def test_guarded_keeps_view_metadata(self):
        """Test the endpoint keeps the view's name and requirement."""

        def reports_page():
            """Reports."""
            return {}

        endpoint = guarded("reports.view")(reports_page)
        assert endpoint.__name__ == "reports_page"
        assert endpoint.__doc__ == "Reports."
        assert endpoint.requirement == NamedPermission("reports.view")
