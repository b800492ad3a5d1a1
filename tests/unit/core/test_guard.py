"""Tests for the route guard state machine."""

import asyncio

import pytest

from storegate.core.guard.machine import (
    GuardTransitionError,
    Placeholder,
    Redirect,
    Rendered,
    RouteGuard,
)
from storegate.core.guard.states import (
    TERMINAL_STATES,
    VALID_TRANSITIONS,
    GuardState,
    GuardTransition,
    can_transition,
    get_target_state,
)
from storegate.core.rbac.catalog import PermissionCatalog
from storegate.core.rbac.models import Role, User
from tests.factories import make_permission


class TestGuardStates:
    """Test state and transition definitions."""

    def test_terminal_states(self):
        """Test rendered and redirected end a navigation."""
        assert TERMINAL_STATES == {GuardState.RENDERED, GuardState.REDIRECTED}

    def test_loading_transitions(self):
        """Test the only way out of LOADING is catalog_ready."""
        assert can_transition(GuardState.LOADING, GuardTransition.CATALOG_READY)
        assert not can_transition(GuardState.LOADING, GuardTransition.GRANT)
        assert not can_transition(GuardState.LOADING, GuardTransition.DENY)

    def test_evaluating_transitions(self):
        """Test evaluation ends in grant or deny."""
        assert get_target_state(GuardState.EVALUATING, GuardTransition.GRANT) == GuardState.RENDERED
        assert get_target_state(GuardState.EVALUATING, GuardTransition.DENY) == GuardState.REDIRECTED

    def test_terminal_states_no_outgoing(self):
        """Test terminal states accept no transitions."""
        for state in TERMINAL_STATES:
            assert state not in VALID_TRANSITIONS
            for transition in GuardTransition:
                assert not can_transition(state, transition)
                assert get_target_state(state, transition) is None


class RecordingView:
    """View stand-in that counts how often it is rendered."""

    def __init__(self, content="protected"):
        self.calls = 0
        self.content = content

    def __call__(self):
        self.calls += 1
        return self.content


class TestRouteGuard:
    """Test guard rendering."""

    def test_placeholder_while_loading(self, local_session, user_a):
        """Test no evaluation happens while the catalog is loading."""
        local_session.begin_load(user_a)
        view = RecordingView()
        guard = RouteGuard("user_management.create", view, session=local_session)

        outcome = guard.render()

        assert isinstance(outcome, Placeholder)
        assert guard.state == GuardState.LOADING
        assert view.calls == 0
        assert guard.get_history() == []

    def test_grant_after_load(self, local_session, sample_catalog, user_a):
        """Test the view renders once the catalog arrives and grants access."""
        ticket = local_session.begin_load(user_a)
        view = RecordingView()
        guard = RouteGuard("user_management.create", view, session=local_session)
        assert isinstance(guard.render(), Placeholder)

        local_session.publish(ticket, user_a, sample_catalog)
        outcome = guard.render()

        assert outcome == Rendered("protected")
        assert guard.state == GuardState.RENDERED
        assert [h["transition"] for h in guard.get_history()] == ["catalog_ready", "grant"]

    def test_deny_redirects_to_fallback(self, local_session, sample_catalog):
        """Test a missing permission redirects without rendering the view."""
        local_session.authenticate(User(id=2, role_id="role-b"), sample_catalog)
        view = RecordingView()
        guard = RouteGuard("@Settings", view, session=local_session, fallback="/home")

        outcome = guard.render()

        assert outcome == Redirect("/home")
        assert guard.state == GuardState.REDIRECTED
        assert guard.is_terminal
        assert view.calls == 0

    def test_no_dashboard_permission_redirects(self, local_session):
        """Test a user without dashboard permissions is redirected from Dashboard."""
        perm = make_permission("inventory.view", "inventory", ["view"])
        catalog = PermissionCatalog([perm], [Role(id=1, name="stock", permissions=(perm,))])
        local_session.authenticate(User(id=1, role_id=1), catalog)

        outcome = RouteGuard("@Dashboard", RecordingView(), session=local_session).render()
        assert isinstance(outcome, Redirect)
        assert outcome.location == "/"

    def test_module_action_requirement(self, local_session, sample_catalog, user_a):
        """Test module + action requirements."""
        local_session.authenticate(user_a, sample_catalog)
        assert isinstance(RouteGuard("inventory:update", RecordingView(), session=local_session).render(), Rendered)
        assert isinstance(RouteGuard("inventory:delete", RecordingView(), session=local_session).render(), Redirect)

    def test_outcome_memoised(self, local_session, sample_catalog, user_a):
        """Test a terminal outcome is kept for the navigation."""
        local_session.authenticate(user_a, sample_catalog)
        view = RecordingView()
        guard = RouteGuard("dashboard.view", view, session=local_session)

        first = guard.render()
        local_session.logout()
        second = guard.render()

        assert first is second
        assert view.calls == 1

    def test_new_navigation_restarts(self, local_session, sample_catalog, user_a):
        """Test a fresh guard starts from LOADING and sees the new state."""
        local_session.authenticate(user_a, sample_catalog)
        assert isinstance(RouteGuard("dashboard.view", RecordingView(), session=local_session).render(), Rendered)

        local_session.logout()
        guard = RouteGuard("dashboard.view", RecordingView(), session=local_session)
        assert guard.state == GuardState.LOADING
        assert isinstance(guard.render(), Redirect)

    def test_anonymous_session_denied(self, local_session):
        """Test a session with no user and no pending load is denied."""
        outcome = RouteGuard("dashboard.view", RecordingView(), session=local_session).render()
        assert isinstance(outcome, Redirect)

    def test_custom_placeholder_message(self, local_session):
        """Test the placeholder text is configurable."""
        local_session.begin_load()
        guard = RouteGuard("dashboard.view", RecordingView(), session=local_session, placeholder_message="Wait")
        assert guard.render() == Placeholder("Wait")

    def test_invalid_transition(self, local_session):
        """Test an invalid transition raises GuardTransitionError."""
        guard = RouteGuard("dashboard.view", RecordingView(), session=local_session)
        with pytest.raises(GuardTransitionError) as exc_info:
            guard._transition(GuardTransition.GRANT)
        assert exc_info.value.from_state == GuardState.LOADING
        assert exc_info.value.transition == GuardTransition.GRANT

    def test_history_records_generation(self, local_session, sample_catalog, user_a):
        """Test the decision records which snapshot it was made on."""
        local_session.authenticate(user_a, sample_catalog)
        guard = RouteGuard("dashboard.view", RecordingView(), session=local_session)
        guard.render()
        assert guard.get_history()[-1]["generation"] == local_session.snapshot.generation

    def test_defaults_to_process_session(self, session, sample_catalog, user_a):
        """Test the process-wide session is used when none is given."""
        session.authenticate(user_a, sample_catalog)
        assert isinstance(RouteGuard("dashboard.view", RecordingView()).render(), Rendered)

    def test_failing_view_can_render_again(self, local_session, sample_catalog, user_a):
        """Test an error in the view leaves the guard able to render again."""
        local_session.authenticate(user_a, sample_catalog)
        attempts = []

        def flaky_view():
            attempts.append(1)
            if len(attempts) == 1:
                raise RuntimeError("view failed")
            return "protected"

        guard = RouteGuard("dashboard.view", flaky_view, session=local_session)
        with pytest.raises(RuntimeError):
            guard.render()
        assert guard.state == GuardState.EVALUATING
        assert not guard.is_terminal

        assert guard.render() == Rendered("protected")
        assert guard.state == GuardState.RENDERED
        assert [h["transition"] for h in guard.get_history()] == ["catalog_ready", "grant"]


class TestRouteGuardResolve:
    """Test awaiting the guard outcome."""

    def test_resolve_waits_for_publish(self, local_session, sample_catalog, user_a):
        """Test resolve suspends until the catalog is published."""

        async def scenario():
            ticket = local_session.begin_load(user_a)
            guard = RouteGuard("user_management.create", RecordingView(), session=local_session)
            pending = asyncio.ensure_future(guard.resolve())
            await asyncio.sleep(0)
            assert not pending.done()
            local_session.publish(ticket, user_a, sample_catalog)
            return await pending

        assert asyncio.run(scenario()) == Rendered("protected")

    def test_resolve_denies_after_publish(self, local_session, sample_catalog):
        """Test resolve ends in a redirect when the grant is missing."""

        async def scenario():
            user = User(id=2, role_id="role-b")
            ticket = local_session.begin_load(user)
            guard = RouteGuard("system_settings", RecordingView(), session=local_session, fallback="/403")
            pending = asyncio.ensure_future(guard.resolve())
            await asyncio.sleep(0)
            local_session.publish(ticket, user, sample_catalog)
            return await pending

        assert asyncio.run(scenario()) == Redirect("/403")
