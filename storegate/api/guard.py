"""HTTP adapter for route guards.

``guarded`` turns a zero-argument page view into a FastAPI endpoint that runs
a fresh RouteGuard per request:

- catalog still loading: ``202`` with a neutral JSON placeholder and
  ``Retry-After``
- requirement met: the view's return value
- requirement not met: ``303`` redirect to the fallback path, with no body
  naming the protected page
"""

from typing import Any, Callable

from fastapi import Depends, status
from fastapi.responses import JSONResponse, RedirectResponse

from storegate.common.config import GuardConfig
from storegate.core.config import Settings, get_settings
from storegate.core.guard.machine import GuardOutcome, Placeholder, Redirect, RouteGuard
from storegate.core.guard.requirements import RequirementLike, as_requirement
from storegate.core.rbac.session import SessionState

from .deps import get_guard_config, get_session_state


def outcome_to_response(outcome: GuardOutcome, retry_after: int) -> Any:
    """Map a guard outcome onto an HTTP response."""
    if isinstance(outcome, Placeholder):
        return JSONResponse(
            status_code=status.HTTP_202_ACCEPTED,
            content={"status": "loading", "message": outcome.message},
            headers={"Retry-After": str(retry_after)},
        )
    if isinstance(outcome, Redirect):
        return RedirectResponse(outcome.location, status_code=status.HTTP_303_SEE_OTHER)
    return outcome.content


def guarded(requirement: RequirementLike) -> Callable[[Callable[[], Any]], Callable]:
    """Decorator protecting a page view with a permission requirement.

    Usage::

        @router.get("/settings")
        @guarded("settings.view")
        def settings_page():
            return {"page": "settings"}
    """
    requirement = as_requirement(requirement)

    def decorator(view: Callable[[], Any]) -> Callable:
        async def endpoint(
            session: SessionState = Depends(get_session_state),
            guard_config: GuardConfig = Depends(get_guard_config),
            settings: Settings = Depends(get_settings),
        ):
            guard = RouteGuard(
                requirement,
                view,
                session=session,
                fallback=guard_config.fallback_path,
                placeholder_message=guard_config.placeholder_message,
            )
            return outcome_to_response(guard.render(), settings.loading_retry_after)

        endpoint.__name__ = view.__name__
        endpoint.__doc__ = view.__doc__
        endpoint.requirement = requirement
        return endpoint

    return decorator
