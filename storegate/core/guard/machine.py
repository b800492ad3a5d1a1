"""Route guard state machine.

A RouteGuard stands in front of one protected view for one navigation. It
renders exactly one of:

- ``Placeholder`` while the permission catalog is still loading
- ``Rendered`` with the view's output once the requirement is met
- ``Redirect`` to the fallback location when it is not

While a catalog load is outstanding the guard never evaluates: checking
against an empty catalog would redirect a user who is about to be granted
access. A session with no user and no pending load is evaluated as-is and
therefore denied.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional, Union

from storegate.common.config import DEFAULT_FALLBACK_PATH, DEFAULT_PLACEHOLDER_MESSAGE
from storegate.common.logger import get_logger
from storegate.core.rbac.errors import StoreGateError
from storegate.core.rbac.session import SessionState, get_session

from .requirements import Requirement, RequirementLike, as_requirement
from .states import (
    TERMINAL_STATES,
    GuardState,
    GuardTransition,
    can_transition,
    get_target_state,
)

logger = get_logger("guard")


class GuardTransitionError(StoreGateError):
    """Raised when a guard transition is invalid."""

    def __init__(self, message: str, from_state: GuardState, transition: GuardTransition):
        super().__init__(message)
        self.from_state = from_state
        self.transition = transition


@dataclass(frozen=True)
class Placeholder:
    """Neutral output shown while permissions load."""

    message: str = DEFAULT_PLACEHOLDER_MESSAGE


@dataclass(frozen=True)
class Rendered:
    """Output of the protected view."""

    content: Any


@dataclass(frozen=True)
class Redirect:
    """Send the user to the fallback location."""

    location: str


GuardOutcome = Union[Placeholder, Rendered, Redirect]


class RouteGuard:
    """Admits or redirects one navigation to a protected view.

    The view is a zero-argument callable and is only invoked once the
    requirement is granted.
    """

    def __init__(
        self,
        requirement: RequirementLike,
        view: Callable[[], Any],
        *,
        session: Optional[SessionState] = None,
        fallback: str = DEFAULT_FALLBACK_PATH,
        placeholder_message: str = DEFAULT_PLACEHOLDER_MESSAGE,
    ):
        """
        Initialize the guard.

        Args:
            requirement: Requirement object or string (see parse_requirement)
            view: Produces the protected content when access is granted
            session: Session to read from; the process-wide one by default
            fallback: Where denied navigations are redirected
            placeholder_message: Text of the loading placeholder
        """
        self.requirement: Requirement = as_requirement(requirement)
        self.view = view
        self.session = session if session is not None else get_session()
        self.fallback = fallback
        self.placeholder_message = placeholder_message
        self._state = GuardState.LOADING
        self._outcome: Optional[GuardOutcome] = None
        self._history: list[Dict[str, Any]] = []

    @property
    def state(self) -> GuardState:
        return self._state

    @property
    def is_terminal(self) -> bool:
        return self._state in TERMINAL_STATES

    def get_history(self) -> list[Dict[str, Any]]:
        return self._history.copy()

    def render(self) -> GuardOutcome:
        """Advance as far as the session allows and return the outcome."""
        if self._outcome is not None:
            return self._outcome

        if self._state == GuardState.LOADING:
            if self.session.is_loading:
                return Placeholder(self.placeholder_message)
            self._transition(GuardTransition.CATALOG_READY)

        checker = self.session.checker()
        if self.requirement.is_satisfied(checker):
            # A view that raises leaves the guard in EVALUATING, so the next
            # render evaluates again.
            content = self.view()
            self._transition(GuardTransition.GRANT, generation=checker.generation)
            self._outcome = Rendered(content)
        else:
            self._transition(GuardTransition.DENY, generation=checker.generation)
            logger.info(f"Denied navigation requiring {self.requirement}; redirecting")
            self._outcome = Redirect(self.fallback)
        return self._outcome

    async def resolve(self) -> GuardOutcome:
        """Wait for the catalog to finish loading, then render."""
        if self._outcome is None and self._state == GuardState.LOADING:
            await self.session.wait_until_ready()
        return self.render()

    def _transition(self, transition: GuardTransition, **details: Any) -> None:
        if not can_transition(self._state, transition):
            raise GuardTransitionError(
                f"Cannot perform {transition.value} from state {self._state.value}",
                self._state,
                transition,
            )
        to_state = get_target_state(self._state, transition)
        self._history.append({
            "from_state": self._state.value,
            "to_state": to_state.value,
            "transition": transition.value,
            "timestamp": datetime.now(timezone.utc),
            **details,
        })
        self._state = to_state
