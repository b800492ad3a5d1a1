"""Route guard states and transitions.

State Machine Diagram:

    ┌──────────┐
    │ LOADING  │ ← Initial state (catalog not ready yet)
    └────┬─────┘
         │ catalog_ready
    ┌────▼──────┐
    │EVALUATING │
    └────┬──────┘
         │
         ├─────────────────────┐
         │ grant               │ deny
    ┌────▼─────┐         ┌─────▼──────┐
    │ RENDERED │         │ REDIRECTED │
    └──────────┘         └────────────┘

A new navigation creates a new guard, which starts again at LOADING.
"""

from enum import Enum
from typing import Dict, NamedTuple, Optional, Set


class GuardState(str, Enum):
    """States of one guarded navigation."""

    LOADING = "loading"           # Waiting for the permission catalog
    EVALUATING = "evaluating"     # Catalog ready, checking the requirement

    # Terminal states
    RENDERED = "rendered"         # Requirement met, protected view shown
    REDIRECTED = "redirected"     # Requirement not met, sent to the fallback


class GuardTransition(str, Enum):
    """Events that move a guard between states."""

    CATALOG_READY = "catalog_ready"  # LOADING → EVALUATING
    GRANT = "grant"                  # EVALUATING → RENDERED
    DENY = "deny"                    # EVALUATING → REDIRECTED


class TransitionRule(NamedTuple):
    """Defines a valid state transition."""
    from_state: GuardState
    to_state: GuardState
    transition: GuardTransition


TRANSITION_RULES: list[TransitionRule] = [
    TransitionRule(GuardState.LOADING, GuardState.EVALUATING, GuardTransition.CATALOG_READY),
    TransitionRule(GuardState.EVALUATING, GuardState.RENDERED, GuardTransition.GRANT),
    TransitionRule(GuardState.EVALUATING, GuardState.REDIRECTED, GuardTransition.DENY),
]

# Build lookup tables for efficient access
VALID_TRANSITIONS: Dict[GuardState, Set[GuardTransition]] = {}
TRANSITION_TARGETS: Dict[tuple[GuardState, GuardTransition], TransitionRule] = {}

for rule in TRANSITION_RULES:
    VALID_TRANSITIONS.setdefault(rule.from_state, set()).add(rule.transition)
    TRANSITION_TARGETS[(rule.from_state, rule.transition)] = rule


TERMINAL_STATES: Set[GuardState] = {
    GuardState.RENDERED,
    GuardState.REDIRECTED,
}


def can_transition(from_state: GuardState, transition: GuardTransition) -> bool:
    """Check if a transition is valid from the given state."""
    return transition in VALID_TRANSITIONS.get(from_state, set())


def get_target_state(from_state: GuardState, transition: GuardTransition) -> Optional[GuardState]:
    """Get the target state for a transition."""
    rule = TRANSITION_TARGETS.get((from_state, transition))
    return rule.to_state if rule else None
