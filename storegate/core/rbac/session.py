"""Process-wide authorization session state.

Lifecycle::

    ANONYMOUS --begin_load--> LOADING --publish--> READY
        ^                        |                   |
        +-------- logout --------+------ logout -----+
                                 ^                   |
                                 +---- begin_load ---+   (role change, re-login)

The permission catalog is loaded once per authentication and replaced
wholesale on login, logout or role reassignment. Each load takes a ticket;
only the most recently issued ticket may publish, so a late answer from a
superseded load is discarded instead of overwriting newer state.

Publishing resolves the user's permissions, compiles a new PermissionIndex
and installs it with a single attribute assignment.
"""

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, List, Optional

from storegate.common.logger import get_logger

from .aliases import DEFAULT_ALIAS_TABLE, ModuleAliasTable
from .catalog import EMPTY_CATALOG, PermissionCatalog, RoleResolver
from .checker import PermissionChecker
from .index import EMPTY_INDEX, IndexBuilder, PermissionIndex
from .models import User
from .signals import DanglingRoleReference, Signal, SignalHandler, UnknownAliasLookup

logger = get_logger("session")


class SessionPhase(str, Enum):
    """Where the session is in its lifecycle."""

    ANONYMOUS = "anonymous"   # No authenticated user
    LOADING = "loading"       # A catalog load is outstanding
    READY = "ready"           # The latest load has published


@dataclass(frozen=True)
class LoadTicket:
    """Handle for one catalog load."""

    sequence: int
    user: Optional[User] = None


@dataclass(frozen=True, eq=False)
class PublishedState:
    """Everything a publish installs, swapped as one reference."""

    user: Optional[User]
    catalog: PermissionCatalog
    index: PermissionIndex
    degraded: Optional[DanglingRoleReference] = None


_EMPTY_STATE = PublishedState(user=None, catalog=EMPTY_CATALOG, index=EMPTY_INDEX)

IndexListener = Callable[[PermissionIndex], None]
DegradedListener = Callable[[DanglingRoleReference], None]


class SessionState:
    """Holds the current user, catalog and compiled permission snapshot."""

    def __init__(self, aliases: ModuleAliasTable = DEFAULT_ALIAS_TABLE):
        self._builder = IndexBuilder(aliases)
        self._state = _EMPTY_STATE
        self._phase = SessionPhase.ANONYMOUS
        self._issued = 0
        self._degraded: Optional[DanglingRoleReference] = None
        self._waiters: List[asyncio.Future] = []
        self._listeners: List[IndexListener] = []
        self._degraded_listeners: List[DegradedListener] = []
        self._signal_listeners: List[SignalHandler] = []

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    @property
    def phase(self) -> SessionPhase:
        return self._phase

    @property
    def is_loaded(self) -> bool:
        """True once the most recent load has published."""
        return self._phase == SessionPhase.READY

    @property
    def is_loading(self) -> bool:
        """True while a catalog load is outstanding."""
        return self._phase == SessionPhase.LOADING

    @property
    def user(self) -> Optional[User]:
        return self._state.user

    @property
    def catalog(self) -> PermissionCatalog:
        return self._state.catalog

    @property
    def snapshot(self) -> PermissionIndex:
        """The currently published index."""
        return self._state.index

    @property
    def aliases(self) -> ModuleAliasTable:
        return self._builder.aliases

    @property
    def degraded(self) -> Optional[DanglingRoleReference]:
        """Pending degraded-state flag, without clearing it."""
        return self._degraded

    def consume_degraded(self) -> Optional[DanglingRoleReference]:
        """Return the degraded-state flag once, then clear it."""
        flag, self._degraded = self._degraded, None
        return flag

    def checker(self) -> PermissionChecker:
        """A checker bound to the snapshot published right now."""
        return PermissionChecker(self._state.index, on_signal=self._handle_signal)

    async def wait_until_ready(self) -> PermissionChecker:
        """Suspend while a load is outstanding, then return a checker.

        Returns at once when no load is pending. A logout during the wait
        also ends it, with a checker over the empty snapshot.
        """
        while self.is_loading:
            future = asyncio.get_running_loop().create_future()
            self._waiters.append(future)
            await future
        return self.checker()

    # ------------------------------------------------------------------
    # Write side
    # ------------------------------------------------------------------

    def begin_load(self, user: Optional[User] = None) -> LoadTicket:
        """Start a catalog load, superseding any load still outstanding."""
        self._issued += 1
        self._phase = SessionPhase.LOADING
        logger.debug(f"Catalog load #{self._issued} started")
        return LoadTicket(sequence=self._issued, user=user)

    def publish(self, ticket: LoadTicket, user: Optional[User], catalog: PermissionCatalog) -> bool:
        """Install the result of a load if it is still the latest one.

        Args:
            ticket: Ticket returned by begin_load for this load
            user: The authenticated user the catalog was loaded for
            catalog: The loaded permission catalog

        Returns:
            True if the load was published, False if it was superseded
        """
        if ticket.sequence != self._issued:
            logger.debug(
                f"Discarding stale catalog load #{ticket.sequence} "
                f"(latest is #{self._issued})"
            )
            return False

        current = self._state
        if current.catalog is catalog and current.user == user:
            index = current.index
            degraded = current.degraded
            if degraded is not None:
                # Same dangling reference as the snapshot being kept
                self._handle_signal(degraded)
        else:
            self._degraded = None
            resolver = RoleResolver(catalog, on_signal=self._handle_signal)
            index = self._builder.build(resolver.resolve(user), generation=ticket.sequence)
            degraded = self._degraded

        self._state = PublishedState(user=user, catalog=catalog, index=index, degraded=degraded)
        self._phase = SessionPhase.READY
        logger.info(
            f"Published permission snapshot #{index.generation} for user "
            f"{getattr(user, 'id', None)!r} ({len(index.permissions)} permissions)"
        )

        self._wake_waiters()
        self._notify(index)
        return True

    def authenticate(self, user: User, catalog: PermissionCatalog) -> bool:
        """Load and publish in one step, for catalogs already in hand."""
        ticket = self.begin_load(user)
        return self.publish(ticket, user, catalog)

    def reassign_role(self, user: User, catalog: Optional[PermissionCatalog] = None) -> bool:
        """Replace the session with the user's new role assignment.

        The previous role's permissions are dropped entirely; nothing is
        merged. When ``catalog`` is omitted the current catalog is reused.
        """
        ticket = self.begin_load(user)
        return self.publish(ticket, user, catalog if catalog is not None else self.catalog)

    async def load(
        self,
        user: User,
        fetch: Callable[[], Awaitable[PermissionCatalog]],
    ) -> bool:
        """Run an asynchronous catalog fetch and publish its result.

        Returns False when another load or a logout superseded this one
        while the fetch was in flight. If the fetch fails while it is still
        the latest load, or is cancelled, the session is torn down before the
        error propagates.
        """
        ticket = self.begin_load(user)
        try:
            catalog = await fetch()
        except BaseException as exc:
            if ticket.sequence == self._issued:
                logger.warning(
                    f"Catalog load #{ticket.sequence} ended with "
                    f"{type(exc).__name__}; tearing down session"
                )
                self.logout()
            raise
        return self.publish(ticket, user, catalog)

    def logout(self) -> None:
        """Tear down to the anonymous, empty state."""
        self._issued += 1
        self._state = _EMPTY_STATE
        self._phase = SessionPhase.ANONYMOUS
        self._degraded = None
        logger.info("Session torn down")
        self._wake_waiters()
        self._notify(EMPTY_INDEX)

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def subscribe(self, listener: IndexListener) -> Callable[[], None]:
        """Call ``listener`` with every newly published index."""
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def on_degraded(self, listener: DegradedListener) -> Callable[[], None]:
        """Call ``listener`` when a dangling role reference is detected."""
        self._degraded_listeners.append(listener)
        return lambda: self._degraded_listeners.remove(listener)

    def on_signal(self, listener: SignalHandler) -> Callable[[], None]:
        """Call ``listener`` with every signal raised during resolution or lookup."""
        self._signal_listeners.append(listener)
        return lambda: self._signal_listeners.remove(listener)

    def _handle_signal(self, signal: Signal) -> None:
        if isinstance(signal, DanglingRoleReference):
            self._degraded = signal
            for listener in list(self._degraded_listeners):
                self._call(listener, signal)
        elif isinstance(signal, UnknownAliasLookup):
            logger.debug(f"Module access asked for unknown label {signal.label!r}")
        for listener in list(self._signal_listeners):
            self._call(listener, signal)

    def _wake_waiters(self) -> None:
        waiters, self._waiters = self._waiters, []
        for future in waiters:
            if not future.done():
                future.set_result(None)

    def _notify(self, index: PermissionIndex) -> None:
        for listener in list(self._listeners):
            self._call(listener, index)

    @staticmethod
    def _call(listener, payload) -> None:
        try:
            listener(payload)
        except Exception:
            # A failing listener must not undo a publish
            logger.exception(f"Session listener {listener!r} failed")


_session: Optional[SessionState] = None


def get_session() -> SessionState:
    """Get the process-wide session state."""
    global _session
    if _session is None:
        _session = SessionState()
    return _session


def reset_session(aliases: ModuleAliasTable = DEFAULT_ALIAS_TABLE) -> SessionState:
    """Replace the process-wide session state with a fresh one."""
    global _session
    _session = SessionState(aliases)
    return _session
