"""Session lifecycle API endpoints.

The host application pushes the authenticated user and the catalog loaded
for them; storegate never fetches it itself.
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from storegate.api.deps import get_session_state
from storegate.api.schemas.session import (
    DegradedInfo,
    SessionPayload,
    SessionPublished,
    SessionStatus,
)
from storegate.core.rbac.catalog import PermissionCatalog
from storegate.core.rbac.session import SessionState

router = APIRouter(prefix="/session", tags=["session"])


def build_status(session: SessionState) -> SessionStatus:
    user = session.user
    index = session.snapshot
    degraded = session.degraded
    return SessionStatus(
        phase=session.phase.value,
        is_loaded=session.is_loaded,
        user_id=user.id if user else None,
        role_id=user.role_id if user else None,
        generation=index.generation,
        permission_count=len(index.permissions),
        degraded=DegradedInfo(user_id=degraded.user_id, role_id=degraded.role_id) if degraded else None,
    )


def _published(session: SessionState, published: bool, catalog: PermissionCatalog) -> SessionPublished:
    malformed: List[str] = sorted(catalog.malformed)
    return SessionPublished(published=published, status=build_status(session), malformed=malformed)


@router.get("/status", response_model=SessionStatus)
async def get_status(session: SessionState = Depends(get_session_state)):
    """Current lifecycle phase, loaded flag and degraded-state flag."""
    return build_status(session)


@router.post("/load", response_model=SessionStatus, status_code=status.HTTP_202_ACCEPTED)
async def begin_load(session: SessionState = Depends(get_session_state)):
    """Mark a catalog load as outstanding; guarded pages answer with a placeholder."""
    session.begin_load()
    return build_status(session)


@router.post("", response_model=SessionPublished)
async def authenticate(
    payload: SessionPayload,
    session: SessionState = Depends(get_session_state),
):
    """Publish the authenticated user and their catalog."""
    catalog = payload.to_catalog()
    published = session.authenticate(payload.to_user(), catalog)
    return _published(session, published, catalog)


@router.put("/role", response_model=SessionPublished)
async def reassign_role(
    payload: SessionPayload,
    session: SessionState = Depends(get_session_state),
):
    """Replace the session with the user's new role assignment."""
    if session.user is None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="No authenticated session")
    catalog = payload.to_catalog()
    published = session.reassign_role(payload.to_user(), catalog)
    return _published(session, published, catalog)


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
async def logout(session: SessionState = Depends(get_session_state)):
    """Tear the session down to the anonymous state."""
    session.logout()
    return None


@router.post("/degraded/ack", response_model=SessionStatus)
async def acknowledge_degraded(session: SessionState = Depends(get_session_state)):
    """Consume the one-shot degraded-state flag."""
    session.consume_degraded()
    return build_status(session)
