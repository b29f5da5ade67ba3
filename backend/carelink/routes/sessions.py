"""
Consultation session routes — the doctor starts a session, either party ends it.
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session as DBSession

from carelink.core.database import get_db
from carelink.core.security import get_current_user
from carelink.models import User
from carelink.schemas import (
    SessionCompleteRequest,
    SessionInterpreterRequest,
    SessionOut,
    SessionResponse,
)
from carelink.services import sessions as lifecycle

router = APIRouter(prefix="/api/sessions", tags=["sessions"])


def _respond(session) -> SessionResponse:
    return SessionResponse(session=SessionOut.model_validate(session))


@router.get("/{session_id}", response_model=SessionResponse)
def get_session(
    session_id: UUID,
    db: DBSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return _respond(lifecycle.get_session(db, session_id, current_user))


@router.post("/{session_id}/activate", response_model=SessionResponse)
def activate_session(
    session_id: UUID,
    db: DBSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return _respond(lifecycle.activate(db, session_id, current_user))


@router.post("/{session_id}/complete", response_model=SessionResponse)
def complete_session(
    session_id: UUID,
    body: Optional[SessionCompleteRequest] = None,
    db: DBSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    notes = body.notes if body else None
    return _respond(lifecycle.complete(db, session_id, current_user, notes=notes))


@router.post("/{session_id}/cancel", response_model=SessionResponse)
def cancel_session(
    session_id: UUID,
    db: DBSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return _respond(lifecycle.cancel(db, session_id, current_user))


@router.post("/{session_id}/interpreter", response_model=SessionResponse)
def add_interpreter(
    session_id: UUID,
    body: SessionInterpreterRequest,
    db: DBSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return _respond(
        lifecycle.attach_interpreter(db, session_id, current_user, body.interpreter_id)
    )
