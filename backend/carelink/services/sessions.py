"""
Consultation session lifecycle.

    waiting ──activate──▶ active ──complete──▶ completed
       │                    │
       └──────cancel────────┴──────────────▶ cancelled

Each transition also moves the owning doctor request along so the two
records never disagree.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.orm import Session as DBSession

from carelink.core.exceptions import NotFoundError, PermissionDenied, ValidationError
from carelink.models import Session as ConsultationSession, User

logger = logging.getLogger(__name__)

OPEN_STATES = ("waiting", "active")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def duration_minutes(start: datetime, end: datetime) -> int:
    return round((_as_utc(end) - _as_utc(start)).total_seconds() / 60)


def _is_participant(session: ConsultationSession, user: User) -> bool:
    return user.id in (session.patient_id, session.doctor_id, session.interpreter_id)


def _load(db: DBSession, session_id: uuid.UUID) -> ConsultationSession:
    session = (
        db.query(ConsultationSession)
        .filter(ConsultationSession.id == session_id)
        .first()
    )
    if not session:
        raise NotFoundError("Session not found")
    return session


def get_session(db: DBSession, session_id: uuid.UUID, user: User) -> ConsultationSession:
    session = _load(db, session_id)
    if not _is_participant(session, user):
        raise PermissionDenied()
    return session


def activate(db: DBSession, session_id: uuid.UUID, user: User) -> ConsultationSession:
    """The assigned doctor picks up a waiting session."""
    session = _load(db, session_id)
    if session.doctor_id != user.id:
        raise PermissionDenied("Only the assigned doctor can start this session")
    if session.status != "waiting":
        raise ValidationError(f"Cannot activate a session that is {session.status}")

    session.status = "active"
    session.start_time = _utcnow()
    session.request.status = "active"
    db.commit()
    db.refresh(session)
    logger.info("Session %s active", session.id)
    return session


def complete(
    db: DBSession,
    session_id: uuid.UUID,
    user: User,
    notes: Optional[str] = None,
) -> ConsultationSession:
    """Either party ends an active session."""
    session = _load(db, session_id)
    if user.id not in (session.patient_id, session.doctor_id):
        raise PermissionDenied()
    if session.status != "active":
        raise ValidationError(f"Cannot complete a session that is {session.status}")

    now = _utcnow()
    session.status = "completed"
    session.end_time = now
    session.duration = duration_minutes(session.start_time, now)
    if notes:
        session.notes = notes.strip()

    request = session.request
    request.status = "completed"
    request.completed_date = now
    if notes:
        request.session_notes = notes.strip()

    db.commit()
    db.refresh(session)
    logger.info("Session %s completed after %s min", session.id, session.duration)
    return session


def cancel(db: DBSession, session_id: uuid.UUID, user: User) -> ConsultationSession:
    session = _load(db, session_id)
    if user.id not in (session.patient_id, session.doctor_id):
        raise PermissionDenied()
    if session.status not in OPEN_STATES:
        raise ValidationError(f"Cannot cancel a session that is {session.status}")

    session.status = "cancelled"
    session.end_time = _utcnow()
    session.request.status = "cancelled"
    db.commit()
    db.refresh(session)
    logger.info("Session %s cancelled by %s", session.id, user.id)
    return session


def attach_interpreter(
    db: DBSession,
    session_id: uuid.UUID,
    user: User,
    interpreter_id: uuid.UUID,
) -> ConsultationSession:
    session = _load(db, session_id)
    if user.id not in (session.patient_id, session.doctor_id):
        raise PermissionDenied()
    if session.status not in OPEN_STATES:
        raise ValidationError(f"Cannot add an interpreter to a session that is {session.status}")

    interpreter = db.query(User).filter(User.id == interpreter_id).first()
    if not interpreter:
        raise NotFoundError("Interpreter not found")
    if interpreter.role != "interpreter":
        raise ValidationError("User is not an interpreter")

    session.interpreter_id = interpreter.id
    db.commit()
    db.refresh(session)
    return session
