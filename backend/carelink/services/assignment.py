"""
Doctor auto-assignment.

Online doctors are preferred; when none are online any registered doctor is
eligible.  The pick is uniform among the eligible doctors at the instant of
selection, and nothing stops two requests from landing on the same doctor.

The request itself is moved out of ``pending`` with a single conditional
UPDATE, so a request can only ever be assigned once.
"""

import logging
import random
from datetime import datetime, timezone
from typing import Sequence

from sqlalchemy import update
from sqlalchemy.orm import Session as DBSession

from carelink.core.exceptions import AssignmentConflict, NoDoctorsAvailable
from carelink.models import DoctorRequest, Session as ConsultationSession, User

logger = logging.getLogger(__name__)


def eligible_doctors(db: DBSession) -> list[User]:
    """Online doctors if there are any, otherwise every doctor."""
    online = (
        db.query(User)
        .filter(User.role == "doctor", User.is_online.is_(True))
        .all()
    )
    if online:
        return online
    return db.query(User).filter(User.role == "doctor").all()


def select_doctor(candidates: Sequence[User], rng=random) -> User:
    """Pick one doctor uniformly at random."""
    if not candidates:
        raise NoDoctorsAvailable()
    return rng.choice(list(candidates))


def assign_doctor(
    db: DBSession,
    request: DoctorRequest,
    rng=random,
) -> tuple[User, ConsultationSession]:
    """Assign a doctor to a pending *request* and open a waiting session.

    Commits on success.  Raises :class:`NoDoctorsAvailable` when no doctor is
    registered and :class:`AssignmentConflict` when the request has already
    left ``pending``; in both cases nothing is written.
    """
    doctor = select_doctor(eligible_doctors(db), rng=rng)

    result = db.execute(
        update(DoctorRequest)
        .where(
            DoctorRequest.id == request.id,
            DoctorRequest.status == "pending",
        )
        .values(
            doctor_id=doctor.id,
            status="assigned",
            assigned_date=datetime.now(timezone.utc),
        )
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        db.rollback()
        raise AssignmentConflict()

    session = ConsultationSession(
        patient_id=request.patient_id,
        doctor_id=doctor.id,
        request_id=request.id,
        status="waiting",
    )
    db.add(session)
    db.commit()
    db.refresh(request)
    db.refresh(session)

    logger.info(
        "Request %s assigned to doctor %s (online=%s)",
        request.id, doctor.id, doctor.is_online,
    )
    return doctor, session
