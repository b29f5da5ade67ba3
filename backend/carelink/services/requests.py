"""
Doctor request intake and queue queries.
"""

import logging
import random
import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session as DBSession, joinedload

from carelink.core.exceptions import (
    DependencyError,
    NotFoundError,
    PermissionDenied,
    ValidationError,
)
from carelink.models import DoctorRequest, Session as ConsultationSession, User
from carelink.services.assignment import assign_doctor

logger = logging.getLogger(__name__)


def create_request(
    db: DBSession,
    patient_id: uuid.UUID,
    request_type: str = "normal",
    description: Optional[str] = None,
    rng=random,
) -> tuple[DoctorRequest, Optional[User]]:
    """Queue a help request and try to assign a doctor to it straight away.

    Returns the request and the assigned doctor, or ``None`` when the request
    stays ``pending`` because assignment could not be completed.
    """
    patient = db.query(User).filter(User.id == patient_id).first()
    if not patient:
        raise NotFoundError("Patient not found")

    request = DoctorRequest(
        patient_id=patient.id,
        request_type=request_type,
        description=description.strip() if description else description,
        status="pending",
    )
    db.add(request)
    db.commit()
    db.refresh(request)

    try:
        doctor, _ = assign_doctor(db, request, rng=rng)
    except DependencyError as exc:
        logger.warning("Request %s queued: %s", request.id, exc.message)
        return request, None
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Assignment failed for request %s; left pending", request.id)
        db.refresh(request)
        return request, None
    return request, doctor


def list_doctor_requests(db: DBSession, doctor_id: uuid.UUID) -> list[DoctorRequest]:
    """Open queue plus the requests this doctor is handling, newest first."""
    doctor = db.query(User).filter(User.id == doctor_id).first()
    if not doctor:
        raise NotFoundError("Doctor not found")

    return (
        db.query(DoctorRequest)
        .options(joinedload(DoctorRequest.patient))
        .filter(
            or_(
                DoctorRequest.status == "pending",
                (DoctorRequest.doctor_id == doctor_id)
                & (DoctorRequest.status.in_(["assigned", "active"])),
            )
        )
        .order_by(DoctorRequest.request_date.desc())
        .all()
    )


def cancel_request(db: DBSession, request_id: uuid.UUID, user: User) -> DoctorRequest:
    """Withdraw a request that no doctor has started on yet.

    Only the requesting patient or the assigned doctor may cancel.
    """
    request = db.query(DoctorRequest).filter(DoctorRequest.id == request_id).first()
    if not request:
        raise NotFoundError("Request not found")
    if user.id not in (request.patient_id, request.doctor_id):
        raise PermissionDenied("Not a participant of this request")
    if request.status not in ("pending", "assigned"):
        raise ValidationError(f"Cannot cancel a request that is {request.status}")

    session = (
        db.query(ConsultationSession)
        .filter(ConsultationSession.request_id == request.id)
        .first()
    )
    if session and session.status == "waiting":
        session.status = "cancelled"
        session.end_time = datetime.now(timezone.utc)
    request.status = "cancelled"
    db.commit()
    db.refresh(request)
    logger.info("Request %s cancelled", request.id)
    return request
