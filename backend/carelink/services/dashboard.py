"""
Role-specific dashboard counters.
"""

from datetime import datetime, timezone

from sqlalchemy import or_
from sqlalchemy.orm import Session as DBSession

from carelink.models import DoctorRequest, Session as ConsultationSession, User

OPEN_REQUEST_STATES = ("pending", "assigned")


def _start_of_today() -> datetime:
    return datetime.now(timezone.utc).replace(hour=0, minute=0, second=0, microsecond=0)


def patient_dashboard(db: DBSession, user: User) -> dict:
    return {
        "onlineDoctors": db.query(User)
        .filter(User.role == "doctor", User.is_online.is_(True))
        .count(),
        "myRequests": db.query(DoctorRequest)
        .filter(
            DoctorRequest.patient_id == user.id,
            DoctorRequest.status.in_(OPEN_REQUEST_STATES),
        )
        .count(),
        "activeSessions": db.query(ConsultationSession)
        .filter(
            ConsultationSession.patient_id == user.id,
            ConsultationSession.status == "active",
        )
        .count(),
        "connectionStatus": "Ready",
        "emergencyStatus": "Normal",
    }


def doctor_dashboard(db: DBSession, user: User) -> dict:
    return {
        "pendingRequests": db.query(DoctorRequest)
        .filter(
            or_(
                DoctorRequest.status == "pending",
                (DoctorRequest.doctor_id == user.id) & (DoctorRequest.status == "assigned"),
            )
        )
        .count(),
        "emergencyAlerts": db.query(DoctorRequest)
        .filter(
            DoctorRequest.request_type == "emergency",
            DoctorRequest.status.in_(OPEN_REQUEST_STATES),
        )
        .count(),
        "activeSessions": db.query(ConsultationSession)
        .filter(
            ConsultationSession.doctor_id == user.id,
            ConsultationSession.status == "active",
        )
        .count(),
        "patientsHelpedToday": db.query(ConsultationSession)
        .filter(
            ConsultationSession.doctor_id == user.id,
            ConsultationSession.status == "completed",
            ConsultationSession.start_time >= _start_of_today(),
        )
        .count(),
        "professional": user.professional,
    }


def interpreter_dashboard(db: DBSession, user: User) -> dict:
    return {
        "activeSessions": db.query(ConsultationSession)
        .filter(
            ConsultationSession.interpreter_id == user.id,
            ConsultationSession.status == "active",
        )
        .count(),
    }


_BUILDERS = {
    "patient": patient_dashboard,
    "doctor": doctor_dashboard,
    "interpreter": interpreter_dashboard,
}


def build_dashboard(db: DBSession, user: User) -> dict:
    builder = _BUILDERS.get(user.role)
    return builder(db, user) if builder else {}
