"""
SQLAlchemy ORM models for CareLink.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    Column,
    String,
    Text,
    Integer,
    DateTime,
    ForeignKey,
    JSON,
    Uuid,
    Enum as SAEnum,
)
from sqlalchemy.orm import relationship

from carelink.core.database import Base


USER_ROLES = ("patient", "doctor", "nurse", "interpreter")
REQUEST_TYPES = ("normal", "urgent", "emergency")
REQUEST_STATUSES = ("pending", "assigned", "active", "completed", "cancelled")
SESSION_STATUSES = ("waiting", "active", "completed", "cancelled")


# ── helpers ────────────────────────────────────────────────────────────
def _uuid():
    return uuid.uuid4()


def _utcnow():
    return datetime.now(timezone.utc)


# ── Users ──────────────────────────────────────────────────────────────
class User(Base):
    __tablename__ = "users"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=_uuid)
    full_name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(Text, nullable=False)
    role = Column(
        SAEnum(*USER_ROLES, name="user_role"),
        nullable=False,
        default="patient",
    )
    phone = Column(String(50), nullable=True)
    is_online = Column(Boolean, nullable=False, default=False)
    last_seen = Column(DateTime(timezone=True), default=_utcnow)
    emergency_contact = Column(JSON, nullable=True)
    professional = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow)

    # relationships
    patient_requests = relationship(
        "DoctorRequest", foreign_keys="DoctorRequest.patient_id", back_populates="patient"
    )
    documents = relationship("MedicalDocument", back_populates="patient")


# ── Doctor requests (the assignment queue) ────────────────────────────
class DoctorRequest(Base):
    __tablename__ = "doctor_requests"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=_uuid)
    patient_id = Column(
        Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True
    )
    doctor_id = Column(
        Uuid(as_uuid=True), ForeignKey("users.id"), nullable=True, index=True
    )
    request_type = Column(
        SAEnum(*REQUEST_TYPES, name="request_type"),
        nullable=False,
        default="normal",
    )
    status = Column(
        SAEnum(*REQUEST_STATUSES, name="request_status"),
        nullable=False,
        default="pending",
    )
    description = Column(Text, nullable=True)
    request_date = Column(DateTime(timezone=True), default=_utcnow)
    assigned_date = Column(DateTime(timezone=True), nullable=True)
    completed_date = Column(DateTime(timezone=True), nullable=True)
    session_notes = Column(Text, nullable=True)

    # relationships
    patient = relationship("User", foreign_keys=[patient_id], back_populates="patient_requests")
    doctor = relationship("User", foreign_keys=[doctor_id])
    session = relationship("Session", back_populates="request", uselist=False)


# ── Sessions (one per assigned request) ───────────────────────────────
class Session(Base):
    __tablename__ = "sessions"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=_uuid)
    patient_id = Column(
        Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False
    )
    doctor_id = Column(
        Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False
    )
    interpreter_id = Column(
        Uuid(as_uuid=True), ForeignKey("users.id"), nullable=True
    )
    request_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("doctor_requests.id"),
        nullable=False,
        unique=True,
    )
    status = Column(
        SAEnum(*SESSION_STATUSES, name="session_status"),
        nullable=False,
        default="waiting",
    )
    start_time = Column(DateTime(timezone=True), default=_utcnow)
    end_time = Column(DateTime(timezone=True), nullable=True)
    duration = Column(Integer, nullable=True)  # minutes
    notes = Column(Text, nullable=True)

    # relationships
    request = relationship("DoctorRequest", back_populates="session")
    patient = relationship("User", foreign_keys=[patient_id])
    doctor = relationship("User", foreign_keys=[doctor_id])
    interpreter = relationship("User", foreign_keys=[interpreter_id])


# ── Medical documents ─────────────────────────────────────────────────
class MedicalDocument(Base):
    __tablename__ = "medical_documents"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=_uuid)
    patient_id = Column(
        Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True
    )
    file_name = Column(String(512), nullable=False)
    original_name = Column(String(512), nullable=False)
    file_path = Column(Text, nullable=False)
    file_type = Column(String(255), nullable=False)
    file_size = Column(Integer, nullable=False)
    upload_date = Column(DateTime(timezone=True), default=_utcnow)
    description = Column(Text, nullable=True)

    patient = relationship("User", back_populates="documents")
