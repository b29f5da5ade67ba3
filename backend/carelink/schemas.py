"""
Pydantic schemas for request / response validation.

The public API speaks camelCase JSON; field names stay snake_case in Python.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, List, Optional, Literal

from pydantic import BaseModel, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


# ═══════════════════════════════════════════════════════════════════════
#  Accounts
# ═══════════════════════════════════════════════════════════════════════
class EmergencyContact(CamelModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    relationship: Optional[str] = None


class ProfessionalInfo(CamelModel):
    license_number: Optional[str] = None
    specialization: Optional[str] = None
    hospital: Optional[str] = None


def _normalize_email(value: Any) -> Any:
    if isinstance(value, str):
        return value.strip().lower()
    return value


class RegisterRequest(CamelModel):
    full_name: str = Field(min_length=1)
    email: EmailStr
    password: str = Field(min_length=6)
    role: Literal["patient", "doctor", "nurse", "interpreter"]
    phone: Optional[str] = None
    emergency_contact: Optional[EmergencyContact] = None
    professional: Optional[ProfessionalInfo] = None

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, value: Any) -> Any:
        return _normalize_email(value)

    @field_validator("full_name", "phone")
    @classmethod
    def strip_text(cls, value: Optional[str]) -> Optional[str]:
        return value.strip() if value is not None else value


class CheckEmailRequest(CamelModel):
    email: EmailStr

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, value: Any) -> Any:
        return _normalize_email(value)


class LoginRequest(CamelModel):
    email: EmailStr
    password: str

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, value: Any) -> Any:
        return _normalize_email(value)


class LogoutRequest(CamelModel):
    user_id: uuid.UUID


class UserOut(CamelModel):
    id: uuid.UUID
    full_name: str
    email: str
    role: str
    phone: Optional[str] = None
    is_online: bool = False
    last_seen: Optional[datetime] = None


class UserResponse(CamelModel):
    success: bool = True
    message: str
    user: UserOut


class MessageResponse(CamelModel):
    success: bool = True
    message: str


# ═══════════════════════════════════════════════════════════════════════
#  Dashboard
# ═══════════════════════════════════════════════════════════════════════
class DashboardUser(CamelModel):
    id: uuid.UUID
    name: str
    role: str
    professional: Optional[ProfessionalInfo] = None


class DashboardResponse(CamelModel):
    success: bool = True
    data: dict[str, Any]
    user: DashboardUser


# ═══════════════════════════════════════════════════════════════════════
#  Doctor requests
# ═══════════════════════════════════════════════════════════════════════
class RequestDoctorRequest(CamelModel):
    patient_id: uuid.UUID
    request_type: Literal["normal", "urgent", "emergency"] = "normal"
    description: Optional[str] = None


class AssignedDoctor(CamelModel):
    id: uuid.UUID
    name: str
    specialization: Optional[str] = None


class RequestSummary(CamelModel):
    id: uuid.UUID
    status: str
    assigned_doctor: Optional[AssignedDoctor] = None


class RequestDoctorResponse(CamelModel):
    success: bool = True
    message: str
    request: RequestSummary


class PatientSummary(CamelModel):
    id: uuid.UUID
    full_name: str
    email: str
    phone: Optional[str] = None
    emergency_contact: Optional[EmergencyContact] = None


class DoctorRequestOut(CamelModel):
    id: uuid.UUID
    patient_id: uuid.UUID
    doctor_id: Optional[uuid.UUID] = None
    request_type: str
    status: str
    description: Optional[str] = None
    request_date: datetime
    assigned_date: Optional[datetime] = None
    completed_date: Optional[datetime] = None
    session_notes: Optional[str] = None
    patient: Optional[PatientSummary] = None


class DoctorRequestList(CamelModel):
    success: bool = True
    requests: List[DoctorRequestOut]


class DoctorRequestResponse(CamelModel):
    success: bool = True
    message: str
    request: DoctorRequestOut


# ═══════════════════════════════════════════════════════════════════════
#  Sessions
# ═══════════════════════════════════════════════════════════════════════
class SessionOut(CamelModel):
    id: uuid.UUID
    patient_id: uuid.UUID
    doctor_id: uuid.UUID
    interpreter_id: Optional[uuid.UUID] = None
    request_id: uuid.UUID
    status: str
    start_time: datetime
    end_time: Optional[datetime] = None
    duration: Optional[int] = None
    notes: Optional[str] = None


class SessionResponse(CamelModel):
    success: bool = True
    session: SessionOut


class SessionCompleteRequest(CamelModel):
    notes: Optional[str] = None


class SessionInterpreterRequest(CamelModel):
    interpreter_id: uuid.UUID


# ═══════════════════════════════════════════════════════════════════════
#  Documents
# ═══════════════════════════════════════════════════════════════════════
class DocumentOut(CamelModel):
    id: uuid.UUID
    patient_id: uuid.UUID
    file_name: str
    original_name: str
    file_type: str
    file_size: int
    upload_date: datetime
    description: Optional[str] = None


class DocumentResponse(CamelModel):
    success: bool = True
    message: str
    document: DocumentOut


class DocumentList(CamelModel):
    success: bool = True
    documents: List[DocumentOut]
