"""
Doctor request routes — intake, the doctor's queue, and cancellation.
"""

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session as DBSession

from carelink.core.database import get_db
from carelink.core.security import get_current_user
from carelink.models import User
from carelink.schemas import (
    AssignedDoctor,
    DoctorRequestList,
    DoctorRequestOut,
    DoctorRequestResponse,
    RequestDoctorRequest,
    RequestDoctorResponse,
    RequestSummary,
)
from carelink.services.requests import cancel_request, create_request, list_doctor_requests

router = APIRouter(prefix="/api", tags=["requests"])


@router.post("/request-doctor", response_model=RequestDoctorResponse)
def request_doctor(body: RequestDoctorRequest, db: DBSession = Depends(get_db)):
    request, doctor = create_request(
        db,
        patient_id=body.patient_id,
        request_type=body.request_type,
        description=body.description,
    )

    if doctor is None:
        return RequestDoctorResponse(
            message="Doctor request submitted and queued",
            request=RequestSummary(id=request.id, status=request.status),
        )

    return RequestDoctorResponse(
        message="Doctor request submitted and assigned successfully",
        request=RequestSummary(
            id=request.id,
            status=request.status,
            assigned_doctor=AssignedDoctor(
                id=doctor.id,
                name=doctor.full_name,
                specialization=(doctor.professional or {}).get("specialization"),
            ),
        ),
    )


@router.get("/doctor-requests/{doctor_id}", response_model=DoctorRequestList)
def doctor_requests(doctor_id: UUID, db: DBSession = Depends(get_db)):
    requests = list_doctor_requests(db, doctor_id)
    return DoctorRequestList(requests=[DoctorRequestOut.model_validate(r) for r in requests])


@router.post("/doctor-requests/{request_id}/cancel", response_model=DoctorRequestResponse)
def cancel_doctor_request(
    request_id: UUID,
    db: DBSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    request = cancel_request(db, request_id, current_user)
    return DoctorRequestResponse(
        message="Doctor request cancelled",
        request=DoctorRequestOut.model_validate(request),
    )
