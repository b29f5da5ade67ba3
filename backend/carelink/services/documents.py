"""
Medical document upload and listing.
"""

import logging
import uuid
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session as DBSession

from carelink.core.config import settings
from carelink.core.exceptions import NotFoundError, ValidationError
from carelink.models import MedicalDocument, User
from carelink.services.storage import LocalFileStorage

logger = logging.getLogger(__name__)

ALLOWED_TYPES = {
    "image/jpeg",
    "image/png",
    "image/gif",
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
}


def ensure_size(length: int) -> None:
    if length > settings.MAX_UPLOAD_BYTES:
        raise ValidationError(
            f"File too large. Maximum size is {settings.MAX_UPLOAD_BYTES // (1024 * 1024)}MB."
        )


def save_document(
    db: DBSession,
    storage: LocalFileStorage,
    patient_id: uuid.UUID,
    original_name: str,
    content_type: Optional[str],
    data: bytes,
    description: Optional[str] = None,
) -> MedicalDocument:
    patient = db.query(User).filter(User.id == patient_id).first()
    if not patient:
        raise NotFoundError("Patient not found")
    if content_type not in ALLOWED_TYPES:
        raise ValidationError(
            "Invalid file type. Only JPEG, PNG, GIF, PDF, and Word documents are allowed."
        )
    ensure_size(len(data))

    stored_name, path = storage.store(data, original_name)
    document = MedicalDocument(
        patient_id=patient.id,
        file_name=stored_name,
        original_name=original_name,
        file_path=path,
        file_type=content_type,
        file_size=len(data),
        description=description.strip() if description else description,
    )
    db.add(document)
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        storage.remove(path)
        raise
    db.refresh(document)
    return document


def list_documents(db: DBSession, patient_id: uuid.UUID) -> list[MedicalDocument]:
    return (
        db.query(MedicalDocument)
        .filter(MedicalDocument.patient_id == patient_id)
        .order_by(MedicalDocument.upload_date.desc())
        .all()
    )
