"""
Medical document routes — multipart upload and per-patient listing.
"""

import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.orm import Session as DBSession

from carelink.core.config import settings
from carelink.core.database import get_db
from carelink.core.exceptions import ValidationError
from carelink.schemas import DocumentList, DocumentOut, DocumentResponse
from carelink.services.documents import ensure_size, list_documents, save_document
from carelink.services.storage import LocalFileStorage, get_storage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["documents"])


@router.post("/upload-document", response_model=DocumentResponse)
async def upload_document(
    patient_id: UUID = Form(..., alias="patientId"),
    description: Optional[str] = Form(None),
    document: Optional[UploadFile] = File(None),
    db: DBSession = Depends(get_db),
    storage: LocalFileStorage = Depends(get_storage),
):
    if document is None or not document.filename:
        raise ValidationError("No file uploaded")

    # never buffer more than one byte past the limit
    data = await document.read(settings.MAX_UPLOAD_BYTES + 1)
    ensure_size(len(data))
    saved = save_document(
        db,
        storage,
        patient_id=patient_id,
        original_name=document.filename,
        content_type=document.content_type,
        data=data,
        description=description,
    )
    logger.info("Document %s uploaded for patient %s", saved.id, patient_id)
    return DocumentResponse(
        message="Document uploaded successfully",
        document=DocumentOut.model_validate(saved),
    )


@router.get("/documents/{patient_id}", response_model=DocumentList)
def documents(patient_id: UUID, db: DBSession = Depends(get_db)):
    return DocumentList(
        documents=[DocumentOut.model_validate(d) for d in list_documents(db, patient_id)]
    )
