"""
Dashboard route — role-specific counters for the landing pages.
"""

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session as DBSession

from carelink.core.database import get_db
from carelink.core.exceptions import NotFoundError
from carelink.models import User
from carelink.schemas import DashboardResponse, DashboardUser
from carelink.services.dashboard import build_dashboard

router = APIRouter(prefix="/api", tags=["dashboard"])


@router.get("/dashboard/{user_id}", response_model=DashboardResponse)
def dashboard(user_id: UUID, db: DBSession = Depends(get_db)):
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise NotFoundError("User not found")

    return DashboardResponse(
        data=build_dashboard(db, user),
        user=DashboardUser(
            id=user.id,
            name=user.full_name,
            role=user.role,
            professional=user.professional,
        ),
    )
