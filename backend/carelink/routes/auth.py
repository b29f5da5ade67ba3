"""
Account routes — register, e-mail check, log-in and log-out.
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session as DBSession

from carelink.core.database import get_db
from carelink.core.exceptions import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from carelink.core.security import (
    clear_auth_cookie,
    create_access_token,
    hash_password,
    set_auth_cookie,
    verify_password,
)
from carelink.models import User
from carelink.schemas import (
    CheckEmailRequest,
    LoginRequest,
    LogoutRequest,
    MessageResponse,
    RegisterRequest,
    UserOut,
    UserResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["auth"])


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def register(body: RegisterRequest, db: DBSession = Depends(get_db)):
    existing = db.query(User).filter(User.email == body.email).first()
    if existing:
        raise ValidationError("User with this email already exists")

    user = User(
        full_name=body.full_name,
        email=body.email,
        password_hash=hash_password(body.password),
        role=body.role,
        phone=body.phone,
    )
    # role-specific profile: contacts for patients, credentials for clinicians
    if body.role == "patient" and body.emergency_contact:
        user.emergency_contact = body.emergency_contact.model_dump(by_alias=True)
    elif body.role in ("doctor", "nurse") and body.professional:
        user.professional = body.professional.model_dump(by_alias=True)

    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # lost a race with a concurrent registration for the same e-mail
        db.rollback()
        raise ValidationError("User with this email already exists")
    db.refresh(user)
    logger.info("Registered %s %s", user.role, user.id)

    return UserResponse(
        message="User registered successfully",
        user=UserOut.model_validate(user),
    )


@router.post("/check-email", response_model=MessageResponse)
def check_email(body: CheckEmailRequest, db: DBSession = Depends(get_db)):
    if db.query(User).filter(User.email == body.email).first():
        raise ConflictError("Email already exists")
    return MessageResponse(message="Email available")


@router.post("/login", response_model=UserResponse)
def login(body: LoginRequest, response: Response, db: DBSession = Depends(get_db)):
    user = db.query(User).filter(User.email == body.email).first()
    if not user or not verify_password(body.password, user.password_hash):
        raise AuthenticationError("Invalid email or password")

    user.is_online = True
    user.last_seen = datetime.now(timezone.utc)
    db.commit()
    db.refresh(user)

    set_auth_cookie(response, create_access_token(user.id, user.role))
    return UserResponse(message="Login successful", user=UserOut.model_validate(user))


@router.post("/logout", response_model=MessageResponse)
def logout(body: LogoutRequest, response: Response, db: DBSession = Depends(get_db)):
    user = db.query(User).filter(User.id == body.user_id).first()
    if not user:
        raise NotFoundError("User not found")

    user.is_online = False
    user.last_seen = datetime.now(timezone.utc)
    db.commit()

    clear_auth_cookie(response)
    return MessageResponse(message="Logged out successfully")
