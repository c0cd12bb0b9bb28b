"""
Authentication Routes

POST /auth/register - Register a student account
POST /auth/login - Login and get JWT token
GET /auth/me - Get current user info with permissions
PUT /auth/password - Change own password
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.orm import selectinload

from placement_portal.core.auth import (
    Actor, create_access_token, get_current_user, get_permission_policy, hash_password,
    verify_password
)
from placement_portal.core.constants import NotificationType, UserRole, UserStatus
from placement_portal.core.exceptions import AuthenticationFailed, ValidationFailed
from placement_portal.core.permissions import PermissionPolicy
from placement_portal.db.postgres import get_db_session
from placement_portal.models import StudentProfile, User, utcnow
from placement_portal.schemas.schemas import (
    ChangePasswordRequest, LoginRequest, MeResponse, MessageResponse, RegisterRequest,
    StudentResponse, TokenResponse, UserResponse
)
from placement_portal.services.account_service import create_account
from placement_portal.services.notification_service import (
    NotificationDispatcher, get_notification_dispatcher
)

router = APIRouter(prefix="/auth", tags=["Authentication"])
logger = logging.getLogger(__name__)


def _token_for(user: User) -> TokenResponse:
    token = create_access_token(data={"sub": str(user.id), "role": user.role.value})
    return TokenResponse(access_token=token, user_id=user.id, role=user.role.value)


@router.post("/register", response_model=TokenResponse, status_code=201)
async def register(
    request: RegisterRequest,
    notifier: NotificationDispatcher = Depends(get_notification_dispatcher),
):
    """
    Register a student account.

    The user and the student profile are created in one transaction.
    Staff accounts are created by administrators through /users.
    """
    with get_db_session() as db:
        user = create_account(
            db,
            email=request.email,
            password=request.password,
            role=UserRole.student,
            first_name=request.first_name,
            last_name=request.last_name,
            phone=request.phone,
            department_id=request.department_id,
            roll_number=request.roll_number,
            degree=request.degree,
            batch_year=request.batch_year,
            current_semester=request.current_semester,
        )
        response = _token_for(user)

    logger.info("Registered student user %s", response.user_id)
    notifier.dispatch([response.user_id], NotificationType.system, {
        "title": "Welcome to Placement Cell",
        "message": "Your account is ready. Complete your profile to start applying for jobs.",
        "link": "/profile",
        "email": True,
    })
    return response


@router.post("/login", response_model=TokenResponse)
async def login(request: LoginRequest):
    """
    Login and receive JWT access token.

    Include token in requests: Authorization: Bearer <token>
    """
    with get_db_session() as db:
        user = db.scalar(select(User).where(User.email == request.email.lower()))

        if user is None or not verify_password(request.password, user.password_hash):
            logger.warning("Failed login for %s", request.email)
            raise AuthenticationFailed("Invalid email or password")

        if user.status != UserStatus.active:
            raise AuthenticationFailed("Account is inactive or suspended")

        user.last_login = utcnow()
        return _token_for(user)


@router.get("/me", response_model=MeResponse)
async def get_me(
    actor: Actor = Depends(get_current_user),
    policy: PermissionPolicy = Depends(get_permission_policy),
):
    """Get current authenticated user's info."""
    with get_db_session() as db:
        user = db.get(User, actor.user_id)
        profile = None
        if actor.student_id is not None:
            profile = db.scalar(
                select(StudentProfile)
                .options(
                    selectinload(StudentProfile.user),
                    selectinload(StudentProfile.department),
                    selectinload(StudentProfile.skills),
                    selectinload(StudentProfile.projects),
                    selectinload(StudentProfile.certifications),
                    selectinload(StudentProfile.internships),
                )
                .where(StudentProfile.id == actor.student_id)
            )
        return MeResponse(
            user=UserResponse.model_validate(user),
            student_profile=StudentResponse.model_validate(profile) if profile else None,
            permissions=policy.permissions_for(actor.role),
        )


@router.put("/password", response_model=MessageResponse)
async def change_password(request: ChangePasswordRequest, actor: Actor = Depends(get_current_user)):
    with get_db_session() as db:
        user = db.get(User, actor.user_id)
        if not verify_password(request.current_password, user.password_hash):
            raise ValidationFailed("Current password is incorrect")
        user.password_hash = hash_password(request.new_password)

    return MessageResponse(message="Password updated successfully")
