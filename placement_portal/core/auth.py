"""
Authentication Utility - JWT, password handling and route guards.

Provides:
- Password hashing with bcrypt
- JWT token creation/verification
- FastAPI dependencies that resolve the acting user (`Actor`) and check the
  permission policy before a handler touches the store
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy import select
from sqlalchemy.orm import selectinload

from placement_portal.core.config import get_settings
from placement_portal.core.constants import DEPARTMENT_ROLES, PlacementStatus, UserRole, UserStatus
from placement_portal.core.exceptions import AuthenticationFailed, Forbidden, NotFound
from placement_portal.core.permissions import PermissionPolicy
from placement_portal.db.postgres import get_db_session
from placement_portal.models import User

settings = get_settings()
logger = logging.getLogger(__name__)

# Password hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# Bearer token extractor; missing headers are reported by get_current_user
bearer_scheme = HTTPBearer(auto_error=False)


def hash_password(password: str) -> str:
    """Hash password with bcrypt."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify password against hash."""
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create JWT access token."""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=settings.jwt_expire_minutes))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> Optional[dict]:
    """Decode and verify JWT token."""
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None


@dataclass(frozen=True)
class StudentSnapshot:
    """Eligibility-relevant view of the acting student's profile."""
    id: int
    department_id: Optional[int]
    batch_year: int
    degree: str
    cgpa: Optional[float]
    active_backlogs: int
    resume_url: Optional[str] = None
    placement_status: PlacementStatus = PlacementStatus.active


@dataclass(frozen=True)
class Actor:
    """The authenticated user a request acts as."""
    user_id: int
    email: str
    role: UserRole
    department_id: Optional[int] = None
    student: Optional[StudentSnapshot] = None

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.admin

    @property
    def is_student(self) -> bool:
        return self.role == UserRole.student

    @property
    def is_department_staff(self) -> bool:
        return self.role in DEPARTMENT_ROLES

    @property
    def student_id(self) -> Optional[int]:
        return self.student.id if self.student else None


def actor_from_user(user: User) -> Actor:
    profile = user.student_profile
    snapshot = None
    if profile is not None:
        snapshot = StudentSnapshot(
            id=profile.id,
            department_id=profile.department_id,
            batch_year=profile.batch_year,
            degree=profile.degree,
            cgpa=profile.cgpa,
            active_backlogs=profile.active_backlogs or 0,
            resume_url=profile.resume_url,
            placement_status=PlacementStatus(profile.placement_status),
        )
    return Actor(
        user_id=user.id,
        email=user.email,
        role=UserRole(user.role),
        department_id=user.department_id,
        student=snapshot,
    )


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Actor:
    """
    FastAPI dependency - Get current authenticated user.

    Usage:
        @router.get("/protected")
        async def route(actor: Actor = Depends(get_current_user)):
            return actor
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationFailed("Not authorized to access this route")

    payload = decode_token(credentials.credentials)
    if not payload:
        raise AuthenticationFailed("Invalid or expired token")

    user_id = payload.get("sub")
    if not user_id or not str(user_id).isdigit():
        raise AuthenticationFailed("Invalid or expired token")

    with get_db_session() as db:
        user = db.scalar(
            select(User)
            .options(selectinload(User.student_profile))
            .where(User.id == int(user_id))
        )
        if user is None:
            raise AuthenticationFailed("User not found")
        if user.status != UserStatus.active:
            raise AuthenticationFailed("Account is inactive or suspended")
        return actor_from_user(user)


async def get_current_student(actor: Actor = Depends(get_current_user)) -> Actor:
    """Dependency - Require student role with a profile."""
    if not actor.is_student:
        raise Forbidden("Students only")
    if actor.student is None:
        raise NotFound("Student profile not found")
    return actor


def get_permission_policy(request: Request) -> PermissionPolicy:
    return request.app.state.permission_policy


@dataclass(frozen=True)
class Access:
    """An actor together with the scope the policy granted for one action."""
    actor: Actor
    scope: str


def require_permission(resource: str, action: str):
    """
    Dependency factory - reject the request unless the actor's role may
    perform `action` on `resource` under some scope.

    Usage:
        @router.get("")
        async def route(access: Access = Depends(require_permission("jobs", "read"))):
            ...
    """
    async def dependency(
        actor: Actor = Depends(get_current_user),
        policy: PermissionPolicy = Depends(get_permission_policy),
    ) -> Access:
        scope = policy.resolve_scope(actor.role, resource, action)
        if scope is None:
            raise Forbidden(f"You don't have permission to {action} {resource}")
        return Access(actor=actor, scope=scope)

    return dependency
