"""
User Routes

GET /users - List accounts (admin: all, department officer: own department)
POST /users - Create an account
GET /users/{user_id} - Get one account
PATCH /users/{user_id}/status - Activate, deactivate or suspend an account
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import or_, select

from placement_portal.core.auth import Access, require_permission
from placement_portal.core.constants import UserRole, UserStatus
from placement_portal.core.exceptions import Forbidden, ValidationFailed
from placement_portal.core.permissions import SCOPE_DEPT
from placement_portal.core.visibility import get_visible, paginate, user_scope
from placement_portal.db.postgres import get_db_session
from placement_portal.models import User
from placement_portal.schemas.schemas import (
    PageMeta, UserCreate, UserListResponse, UserResponse, UserStatusUpdate
)
from placement_portal.services.account_service import create_account
from placement_portal.utils.pagination import PageParams, pagination_params

router = APIRouter(prefix="/users", tags=["Users"])
logger = logging.getLogger(__name__)

# Roles a department officer may create, always inside their own department
DEPT_CREATABLE_ROLES = (UserRole.coordinator, UserRole.student)


@router.get("", response_model=UserListResponse)
async def list_users(
    role: Optional[UserRole] = Query(None),
    status: Optional[UserStatus] = Query(None),
    department_id: Optional[int] = Query(None),
    search: Optional[str] = Query(None, description="Search in name and email"),
    paging: PageParams = Depends(pagination_params),
    access: Access = Depends(require_permission("users", "read")),
):
    filters = []
    if role:
        filters.append(User.role == role)
    if status:
        filters.append(User.status == status)
    if department_id is not None:
        filters.append(User.department_id == department_id)
    if search:
        pattern = f"%{search}%"
        filters.append(or_(
            User.email.ilike(pattern), User.first_name.ilike(pattern), User.last_name.ilike(pattern)
        ))

    scope = user_scope(access.actor).narrowed(filters)
    with get_db_session() as db:
        rows, total = paginate(
            db, select(User), scope, paging.page, paging.page_size,
            order_by=(User.created_at.desc(), User.id.desc()),
        )
        return UserListResponse(
            users=[UserResponse.model_validate(u) for u in rows],
            **PageMeta.build(total, paging.page, paging.page_size)
        )


@router.post("", response_model=UserResponse, status_code=201)
async def create_user(
    request: UserCreate,
    access: Access = Depends(require_permission("users", "create")),
):
    actor = access.actor
    department_id = request.department_id

    if access.scope == SCOPE_DEPT:
        if request.role not in DEPT_CREATABLE_ROLES:
            raise Forbidden("Department officers can only create coordinator and student accounts")
        if department_id is None:
            department_id = actor.department_id
        if department_id != actor.department_id:
            raise Forbidden("Accounts can only be created in your own department")

    if request.role in (UserRole.dept_officer, UserRole.coordinator) and department_id is None:
        raise ValidationFailed("Department staff accounts require a department")

    with get_db_session() as db:
        user = create_account(
            db,
            email=request.email,
            password=request.password,
            role=request.role,
            first_name=request.first_name,
            last_name=request.last_name,
            phone=request.phone,
            department_id=department_id,
            roll_number=request.roll_number,
            degree=request.degree,
            batch_year=request.batch_year,
        )
        logger.info("User %s created %s account %s", actor.user_id, user.role.value, user.id)
        return UserResponse.model_validate(user)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(user_id: int, access: Access = Depends(require_permission("users", "read"))):
    with get_db_session() as db:
        user = get_visible(db, User, user_id, user_scope(access.actor), "User")
        return UserResponse.model_validate(user)


@router.patch("/{user_id}/status", response_model=UserResponse)
async def update_user_status(
    user_id: int,
    request: UserStatusUpdate,
    access: Access = Depends(require_permission("users", "update")),
):
    if user_id == access.actor.user_id:
        raise ValidationFailed("You cannot change the status of your own account")

    with get_db_session() as db:
        user = get_visible(db, User, user_id, user_scope(access.actor), "User")
        if access.scope == SCOPE_DEPT and user.role not in DEPT_CREATABLE_ROLES:
            raise Forbidden("Department officers can only manage coordinator and student accounts")
        user.status = request.status
        logger.info("User %s set account %s to %s", access.actor.user_id, user.id, request.status.value)
        return UserResponse.model_validate(user)
