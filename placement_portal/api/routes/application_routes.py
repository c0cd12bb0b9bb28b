"""
Application Routes

GET /applications - List applications in scope (filters: status, job, student)
POST /applications/bulk-status - Change the status of several applications at once
GET /applications/{application_id} - Get application
PATCH /applications/{application_id}/status - Staff status change
PATCH /applications/{application_id}/withdraw - Withdraw own application (student)
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.orm import selectinload

from placement_portal.core.auth import (
    Access, Actor, get_current_user, get_permission_policy, require_permission
)
from placement_portal.core.constants import ApplicationStatus
from placement_portal.core.exceptions import Forbidden
from placement_portal.core.permissions import PermissionPolicy
from placement_portal.core.transitions import (
    SHORTLIST_STATUSES, apply_application_status, check_application_transition, check_withdrawal,
    mark_withdrawn
)
from placement_portal.core.visibility import Scope, application_scope, get_visible, paginate
from placement_portal.db.postgres import get_db_session
from placement_portal.models import Application, JobPosting, StudentProfile, utcnow
from placement_portal.schemas.schemas import (
    ApplicationListResponse, ApplicationResponse, ApplicationStatusUpdate, BulkStatusResponse,
    BulkStatusUpdate, PageMeta
)
from placement_portal.services.notification_service import (
    NotificationDispatcher, get_notification_dispatcher
)
from placement_portal.utils.pagination import PageParams, pagination_params

router = APIRouter(prefix="/applications", tags=["Applications"])
logger = logging.getLogger(__name__)

APPLICATION_OPTIONS = (
    selectinload(Application.job).selectinload(JobPosting.company),
    selectinload(Application.student).selectinload(StudentProfile.user),
)


def status_change_scope(actor: Actor, policy: PermissionPolicy, target: ApplicationStatus) -> Scope:
    """
    Rows the actor may move to `target`.

    The update grant covers every status; the shortlist grant only covers
    moving an application into review or onto the shortlist.
    """
    granted = policy.resolve_scope(actor.role, "applications", "update")
    if granted is None and ApplicationStatus(target) in SHORTLIST_STATUSES:
        granted = policy.resolve_scope(actor.role, "applications", "shortlist")
    if granted is None:
        raise Forbidden(f"You don't have permission to set applications to {ApplicationStatus(target).value}")
    return application_scope(actor)


@router.get("", response_model=ApplicationListResponse)
async def list_applications(
    status: Optional[ApplicationStatus] = Query(None),
    job_id: Optional[int] = Query(None),
    student_id: Optional[int] = Query(None),
    paging: PageParams = Depends(pagination_params),
    access: Access = Depends(require_permission("applications", "read")),
):
    filters = []
    if status:
        filters.append(Application.status == status)
    if job_id is not None:
        filters.append(Application.job_id == job_id)
    if student_id is not None:
        filters.append(Application.student_id == student_id)

    scope = application_scope(access.actor).narrowed(filters)
    with get_db_session() as db:
        rows, total = paginate(
            db, select(Application).options(*APPLICATION_OPTIONS), scope,
            paging.page, paging.page_size, order_by=(Application.applied_at.desc(), Application.id.desc()),
        )
        return ApplicationListResponse(
            applications=[ApplicationResponse.model_validate(a) for a in rows],
            **PageMeta.build(total, paging.page, paging.page_size)
        )


@router.post("/bulk-status", response_model=BulkStatusResponse)
async def bulk_update_status(
    data: BulkStatusUpdate,
    actor: Actor = Depends(get_current_user),
    policy: PermissionPolicy = Depends(get_permission_policy),
    notifier: NotificationDispatcher = Depends(get_notification_dispatcher),
):
    """
    Apply one status to several applications.

    All-or-nothing: every application must be visible and allow the
    transition, otherwise nothing is written.
    """
    scope = status_change_scope(actor, policy, data.status)
    now = utcnow()
    application_ids = list(dict.fromkeys(data.application_ids))

    with get_db_session() as db:
        applications = [get_visible(db, Application, app_id, scope, "Application") for app_id in application_ids]
        for application in applications:
            check_application_transition(application.status, data.status).raise_if_denied()
        for application in applications:
            apply_application_status(application, data.status, actor.user_id, now, data.notes)
        recipients = [(a.student.user_id, a.id) for a in applications]

    for user_id, application_id in recipients:
        notifier.application_status_changed(user_id, application_id, data.status)
    return BulkStatusResponse(count=len(recipients), status=data.status)


@router.get("/{application_id}", response_model=ApplicationResponse)
async def get_application(
    application_id: int,
    access: Access = Depends(require_permission("applications", "read")),
):
    with get_db_session() as db:
        application = get_visible(db, Application, application_id, application_scope(access.actor), "Application")
        return ApplicationResponse.model_validate(application)


@router.patch("/{application_id}/status", response_model=ApplicationResponse)
async def update_application_status(
    application_id: int,
    data: ApplicationStatusUpdate,
    actor: Actor = Depends(get_current_user),
    policy: PermissionPolicy = Depends(get_permission_policy),
    notifier: NotificationDispatcher = Depends(get_notification_dispatcher),
):
    """Staff status change. Records who made the change and when."""
    scope = status_change_scope(actor, policy, data.status)
    with get_db_session() as db:
        application = get_visible(db, Application, application_id, scope, "Application")
        check_application_transition(application.status, data.status).raise_if_denied()
        apply_application_status(application, data.status, actor.user_id, utcnow(), data.notes)
        db.flush()
        response = ApplicationResponse.model_validate(application)
        student_user_id = application.student.user_id

    notifier.application_status_changed(student_user_id, application_id, data.status)
    return response


@router.patch("/{application_id}/withdraw", response_model=ApplicationResponse)
async def withdraw_application(
    application_id: int,
    access: Access = Depends(require_permission("applications", "withdraw")),
):
    """
    Withdraw an application. Only the applicant may do this, and not after
    selection. Open interviews for the application are cancelled with it.
    """
    actor = access.actor
    with get_db_session() as db:
        application = get_visible(db, Application, application_id, application_scope(actor), "Application")
        is_owner = actor.student_id is not None and application.student_id == actor.student_id
        check_withdrawal(application.status, is_owner).raise_if_denied()
        cancelled = mark_withdrawn(application)
        db.flush()
        logger.info(
            "Student %s withdrew application %s (%d interview(s) cancelled)",
            actor.student_id, application_id, len(cancelled),
        )
        return ApplicationResponse.model_validate(application)
