"""
Interview Routes

GET /interviews - List interviews in scope (filters: status, view=upcoming|past, date, application)
POST /interviews - Schedule an interview for one or more applications
GET /interviews/{interview_id} - Get interview
PUT /interviews/{interview_id} - Update details; a new date or time marks it rescheduled
PATCH /interviews/{interview_id}/status - Record status, result and feedback
DELETE /interviews/{interview_id} - Delete interview
"""

import logging
from datetime import date
from enum import Enum
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select

from placement_portal.core.auth import Access, require_permission
from placement_portal.core.constants import ApplicationStatus, InterviewStatus
from placement_portal.core.transitions import (
    apply_application_status, check_interview_editable, check_interview_scheduling, check_reschedule,
    record_interview_result
)
from placement_portal.core.visibility import application_scope, get_visible, interview_scope, paginate
from placement_portal.db.postgres import get_db_session
from placement_portal.models import Application, Interview, utcnow
from placement_portal.schemas.schemas import (
    ApplicationResponse, InterviewListResponse, InterviewResponse, InterviewResultResponse,
    InterviewSchedule, InterviewStatusUpdate, InterviewUpdate, MessageResponse, PageMeta
)
from placement_portal.services.notification_service import (
    NotificationDispatcher, get_notification_dispatcher
)
from placement_portal.utils.pagination import PageParams, pagination_params

router = APIRouter(prefix="/interviews", tags=["Interviews"])
logger = logging.getLogger(__name__)


class InterviewView(str, Enum):
    upcoming = "upcoming"
    past = "past"


@router.get("", response_model=InterviewListResponse)
async def list_interviews(
    status: Optional[InterviewStatus] = Query(None),
    view: Optional[InterviewView] = Query(None),
    on_date: Optional[date] = Query(None, alias="date"),
    application_id: Optional[int] = Query(None),
    paging: PageParams = Depends(pagination_params),
    access: Access = Depends(require_permission("interviews", "read")),
):
    filters = []
    if status:
        filters.append(Interview.status == status)
    today = date.today()
    if view == InterviewView.upcoming:
        filters.append(Interview.scheduled_date >= today)
    elif view == InterviewView.past:
        filters.append(Interview.scheduled_date < today)
    elif on_date is not None:
        filters.append(Interview.scheduled_date == on_date)
    if application_id is not None:
        filters.append(Interview.application_id == application_id)

    scope = interview_scope(access.actor).narrowed(filters)
    with get_db_session() as db:
        rows, total = paginate(
            db, select(Interview), scope, paging.page, paging.page_size,
            order_by=(Interview.scheduled_date, Interview.scheduled_time, Interview.id),
        )
        return InterviewListResponse(
            interviews=[InterviewResponse.model_validate(i) for i in rows],
            **PageMeta.build(total, paging.page, paging.page_size)
        )


@router.post("", response_model=List[InterviewResponse], status_code=201)
async def schedule_interviews(
    data: InterviewSchedule,
    access: Access = Depends(require_permission("interviews", "create")),
    notifier: NotificationDispatcher = Depends(get_notification_dispatcher),
):
    """
    Schedule one interview per listed application.

    Each application moves to interview_scheduled in the same transaction.
    Nothing is written unless every application can be scheduled.
    """
    actor = access.actor
    now = utcnow()
    scope = application_scope(actor)
    details = data.model_dump(exclude={"application_ids"})
    application_ids = list(dict.fromkeys(data.application_ids))

    with get_db_session() as db:
        applications = [get_visible(db, Application, app_id, scope, "Application") for app_id in application_ids]
        for application in applications:
            check_interview_scheduling(application.status).raise_if_denied()

        interviews = []
        for application in applications:
            interview = Interview(application_id=application.id, created_by=actor.user_id, **details)
            db.add(interview)
            interviews.append(interview)
            if application.status != ApplicationStatus.interview_scheduled:
                apply_application_status(application, ApplicationStatus.interview_scheduled, actor.user_id, now)

        db.flush()
        response = [InterviewResponse.model_validate(i) for i in interviews]
        recipients = [(a.student.user_id, i) for a, i in zip(applications, interviews)]

    logger.info("User %s scheduled %d interview(s)", actor.user_id, len(response))
    for user_id, interview in recipients:
        notifier.interview_scheduled(user_id, interview)
    return response


@router.get("/{interview_id}", response_model=InterviewResponse)
async def get_interview(interview_id: int, access: Access = Depends(require_permission("interviews", "read"))):
    with get_db_session() as db:
        interview = get_visible(db, Interview, interview_id, interview_scope(access.actor), "Interview")
        return InterviewResponse.model_validate(interview)


@router.put("/{interview_id}", response_model=InterviewResponse)
async def update_interview(
    interview_id: int,
    data: InterviewUpdate,
    access: Access = Depends(require_permission("interviews", "update")),
    notifier: NotificationDispatcher = Depends(get_notification_dispatcher),
):
    """Update interview details. Moving the date or time marks the interview rescheduled."""
    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    with get_db_session() as db:
        interview = get_visible(db, Interview, interview_id, interview_scope(access.actor), "Interview")
        check_interview_editable(interview.application.status).raise_if_denied()

        moved = any(
            name in changes and changes[name] != getattr(interview, name)
            for name in ("scheduled_date", "scheduled_time")
        )
        if moved:
            check_reschedule(interview.status).raise_if_denied()

        for name, value in changes.items():
            setattr(interview, name, value)
        if moved:
            interview.status = InterviewStatus.rescheduled

        db.flush()
        response = InterviewResponse.model_validate(interview)
        student_user_id = interview.application.student.user_id

    if moved:
        logger.info("Interview %s rescheduled by user %s", interview_id, access.actor.user_id)
        notifier.interview_rescheduled(student_user_id, interview)
    return response


@router.patch("/{interview_id}/status", response_model=InterviewResultResponse)
async def update_interview_status(
    interview_id: int,
    data: InterviewStatusUpdate,
    access: Access = Depends(require_permission("interviews", "update")),
    notifier: NotificationDispatcher = Depends(get_notification_dispatcher),
):
    """
    Record an interview outcome.

    A passing result selects the application and a failing one rejects it,
    in the same commit as the interview change.
    """
    with get_db_session() as db:
        interview = get_visible(db, Interview, interview_id, interview_scope(access.actor), "Interview")
        previous = interview.application.status
        interview, application = record_interview_result(
            interview,
            now=utcnow(),
            actor_user_id=access.actor.user_id,
            status=data.status,
            result=data.result,
            feedback=data.feedback,
        )
        db.flush()
        response = InterviewResultResponse(
            interview=InterviewResponse.model_validate(interview),
            application=ApplicationResponse.model_validate(application),
        )
        changed = application.status != previous
        student_user_id = application.student.user_id

    if changed:
        notifier.application_status_changed(student_user_id, response.application.id, response.application.status)
    return response


@router.delete("/{interview_id}", response_model=MessageResponse)
async def delete_interview(interview_id: int, access: Access = Depends(require_permission("interviews", "delete"))):
    with get_db_session() as db:
        interview = get_visible(db, Interview, interview_id, interview_scope(access.actor), "Interview")
        db.delete(interview)

    logger.info("User %s deleted interview %s", access.actor.user_id, interview_id)
    return MessageResponse(message="Interview deleted successfully")
