"""
Announcement Routes

GET /announcements - Announcements addressed to the caller (filters: type, priority, pinned)
POST /announcements - Publish announcement and notify its audience
GET /announcements/{announcement_id} - Get announcement
PUT /announcements/{announcement_id} - Update announcement (admin or creator)
DELETE /announcements/{announcement_id} - Delete announcement (admin or creator)
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.orm import selectinload

from placement_portal.core.auth import Access, Actor, require_permission
from placement_portal.core.constants import AnnouncementPriority, AnnouncementType, UserStatus
from placement_portal.core.exceptions import Forbidden, NotFound
from placement_portal.core.permissions import SCOPE_DEPT, SCOPE_OWN
from placement_portal.core.visibility import addressed_to, announcement_scope, get_visible, paginate
from placement_portal.db.postgres import get_db_session
from placement_portal.models import Announcement, User, utcnow
from placement_portal.schemas.schemas import (
    AnnouncementCreate, AnnouncementListResponse, AnnouncementResponse, AnnouncementUpdate,
    MessageResponse, PageMeta
)
from placement_portal.services.notification_service import (
    NotificationDispatcher, get_notification_dispatcher
)
from placement_portal.utils.pagination import PageParams, pagination_params

router = APIRouter(prefix="/announcements", tags=["Announcements"])
logger = logging.getLogger(__name__)


def _audience_user_ids(db, announcement: Announcement, exclude_user_id: int) -> List[int]:
    users = db.scalars(
        select(User)
        .options(selectinload(User.student_profile))
        .where(User.status == UserStatus.active)
        .where(User.id != exclude_user_id)
    ).all()
    return [
        u.id for u in users
        if addressed_to(
            announcement,
            u.role,
            u.department_id,
            u.student_profile.batch_year if u.student_profile else None,
        )
    ]


def _restrict_departments(actor: Actor, departments: List[int]) -> List[int]:
    """Department-scoped authors may only address their own department."""
    if actor.department_id is None:
        raise Forbidden("Your account is not assigned to a department")
    if not departments:
        return [actor.department_id]
    if set(departments) != {actor.department_id}:
        raise Forbidden("You can only address announcements to your own department")
    return departments


def _owned_announcement(db, announcement_id: int, access: Access) -> Announcement:
    announcement = db.get(Announcement, announcement_id)
    if announcement is None:
        raise NotFound("Announcement not found")
    if access.scope == SCOPE_OWN and announcement.created_by != access.actor.user_id:
        raise Forbidden("Only the creator or an administrator can modify this announcement")
    return announcement


@router.get("", response_model=AnnouncementListResponse)
async def list_announcements(
    type: Optional[AnnouncementType] = Query(None),
    priority: Optional[AnnouncementPriority] = Query(None),
    pinned: Optional[bool] = Query(None),
    paging: PageParams = Depends(pagination_params),
    access: Access = Depends(require_permission("announcements", "read")),
):
    """Pinned announcements first, then newest."""
    filters = []
    if type:
        filters.append(Announcement.type == type)
    if priority:
        filters.append(Announcement.priority == priority)
    if pinned is not None:
        filters.append(Announcement.is_pinned.is_(pinned))

    scope = announcement_scope(access.actor, utcnow()).narrowed(filters)
    with get_db_session() as db:
        rows, total = paginate(
            db, select(Announcement), scope, paging.page, paging.page_size,
            order_by=(Announcement.is_pinned.desc(), Announcement.published_at.desc(), Announcement.id.desc()),
        )
        return AnnouncementListResponse(
            announcements=[AnnouncementResponse.model_validate(a) for a in rows],
            **PageMeta.build(total, paging.page, paging.page_size)
        )


@router.post("", response_model=AnnouncementResponse, status_code=201)
async def create_announcement(
    data: AnnouncementCreate,
    access: Access = Depends(require_permission("announcements", "create")),
    notifier: NotificationDispatcher = Depends(get_notification_dispatcher),
):
    actor = access.actor
    values = data.model_dump()
    values["target_roles"] = [role.value for role in data.target_roles]
    if access.scope == SCOPE_DEPT:
        values["target_departments"] = _restrict_departments(actor, data.target_departments)

    with get_db_session() as db:
        announcement = Announcement(
            **values,
            published=True,
            published_at=utcnow(),
            created_by=actor.user_id,
        )
        db.add(announcement)
        db.flush()
        response = AnnouncementResponse.model_validate(announcement)
        recipients = _audience_user_ids(db, announcement, actor.user_id)

    logger.info("User %s published announcement %s to %d users", actor.user_id, response.id, len(recipients))
    notifier.announcement_published(recipients, announcement)
    return response


@router.get("/{announcement_id}", response_model=AnnouncementResponse)
async def get_announcement(
    announcement_id: int,
    access: Access = Depends(require_permission("announcements", "read")),
):
    scope = announcement_scope(access.actor, utcnow())
    with get_db_session() as db:
        announcement = get_visible(db, Announcement, announcement_id, scope, "Announcement")
        return AnnouncementResponse.model_validate(announcement)


@router.put("/{announcement_id}", response_model=AnnouncementResponse)
async def update_announcement(
    announcement_id: int,
    data: AnnouncementUpdate,
    access: Access = Depends(require_permission("announcements", "update")),
):
    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    if "target_roles" in changes:
        changes["target_roles"] = [role.value for role in data.target_roles]

    with get_db_session() as db:
        announcement = _owned_announcement(db, announcement_id, access)
        if "target_departments" in changes and not access.actor.is_admin:
            changes["target_departments"] = _restrict_departments(access.actor, changes["target_departments"])
        for name, value in changes.items():
            setattr(announcement, name, value)
        if changes.get("published") and announcement.published_at is None:
            announcement.published_at = utcnow()
        db.flush()
        return AnnouncementResponse.model_validate(announcement)


@router.delete("/{announcement_id}", response_model=MessageResponse)
async def delete_announcement(
    announcement_id: int,
    access: Access = Depends(require_permission("announcements", "delete")),
):
    with get_db_session() as db:
        announcement = _owned_announcement(db, announcement_id, access)
        db.delete(announcement)

    return MessageResponse(message="Announcement deleted successfully")
