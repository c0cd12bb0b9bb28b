"""
Notification Routes

GET /notifications - Own notifications with unread count
PATCH /notifications/read-all - Mark all own notifications read
PATCH /notifications/{notification_id}/read - Mark one notification read
DELETE /notifications/{notification_id} - Delete a notification
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func, select, update

from placement_portal.core.auth import Actor, get_current_user
from placement_portal.core.visibility import Scope, get_visible, paginate
from placement_portal.db.postgres import get_db_session
from placement_portal.models import Notification, utcnow
from placement_portal.schemas.schemas import (
    MessageResponse, NotificationListResponse, NotificationResponse, PageMeta
)
from placement_portal.utils.pagination import PageParams, pagination_params

router = APIRouter(prefix="/notifications", tags=["Notifications"])


def own_notifications(actor: Actor) -> Scope:
    return Scope(clauses=[Notification.user_id == actor.user_id])


@router.get("", response_model=NotificationListResponse)
async def list_notifications(
    unread_only: bool = Query(False),
    paging: PageParams = Depends(pagination_params),
    actor: Actor = Depends(get_current_user),
):
    scope = own_notifications(actor)
    if unread_only:
        scope = scope.narrowed([Notification.read.is_(False)])

    with get_db_session() as db:
        rows, total = paginate(
            db, select(Notification), scope, paging.page, paging.page_size,
            order_by=(Notification.created_at.desc(), Notification.id.desc()),
        )
        unread_count = db.scalar(
            select(func.count(Notification.id))
            .where(Notification.user_id == actor.user_id)
            .where(Notification.read.is_(False))
        )
        return NotificationListResponse(
            notifications=[NotificationResponse.model_validate(n) for n in rows],
            unread_count=unread_count or 0,
            **PageMeta.build(total, paging.page, paging.page_size)
        )


@router.patch("/read-all", response_model=MessageResponse)
async def mark_all_read(actor: Actor = Depends(get_current_user)):
    with get_db_session() as db:
        result = db.execute(
            update(Notification)
            .where(Notification.user_id == actor.user_id)
            .where(Notification.read.is_(False))
            .values(read=True, read_at=utcnow())
        )
        count = result.rowcount

    return MessageResponse(message=f"{count} notification(s) marked as read")


@router.patch("/{notification_id}/read", response_model=NotificationResponse)
async def mark_read(notification_id: int, actor: Actor = Depends(get_current_user)):
    """Mark as read. Marking an already-read notification changes nothing."""
    with get_db_session() as db:
        notification = get_visible(db, Notification, notification_id, own_notifications(actor), "Notification")
        if not notification.read:
            notification.read = True
            notification.read_at = utcnow()
        return NotificationResponse.model_validate(notification)


@router.delete("/{notification_id}", response_model=MessageResponse)
async def delete_notification(notification_id: int, actor: Actor = Depends(get_current_user)):
    with get_db_session() as db:
        notification = get_visible(db, Notification, notification_id, own_notifications(actor), "Notification")
        db.delete(notification)

    return MessageResponse(message="Notification deleted")
