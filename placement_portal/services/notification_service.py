"""
Notification Service - in-app notifications plus optional email.

`NotificationDispatcher.dispatch()` is called by handlers only after their
own transaction has committed. It writes the notification rows in a fresh
session and then emails the recipients. Any failure here is logged and
swallowed so a delivered status change is never reported as failed.
"""

import logging
from typing import Iterable, List, Optional

from sqlalchemy import select

from placement_portal.core.constants import ApplicationStatus, NotificationType
from placement_portal.db.postgres import get_db_session
from placement_portal.models import Notification, User
from placement_portal.services.email_service import EmailService, render_notification_email

logger = logging.getLogger(__name__)


APPLICATION_STATUS_MESSAGES = {
    ApplicationStatus.under_review: "Your application is being reviewed",
    ApplicationStatus.shortlisted: "Congratulations! You have been shortlisted",
    ApplicationStatus.rejected: "Your application was not selected",
    ApplicationStatus.interview_scheduled: "Your interview has been scheduled",
    ApplicationStatus.selected: "Congratulations! You have been selected",
    ApplicationStatus.offer_accepted: "Your offer acceptance has been confirmed",
    ApplicationStatus.offer_rejected: "Your offer rejection has been recorded",
}


class NotificationDispatcher:
    def __init__(self, email_service: Optional[EmailService] = None):
        self.email_service = email_service or EmailService()

    def dispatch(self, user_ids: Iterable[int], kind: NotificationType, payload: dict) -> int:
        """
        Notify `user_ids`. `payload` carries `title`, `message`, optional
        `link` and an optional `email` flag (default False).

        Returns the number of notifications written (0 on failure).
        """
        recipients = sorted({uid for uid in user_ids if uid is not None})
        if not recipients:
            return 0

        title = payload["title"]
        message = payload["message"]
        try:
            with get_db_session() as db:
                for user_id in recipients:
                    db.add(Notification(
                        user_id=user_id,
                        type=NotificationType(kind),
                        title=title,
                        message=message,
                        link=payload.get("link"),
                    ))
                addresses = []
                if payload.get("email") and self.email_service.enabled:
                    addresses = [
                        (user.email, user.first_name)
                        for user in db.scalars(select(User).where(User.id.in_(recipients)))
                    ]
        except Exception:
            logger.exception("Failed to write %s notifications for %d users", kind, len(recipients))
            return 0

        self._send_emails(addresses, title, message)
        return len(recipients)

    def _send_emails(self, addresses: List[tuple], title: str, message: str) -> None:
        for email, first_name in addresses:
            try:
                self.email_service.send(
                    to=email,
                    subject=title,
                    text=message,
                    html=render_notification_email(first_name, title, message),
                )
            except Exception:
                logger.exception("Email delivery to %s failed", email)

    # Convenience wrappers used by the route handlers

    def application_status_changed(self, student_user_id: int, application_id: int, status: ApplicationStatus) -> int:
        status = ApplicationStatus(status)
        message = APPLICATION_STATUS_MESSAGES.get(status, f"Application status updated to: {status.value}")
        return self.dispatch([student_user_id], NotificationType.application_update, {
            "title": "Application Update",
            "message": message,
            "link": f"/applications/{application_id}",
            "email": True,
        })

    def interview_scheduled(self, student_user_id: int, interview) -> int:
        return self.dispatch([student_user_id], NotificationType.interview_scheduled, {
            "title": "Interview Scheduled",
            "message": (
                f"Your {interview.interview_type.value} interview is scheduled for "
                f"{interview.scheduled_date.isoformat()} at {interview.scheduled_time.strftime('%H:%M')}"
            ),
            "link": f"/interviews/{interview.id}",
            "email": True,
        })

    def interview_rescheduled(self, student_user_id: int, interview) -> int:
        return self.dispatch([student_user_id], NotificationType.interview_scheduled, {
            "title": "Interview Rescheduled",
            "message": (
                f"Your {interview.interview_type.value} interview has moved to "
                f"{interview.scheduled_date.isoformat()} at {interview.scheduled_time.strftime('%H:%M')}"
            ),
            "link": f"/interviews/{interview.id}",
            "email": True,
        })

    def announcement_published(self, user_ids: Iterable[int], announcement) -> int:
        content = announcement.content
        preview = content[:200] + ("..." if len(content) > 200 else "")
        return self.dispatch(user_ids, NotificationType.announcement, {
            "title": announcement.title,
            "message": preview,
            "link": f"/announcements/{announcement.id}",
        })


_dispatcher: Optional[NotificationDispatcher] = None


def get_notification_dispatcher() -> NotificationDispatcher:
    """FastAPI dependency; tests may override it."""
    global _dispatcher
    if _dispatcher is None:
        _dispatcher = NotificationDispatcher()
    return _dispatcher
