from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, Integer, String, Text

from placement_portal.core.constants import AnnouncementPriority, AnnouncementType, NotificationType
from placement_portal.models.base import Base, TimestampMixin, enum_column, utcnow


class Announcement(TimestampMixin, Base):
    __tablename__ = "announcements"

    id = Column(Integer, primary_key=True)
    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=False)
    type = enum_column(AnnouncementType, nullable=False, default=AnnouncementType.general)
    priority = enum_column(AnnouncementPriority, nullable=False, default=AnnouncementPriority.medium)

    # Audience. Empty department/batch lists mean everyone.
    target_roles = Column(JSON, nullable=False, default=list)
    target_departments = Column(JSON, nullable=False, default=list)
    target_batches = Column(JSON, nullable=False, default=list)

    attachment_url = Column(String(500))
    is_pinned = Column(Boolean, nullable=False, default=False)
    published = Column(Boolean, nullable=False, default=True)
    published_at = Column(DateTime, default=utcnow)
    expires_at = Column(DateTime)
    created_by = Column(Integer, ForeignKey("users.id", ondelete="RESTRICT"))


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    type = enum_column(NotificationType, nullable=False, default=NotificationType.system)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    link = Column(String(500))
    read = Column(Boolean, nullable=False, default=False)
    read_at = Column(DateTime)
    created_at = Column(DateTime, nullable=False, default=utcnow)
