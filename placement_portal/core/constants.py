"""
Enumerations shared by the ORM models, the API schemas and the access core.
"""

from enum import Enum


class UserRole(str, Enum):
    admin = "admin"
    dept_officer = "dept_officer"
    coordinator = "coordinator"
    student = "student"


STAFF_ROLES = (UserRole.admin, UserRole.dept_officer, UserRole.coordinator)
DEPARTMENT_ROLES = (UserRole.dept_officer, UserRole.coordinator)


class UserStatus(str, Enum):
    active = "active"
    inactive = "inactive"
    suspended = "suspended"


class PlacementStatus(str, Enum):
    active = "active"
    placed = "placed"
    opted_out = "opted_out"


class CompanyStatus(str, Enum):
    pending = "pending"
    approved = "approved"
    active = "active"
    rejected = "rejected"
    inactive = "inactive"


VISIBLE_COMPANY_STATUSES = (CompanyStatus.approved, CompanyStatus.active)


class JobType(str, Enum):
    full_time = "full_time"
    internship = "internship"
    part_time = "part_time"
    contract = "contract"


class WorkMode(str, Enum):
    remote = "remote"
    onsite = "onsite"
    hybrid = "hybrid"


class JobStatus(str, Enum):
    draft = "draft"
    pending = "pending"
    active = "active"
    closed = "closed"
    cancelled = "cancelled"


class ApplicationStatus(str, Enum):
    submitted = "submitted"
    under_review = "under_review"
    shortlisted = "shortlisted"
    interview_scheduled = "interview_scheduled"
    selected = "selected"
    offer_accepted = "offer_accepted"
    offer_rejected = "offer_rejected"
    rejected = "rejected"
    withdrawn = "withdrawn"


class InterviewType(str, Enum):
    technical = "technical"
    hr = "hr"
    aptitude = "aptitude"
    group_discussion = "group_discussion"
    final = "final"


class InterviewMode(str, Enum):
    online = "online"
    offline = "offline"
    hybrid = "hybrid"


class InterviewStatus(str, Enum):
    scheduled = "scheduled"
    rescheduled = "rescheduled"
    completed = "completed"
    cancelled = "cancelled"
    no_show = "no_show"


class InterviewResult(str, Enum):
    pending = "pending"
    passed = "passed"
    selected = "selected"
    failed = "failed"
    rejected = "rejected"
    on_hold = "on_hold"


class AnnouncementType(str, Enum):
    general = "general"
    urgent = "urgent"
    job_posting = "job_posting"
    event = "event"
    deadline = "deadline"


class AnnouncementPriority(str, Enum):
    low = "low"
    medium = "medium"
    high = "high"
    critical = "critical"


class NotificationType(str, Enum):
    application_update = "application_update"
    interview_scheduled = "interview_scheduled"
    announcement = "announcement"
    profile_update = "profile_update"
    job_posted = "job_posted"
    system = "system"


DEGREE_TYPES = ["BTech", "MTech", "MBA", "MCA", "BSc", "MSc", "BBA", "BCA"]

DEFAULT_INTERVIEW_DURATION = 60  # minutes
DEFAULT_CURRENCY = "INR"
