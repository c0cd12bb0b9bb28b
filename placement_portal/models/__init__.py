"""
Models module - SQLAlchemy ORM tables (the Record Store).
"""

from placement_portal.models.base import Base, utcnow
from placement_portal.models.user import (
    Department, StudentCertification, StudentInternship, StudentProfile,
    StudentProject, StudentSkill, User
)
from placement_portal.models.company import Company, CompanyContact
from placement_portal.models.job import Application, Interview, JobPosting
from placement_portal.models.communication import Announcement, Notification

__all__ = [
    "Base",
    "utcnow",
    "Department",
    "User",
    "StudentProfile",
    "StudentSkill",
    "StudentProject",
    "StudentCertification",
    "StudentInternship",
    "Company",
    "CompanyContact",
    "JobPosting",
    "Application",
    "Interview",
    "Announcement",
    "Notification",
]
