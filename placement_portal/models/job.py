"""
Recruitment pipeline models - job postings, applications and interviews.
"""

from sqlalchemy import (
    JSON, Column, Date, DateTime, Float, ForeignKey, Index, Integer, String, Text, Time, text
)
from sqlalchemy.orm import relationship

from placement_portal.core.constants import (
    DEFAULT_CURRENCY, DEFAULT_INTERVIEW_DURATION, ApplicationStatus, InterviewMode,
    InterviewResult, InterviewStatus, InterviewType, JobStatus, JobType, WorkMode
)
from placement_portal.models.base import Base, TimestampMixin, enum_column, utcnow


class JobPosting(TimestampMixin, Base):
    __tablename__ = "job_postings"

    id = Column(Integer, primary_key=True)
    company_id = Column(Integer, ForeignKey("companies.id", ondelete="RESTRICT"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    job_type = enum_column(JobType, nullable=False, default=JobType.full_time)
    location = Column(String(255))
    work_mode = enum_column(WorkMode)
    salary_min = Column(Float)
    salary_max = Column(Float)
    currency = Column(String(10), nullable=False, default=DEFAULT_CURRENCY)
    positions_available = Column(Integer, nullable=False, default=1)

    # Eligibility. Empty lists mean "no restriction".
    required_cgpa = Column(Float)
    allowed_backlogs = Column(Integer)
    eligible_departments = Column(JSON, nullable=False, default=list)
    eligible_batches = Column(JSON, nullable=False, default=list)
    eligible_degrees = Column(JSON, nullable=False, default=list)
    skills_required = Column(JSON, nullable=False, default=list)

    responsibilities = Column(Text)
    requirements = Column(Text)
    perks = Column(Text)
    application_deadline = Column(DateTime)

    status = enum_column(JobStatus, nullable=False, default=JobStatus.pending, index=True)
    created_by = Column(Integer, ForeignKey("users.id", ondelete="RESTRICT"))
    approved_by = Column(Integer, ForeignKey("users.id", ondelete="RESTRICT"))
    approved_at = Column(DateTime)

    company = relationship("Company", back_populates="job_postings")
    applications = relationship("Application", back_populates="job")

    def __repr__(self):
        return f"<JobPosting {self.title}>"


class Application(Base):
    """
    One student's application to one job.

    The partial unique index allows re-applying after a withdrawal while
    keeping at most one live application per student-job pair, even when
    two requests race.
    """
    __tablename__ = "applications"
    __table_args__ = (
        Index(
            "uq_live_application_per_student_job",
            "student_id", "job_id",
            unique=True,
            postgresql_where=text("status <> 'withdrawn'"),
            sqlite_where=text("status <> 'withdrawn'"),
        ),
    )

    id = Column(Integer, primary_key=True)
    job_id = Column(Integer, ForeignKey("job_postings.id", ondelete="CASCADE"), nullable=False, index=True)
    student_id = Column(Integer, ForeignKey("student_profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    cover_letter = Column(Text)
    resume_url = Column(String(500))
    status = enum_column(ApplicationStatus, nullable=False, default=ApplicationStatus.submitted, index=True)
    notes = Column(Text)

    applied_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)
    reviewed_by = Column(Integer, ForeignKey("users.id", ondelete="RESTRICT"))
    reviewed_at = Column(DateTime)

    job = relationship("JobPosting", back_populates="applications")
    student = relationship("StudentProfile", back_populates="applications")
    interviews = relationship(
        "Interview",
        back_populates="application",
        cascade="all, delete-orphan",
        order_by="Interview.scheduled_date.desc()",
    )

    def __repr__(self):
        return f"<Application {self.student_id} -> {self.job_id} ({self.status})>"


class Interview(TimestampMixin, Base):
    __tablename__ = "interviews"

    id = Column(Integer, primary_key=True)
    application_id = Column(Integer, ForeignKey("applications.id", ondelete="CASCADE"), nullable=False, index=True)
    interview_type = enum_column(InterviewType, nullable=False)
    interview_mode = enum_column(InterviewMode, nullable=False)
    scheduled_date = Column(Date, nullable=False, index=True)
    scheduled_time = Column(Time, nullable=False)
    duration_minutes = Column(Integer, nullable=False, default=DEFAULT_INTERVIEW_DURATION)
    location = Column(String(255))
    meeting_link = Column(String(500))
    interviewer_names = Column(JSON, nullable=False, default=list)
    notes = Column(Text)
    feedback = Column(Text)

    status = enum_column(InterviewStatus, nullable=False, default=InterviewStatus.scheduled)
    result = enum_column(InterviewResult, nullable=False, default=InterviewResult.pending)
    created_by = Column(Integer, ForeignKey("users.id", ondelete="RESTRICT"))

    application = relationship("Application", back_populates="interviews")

    def __repr__(self):
        return f"<Interview {self.id} for application {self.application_id}>"
