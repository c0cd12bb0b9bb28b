"""
Pydantic Schemas - Request/Response Validation

All API request and response schemas in one file for simplicity.

Request models list their accepted fields explicitly. Update models forbid
unknown keys, so a misspelt field is a 400 instead of a silent no-op.
"""

from datetime import date, datetime, time, timezone
from math import ceil
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator

from placement_portal.core.constants import (
    DEFAULT_CURRENCY, DEFAULT_INTERVIEW_DURATION, AnnouncementPriority, AnnouncementType,
    ApplicationStatus, CompanyStatus, InterviewMode, InterviewResult, InterviewStatus,
    InterviewType, JobStatus, JobType, NotificationType, PlacementStatus, UserRole,
    UserStatus, WorkMode
)


class StrictModel(BaseModel):
    model_config = ConfigDict(extra="forbid")


class ORMModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


def naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Stored timestamps are naive UTC; convert aware input."""
    if value is not None and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class PageMeta(BaseModel):
    total: int
    page: int
    page_size: int
    pages: int

    @staticmethod
    def build(total: int, page: int, page_size: int) -> dict:
        return {
            "total": total,
            "page": page,
            "page_size": page_size,
            "pages": ceil(total / page_size) if page_size else 0,
        }


# ============================================================
# AUTH & USER SCHEMAS
# ============================================================

class RegisterRequest(StrictModel):
    """Student self-registration. Staff accounts are created through /users."""
    email: EmailStr
    password: str = Field(..., min_length=8)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field("", max_length=100)
    phone: Optional[str] = Field(None, max_length=20)
    department_id: int
    roll_number: str = Field(..., min_length=1, max_length=50)
    degree: str = Field(..., max_length=20)
    batch_year: int = Field(..., ge=2000, le=2100)
    current_semester: int = Field(1, ge=1, le=12)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class ChangePasswordRequest(StrictModel):
    current_password: str
    new_password: str = Field(..., min_length=8)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: int
    role: str


class DepartmentCreate(StrictModel):
    code: str = Field(..., min_length=1, max_length=20)
    name: str = Field(..., min_length=2, max_length=255)


class DepartmentResponse(ORMModel):
    id: int
    code: str
    name: str


class UserSummary(ORMModel):
    id: int
    email: str
    first_name: str
    last_name: str


class UserResponse(ORMModel):
    id: int
    email: str
    role: UserRole
    status: UserStatus
    first_name: str
    last_name: str
    phone: Optional[str] = None
    department_id: Optional[int] = None
    last_login: Optional[datetime] = None
    created_at: datetime


class UserCreate(StrictModel):
    """Account creation by staff. Student accounts also need the profile fields."""
    email: EmailStr
    password: str = Field(..., min_length=8)
    role: UserRole
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field("", max_length=100)
    phone: Optional[str] = Field(None, max_length=20)
    department_id: Optional[int] = None
    roll_number: Optional[str] = Field(None, max_length=50)
    degree: Optional[str] = Field(None, max_length=20)
    batch_year: Optional[int] = Field(None, ge=2000, le=2100)

    @model_validator(mode="after")
    def student_fields_present(self):
        if self.role == UserRole.student:
            missing = [f for f in ("roll_number", "degree", "batch_year", "department_id") if getattr(self, f) is None]
            if missing:
                raise ValueError(f"Student accounts require: {', '.join(missing)}")
        return self


class UserStatusUpdate(StrictModel):
    status: UserStatus


class UserListResponse(PageMeta):
    users: List[UserResponse]


# ============================================================
# STUDENT SCHEMAS
# ============================================================

class SkillCreate(StrictModel):
    skill_name: str = Field(..., min_length=1, max_length=100)
    proficiency_level: str = Field("intermediate", pattern="^(beginner|intermediate|advanced|expert)$")


class SkillResponse(ORMModel):
    id: int
    skill_name: str
    proficiency_level: Optional[str] = None


class ProjectCreate(StrictModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    technologies: Optional[str] = Field(None, max_length=500)
    project_url: Optional[str] = Field(None, max_length=500)
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class ProjectResponse(ORMModel):
    id: int
    title: str
    description: Optional[str] = None
    technologies: Optional[str] = None
    project_url: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class CertificationCreate(StrictModel):
    name: str = Field(..., min_length=1, max_length=255)
    issuing_organization: Optional[str] = Field(None, max_length=255)
    issue_date: Optional[date] = None
    credential_url: Optional[str] = Field(None, max_length=500)


class CertificationResponse(ORMModel):
    id: int
    name: str
    issuing_organization: Optional[str] = None
    issue_date: Optional[date] = None
    credential_url: Optional[str] = None


class InternshipCreate(StrictModel):
    company_name: str = Field(..., min_length=1, max_length=255)
    role: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class InternshipResponse(ORMModel):
    id: int
    company_name: str
    role: str
    description: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class StudentSelfUpdate(StrictModel):
    """Fields a student may change on their own profile."""
    phone: Optional[str] = Field(None, max_length=20)
    date_of_birth: Optional[date] = None
    gender: Optional[str] = Field(None, max_length=20)
    address: Optional[str] = None
    city: Optional[str] = Field(None, max_length=100)
    state: Optional[str] = Field(None, max_length=100)
    pincode: Optional[str] = Field(None, max_length=10)
    resume_url: Optional[str] = Field(None, max_length=500)


class StudentAcademicUpdate(StudentSelfUpdate):
    """Fields staff may change, including the eligibility inputs."""
    cgpa: Optional[float] = Field(None, ge=0, le=10)
    tenth_percentage: Optional[float] = Field(None, ge=0, le=100)
    twelfth_percentage: Optional[float] = Field(None, ge=0, le=100)
    active_backlogs: Optional[int] = Field(None, ge=0)
    current_semester: Optional[int] = Field(None, ge=1, le=12)
    placement_status: Optional[PlacementStatus] = None


class StudentVerifyRequest(StrictModel):
    is_verified: bool = True


class StudentSummary(ORMModel):
    id: int
    user_id: int
    roll_number: str
    degree: str
    department_id: Optional[int] = None
    batch_year: int
    cgpa: Optional[float] = None
    active_backlogs: int
    placement_status: PlacementStatus
    is_verified: bool
    user: Optional[UserSummary] = None


class StudentResponse(StudentSummary):
    current_semester: Optional[int] = None
    tenth_percentage: Optional[float] = None
    twelfth_percentage: Optional[float] = None
    date_of_birth: Optional[date] = None
    gender: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    pincode: Optional[str] = None
    resume_url: Optional[str] = None
    department: Optional[DepartmentResponse] = None
    skills: List[SkillResponse] = []
    projects: List[ProjectResponse] = []
    certifications: List[CertificationResponse] = []
    internships: List[InternshipResponse] = []
    created_at: datetime


class StudentListResponse(PageMeta):
    students: List[StudentSummary]


class MeResponse(BaseModel):
    user: UserResponse
    student_profile: Optional[StudentResponse] = None
    permissions: dict = {}


# ============================================================
# COMPANY SCHEMAS
# ============================================================

class ContactCreate(StrictModel):
    name: str = Field(..., min_length=1, max_length=255)
    designation: Optional[str] = Field(None, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=20)
    is_primary: bool = False


class ContactResponse(ORMModel):
    id: int
    name: str
    designation: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    is_primary: bool


class CompanyCreate(StrictModel):
    name: str = Field(..., min_length=2, max_length=255)
    website: Optional[str] = Field(None, max_length=500)
    industry: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = Field(None, max_length=100)
    state: Optional[str] = Field(None, max_length=100)
    country: str = Field("India", max_length=100)
    contacts: List[ContactCreate] = []


class CompanyUpdate(StrictModel):
    name: Optional[str] = Field(None, min_length=2, max_length=255)
    website: Optional[str] = Field(None, max_length=500)
    industry: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = Field(None, max_length=100)
    state: Optional[str] = Field(None, max_length=100)
    country: Optional[str] = Field(None, max_length=100)
    logo_url: Optional[str] = Field(None, max_length=500)


class CompanyStatusUpdate(StrictModel):
    status: CompanyStatus


class CompanySummary(ORMModel):
    id: int
    name: str
    industry: Optional[str] = None
    logo_url: Optional[str] = None


class CompanyResponse(ORMModel):
    id: int
    name: str
    website: Optional[str] = None
    industry: Optional[str] = None
    description: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    logo_url: Optional[str] = None
    status: CompanyStatus
    created_by: Optional[int] = None
    approved_by: Optional[int] = None
    approved_at: Optional[datetime] = None
    contacts: List[ContactResponse] = []
    created_at: datetime


class CompanyListResponse(PageMeta):
    companies: List[CompanyResponse]


# ============================================================
# JOB SCHEMAS
# ============================================================

class JobCreate(StrictModel):
    company_id: int
    title: str = Field(..., min_length=3, max_length=255)
    description: str = Field(..., min_length=10, max_length=10000)
    job_type: JobType = JobType.full_time
    location: Optional[str] = Field(None, max_length=255)
    work_mode: Optional[WorkMode] = None
    salary_min: Optional[float] = Field(None, ge=0)
    salary_max: Optional[float] = Field(None, ge=0)
    currency: str = Field(DEFAULT_CURRENCY, max_length=10)
    positions_available: int = Field(1, ge=1)
    required_cgpa: Optional[float] = Field(None, ge=0, le=10)
    allowed_backlogs: Optional[int] = Field(None, ge=0)
    eligible_departments: List[int] = []
    eligible_batches: List[int] = []
    eligible_degrees: List[str] = []
    skills_required: List[str] = []
    responsibilities: Optional[str] = None
    requirements: Optional[str] = None
    perks: Optional[str] = None
    application_deadline: Optional[datetime] = None

    @field_validator("application_deadline")
    @classmethod
    def deadline_utc(cls, value):
        return naive_utc(value)

    @model_validator(mode="after")
    def salary_range(self):
        if self.salary_min is not None and self.salary_max is not None and self.salary_max < self.salary_min:
            raise ValueError("Maximum salary must be greater than minimum salary")
        return self


class JobUpdate(StrictModel):
    title: Optional[str] = Field(None, min_length=3, max_length=255)
    description: Optional[str] = Field(None, min_length=10, max_length=10000)
    location: Optional[str] = Field(None, max_length=255)
    work_mode: Optional[WorkMode] = None
    salary_min: Optional[float] = Field(None, ge=0)
    salary_max: Optional[float] = Field(None, ge=0)
    positions_available: Optional[int] = Field(None, ge=1)
    required_cgpa: Optional[float] = Field(None, ge=0, le=10)
    allowed_backlogs: Optional[int] = Field(None, ge=0)
    eligible_departments: Optional[List[int]] = None
    eligible_batches: Optional[List[int]] = None
    eligible_degrees: Optional[List[str]] = None
    skills_required: Optional[List[str]] = None
    responsibilities: Optional[str] = None
    requirements: Optional[str] = None
    perks: Optional[str] = None
    application_deadline: Optional[datetime] = None

    @field_validator("application_deadline")
    @classmethod
    def deadline_utc(cls, value):
        return naive_utc(value)


class JobStatusUpdate(StrictModel):
    status: JobStatus


class JobResponse(ORMModel):
    id: int
    company_id: int
    company: Optional[CompanySummary] = None
    title: str
    description: str
    job_type: JobType
    location: Optional[str] = None
    work_mode: Optional[WorkMode] = None
    salary_min: Optional[float] = None
    salary_max: Optional[float] = None
    currency: str
    positions_available: int
    required_cgpa: Optional[float] = None
    allowed_backlogs: Optional[int] = None
    eligible_departments: List[int] = []
    eligible_batches: List[int] = []
    eligible_degrees: List[str] = []
    skills_required: List[str] = []
    responsibilities: Optional[str] = None
    requirements: Optional[str] = None
    perks: Optional[str] = None
    application_deadline: Optional[datetime] = None
    status: JobStatus
    created_by: Optional[int] = None
    approved_by: Optional[int] = None
    approved_at: Optional[datetime] = None
    created_at: datetime


class JobDetailResponse(JobResponse):
    has_applied: bool = False


class JobListResponse(PageMeta):
    jobs: List[JobResponse]


class EligibilityResponse(BaseModel):
    job_id: int
    eligible: bool
    reasons: List[str] = []


# ============================================================
# APPLICATION SCHEMAS
# ============================================================

class ApplicationCreate(StrictModel):
    cover_letter: Optional[str] = Field(None, max_length=5000)
    resume_url: Optional[str] = Field(None, max_length=500)


class ApplicationStatusUpdate(StrictModel):
    status: ApplicationStatus
    notes: Optional[str] = None


class BulkStatusUpdate(StrictModel):
    application_ids: List[int] = Field(..., min_length=1)
    status: ApplicationStatus
    notes: Optional[str] = None


class JobSummary(ORMModel):
    id: int
    title: str
    company: Optional[CompanySummary] = None


class ApplicationResponse(ORMModel):
    id: int
    job_id: int
    student_id: int
    status: ApplicationStatus
    cover_letter: Optional[str] = None
    resume_url: Optional[str] = None
    notes: Optional[str] = None
    applied_at: datetime
    updated_at: datetime
    reviewed_by: Optional[int] = None
    reviewed_at: Optional[datetime] = None
    job: Optional[JobSummary] = None
    student: Optional[StudentSummary] = None


class ApplicationListResponse(PageMeta):
    applications: List[ApplicationResponse]


class BulkStatusResponse(BaseModel):
    count: int
    status: ApplicationStatus


# ============================================================
# INTERVIEW SCHEMAS
# ============================================================

class InterviewSchedule(StrictModel):
    application_ids: List[int] = Field(..., min_length=1)
    interview_type: InterviewType
    interview_mode: InterviewMode
    scheduled_date: date
    scheduled_time: time
    duration_minutes: int = Field(DEFAULT_INTERVIEW_DURATION, ge=5, le=600)
    location: Optional[str] = Field(None, max_length=255)
    meeting_link: Optional[str] = Field(None, max_length=500)
    interviewer_names: List[str] = []
    notes: Optional[str] = None


class InterviewUpdate(StrictModel):
    scheduled_date: Optional[date] = None
    scheduled_time: Optional[time] = None
    duration_minutes: Optional[int] = Field(None, ge=5, le=600)
    location: Optional[str] = Field(None, max_length=255)
    meeting_link: Optional[str] = Field(None, max_length=500)
    interviewer_names: Optional[List[str]] = None
    notes: Optional[str] = None


class InterviewStatusUpdate(StrictModel):
    status: Optional[InterviewStatus] = None
    result: Optional[InterviewResult] = None
    feedback: Optional[str] = None

    @model_validator(mode="after")
    def something_to_change(self):
        if self.status is None and self.result is None and not self.feedback:
            raise ValueError("Provide a status, a result or feedback")
        return self


class InterviewResponse(ORMModel):
    id: int
    application_id: int
    interview_type: InterviewType
    interview_mode: InterviewMode
    scheduled_date: date
    scheduled_time: time
    duration_minutes: int
    location: Optional[str] = None
    meeting_link: Optional[str] = None
    interviewer_names: List[str] = []
    notes: Optional[str] = None
    feedback: Optional[str] = None
    status: InterviewStatus
    result: InterviewResult
    created_by: Optional[int] = None
    created_at: datetime


class InterviewListResponse(PageMeta):
    interviews: List[InterviewResponse]


class InterviewResultResponse(BaseModel):
    interview: InterviewResponse
    application: ApplicationResponse


# ============================================================
# ANNOUNCEMENT & NOTIFICATION SCHEMAS
# ============================================================

class AnnouncementCreate(StrictModel):
    title: str = Field(..., min_length=3, max_length=255)
    content: str = Field(..., min_length=1)
    type: AnnouncementType = AnnouncementType.general
    priority: AnnouncementPriority = AnnouncementPriority.medium
    target_roles: List[UserRole] = Field(default_factory=lambda: list(UserRole))
    target_departments: List[int] = []
    target_batches: List[int] = []
    attachment_url: Optional[str] = Field(None, max_length=500)
    is_pinned: bool = False
    expires_at: Optional[datetime] = None

    @field_validator("expires_at")
    @classmethod
    def expiry_utc(cls, value):
        return naive_utc(value)


class AnnouncementUpdate(StrictModel):
    title: Optional[str] = Field(None, min_length=3, max_length=255)
    content: Optional[str] = None
    type: Optional[AnnouncementType] = None
    priority: Optional[AnnouncementPriority] = None
    target_roles: Optional[List[UserRole]] = None
    target_departments: Optional[List[int]] = None
    target_batches: Optional[List[int]] = None
    attachment_url: Optional[str] = Field(None, max_length=500)
    is_pinned: Optional[bool] = None
    published: Optional[bool] = None
    expires_at: Optional[datetime] = None

    @field_validator("expires_at")
    @classmethod
    def expiry_utc(cls, value):
        return naive_utc(value)


class AnnouncementResponse(ORMModel):
    id: int
    title: str
    content: str
    type: AnnouncementType
    priority: AnnouncementPriority
    target_roles: List[str] = []
    target_departments: List[int] = []
    target_batches: List[int] = []
    attachment_url: Optional[str] = None
    is_pinned: bool
    published: bool
    published_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    created_by: Optional[int] = None
    created_at: datetime


class AnnouncementListResponse(PageMeta):
    announcements: List[AnnouncementResponse]


class NotificationResponse(ORMModel):
    id: int
    type: NotificationType
    title: str
    message: str
    link: Optional[str] = None
    read: bool
    read_at: Optional[datetime] = None
    created_at: datetime


class NotificationListResponse(PageMeta):
    notifications: List[NotificationResponse]
    unread_count: int


# ============================================================
# ANALYTICS SCHEMAS
# ============================================================

class OverviewResponse(BaseModel):
    scope: str
    total_students: int
    placed_students: int
    placement_rate: float
    active_jobs: int
    total_applications: int
    applications_by_status: dict
    upcoming_interviews: int


class DepartmentStatsResponse(BaseModel):
    id: int
    code: str
    name: str
    total_students: int
    placed_students: int
    placement_rate: float


# ============================================================
# GENERIC SCHEMAS
# ============================================================

class MessageResponse(BaseModel):
    message: str
    success: bool = True


class FileUploadResponse(BaseModel):
    success: bool = True
    file_id: str
    filename: str
    url: str
    size: int
