"""
Job Routes

GET /jobs - List jobs in scope (students: active jobs they are eligible for)
POST /jobs - Create job posting (admin: active, others: pending approval)
GET /jobs/{job_id} - Get job details
GET /jobs/{job_id}/eligibility - Eligibility report for a student
PUT /jobs/{job_id} - Update job
DELETE /jobs/{job_id} - Delete job without applications (admin)
PATCH /jobs/{job_id}/status - Approve, close, reopen or cancel a job
POST /jobs/{job_id}/apply - Apply to job (student only)
GET /jobs/{job_id}/applications - Applications received for a job
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import or_, select
from sqlalchemy.orm import selectinload

from placement_portal.core.auth import (
    Access, Actor, get_current_user, get_permission_policy, require_permission
)
from placement_portal.core.constants import (
    VISIBLE_COMPANY_STATUSES, ApplicationStatus, JobStatus, JobType, NotificationType,
    PlacementStatus, UserStatus
)
from placement_portal.core.eligibility import evaluate_eligibility, is_eligible
from placement_portal.core.exceptions import (
    Conflict, Forbidden, IneligibleForResource, NotFound, ValidationFailed
)
from placement_portal.core.permissions import SCOPE_ALL, SCOPE_DEPT, SCOPE_OWN, PermissionPolicy
from placement_portal.core.transitions import check_job_transition
from placement_portal.core.visibility import (
    application_scope, get_visible, job_open_to_department, job_scope, paginate, student_scope
)
from placement_portal.db.postgres import get_db_session
from placement_portal.models import Application, Company, JobPosting, StudentProfile, User, utcnow
from placement_portal.schemas.schemas import (
    ApplicationCreate, ApplicationListResponse, ApplicationResponse, EligibilityResponse,
    JobCreate, JobDetailResponse, JobListResponse, JobResponse, JobStatusUpdate, JobUpdate,
    MessageResponse, PageMeta
)
from placement_portal.services.notification_service import (
    NotificationDispatcher, get_notification_dispatcher
)
from placement_portal.utils.pagination import PageParams, pagination_params

router = APIRouter(prefix="/jobs", tags=["Jobs"])
logger = logging.getLogger(__name__)

APPLICATION_OPTIONS = (
    selectinload(Application.job).selectinload(JobPosting.company),
    selectinload(Application.student).selectinload(StudentProfile.user),
)

# Optional limits an explicit null removes
CLEARABLE_FIELDS = frozenset({"required_cgpa", "allowed_backlogs", "application_deadline"})


def _require_job_scope(job: JobPosting, actor: Actor, scope: str) -> None:
    """Enforce a resolved jobs grant against one posting."""
    if scope == SCOPE_ALL:
        return
    if scope == SCOPE_DEPT and actor.department_id is not None and job_open_to_department(job, actor.department_id):
        return
    if scope == SCOPE_OWN and job.created_by == actor.user_id:
        return
    raise Forbidden("Not authorized to modify this job")


def _eligible_student_user_ids(db, job: JobPosting) -> List[int]:
    """Users of unplaced, active students who pass the job's criteria."""
    students = db.scalars(
        select(StudentProfile)
        .join(StudentProfile.user)
        .where(StudentProfile.placement_status == PlacementStatus.active)
        .where(User.status == UserStatus.active)
    ).all()
    return [s.user_id for s in students if is_eligible(s, job)]


def _announce_job(notifier: NotificationDispatcher, job_id: int, company_name: str, title: str, user_ids: List[int]) -> None:
    notifier.dispatch(user_ids, NotificationType.job_posted, {
        "title": "New Job Opportunity",
        "message": f"{company_name} is hiring for {title}. Check eligibility and apply now!",
        "link": f"/jobs/{job_id}",
    })


@router.get("", response_model=JobListResponse)
async def list_jobs(
    job_type: Optional[JobType] = Query(None),
    company_id: Optional[int] = Query(None),
    department_id: Optional[int] = Query(None, description="Jobs open to this department"),
    status: Optional[JobStatus] = Query(None, description="Staff only; students always see active jobs"),
    search: Optional[str] = Query(None, description="Search in title and location"),
    paging: PageParams = Depends(pagination_params),
    access: Access = Depends(require_permission("jobs", "read")),
):
    """List job postings visible to the caller, newest first."""
    filters = []
    if job_type:
        filters.append(JobPosting.job_type == job_type)
    if company_id is not None:
        filters.append(JobPosting.company_id == company_id)
    if status and not access.actor.is_student:
        filters.append(JobPosting.status == status)
    if search:
        pattern = f"%{search}%"
        filters.append(or_(JobPosting.title.ilike(pattern), JobPosting.location.ilike(pattern)))

    department_filter = None
    if department_id is not None:
        def department_filter(job):
            return job_open_to_department(job, department_id)

    scope = job_scope(access.actor).narrowed(filters, row_filter=department_filter)
    with get_db_session() as db:
        rows, total = paginate(
            db, select(JobPosting).options(selectinload(JobPosting.company)), scope,
            paging.page, paging.page_size, order_by=(JobPosting.created_at.desc(), JobPosting.id.desc()),
        )
        return JobListResponse(
            jobs=[JobResponse.model_validate(j) for j in rows],
            **PageMeta.build(total, paging.page, paging.page_size)
        )


@router.post("", response_model=JobResponse, status_code=201)
async def create_job(
    data: JobCreate,
    access: Access = Depends(require_permission("jobs", "create")),
    notifier: NotificationDispatcher = Depends(get_notification_dispatcher),
):
    """Create a job posting for an approved company."""
    actor = access.actor
    with get_db_session() as db:
        company = db.get(Company, data.company_id)
        if company is None:
            raise ValidationFailed("Company does not exist")
        if company.status not in VISIBLE_COMPANY_STATUSES:
            raise ValidationFailed("Jobs can only be posted for approved companies")

        job = JobPosting(**data.model_dump(), created_by=actor.user_id)
        if actor.is_admin:
            job.status = JobStatus.active
            job.approved_by = actor.user_id
            job.approved_at = utcnow()
        else:
            job.status = JobStatus.pending
        db.add(job)
        db.flush()

        response = JobResponse.model_validate(job)
        recipients = _eligible_student_user_ids(db, job) if job.status == JobStatus.active else []

    logger.info("User %s created job %s (%s)", actor.user_id, response.id, response.status.value)
    if recipients:
        _announce_job(notifier, response.id, company.name, response.title, recipients)
    return response


@router.get("/{job_id}", response_model=JobDetailResponse)
async def get_job(job_id: int, access: Access = Depends(require_permission("jobs", "read"))):
    actor = access.actor
    with get_db_session() as db:
        job = get_visible(db, JobPosting, job_id, job_scope(actor), "Job")
        response = JobDetailResponse.model_validate(job)
        if actor.is_student:
            response.has_applied = db.scalar(
                select(Application.id)
                .where(Application.job_id == job_id)
                .where(Application.student_id == actor.student_id)
                .where(Application.status != ApplicationStatus.withdrawn)
            ) is not None
        return response


@router.get("/{job_id}/eligibility", response_model=EligibilityResponse)
async def check_eligibility(
    job_id: int,
    student_id: Optional[int] = Query(None, description="Staff only; students check themselves"),
    access: Access = Depends(require_permission("jobs", "read")),
):
    """Report which eligibility criteria a student meets for a job."""
    actor = access.actor
    with get_db_session() as db:
        job = db.get(JobPosting, job_id)
        if job is None:
            raise NotFound("Job not found")

        if actor.is_student:
            if student_id is not None and student_id != actor.student_id:
                raise Forbidden("Students can only check their own eligibility")
            if job.status != JobStatus.active or actor.student is None:
                raise NotFound("Job not found")
            student = actor.student
        else:
            if student_id is None:
                raise ValidationFailed("student_id is required")
            student = get_visible(db, StudentProfile, student_id, student_scope(actor), "Student")

        result = evaluate_eligibility(student, job)
        return EligibilityResponse(job_id=job_id, eligible=result.eligible, reasons=list(result.reasons))


@router.put("/{job_id}", response_model=JobResponse)
async def update_job(
    job_id: int,
    data: JobUpdate,
    access: Access = Depends(require_permission("jobs", "update")),
):
    """
    Update a job. A null leaves a field unchanged, except for the optional
    eligibility limits, where an explicit null removes the limit.
    """
    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    for name in CLEARABLE_FIELDS & data.model_fields_set:
        if getattr(data, name) is None:
            changes[name] = None
    with get_db_session() as db:
        job = db.get(JobPosting, job_id)
        if job is None:
            raise NotFound("Job not found")
        _require_job_scope(job, access.actor, access.scope)
        if job.status == JobStatus.cancelled:
            raise ValidationFailed("Cancelled jobs cannot be edited")

        for name, value in changes.items():
            setattr(job, name, value)
        if job.salary_min is not None and job.salary_max is not None and job.salary_max < job.salary_min:
            raise ValidationFailed("Maximum salary must be greater than minimum salary")

        db.flush()
        return JobResponse.model_validate(job)


@router.delete("/{job_id}", response_model=MessageResponse)
async def delete_job(job_id: int, access: Access = Depends(require_permission("jobs", "delete"))):
    with get_db_session() as db:
        job = db.get(JobPosting, job_id)
        if job is None:
            raise NotFound("Job not found")
        if db.scalar(select(Application.id).where(Application.job_id == job_id).limit(1)) is not None:
            raise Conflict("Job has applications; cancel it instead")
        db.delete(job)

    logger.info("User %s deleted job %s", access.actor.user_id, job_id)
    return MessageResponse(message="Job deleted successfully")


@router.patch("/{job_id}/status", response_model=JobResponse)
async def update_job_status(
    job_id: int,
    data: JobStatusUpdate,
    actor: Actor = Depends(get_current_user),
    policy: PermissionPolicy = Depends(get_permission_policy),
    notifier: NotificationDispatcher = Depends(get_notification_dispatcher),
):
    """
    Move a job through its lifecycle.

    Publishing a pending job needs the approve grant; every other change
    needs the update grant.
    """
    with get_db_session() as db:
        job = db.get(JobPosting, job_id)
        if job is None:
            raise NotFound("Job not found")

        approving = job.status == JobStatus.pending and data.status == JobStatus.active
        action = "approve" if approving else "update"
        scope = policy.resolve_scope(actor.role, "jobs", action)
        if scope is None:
            raise Forbidden(f"You don't have permission to {action} jobs")
        _require_job_scope(job, actor, scope)

        check_job_transition(job.status, data.status).raise_if_denied()
        job.status = data.status
        if approving:
            job.approved_by = actor.user_id
            job.approved_at = utcnow()

        db.flush()
        response = JobResponse.model_validate(job)
        recipients = _eligible_student_user_ids(db, job) if approving else []
        company_name = job.company.name

    logger.info("User %s moved job %s to %s", actor.user_id, job_id, data.status.value)
    if recipients:
        _announce_job(notifier, job_id, company_name, response.title, recipients)
    return response


@router.post("/{job_id}/apply", response_model=ApplicationResponse, status_code=201)
async def apply_to_job(
    job_id: int,
    data: ApplicationCreate,
    access: Access = Depends(require_permission("applications", "create")),
):
    """
    Apply to an active job.

    Eligibility is evaluated with the same function that filters the job
    list. The duplicate check and the insert share one transaction, and the
    partial unique index on applications rejects a racing duplicate.
    """
    actor = access.actor
    if actor.student_id is None:
        raise ValidationFailed("Student profile not found")

    with get_db_session() as db:
        job = db.get(JobPosting, job_id)
        if job is None:
            raise NotFound("Job not found")
        if job.status != JobStatus.active:
            raise ValidationFailed("Job is not available for applications")
        if job.application_deadline is not None and job.application_deadline < utcnow():
            raise ValidationFailed("The application deadline has passed")

        student = db.get(StudentProfile, actor.student_id)
        if student.placement_status != PlacementStatus.active:
            raise IneligibleForResource("Only students open to placement can apply")
        result = evaluate_eligibility(student, job)
        if not result.eligible:
            raise IneligibleForResource("; ".join(result.reasons))

        existing = db.scalar(
            select(Application.id)
            .where(Application.job_id == job_id)
            .where(Application.student_id == student.id)
            .where(Application.status != ApplicationStatus.withdrawn)
        )
        if existing is not None:
            raise Conflict("You have already applied to this job")

        application = Application(
            job_id=job_id,
            student_id=student.id,
            cover_letter=data.cover_letter,
            resume_url=data.resume_url or student.resume_url,
            status=ApplicationStatus.submitted,
        )
        db.add(application)
        db.flush()

        logger.info("Student %s applied to job %s", student.id, job_id)
        return ApplicationResponse.model_validate(application)


@router.get("/{job_id}/applications", response_model=ApplicationListResponse)
async def list_job_applications(
    job_id: int,
    status: Optional[ApplicationStatus] = Query(None),
    paging: PageParams = Depends(pagination_params),
    access: Access = Depends(require_permission("applications", "read")),
):
    filters = [Application.job_id == job_id]
    if status:
        filters.append(Application.status == status)
    scope = application_scope(access.actor).narrowed(filters)

    with get_db_session() as db:
        if db.get(JobPosting, job_id) is None:
            raise NotFound("Job not found")
        rows, total = paginate(
            db, select(Application).options(*APPLICATION_OPTIONS), scope,
            paging.page, paging.page_size, order_by=(Application.applied_at.desc(), Application.id.desc()),
        )
        return ApplicationListResponse(
            applications=[ApplicationResponse.model_validate(a) for a in rows],
            **PageMeta.build(total, paging.page, paging.page_size)
        )
