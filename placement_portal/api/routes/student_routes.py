"""
Student Routes

GET /students - List students in scope (filters: department, batch, degree, placement status, search)
GET /students/me - Get own profile
PUT /students/me - Update own contact details
POST /students/me/resume - Upload resume (PDF/DOC/DOCX)
POST /students/me/skills - Add skill
POST /students/me/projects - Add project
POST /students/me/certifications - Add certification
POST /students/me/internships - Add internship
DELETE /students/me/{section}/{item_id} - Remove a skill, project, certification or internship
GET /students/{student_id} - Get a student profile
PUT /students/{student_id} - Update a student profile (academic fields for staff)
PATCH /students/{student_id}/verify - Verify (approve) a student profile
"""

import logging
from enum import Enum
from typing import Optional

from fastapi import APIRouter, Depends, File, Query, UploadFile
from sqlalchemy import or_, select
from sqlalchemy.orm import selectinload

from placement_portal.core.auth import Access, require_permission
from placement_portal.core.constants import NotificationType, PlacementStatus
from placement_portal.core.exceptions import Forbidden, NotFound
from placement_portal.core.permissions import SCOPE_OWN
from placement_portal.core.visibility import get_visible, paginate, student_scope
from placement_portal.db.postgres import get_db_session
from placement_portal.models import (
    StudentCertification, StudentInternship, StudentProfile, StudentProject, StudentSkill, User
)
from placement_portal.schemas.schemas import (
    CertificationCreate, CertificationResponse, FileUploadResponse, InternshipCreate,
    InternshipResponse, MessageResponse, PageMeta, ProjectCreate, ProjectResponse, SkillCreate,
    SkillResponse, StudentAcademicUpdate, StudentListResponse, StudentResponse, StudentSelfUpdate,
    StudentSummary, StudentVerifyRequest
)
from placement_portal.services.file_storage import FileStorageService, get_file_storage
from placement_portal.services.notification_service import (
    NotificationDispatcher, get_notification_dispatcher
)
from placement_portal.utils.file_upload import RESUME_EXTENSIONS, read_upload
from placement_portal.utils.pagination import PageParams, pagination_params

router = APIRouter(prefix="/students", tags=["Students"])
logger = logging.getLogger(__name__)

DETAIL_OPTIONS = (
    selectinload(StudentProfile.user),
    selectinload(StudentProfile.department),
    selectinload(StudentProfile.skills),
    selectinload(StudentProfile.projects),
    selectinload(StudentProfile.certifications),
    selectinload(StudentProfile.internships),
)

# Contact fields live on the user row, everything else on the profile
USER_FIELDS = {"phone"}
SELF_FIELDS = set(StudentSelfUpdate.model_fields)


class Section(str, Enum):
    skills = "skills"
    projects = "projects"
    certifications = "certifications"
    internships = "internships"


SECTION_MODELS = {
    Section.skills: StudentSkill,
    Section.projects: StudentProject,
    Section.certifications: StudentCertification,
    Section.internships: StudentInternship,
}


def _load_detail(db, student_id: int) -> StudentProfile:
    student = db.scalar(select(StudentProfile).options(*DETAIL_OPTIONS).where(StudentProfile.id == student_id))
    if student is None:
        raise NotFound("Student not found")
    return student


def _own_student_id(access: Access) -> int:
    actor = access.actor
    if not actor.is_student:
        raise Forbidden("Students only")
    if actor.student_id is None:
        raise NotFound("Student profile not found")
    return actor.student_id


def _apply_profile_changes(student: StudentProfile, changes: dict) -> None:
    for name, value in changes.items():
        if name in USER_FIELDS:
            setattr(student.user, name, value)
        else:
            setattr(student, name, value)


@router.get("", response_model=StudentListResponse)
async def list_students(
    department_id: Optional[int] = Query(None),
    batch_year: Optional[int] = Query(None),
    degree: Optional[str] = Query(None),
    placement_status: Optional[PlacementStatus] = Query(None),
    is_verified: Optional[bool] = Query(None),
    search: Optional[str] = Query(None, description="Search in roll number, name and email"),
    paging: PageParams = Depends(pagination_params),
    access: Access = Depends(require_permission("students", "read")),
):
    filters = []
    if department_id is not None:
        filters.append(StudentProfile.department_id == department_id)
    if batch_year is not None:
        filters.append(StudentProfile.batch_year == batch_year)
    if degree:
        filters.append(StudentProfile.degree == degree)
    if placement_status:
        filters.append(StudentProfile.placement_status == placement_status)
    if is_verified is not None:
        filters.append(StudentProfile.is_verified.is_(is_verified))
    if search:
        pattern = f"%{search}%"
        filters.append(or_(
            StudentProfile.roll_number.ilike(pattern),
            StudentProfile.user.has(or_(
                User.first_name.ilike(pattern), User.last_name.ilike(pattern), User.email.ilike(pattern)
            )),
        ))

    scope = student_scope(access.actor).narrowed(filters)
    with get_db_session() as db:
        rows, total = paginate(
            db, select(StudentProfile).options(selectinload(StudentProfile.user)), scope,
            paging.page, paging.page_size, order_by=(StudentProfile.roll_number,),
        )
        return StudentListResponse(
            students=[StudentSummary.model_validate(s) for s in rows],
            **PageMeta.build(total, paging.page, paging.page_size)
        )


@router.get("/me", response_model=StudentResponse)
async def get_my_profile(access: Access = Depends(require_permission("students", "read"))):
    student_id = _own_student_id(access)
    with get_db_session() as db:
        return StudentResponse.model_validate(_load_detail(db, student_id))


@router.put("/me", response_model=StudentResponse)
async def update_my_profile(
    data: StudentSelfUpdate,
    access: Access = Depends(require_permission("students", "update")),
):
    student_id = _own_student_id(access)
    with get_db_session() as db:
        student = _load_detail(db, student_id)
        _apply_profile_changes(student, data.model_dump(exclude_unset=True, exclude_none=True))
        return StudentResponse.model_validate(student)


@router.post("/me/resume", response_model=FileUploadResponse)
async def upload_resume(
    file: UploadFile = File(...),
    access: Access = Depends(require_permission("students", "update")),
    storage: FileStorageService = Depends(get_file_storage),
):
    """Upload a resume; the stored file's URL becomes the profile's resume_url."""
    student_id = _own_student_id(access)
    content, filename = await read_upload(file, RESUME_EXTENSIONS)
    url = storage.store(content, filename, file.content_type, access.actor.user_id, "resume")

    with get_db_session() as db:
        student = db.get(StudentProfile, student_id)
        student.resume_url = url

    return FileUploadResponse(file_id=url.rsplit("/", 1)[-1], filename=filename, url=url, size=len(content))


def _add_section_item(access: Access, model, data):
    student_id = _own_student_id(access)
    with get_db_session() as db:
        item = model(student_id=student_id, **data.model_dump())
        db.add(item)
        db.flush()
        return item


@router.post("/me/skills", response_model=SkillResponse, status_code=201)
async def add_skill(data: SkillCreate, access: Access = Depends(require_permission("students", "update"))):
    return SkillResponse.model_validate(_add_section_item(access, StudentSkill, data))


@router.post("/me/projects", response_model=ProjectResponse, status_code=201)
async def add_project(data: ProjectCreate, access: Access = Depends(require_permission("students", "update"))):
    return ProjectResponse.model_validate(_add_section_item(access, StudentProject, data))


@router.post("/me/certifications", response_model=CertificationResponse, status_code=201)
async def add_certification(
    data: CertificationCreate,
    access: Access = Depends(require_permission("students", "update")),
):
    return CertificationResponse.model_validate(_add_section_item(access, StudentCertification, data))


@router.post("/me/internships", response_model=InternshipResponse, status_code=201)
async def add_internship(
    data: InternshipCreate,
    access: Access = Depends(require_permission("students", "update")),
):
    return InternshipResponse.model_validate(_add_section_item(access, StudentInternship, data))


@router.delete("/me/{section}/{item_id}", response_model=MessageResponse)
async def remove_section_item(
    section: Section,
    item_id: int,
    access: Access = Depends(require_permission("students", "update")),
):
    student_id = _own_student_id(access)
    model = SECTION_MODELS[section]
    with get_db_session() as db:
        item = db.get(model, item_id)
        if item is None or item.student_id != student_id:
            raise NotFound(f"Item not found in {section.value}")
        db.delete(item)

    return MessageResponse(message=f"Removed from {section.value}")


@router.get("/{student_id}", response_model=StudentResponse)
async def get_student(student_id: int, access: Access = Depends(require_permission("students", "read"))):
    with get_db_session() as db:
        get_visible(db, StudentProfile, student_id, student_scope(access.actor), "Student")
        return StudentResponse.model_validate(_load_detail(db, student_id))


@router.put("/{student_id}", response_model=StudentResponse)
async def update_student(
    student_id: int,
    data: StudentAcademicUpdate,
    access: Access = Depends(require_permission("students", "update")),
):
    """
    Update a student profile.

    Staff with the update grant may change academic fields. A student may
    only change the contact fields of their own profile.
    """
    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    if access.scope == SCOPE_OWN:
        if student_id != access.actor.student_id:
            raise Forbidden("Not authorized to update this student")
        restricted = set(changes) - SELF_FIELDS
        if restricted:
            raise Forbidden(f"Students cannot change: {', '.join(sorted(restricted))}")

    with get_db_session() as db:
        get_visible(db, StudentProfile, student_id, student_scope(access.actor), "Student")
        student = _load_detail(db, student_id)
        _apply_profile_changes(student, changes)
        logger.info("User %s updated student %s: %s", access.actor.user_id, student_id, sorted(changes))
        return StudentResponse.model_validate(student)


@router.patch("/{student_id}/verify", response_model=StudentResponse)
async def verify_student(
    student_id: int,
    data: StudentVerifyRequest,
    access: Access = Depends(require_permission("students", "approve")),
    notifier: NotificationDispatcher = Depends(get_notification_dispatcher),
):
    with get_db_session() as db:
        get_visible(db, StudentProfile, student_id, student_scope(access.actor), "Student")
        student = _load_detail(db, student_id)
        student.is_verified = data.is_verified
        response = StudentResponse.model_validate(student)

    if data.is_verified:
        notifier.dispatch([response.user_id], NotificationType.profile_update, {
            "title": "Profile Verified",
            "message": "Your placement profile has been verified by the placement cell.",
            "link": "/profile",
        })
    return response
