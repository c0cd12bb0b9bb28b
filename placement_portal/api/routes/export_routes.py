"""
Export Routes

GET /export/students - Students as CSV (filters: department, batch, placement status)
GET /export/applications - Applications as CSV (filters: job, status)

Rows are scoped exactly like the list endpoints.
"""

import logging
import time
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlalchemy import select
from sqlalchemy.orm import selectinload

from placement_portal.core.auth import Access, require_permission
from placement_portal.core.constants import ApplicationStatus, PlacementStatus
from placement_portal.core.visibility import application_scope, scoped_all, student_scope
from placement_portal.db.postgres import get_db_session
from placement_portal.models import Application, JobPosting, StudentProfile
from placement_portal.utils.csv_export import generate_csv

router = APIRouter(prefix="/export", tags=["Export"])
logger = logging.getLogger(__name__)

STUDENT_COLUMNS = [
    ("Roll Number", "roll_number"),
    ("Name", "name"),
    ("Email", "email"),
    ("Phone", "phone"),
    ("Department", "department"),
    ("Degree", "degree"),
    ("Batch Year", "batch_year"),
    ("CGPA", "cgpa"),
    ("10th %", "tenth_percentage"),
    ("12th %", "twelfth_percentage"),
    ("Backlogs", "active_backlogs"),
    ("Skills", "skills"),
    ("Placement Status", "placement_status"),
    ("Verified", "verified"),
]

APPLICATION_COLUMNS = [
    ("Application ID", "id"),
    ("Roll Number", "roll_number"),
    ("Student Name", "name"),
    ("Email", "email"),
    ("Company", "company"),
    ("Job Title", "job_title"),
    ("Status", "status"),
    ("Applied At", "applied_at"),
    ("Reviewed At", "reviewed_at"),
]


def _csv_response(content: str, prefix: str) -> Response:
    filename = f"{prefix}_export_{int(time.time())}.csv"
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


@router.get("/students")
async def export_students(
    department_id: Optional[int] = Query(None),
    batch_year: Optional[int] = Query(None),
    placement_status: Optional[PlacementStatus] = Query(None),
    access: Access = Depends(require_permission("reports", "export")),
):
    filters = []
    if department_id is not None:
        filters.append(StudentProfile.department_id == department_id)
    if batch_year is not None:
        filters.append(StudentProfile.batch_year == batch_year)
    if placement_status:
        filters.append(StudentProfile.placement_status == placement_status)

    stmt = select(StudentProfile).options(
        selectinload(StudentProfile.user),
        selectinload(StudentProfile.department),
        selectinload(StudentProfile.skills),
    )
    with get_db_session() as db:
        students = scoped_all(db, stmt, student_scope(access.actor).narrowed(filters), order_by=(StudentProfile.roll_number,))
        rows = [
            {
                "roll_number": s.roll_number,
                "name": s.user.full_name,
                "email": s.user.email,
                "phone": s.user.phone,
                "department": s.department.name if s.department else None,
                "degree": s.degree,
                "batch_year": s.batch_year,
                "cgpa": s.cgpa,
                "tenth_percentage": s.tenth_percentage,
                "twelfth_percentage": s.twelfth_percentage,
                "active_backlogs": s.active_backlogs,
                "skills": [sk.skill_name for sk in s.skills],
                "placement_status": s.placement_status,
                "verified": "Yes" if s.is_verified else "No",
            }
            for s in students
        ]

    logger.info("User %s exported %d students", access.actor.user_id, len(rows))
    return _csv_response(generate_csv(rows, STUDENT_COLUMNS), "students")


@router.get("/applications")
async def export_applications(
    job_id: Optional[int] = Query(None),
    status: Optional[ApplicationStatus] = Query(None),
    access: Access = Depends(require_permission("reports", "export")),
):
    filters = []
    if job_id is not None:
        filters.append(Application.job_id == job_id)
    if status:
        filters.append(Application.status == status)

    stmt = select(Application).options(
        selectinload(Application.job).selectinload(JobPosting.company),
        selectinload(Application.student).selectinload(StudentProfile.user),
    )
    with get_db_session() as db:
        applications = scoped_all(
            db, stmt, application_scope(access.actor).narrowed(filters),
            order_by=(Application.applied_at.desc(), Application.id.desc()),
        )
        rows = [
            {
                "id": a.id,
                "roll_number": a.student.roll_number,
                "name": a.student.user.full_name,
                "email": a.student.user.email,
                "company": a.job.company.name,
                "job_title": a.job.title,
                "status": a.status,
                "applied_at": a.applied_at,
                "reviewed_at": a.reviewed_at,
            }
            for a in applications
        ]

    logger.info("User %s exported %d applications", access.actor.user_id, len(rows))
    return _csv_response(generate_csv(rows, APPLICATION_COLUMNS), "applications")
