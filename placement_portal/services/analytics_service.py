"""
Analytics Service - placement counts for the dashboard.

Every query is narrowed to the caller's scope: all rows for admins, the
caller's department for department staff, the caller's own rows for students.
"""

from datetime import date
from typing import List, Optional

from sqlalchemy import case, func, select
from sqlalchemy.orm import Session

from placement_portal.core.constants import ApplicationStatus, InterviewStatus, JobStatus, PlacementStatus
from placement_portal.core.permissions import SCOPE_DEPT, SCOPE_OWN
from placement_portal.models import Application, Department, Interview, JobPosting, StudentProfile


def _placement_rate(placed: int, total: int) -> float:
    return round(placed * 100.0 / total, 1) if total else 0.0


def overview(db: Session, scope: str, department_id: Optional[int] = None, student_id: Optional[int] = None) -> dict:
    students = select(StudentProfile.id)
    applications = select(Application.id, Application.status).join(Application.student)
    interviews = (
        select(Interview.id)
        .join(Interview.application)
        .join(Application.student)
        .where(Interview.status.in_([InterviewStatus.scheduled, InterviewStatus.rescheduled]))
        .where(Interview.scheduled_date >= date.today())
    )

    if scope == SCOPE_DEPT:
        students = students.where(StudentProfile.department_id == department_id)
        applications = applications.where(StudentProfile.department_id == department_id)
        interviews = interviews.where(StudentProfile.department_id == department_id)
    elif scope == SCOPE_OWN:
        students = students.where(StudentProfile.id == student_id)
        applications = applications.where(Application.student_id == student_id)
        interviews = interviews.where(Application.student_id == student_id)

    total_students = db.scalar(select(func.count()).select_from(students.subquery())) or 0
    placed_students = db.scalar(
        select(func.count()).select_from(
            students.where(StudentProfile.placement_status == PlacementStatus.placed).subquery()
        )
    ) or 0

    by_status = {status.value: 0 for status in ApplicationStatus}
    app_rows = applications.subquery()
    for status, count in db.execute(select(app_rows.c.status, func.count()).group_by(app_rows.c.status)):
        by_status[ApplicationStatus(status).value] = count

    active_jobs = db.scalar(
        select(func.count(JobPosting.id)).where(JobPosting.status == JobStatus.active)
    ) or 0

    return {
        "scope": scope,
        "total_students": total_students,
        "placed_students": placed_students,
        "placement_rate": _placement_rate(placed_students, total_students),
        "active_jobs": active_jobs,
        "total_applications": sum(by_status.values()),
        "applications_by_status": by_status,
        "upcoming_interviews": db.scalar(select(func.count()).select_from(interviews.subquery())) or 0,
    }


def department_breakdown(db: Session, department_id: Optional[int] = None) -> List[dict]:
    """Per-department student and placement counts, optionally for one department."""
    placed = func.sum(case((StudentProfile.placement_status == PlacementStatus.placed, 1), else_=0))
    stmt = (
        select(Department.id, Department.code, Department.name, func.count(StudentProfile.id), placed)
        .outerjoin(StudentProfile, StudentProfile.department_id == Department.id)
        .group_by(Department.id, Department.code, Department.name)
        .order_by(Department.code)
    )
    if department_id is not None:
        stmt = stmt.where(Department.id == department_id)

    results = []
    for dept_id, code, name, total, placed_count in db.execute(stmt):
        placed_count = int(placed_count or 0)
        results.append({
            "id": dept_id,
            "code": code,
            "name": name,
            "total_students": total,
            "placed_students": placed_count,
            "placement_rate": _placement_rate(placed_count, total),
        })
    return results
