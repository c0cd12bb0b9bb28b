"""
Visibility Filter - which rows may the acting user see?

Each builder returns a `Scope`: SQL joins and clauses for what the database
can filter, plus an optional row predicate for checks evaluated in Python
(job eligibility, JSON list membership). A handler builds one scope per
request and runs both its page query and its count through `paginate()`, so
the reported total always matches the rows that can be returned.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, List, Optional, Tuple

from sqlalchemy import false, func, or_, select
from sqlalchemy.orm import Session

from placement_portal.core.auth import Actor
from placement_portal.core.constants import JobStatus, PlacementStatus, UserRole
from placement_portal.core.eligibility import is_eligible
from placement_portal.core.exceptions import Forbidden, NotFound
from placement_portal.models import (
    Announcement, Application, Interview, JobPosting, StudentProfile, User, utcnow
)


@dataclass
class Scope:
    joins: List[Any] = field(default_factory=list)
    clauses: List[Any] = field(default_factory=list)
    row_filter: Optional[Callable[[Any], bool]] = None

    def apply(self, stmt):
        for target in self.joins:
            stmt = stmt.join(target)
        for clause in self.clauses:
            stmt = stmt.where(clause)
        return stmt

    def allows(self, row) -> bool:
        return self.row_filter is None or self.row_filter(row)

    def narrowed(self, clauses=(), row_filter: Optional[Callable[[Any], bool]] = None) -> "Scope":
        """A copy of this scope with extra request filters ANDed in."""
        base = self.row_filter
        combined = base or row_filter
        if base is not None and row_filter is not None:
            def combined(row):
                return base(row) and row_filter(row)
        return Scope(
            joins=list(self.joins),
            clauses=list(self.clauses) + list(clauses),
            row_filter=combined,
        )


UNRESTRICTED = Scope()


def _nothing() -> Scope:
    return Scope(clauses=[false()])


# ============================================================
# SCOPE BUILDERS
# ============================================================

def application_scope(actor: Actor) -> Scope:
    if actor.is_admin:
        return UNRESTRICTED
    if actor.is_student:
        if actor.student_id is None:
            return _nothing()
        return Scope(clauses=[Application.student_id == actor.student_id])
    if actor.department_id is None:
        return _nothing()
    return Scope(
        joins=[Application.student],
        clauses=[StudentProfile.department_id == actor.department_id],
    )


def interview_scope(actor: Actor) -> Scope:
    if actor.is_admin:
        return UNRESTRICTED
    if actor.is_student:
        if actor.student_id is None:
            return _nothing()
        return Scope(
            joins=[Interview.application],
            clauses=[Application.student_id == actor.student_id],
        )
    if actor.department_id is None:
        return _nothing()
    return Scope(
        joins=[Interview.application, Application.student],
        clauses=[StudentProfile.department_id == actor.department_id],
    )


def student_scope(actor: Actor) -> Scope:
    if actor.is_admin:
        return UNRESTRICTED
    if actor.is_student:
        if actor.student_id is None:
            return _nothing()
        return Scope(clauses=[StudentProfile.id == actor.student_id])
    if actor.department_id is None:
        return _nothing()
    return Scope(clauses=[StudentProfile.department_id == actor.department_id])


def user_scope(actor: Actor) -> Scope:
    if actor.is_admin:
        return UNRESTRICTED
    if actor.is_department_staff and actor.department_id is not None:
        return Scope(clauses=[User.department_id == actor.department_id])
    return Scope(clauses=[User.id == actor.user_id])


def job_scope(actor: Actor, now: Optional[datetime] = None) -> Scope:
    """
    Students see the jobs they could apply to right now: active, before the
    deadline, eligible by the same `is_eligible` the apply step uses, and
    nothing at all once they are no longer open to placement. Department
    staff see jobs open to their department (a job without a department
    list is open to all).
    """
    if actor.is_admin:
        return UNRESTRICTED
    if actor.is_student:
        student = actor.student
        if student is None or student.placement_status != PlacementStatus.active:
            return _nothing()
        now = now or utcnow()
        return Scope(
            clauses=[
                JobPosting.status == JobStatus.active,
                or_(JobPosting.application_deadline.is_(None), JobPosting.application_deadline >= now),
            ],
            row_filter=lambda job: is_eligible(student, job),
        )
    department_id = actor.department_id
    if department_id is None:
        return _nothing()
    return Scope(row_filter=lambda job: job_open_to_department(job, department_id))


def job_open_to_department(job, department_id: int) -> bool:
    departments = job.eligible_departments or []
    return not departments or department_id in departments


def announcement_scope(actor: Actor, now: datetime) -> Scope:
    """Published, inside the publication window, and addressed to the actor."""
    clauses = [
        Announcement.published.is_(True),
        or_(Announcement.published_at.is_(None), Announcement.published_at <= now),
        or_(Announcement.expires_at.is_(None), Announcement.expires_at > now),
    ]
    if actor.is_admin:
        return Scope(clauses=clauses)

    batch_year = actor.student.batch_year if actor.student else None
    return Scope(
        clauses=clauses,
        row_filter=lambda announcement: addressed_to(announcement, actor.role, actor.department_id, batch_year),
    )


def addressed_to(announcement, role, department_id: Optional[int], batch_year: Optional[int]) -> bool:
    """Audience match; an empty target list does not restrict."""
    roles = announcement.target_roles or []
    if roles and getattr(role, "value", role) not in roles:
        return False
    departments = announcement.target_departments or []
    if departments and department_id not in departments:
        return False
    batches = announcement.target_batches or []
    if batches and getattr(role, "value", role) == UserRole.student.value and batch_year not in batches:
        return False
    return True


# ============================================================
# QUERY HELPERS
# ============================================================

def paginate(db: Session, stmt, scope: Scope, page: int, page_size: int, order_by=()) -> Tuple[list, int]:
    """
    Run `stmt` restricted by `scope`, returning (rows for the page, total).

    Without a row predicate the count is a SQL COUNT over the same scoped
    statement. With one, rows are filtered in Python first and the page is
    sliced from the filtered list.
    """
    scoped = scope.apply(stmt)
    offset = (page - 1) * page_size

    if scope.row_filter is None:
        total = db.scalar(select(func.count()).select_from(scoped.order_by(None).subquery()))
        rows = db.scalars(scoped.order_by(*order_by).limit(page_size).offset(offset)).unique().all()
        return list(rows), total or 0

    rows = [row for row in db.scalars(scoped.order_by(*order_by)).unique().all() if scope.row_filter(row)]
    return rows[offset:offset + page_size], len(rows)


def scoped_all(db: Session, stmt, scope: Scope, order_by=()) -> list:
    rows = db.scalars(scope.apply(stmt).order_by(*order_by)).unique().all()
    return [row for row in rows if scope.allows(row)]


def get_visible(db: Session, model, row_id: int, scope: Scope, label: str = "Resource"):
    """
    Fetch one row by id through `scope`.

    Raises NotFound when the row does not exist and Forbidden when it exists
    but lies outside the actor's scope.
    """
    row = db.get(model, row_id)
    if row is None:
        raise NotFound(f"{label} not found")
    if scope.joins or scope.clauses:
        visible = db.scalar(scope.apply(select(model.id)).where(model.id == row_id))
        if visible is None:
            raise Forbidden(f"Not authorized to access this {label.lower()}")
    if not scope.allows(row):
        raise Forbidden(f"Not authorized to access this {label.lower()}")
    return row
