"""
Account Service - create users together with their student profile.

Runs inside the caller's session so the user row and the profile row
commit or roll back together.
"""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from placement_portal.core.auth import hash_password
from placement_portal.core.constants import DEGREE_TYPES, UserRole
from placement_portal.core.exceptions import Conflict, ValidationFailed
from placement_portal.models import Department, StudentProfile, User


def create_account(
    db: Session,
    email: str,
    password: str,
    role: UserRole,
    first_name: str,
    last_name: str = "",
    phone: Optional[str] = None,
    department_id: Optional[int] = None,
    roll_number: Optional[str] = None,
    degree: Optional[str] = None,
    batch_year: Optional[int] = None,
    current_semester: int = 1,
) -> User:
    email = email.lower()
    if db.scalar(select(User.id).where(User.email == email)) is not None:
        raise Conflict("Email already registered")

    if department_id is not None and db.get(Department, department_id) is None:
        raise ValidationFailed("Department does not exist")

    user = User(
        email=email,
        password_hash=hash_password(password),
        role=UserRole(role),
        first_name=first_name,
        last_name=last_name or "",
        phone=phone,
        department_id=department_id,
    )
    db.add(user)

    if user.role == UserRole.student:
        if degree not in DEGREE_TYPES:
            raise ValidationFailed(f"Degree must be one of: {', '.join(DEGREE_TYPES)}")
        if db.scalar(select(StudentProfile.id).where(StudentProfile.roll_number == roll_number)) is not None:
            raise Conflict("Roll number already registered")
        user.student_profile = StudentProfile(
            roll_number=roll_number,
            degree=degree,
            department_id=department_id,
            batch_year=batch_year,
            current_semester=current_semester,
        )

    db.flush()
    return user
