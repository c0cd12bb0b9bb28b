#!/usr/bin/env python3
"""
Seed Script

Creates the departments, one account per staff role and a sample student.
Safe to run twice: existing departments and accounts are left alone.

Usage: python scripts/seed_data.py
"""
from sqlalchemy import select

from placement_portal.core.constants import UserRole
from placement_portal.db.postgres import get_db_session, init_database
from placement_portal.logging_config import configure_logging
from placement_portal.models import Department, User
from placement_portal.services.account_service import create_account

DEPARTMENTS = [
    ("CSE", "Computer Science and Engineering"),
    ("ECE", "Electronics and Communication Engineering"),
    ("EEE", "Electrical and Electronics Engineering"),
    ("ME", "Mechanical Engineering"),
    ("CE", "Civil Engineering"),
    ("IT", "Information Technology"),
]

STAFF_PASSWORD = "Admin@123"
STUDENT_PASSWORD = "Student@123"


def seed_departments(db) -> dict:
    by_code = {}
    for code, name in DEPARTMENTS:
        department = db.scalar(select(Department).where(Department.code == code))
        if department is None:
            department = Department(code=code, name=name)
            db.add(department)
            db.flush()
        by_code[code] = department
    return by_code


def seed_user(db, email: str, **fields) -> None:
    if db.scalar(select(User.id).where(User.email == email)) is not None:
        print(f"    = {email} already exists")
        return
    create_account(db, email=email, **fields)
    print(f"    + {email} ({fields['role'].value})")


def main():
    configure_logging()
    init_database()

    with get_db_session() as db:
        departments = seed_departments(db)
        print(f"Departments: {', '.join(sorted(departments))}")
        cse = departments["CSE"].id

        print("Users:")
        seed_user(db, "admin@placementcell.com", password=STAFF_PASSWORD, role=UserRole.admin,
                  first_name="System", last_name="Administrator")
        seed_user(db, "officer@placementcell.com", password=STAFF_PASSWORD, role=UserRole.dept_officer,
                  first_name="Placement", last_name="Officer", department_id=cse)
        seed_user(db, "coordinator@placementcell.com", password=STAFF_PASSWORD, role=UserRole.coordinator,
                  first_name="Department", last_name="Coordinator", department_id=cse)
        seed_user(db, "student@placementcell.com", password=STUDENT_PASSWORD, role=UserRole.student,
                  first_name="Sample", last_name="Student", department_id=cse,
                  roll_number="CSE2025001", degree="BTech", batch_year=2025, current_semester=7)

    print("Seed complete.")


if __name__ == "__main__":
    main()
