from __future__ import annotations

import os
import tempfile

_DB_DIR = tempfile.mkdtemp(prefix="placement-portal-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_DB_DIR, 'portal.db')}"
os.environ["JWT_SECRET_KEY"] = "test-secret"
os.environ["SMTP_HOST"] = ""

import pytest  # noqa: E402
from bson import ObjectId  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from placement_portal.core.auth import create_access_token  # noqa: E402
from placement_portal.core.constants import CompanyStatus, JobStatus, UserRole  # noqa: E402
from placement_portal.db.postgres import engine, get_db_session  # noqa: E402
from placement_portal.main import create_app  # noqa: E402
from placement_portal.models import Base, Company, Department, JobPosting, StudentProfile  # noqa: E402
from placement_portal.services.account_service import create_account  # noqa: E402
from placement_portal.services.file_storage import file_url, get_file_storage  # noqa: E402


class InMemoryFileStorage:
    def __init__(self) -> None:
        self.files = {}

    def store(self, data, filename, content_type, owner_user_id, kind):
        file_id = str(ObjectId())
        self.files[file_id] = {
            "filename": filename,
            "content_type": content_type,
            "data": data,
            "owner_user_id": owner_user_id,
            "kind": kind,
        }
        return file_url(file_id)

    def get(self, file_id):
        return self.files.get(file_id)


@pytest.fixture(autouse=True)
def reset_db() -> None:
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def storage() -> InMemoryFileStorage:
    return InMemoryFileStorage()


@pytest.fixture
def client(storage) -> TestClient:
    # No context manager: startup would try to reach MongoDB
    app = create_app()
    app.dependency_overrides[get_file_storage] = lambda: storage
    return TestClient(app)


def auth(user_id: int) -> dict:
    return {"Authorization": f"Bearer {create_access_token({'sub': str(user_id)})}"}


def make_department(code: str = "CSE", name: str = "Computer Science") -> int:
    with get_db_session() as db:
        department = Department(code=code, name=name)
        db.add(department)
        db.flush()
        return department.id


_counter = {"n": 0}


def make_user(role: UserRole, department_id: int = None, **profile) -> dict:
    """
    Create an account and return its ids. Student accounts accept profile
    overrides such as cgpa, active_backlogs, batch_year or degree.
    """
    _counter["n"] += 1
    n = _counter["n"]
    with get_db_session() as db:
        user = create_account(
            db,
            email=f"{role.value}{n}@college.edu",
            password="Password@123",
            role=role,
            first_name=role.value.title(),
            last_name=str(n),
            department_id=department_id,
            roll_number=f"R{n:04d}" if role == UserRole.student else None,
            degree=profile.pop("degree", "BTech") if role == UserRole.student else None,
            batch_year=profile.pop("batch_year", 2025) if role == UserRole.student else None,
        )
        student_id = None
        if user.student_profile is not None:
            for name, value in profile.items():
                setattr(user.student_profile, name, value)
            student_id = user.student_profile.id
        return {"user_id": user.id, "student_id": student_id, "email": user.email}


def make_company(name: str = "Acme Corp", status: CompanyStatus = CompanyStatus.approved) -> int:
    with get_db_session() as db:
        company = Company(name=name, status=status)
        db.add(company)
        db.flush()
        return company.id


def make_job(company_id: int, status: JobStatus = JobStatus.active, created_by: int = None, **criteria) -> int:
    with get_db_session() as db:
        job = JobPosting(
            company_id=company_id,
            title=criteria.pop("title", "Software Engineer"),
            description="Build and maintain backend services.",
            status=status,
            created_by=created_by,
            **criteria,
        )
        db.add(job)
        db.flush()
        return job.id


def student_profile(student_id: int) -> StudentProfile:
    with get_db_session() as db:
        return db.get(StudentProfile, student_id)
