"""
Department Routes

GET /departments - List departments
POST /departments - Create department (admin)
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy import select

from placement_portal.core.auth import Access, require_permission
from placement_portal.core.exceptions import Conflict
from placement_portal.db.postgres import get_db_session
from placement_portal.models import Department
from placement_portal.schemas.schemas import DepartmentCreate, DepartmentResponse

router = APIRouter(prefix="/departments", tags=["Departments"])


@router.get("", response_model=List[DepartmentResponse])
async def list_departments(access: Access = Depends(require_permission("departments", "read"))):
    with get_db_session() as db:
        departments = db.scalars(select(Department).order_by(Department.code)).all()
        return [DepartmentResponse.model_validate(d) for d in departments]


@router.post("", response_model=DepartmentResponse, status_code=201)
async def create_department(
    request: DepartmentCreate,
    access: Access = Depends(require_permission("departments", "create")),
):
    code = request.code.strip().upper()
    with get_db_session() as db:
        if db.scalar(select(Department.id).where(Department.code == code)) is not None:
            raise Conflict(f"Department {code} already exists")
        department = Department(code=code, name=request.name.strip())
        db.add(department)
        db.flush()
        return DepartmentResponse.model_validate(department)
