"""
Analytics Routes

GET /analytics/overview - Placement and application counts for the caller's scope
GET /analytics/departments - Per-department placement counts
"""

from typing import List

from fastapi import APIRouter, Depends

from placement_portal.core.auth import Access, require_permission
from placement_portal.core.exceptions import Forbidden
from placement_portal.core.permissions import SCOPE_ALL, SCOPE_DEPT
from placement_portal.db.postgres import get_db_session
from placement_portal.schemas.schemas import DepartmentStatsResponse, OverviewResponse
from placement_portal.services import analytics_service

router = APIRouter(prefix="/analytics", tags=["Analytics"])


@router.get("/overview", response_model=OverviewResponse)
async def get_overview(access: Access = Depends(require_permission("analytics", "read"))):
    actor = access.actor
    with get_db_session() as db:
        stats = analytics_service.overview(
            db, access.scope, department_id=actor.department_id, student_id=actor.student_id
        )
    return OverviewResponse(**stats)


@router.get("/departments", response_model=List[DepartmentStatsResponse])
async def get_department_stats(access: Access = Depends(require_permission("analytics", "read"))):
    """Admins see every department; department staff see their own."""
    if access.scope == SCOPE_ALL:
        department_id = None
    elif access.scope == SCOPE_DEPT and access.actor.department_id is not None:
        department_id = access.actor.department_id
    else:
        raise Forbidden("Department statistics are available to staff only")

    with get_db_session() as db:
        return [DepartmentStatsResponse(**row) for row in analytics_service.department_breakdown(db, department_id)]
