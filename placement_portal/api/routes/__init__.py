"""
API Routes - Combines all route modules into single router.
"""

from fastapi import APIRouter

from placement_portal.api.routes.auth_routes import router as auth_router
from placement_portal.api.routes.user_routes import router as user_router
from placement_portal.api.routes.department_routes import router as department_router
from placement_portal.api.routes.student_routes import router as student_router
from placement_portal.api.routes.company_routes import router as company_router
from placement_portal.api.routes.job_routes import router as job_router
from placement_portal.api.routes.application_routes import router as application_router
from placement_portal.api.routes.interview_routes import router as interview_router
from placement_portal.api.routes.announcement_routes import router as announcement_router
from placement_portal.api.routes.notification_routes import router as notification_router
from placement_portal.api.routes.export_routes import router as export_router
from placement_portal.api.routes.analytics_routes import router as analytics_router
from placement_portal.api.routes.file_routes import router as file_router

# Main API router
api_router = APIRouter()

# Include all sub-routers
api_router.include_router(auth_router)
api_router.include_router(user_router)
api_router.include_router(department_router)
api_router.include_router(student_router)
api_router.include_router(company_router)
api_router.include_router(job_router)
api_router.include_router(application_router)
api_router.include_router(interview_router)
api_router.include_router(announcement_router)
api_router.include_router(notification_router)
api_router.include_router(export_router)
api_router.include_router(analytics_router)
api_router.include_router(file_router)
