"""
Placement Cell Portal - Main Application

FastAPI backend with:
- Relational store (PostgreSQL, SQLite for tests) for structured data
- MongoDB for uploaded documents
- JWT authentication
- Role-based permission policy with department scoping

Run: uvicorn placement_portal.main:app --reload
"""

import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

from placement_portal.api.routes import api_router
from placement_portal.core.config import get_settings
from placement_portal.core.exceptions import Conflict, PortalError
from placement_portal.core.permissions import PermissionPolicy
from placement_portal.db.mongodb import init_mongo_indexes, test_mongo_connection
from placement_portal.db.postgres import init_database, test_postgres_connection
from placement_portal.logging_config import configure_logging

logger = logging.getLogger(__name__)


def _error_body(detail, kind: str) -> dict:
    return {"success": False, "detail": detail, "error": kind}


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(PortalError)
    async def portal_error_handler(request: Request, exc: PortalError):
        return JSONResponse(status_code=exc.status_code, content=_error_body(exc.detail, exc.kind))

    @app.exception_handler(IntegrityError)
    async def integrity_error_handler(request: Request, exc: IntegrityError):
        logger.warning("Integrity error on %s %s: %s", request.method, request.url.path, exc.orig)
        error = Conflict("Duplicate or conflicting record")
        return JSONResponse(status_code=error.status_code, content=_error_body(error.detail, error.kind))

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content=_error_body(jsonable_encoder(exc.errors()), "ValidationFailed"),
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content=_error_body("Internal server error", "ServerError"))


def create_app(policy: PermissionPolicy = None) -> FastAPI:
    configure_logging()
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="""
        Role-based placement cell management.

        ## Features
        - **Authentication**: JWT-based auth, student self-registration
        - **Students**: Profiles, academic records, resume upload, verification
        - **Companies**: Recruiter records with approval workflow
        - **Jobs**: Postings with eligibility criteria, filtered per student
        - **Applications & Interviews**: Status pipeline with audit fields
        - **Announcements & Notifications**: Audience-targeted messaging
        - **Analytics & Export**: Placement counts and CSV exports
        """,
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        debug=settings.debug,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list or ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # One policy per process; route guards read it from app.state
    app.state.permission_policy = policy or PermissionPolicy.default()

    register_exception_handlers(app)
    app.include_router(api_router, prefix="/api")

    @app.on_event("startup")
    async def startup_event():
        init_database()
        try:
            init_mongo_indexes()
            logger.info("MongoDB indexes initialized")
        except Exception as e:
            logger.warning("MongoDB index initialization failed: %s", e)
        logger.info("%s started", settings.app_name)

    @app.get("/health", tags=["Health"])
    async def health_check():
        """Store reachability."""
        postgres_ok = test_postgres_connection()
        mongo_ok = test_mongo_connection()
        return {
            "status": "healthy" if postgres_ok else "degraded",
            "database": "connected" if postgres_ok else "disconnected",
            "mongodb": "connected" if mongo_ok else "disconnected",
        }

    return app


app = create_app()
