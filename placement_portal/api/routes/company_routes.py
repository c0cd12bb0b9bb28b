"""
Company Routes

GET /companies - List companies (filters: status, industry, search)
POST /companies - Create company (admin: approved, others: pending approval)
GET /companies/{company_id} - Get company details
PUT /companies/{company_id} - Update company (admin or creator)
DELETE /companies/{company_id} - Delete company without job postings (admin)
PATCH /companies/{company_id}/status - Approve, reject or deactivate
POST /companies/{company_id}/logo - Upload company logo
POST /companies/{company_id}/contacts - Add contact
DELETE /companies/{company_id}/contacts/{contact_id} - Remove contact
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Query, UploadFile
from sqlalchemy import or_, select, update
from sqlalchemy.orm import selectinload

from placement_portal.core.auth import Access, Actor, require_permission
from placement_portal.core.constants import CompanyStatus
from placement_portal.core.exceptions import Conflict, Forbidden, NotFound
from placement_portal.core.visibility import UNRESTRICTED, get_visible, paginate
from placement_portal.db.postgres import get_db_session
from placement_portal.models import Company, CompanyContact, JobPosting, utcnow
from placement_portal.schemas.schemas import (
    CompanyCreate, CompanyListResponse, CompanyResponse, CompanyStatusUpdate, CompanyUpdate,
    ContactCreate, ContactResponse, FileUploadResponse, MessageResponse, PageMeta
)
from placement_portal.services.file_storage import FileStorageService, get_file_storage
from placement_portal.utils.file_upload import IMAGE_EXTENSIONS, read_upload
from placement_portal.utils.pagination import PageParams, pagination_params

router = APIRouter(prefix="/companies", tags=["Companies"])
logger = logging.getLogger(__name__)

APPROVED_STATUSES = (CompanyStatus.approved, CompanyStatus.active)


def _editable_company(db, company_id: int, actor: Actor) -> Company:
    """Company the actor may edit: admins edit any, others only their own."""
    company = get_visible(db, Company, company_id, UNRESTRICTED, "Company")
    if not actor.is_admin and company.created_by != actor.user_id:
        raise Forbidden("Only the creator or an administrator can modify this company")
    return company


def _add_contact(db, company: Company, data: ContactCreate) -> CompanyContact:
    if data.is_primary:
        db.execute(
            update(CompanyContact)
            .where(CompanyContact.company_id == company.id)
            .values(is_primary=False)
        )
    contact = CompanyContact(company_id=company.id, **data.model_dump())
    db.add(contact)
    return contact


@router.get("", response_model=CompanyListResponse)
async def list_companies(
    status: Optional[CompanyStatus] = Query(None),
    industry: Optional[str] = Query(None),
    search: Optional[str] = Query(None, description="Search in name and industry"),
    paging: PageParams = Depends(pagination_params),
    access: Access = Depends(require_permission("companies", "read")),
):
    filters = []
    if status:
        filters.append(Company.status == status)
    if industry:
        filters.append(Company.industry.ilike(f"%{industry}%"))
    if search:
        pattern = f"%{search}%"
        filters.append(or_(Company.name.ilike(pattern), Company.industry.ilike(pattern)))

    scope = UNRESTRICTED.narrowed(filters)
    with get_db_session() as db:
        rows, total = paginate(
            db, select(Company).options(selectinload(Company.contacts)), scope,
            paging.page, paging.page_size, order_by=(Company.name, Company.id),
        )
        return CompanyListResponse(
            companies=[CompanyResponse.model_validate(c) for c in rows],
            **PageMeta.build(total, paging.page, paging.page_size)
        )


@router.post("", response_model=CompanyResponse, status_code=201)
async def create_company(
    data: CompanyCreate,
    access: Access = Depends(require_permission("companies", "create")),
):
    """Create a company. Companies added by non-admins wait for approval."""
    actor = access.actor
    now = utcnow()
    with get_db_session() as db:
        company = Company(
            **data.model_dump(exclude={"contacts"}),
            created_by=actor.user_id,
            status=CompanyStatus.approved if actor.is_admin else CompanyStatus.pending,
        )
        if actor.is_admin:
            company.approved_by = actor.user_id
            company.approved_at = now
        db.add(company)
        db.flush()

        # At most one primary contact: the last one flagged wins
        last_primary = max((i for i, c in enumerate(data.contacts) if c.is_primary), default=None)
        for i, contact in enumerate(data.contacts):
            company.contacts.append(CompanyContact(
                **contact.model_dump(exclude={"is_primary"}),
                is_primary=(i == last_primary),
            ))

        db.flush()
        logger.info("User %s created company %s (%s)", actor.user_id, company.id, company.status.value)
        return CompanyResponse.model_validate(company)


@router.get("/{company_id}", response_model=CompanyResponse)
async def get_company(company_id: int, access: Access = Depends(require_permission("companies", "read"))):
    with get_db_session() as db:
        company = get_visible(db, Company, company_id, UNRESTRICTED, "Company")
        return CompanyResponse.model_validate(company)


@router.put("/{company_id}", response_model=CompanyResponse)
async def update_company(
    company_id: int,
    data: CompanyUpdate,
    access: Access = Depends(require_permission("companies", "update")),
):
    with get_db_session() as db:
        company = _editable_company(db, company_id, access.actor)
        for name, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
            setattr(company, name, value)
        return CompanyResponse.model_validate(company)


@router.delete("/{company_id}", response_model=MessageResponse)
async def delete_company(company_id: int, access: Access = Depends(require_permission("companies", "delete"))):
    with get_db_session() as db:
        company = db.get(Company, company_id)
        if company is None:
            raise NotFound("Company not found")
        if db.scalar(select(JobPosting.id).where(JobPosting.company_id == company_id).limit(1)) is not None:
            raise Conflict("Company has job postings; deactivate it instead")
        db.delete(company)

    logger.info("User %s deleted company %s", access.actor.user_id, company_id)
    return MessageResponse(message="Company deleted successfully")


@router.patch("/{company_id}/status", response_model=CompanyResponse)
async def update_company_status(
    company_id: int,
    data: CompanyStatusUpdate,
    access: Access = Depends(require_permission("companies", "approve")),
):
    """
    Change a company's status. Approving records who approved it and when.

    Companies are not owned by a department, so a department-scoped approval
    grant covers every company.
    """
    with get_db_session() as db:
        company = get_visible(db, Company, company_id, UNRESTRICTED, "Company")
        company.status = data.status
        if data.status in APPROVED_STATUSES and company.approved_by is None:
            company.approved_by = access.actor.user_id
            company.approved_at = utcnow()
        logger.info("User %s set company %s to %s", access.actor.user_id, company_id, data.status.value)
        return CompanyResponse.model_validate(company)


@router.post("/{company_id}/logo", response_model=FileUploadResponse)
async def upload_logo(
    company_id: int,
    file: UploadFile = File(...),
    access: Access = Depends(require_permission("companies", "update")),
    storage: FileStorageService = Depends(get_file_storage),
):
    with get_db_session() as db:
        _editable_company(db, company_id, access.actor)

    content, filename = await read_upload(file, IMAGE_EXTENSIONS)
    url = storage.store(content, filename, file.content_type, access.actor.user_id, "logo")

    with get_db_session() as db:
        db.get(Company, company_id).logo_url = url

    return FileUploadResponse(file_id=url.rsplit("/", 1)[-1], filename=filename, url=url, size=len(content))


@router.post("/{company_id}/contacts", response_model=ContactResponse, status_code=201)
async def add_contact(
    company_id: int,
    data: ContactCreate,
    access: Access = Depends(require_permission("companies", "update")),
):
    """Add a contact. A new primary contact replaces the previous primary."""
    with get_db_session() as db:
        company = _editable_company(db, company_id, access.actor)
        contact = _add_contact(db, company, data)
        db.flush()
        return ContactResponse.model_validate(contact)


@router.delete("/{company_id}/contacts/{contact_id}", response_model=MessageResponse)
async def delete_contact(
    company_id: int,
    contact_id: int,
    access: Access = Depends(require_permission("companies", "update")),
):
    with get_db_session() as db:
        _editable_company(db, company_id, access.actor)
        contact = db.get(CompanyContact, contact_id)
        if contact is None or contact.company_id != company_id:
            raise NotFound("Contact not found")
        db.delete(contact)

    return MessageResponse(message="Contact removed")
