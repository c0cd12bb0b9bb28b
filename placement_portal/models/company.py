from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from placement_portal.core.constants import CompanyStatus
from placement_portal.models.base import Base, TimestampMixin, enum_column


class Company(TimestampMixin, Base):
    """Recruiter entity. New companies wait for approval unless an admin adds them."""
    __tablename__ = "companies"

    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False, index=True)
    website = Column(String(500))
    industry = Column(String(100))
    description = Column(Text)
    address = Column(Text)
    city = Column(String(100))
    state = Column(String(100))
    country = Column(String(100), default="India")
    logo_url = Column(String(500))

    status = enum_column(CompanyStatus, nullable=False, default=CompanyStatus.pending, index=True)
    created_by = Column(Integer, ForeignKey("users.id", ondelete="RESTRICT"))
    approved_by = Column(Integer, ForeignKey("users.id", ondelete="RESTRICT"))
    approved_at = Column(DateTime)

    contacts = relationship("CompanyContact", cascade="all, delete-orphan", order_by="CompanyContact.id")
    job_postings = relationship("JobPosting", back_populates="company")

    def __repr__(self):
        return f"<Company {self.name}>"


class CompanyContact(Base):
    __tablename__ = "company_contacts"

    id = Column(Integer, primary_key=True)
    company_id = Column(Integer, ForeignKey("companies.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    designation = Column(String(100))
    email = Column(String(255))
    phone = Column(String(20))
    is_primary = Column(Boolean, nullable=False, default=False)
