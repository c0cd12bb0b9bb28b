"""
Placement Cell Portal
Role-based placement management: students, department staff and administrators.

Architecture:
- Relational store (PostgreSQL via SQLAlchemy): users, students, companies, jobs, applications
- MongoDB: uploaded documents (resumes, logos, attachments)
- Access core: permission policy, visibility scopes, eligibility, status transitions
"""

__version__ = "1.0.0"
