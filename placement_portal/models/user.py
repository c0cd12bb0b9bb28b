"""
Identity models - users, departments and the student profile with its
student-owned sections (skills, projects, certifications, internships).
"""

from sqlalchemy import (
    Boolean, Column, Date, DateTime, Float, ForeignKey, Integer, String, Text
)
from sqlalchemy.orm import relationship

from placement_portal.core.constants import PlacementStatus, UserRole, UserStatus
from placement_portal.models.base import Base, TimestampMixin, enum_column


class Department(TimestampMixin, Base):
    __tablename__ = "departments"

    id = Column(Integer, primary_key=True)
    code = Column(String(20), unique=True, nullable=False)
    name = Column(String(255), nullable=False)

    def __repr__(self):
        return f"<Department {self.code}>"


class User(TimestampMixin, Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    role = enum_column(UserRole, nullable=False, index=True)
    status = enum_column(UserStatus, nullable=False, default=UserStatus.active)

    first_name = Column(String(100), nullable=False, default="")
    last_name = Column(String(100), nullable=False, default="")
    phone = Column(String(20))
    department_id = Column(Integer, ForeignKey("departments.id", ondelete="RESTRICT"), index=True)
    last_login = Column(DateTime)

    department = relationship("Department")
    student_profile = relationship("StudentProfile", back_populates="user", uselist=False)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def __repr__(self):
        return f"<User {self.email} ({self.role})>"


class StudentProfile(TimestampMixin, Base):
    __tablename__ = "student_profiles"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="RESTRICT"), unique=True, nullable=False)
    roll_number = Column(String(50), unique=True, nullable=False)
    degree = Column(String(20), nullable=False)
    department_id = Column(Integer, ForeignKey("departments.id", ondelete="RESTRICT"), index=True)
    batch_year = Column(Integer, nullable=False, index=True)
    current_semester = Column(Integer, default=1)

    # Academics (eligibility inputs)
    cgpa = Column(Float)
    tenth_percentage = Column(Float)
    twelfth_percentage = Column(Float)
    active_backlogs = Column(Integer, nullable=False, default=0)

    # Personal
    date_of_birth = Column(Date)
    gender = Column(String(20))
    address = Column(Text)
    city = Column(String(100))
    state = Column(String(100))
    pincode = Column(String(10))

    resume_url = Column(String(500))
    placement_status = enum_column(PlacementStatus, nullable=False, default=PlacementStatus.active)
    is_verified = Column(Boolean, nullable=False, default=False)

    user = relationship("User", back_populates="student_profile")
    department = relationship("Department")
    skills = relationship("StudentSkill", cascade="all, delete-orphan", order_by="StudentSkill.id")
    projects = relationship("StudentProject", cascade="all, delete-orphan", order_by="StudentProject.id")
    certifications = relationship("StudentCertification", cascade="all, delete-orphan", order_by="StudentCertification.id")
    internships = relationship("StudentInternship", cascade="all, delete-orphan", order_by="StudentInternship.id")
    applications = relationship("Application", back_populates="student")

    def __repr__(self):
        return f"<StudentProfile {self.roll_number}>"


class StudentSkill(Base):
    __tablename__ = "student_skills"

    id = Column(Integer, primary_key=True)
    student_id = Column(Integer, ForeignKey("student_profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    skill_name = Column(String(100), nullable=False)
    proficiency_level = Column(String(20), default="intermediate")


class StudentProject(Base):
    __tablename__ = "student_projects"

    id = Column(Integer, primary_key=True)
    student_id = Column(Integer, ForeignKey("student_profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text)
    technologies = Column(String(500))
    project_url = Column(String(500))
    start_date = Column(Date)
    end_date = Column(Date)


class StudentCertification(Base):
    __tablename__ = "student_certifications"

    id = Column(Integer, primary_key=True)
    student_id = Column(Integer, ForeignKey("student_profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    issuing_organization = Column(String(255))
    issue_date = Column(Date)
    credential_url = Column(String(500))


class StudentInternship(Base):
    __tablename__ = "student_internships"

    id = Column(Integer, primary_key=True)
    student_id = Column(Integer, ForeignKey("student_profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    company_name = Column(String(255), nullable=False)
    role = Column(String(255), nullable=False)
    description = Column(Text)
    start_date = Column(Date)
    end_date = Column(Date)
