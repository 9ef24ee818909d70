"""
User model: every person in the hierarchy, directors included.
Reporting lines are a self-referencing manager_id.
"""
import uuid
from sqlalchemy import Column, String, Float, Date, DateTime, Boolean, ForeignKey, Text
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from hrportal.database import Base
from hrportal.core import roles
from hrportal.core.roles import UserRole
from hrportal.core.security import encrypt_data, decrypt_data


def new_id() -> str:
    return str(uuid.uuid4())


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=new_id)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    name = Column(String, nullable=False)

    # Stored as the plain tag so legacy values survive; tier checks go through core.roles
    role = Column(String, default=UserRole.EMPLOYEE.value, nullable=False, index=True)
    manager_id = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)

    department = Column(String, nullable=True)
    position = Column(String, nullable=True)
    employee_code = Column(String, unique=True, nullable=True)
    phone = Column(String, nullable=True)
    address = Column(Text, nullable=True)
    emergency_contact_name = Column(String, nullable=True)
    emergency_contact_phone = Column(String, nullable=True)
    join_date = Column(Date, nullable=True)
    annual_leave_balance = Column(Float, default=0.0)
    _annual_salary = Column("annual_salary", String, nullable=True)  # Fernet token

    # Interns only
    college = Column(String, nullable=True)
    internship_start_date = Column(Date, nullable=True)
    internship_end_date = Column(Date, nullable=True)

    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    manager = relationship("User", remote_side=[id], back_populates="reports")
    reports = relationship("User", back_populates="manager")
    sessions = relationship("UserSession", back_populates="user", cascade="all, delete-orphan")
    notifications = relationship("Notification", back_populates="user", cascade="all, delete-orphan")
    leave_requests = relationship(
        "LeaveRequest", foreign_keys="[LeaveRequest.user_id]", back_populates="requester",
        cascade="all, delete-orphan"
    )

    def __repr__(self):
        return f"<User {self.email} ({self.role})>"

    @property
    def annual_salary(self):
        return decrypt_data(self._annual_salary)

    @annual_salary.setter
    def annual_salary(self, value):
        self._annual_salary = encrypt_data(str(value)) if value is not None else None

    @property
    def tier(self) -> str:
        return roles.tier_of(self.role).value

    @property
    def display_role(self) -> str:
        return roles.display_name(self.role)

    @property
    def designation(self) -> str:
        return roles.simple_designation(self.role)

    @property
    def access_level(self) -> str:
        return roles.access_level(self.role).value

    @property
    def is_director(self) -> bool:
        return roles.is_director(self.role)

    @property
    def can_approve(self) -> bool:
        """Role allows approving direct reports' requests (relationship checked elsewhere)."""
        return roles.can_hold_approvals(self.role)


class UserSession(Base):
    __tablename__ = "user_sessions"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    refresh_token = Column(String, unique=True, index=True, nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    is_revoked = Column(Boolean, default=False, nullable=False)

    user = relationship("User", back_populates="sessions")
