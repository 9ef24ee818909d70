from sqlalchemy import Column, Integer, String, Date, DateTime, ForeignKey, Text
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from hrportal.database import Base
import enum


class LeaveStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class LeaveType(str, enum.Enum):
    ANNUAL = "annual"
    SICK = "sick"
    CASUAL = "casual"
    UNPAID = "unpaid"
    MATERNITY = "maternity"
    PATERNITY = "paternity"


class LeaveRequest(Base):
    __tablename__ = "leave_requests"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    leave_type = Column(String, nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    reason = Column(Text, nullable=True)

    # Two independent approval stages; status is derived from both
    manager_approval = Column(String, default=LeaveStatus.PENDING.value, nullable=False)
    director_approval = Column(String, default=LeaveStatus.PENDING.value, nullable=False)
    status = Column(String, default=LeaveStatus.PENDING.value, nullable=False, index=True)
    required_levels = Column(Integer, default=2, nullable=False)

    manager_approver_id = Column(String(36), ForeignKey("users.id"), nullable=True)
    manager_decided_at = Column(DateTime(timezone=True), nullable=True)
    manager_comment = Column(Text, nullable=True)
    director_approver_id = Column(String(36), ForeignKey("users.id"), nullable=True)
    director_decided_at = Column(DateTime(timezone=True), nullable=True)
    director_comment = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    requester = relationship("User", foreign_keys=[user_id], back_populates="leave_requests")

    @property
    def days_count(self) -> int:
        return (self.end_date - self.start_date).days + 1

    def recompute_status(self) -> str:
        """
        Rejected at any stage rejects the request; otherwise it is approved
        once required_levels stages are approved.
        """
        stages = [self.manager_approval, self.director_approval]
        if LeaveStatus.REJECTED.value in stages:
            self.status = LeaveStatus.REJECTED.value
        elif stages.count(LeaveStatus.APPROVED.value) >= (self.required_levels or 0):
            self.status = LeaveStatus.APPROVED.value
        else:
            self.status = LeaveStatus.PENDING.value
        return self.status
