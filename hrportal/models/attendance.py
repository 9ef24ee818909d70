from sqlalchemy import Column, Integer, String, Date, Time, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.sql import func
from hrportal.database import Base
import enum


class AttendanceStatus(str, enum.Enum):
    PRESENT = "present"
    ABSENT = "absent"
    HALF_DAY = "half_day"
    REMOTE = "remote"


class Attendance(Base):
    __tablename__ = "attendance"
    __table_args__ = (UniqueConstraint("user_id", "date", name="uq_attendance_user_date"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    date = Column(Date, nullable=False)
    punch_in = Column(Time, nullable=True)
    punch_out = Column(Time, nullable=True)
    status = Column(String, default=AttendanceStatus.PRESENT.value, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
