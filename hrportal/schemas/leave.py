from pydantic import BaseModel, ConfigDict, Field, model_validator
from datetime import date, datetime
from typing import Optional
from hrportal.models.leave_request import LeaveType


class LeaveRequestCreate(BaseModel):
    leave_type: LeaveType
    start_date: date
    end_date: date
    reason: str = Field(..., min_length=1, max_length=2000)

    @model_validator(mode="after")
    def check_range(self):
        if self.end_date < self.start_date:
            raise ValueError("end_date must not precede start_date")
        return self


class LeaveRequestResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: str
    leave_type: str
    start_date: date
    end_date: date
    days_count: int
    reason: Optional[str] = None
    manager_approval: str
    director_approval: str
    status: str
    required_levels: int
    manager_approver_id: Optional[str] = None
    manager_comment: Optional[str] = None
    director_approver_id: Optional[str] = None
    director_comment: Optional[str] = None
    created_at: Optional[datetime] = None


class LeaveDecision(BaseModel):
    approve: bool
    comment: Optional[str] = Field(None, max_length=1000)
