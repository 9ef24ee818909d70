from pydantic import BaseModel, ConfigDict, Field
from datetime import date, datetime
from typing import Optional


class ProgressReportCreate(BaseModel):
    date: date
    accomplishments: str = Field(..., min_length=1)
    task_id: Optional[int] = None


class ProgressReportResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: str
    task_id: Optional[int] = None
    date: date
    accomplishments: str
    daily_progress: int
    approved: bool
    reviewed_by: Optional[str] = None
    submitted_at: Optional[datetime] = None
