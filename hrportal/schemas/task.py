from pydantic import BaseModel, ConfigDict, Field
from datetime import date, datetime
from typing import Optional
from hrportal.models.task import TaskPriority


class TaskCreate(BaseModel):
    assignee_id: str
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    project_id: Optional[int] = None
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: Optional[date] = None


class TaskProgressUpdate(BaseModel):
    progress: int = Field(..., ge=0, le=100)


class TaskResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    project_id: Optional[int] = None
    user_id: str
    assigned_by: str
    title: str
    description: Optional[str] = None
    priority: str
    due_date: Optional[date] = None
    status: str
    progress: int
    created_at: Optional[datetime] = None
