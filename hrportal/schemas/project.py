from pydantic import BaseModel, ConfigDict, Field, model_validator
from datetime import date
from typing import Optional
from hrportal.models.project import ProjectStatus


class ProjectCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    start_date: date
    end_date: Optional[date] = None

    @model_validator(mode="after")
    def check_range(self):
        if self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date must not precede start_date")
        return self


class ProjectStatusUpdate(BaseModel):
    status: ProjectStatus


class ProjectResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: Optional[str] = None
    owner_id: str
    start_date: date
    end_date: Optional[date] = None
    status: str
