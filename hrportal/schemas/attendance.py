from pydantic import BaseModel, ConfigDict, model_validator
from datetime import date, time
from typing import Optional
from hrportal.models.attendance import AttendanceStatus


class AttendanceCreate(BaseModel):
    date: date
    punch_in: Optional[time] = None
    punch_out: Optional[time] = None
    status: AttendanceStatus = AttendanceStatus.PRESENT

    @model_validator(mode="after")
    def check_punches(self):
        if self.punch_in and self.punch_out and self.punch_out < self.punch_in:
            raise ValueError("punch_out must not precede punch_in")
        return self


class PunchOut(BaseModel):
    punch_out: time


class AttendanceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: str
    date: date
    punch_in: Optional[time] = None
    punch_out: Optional[time] = None
    status: str
