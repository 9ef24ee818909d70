from pydantic import BaseModel, EmailStr, ConfigDict, Field, field_validator, model_validator
from typing import List, Optional
from datetime import date
from hrportal.core import roles
from hrportal.core.roles import UserRole


DEPARTMENTS = (
    "hr", "operations", "engineering", "tech", "business_development",
    "quality_assurance", "systems_integration", "client_relations",
)


def _role_tag(v: str) -> str:
    parsed = roles.parse_role(v)
    if parsed is None:
        raise ValueError(f"Unknown role: {v}")
    return parsed.value


class EmployeeCreate(BaseModel):
    email: EmailStr
    name: str = Field(..., min_length=1)
    password: str = Field("ChangeMe123!", min_length=8)
    role: str
    department: str
    position: str
    employee_code: str
    join_date: date
    emergency_contact_name: str
    emergency_contact_phone: str
    manager_id: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    annual_salary: Optional[float] = Field(None, ge=0)
    annual_leave_balance: float = Field(0.0, ge=0)
    college: Optional[str] = None
    internship_start_date: Optional[date] = None
    internship_end_date: Optional[date] = None

    @field_validator("role")
    @classmethod
    def known_role(cls, v: str) -> str:
        return _role_tag(v)

    @field_validator("department")
    @classmethod
    def known_department(cls, v: str) -> str:
        key = v.strip().lower().replace(" ", "_")
        if key not in DEPARTMENTS:
            raise ValueError(f"Invalid department: {v}")
        return key

    @model_validator(mode="after")
    def intern_fields(self):
        if self.role != UserRole.INTERN.value:
            self.college = None
            self.internship_start_date = None
            self.internship_end_date = None
        elif (
            self.internship_start_date and self.internship_end_date
            and self.internship_end_date < self.internship_start_date
        ):
            raise ValueError("internship_end_date must not precede internship_start_date")
        return self


class RoleUpdate(BaseModel):
    role: str

    @field_validator("role")
    @classmethod
    def known_role(cls, v: str) -> str:
        return _role_tag(v)


class EmployeeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: EmailStr
    name: str
    role: str
    display_role: str
    designation: str
    manager_id: Optional[str] = None
    department: Optional[str] = None
    position: Optional[str] = None
    employee_code: Optional[str] = None
    join_date: Optional[date] = None
    is_active: bool


class ApproverInfo(BaseModel):
    id: str
    name: str
    role: str
    display_role: str


class ApprovalChainResponse(BaseModel):
    user_id: str
    approvers: List[ApproverInfo]


class RoleInfo(BaseModel):
    role: str
    tier: str
    access_level: str
    display_name: str
    designation: str
    can_approve: bool
