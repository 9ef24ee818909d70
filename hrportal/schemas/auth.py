from pydantic import BaseModel, EmailStr, ConfigDict, Field, field_validator
from typing import Optional
from datetime import date, datetime
from hrportal.core import roles


class UserSummary(BaseModel):
    id: str
    email: EmailStr
    name: str
    role: str
    display_role: str
    designation: str
    access_level: str


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: EmailStr
    name: str
    role: str
    display_role: str
    designation: str
    tier: str
    access_level: str
    manager_id: Optional[str] = None
    department: Optional[str] = None
    position: Optional[str] = None
    join_date: Optional[date] = None
    created_at: Optional[datetime] = None


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class RefreshRequest(BaseModel):
    refresh_token: str


class Token(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str
    user: Optional[UserSummary] = None


class DirectorSignup(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=8)
    name: str = Field(..., min_length=1)
    phone: Optional[str] = None
    join_date: date
    designation: str
    department: str
    director_title: str
    emergency_contact_name: str
    emergency_contact_phone: str

    @field_validator("director_title")
    @classmethod
    def must_be_director_role(cls, v: str) -> str:
        tag = roles.normalize_role(v)
        if not roles.is_known_role(tag) or not roles.is_director(tag):
            raise ValueError("director_title must be a director role")
        return tag


class PasswordChange(BaseModel):
    current_password: str
    new_password: str = Field(..., min_length=8)
