from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field, model_validator


class Role(str, Enum):
    """School roles; each maps to a capability set in services.scoping."""
    STUDENT = "student"
    TEACHER = "teacher"
    ADMIN = "admin"
    DIRECTOR = "director"


def _check_year(role: Optional[Role], year: Optional[int]) -> Optional[int]:
    # year of study only exists for students
    if role is None:
        return year
    if role != Role.STUDENT:
        return None
    if year is None:
        raise ValueError("year is required for students")
    return year


class UserRecord(BaseModel):
    """Stored user document. The password hash never leaves the repository layer."""
    id: str = Field(..., description="User ID")
    email: EmailStr = Field(..., description="Login email, unique across users")
    password_hash: str = Field(..., description="Salted bcrypt hash")
    role: Role = Field(..., description="School role")
    name: str = Field(..., min_length=1)
    surname: str = Field(..., min_length=1)
    year: Optional[int] = Field(None, ge=1, le=7, description="Year of study (students only)")
    department: Optional[str] = Field(None)
    phone: Optional[str] = Field(None)
    created_at: datetime = Field(..., description="Created timestamp")

    @model_validator(mode="after")
    def _year_for_students(self) -> "UserRecord":
        self.year = _check_year(self.role, self.year)
        return self


class UserRead(BaseModel):
    """User read model."""
    id: str = Field(..., description="User ID")
    email: EmailStr = Field(..., description="User email")
    role: Role = Field(..., description="School role")
    name: str = Field(...)
    surname: str = Field(...)
    year: Optional[int] = Field(None)
    department: Optional[str] = Field(None)
    phone: Optional[str] = Field(None)
    created_at: datetime = Field(..., description="Created timestamp")

    class Config:
        from_attributes = True


class UserCreate(BaseModel):
    """Create user payload."""
    email: EmailStr = Field(..., description="Email")
    password: str = Field(..., min_length=6, description="Password")
    role: Role = Field(..., description="School role")
    name: str = Field(..., min_length=1)
    surname: str = Field(..., min_length=1)
    year: Optional[int] = Field(None, ge=1, le=7, description="Year of study, required for students")
    department: Optional[str] = Field(None)
    phone: Optional[str] = Field(None)

    @model_validator(mode="after")
    def _year_for_students(self) -> "UserCreate":
        self.year = _check_year(self.role, self.year)
        return self


class UserUpdate(BaseModel):
    """Partial user update; only provided fields are changed."""
    email: Optional[EmailStr] = Field(None)
    password: Optional[str] = Field(None, min_length=6)
    role: Optional[Role] = Field(None)
    name: Optional[str] = Field(None, min_length=1)
    surname: Optional[str] = Field(None, min_length=1)
    year: Optional[int] = Field(None, ge=1, le=7)
    department: Optional[str] = Field(None)
    phone: Optional[str] = Field(None)


class LoginRequest(BaseModel):
    """Credentials for opening a session."""
    email: str = Field(..., min_length=1, description="User email")
    password: str = Field(..., min_length=1, description="User password")


class SessionRead(BaseModel):
    """Opened session: the authenticated user and a bearer token for later calls."""
    user: UserRead = Field(...)
    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field("bearer", description="Token type, typically 'bearer'")


class TokenResponse(BaseModel):
    """OAuth2 password-flow token response."""
    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field("bearer")


class MeRead(BaseModel):
    """Current user with the operations their role allows."""
    user: UserRead = Field(...)
    operations: List[str] = Field(default_factory=list, description="Allowed operation codes")
