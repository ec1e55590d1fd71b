from pydantic import BaseModel, EmailStr, Field, constr, field_validator
from datetime import datetime
from typing import List, Literal, Optional

class UserRegister(BaseModel):
    email: EmailStr
    password: constr(min_length=6)
    full_name: str | None = None

class UserLogin(BaseModel):
    email: EmailStr
    password: str

class RefreshRequest(BaseModel):
    refresh_token: str

class UserOut(BaseModel):
    id: str
    email: EmailStr
    full_name: str | None
    role: str
    created_at: datetime
    class Config:
        from_attributes = True

class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str | None = None
    token_type: str = "bearer"

class AcademicProfileIn(BaseModel):
    """Fields the matching engine falls back on when documents don't provide them."""
    education_level: Optional[Literal["+2", "Bachelor", "Master", "PhD"]] = None
    gpa: Optional[float] = Field(default=None, ge=0.0, le=4.0)
    major: Optional[str] = None
    preferred_countries: Optional[List[str]] = None

    @field_validator("preferred_countries")
    @classmethod
    def strip_countries(cls, value):
        if value is None:
            return None
        return [c.strip() for c in value if c and c.strip()]

class AcademicProfileOut(BaseModel):
    user_id: str
    education_level: Optional[str] = None
    gpa: Optional[float] = None
    major: Optional[str] = None
    preferred_countries: List[str] = Field(default_factory=list)
    updated_at: Optional[datetime] = None
