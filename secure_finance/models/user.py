from pydantic import BaseModel, Field, field_validator
from typing import Optional
import re

from secure_finance.models.common import to_base64


EMAIL_PATTERN = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'


def _check_email(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    if not re.match(EMAIL_PATTERN, v):
        raise ValueError('Invalid email format')
    return v.strip()


# ===== USER PYDANTIC MODELS =====

class UserCreate(BaseModel):
    username: str = Field(..., min_length=1, max_length=100, description="Login name")
    password: str = Field(..., min_length=1, description="Encrypted password (Base64)")
    email: Optional[str] = Field(None, description="User's email address")
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)

    @field_validator('username')
    @classmethod
    def validate_username(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError('username is required')
        return v

    @field_validator('email')
    @classmethod
    def validate_email(cls, v: Optional[str]) -> Optional[str]:
        return _check_email(v)


class UserBulkItem(UserCreate):
    mobile_id: Optional[int] = Field(None, gt=0, description="Client-side id echoed back in the response")


class UserReplace(UserCreate):
    """Whole-record replacement - omitted optional fields are cleared"""
    pass


class UserUpdate(BaseModel):
    """Update user profile - all fields optional, omitted fields keep their value"""
    username: Optional[str] = Field(None, min_length=1, max_length=100)
    password: Optional[str] = Field(None, min_length=1)
    email: Optional[str] = None
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)

    @field_validator('username')
    @classmethod
    def validate_username(cls, v: Optional[str]) -> Optional[str]:
        return v.strip() if v else v

    @field_validator('email')
    @classmethod
    def validate_email(cls, v: Optional[str]) -> Optional[str]:
        return _check_email(v)


class UserResponse(BaseModel):
    """User data returned to client; the password stays opaque"""
    id: int
    username: str
    password: str
    email: Optional[str]
    first_name: Optional[str]
    last_name: Optional[str]

    @field_validator('password', mode='before')
    @classmethod
    def encode_password(cls, v):
        return to_base64(v)

    class Config:
        from_attributes = True


class UserBulkResponse(UserResponse):
    mobile_id: Optional[int] = None


class UserPrincipal(BaseModel):
    """
    Snapshot of the authenticated user's record. Store operations compare it
    against the row in the database before doing anything.
    """
    user_id: int
    username: str
    password: bytes
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None

    class Config:
        frozen = True
