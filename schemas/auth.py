import re
from typing import Optional

from pydantic import BaseModel, field_validator

USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9_.\-]{3,30}$")

class UserCreate(BaseModel):
    email: str
    username: str
    password: str

    @field_validator('email')
    @classmethod
    def validate_email(cls, v):
        v = v.strip()
        if not v or '@' not in v:
            raise ValueError('A valid email is required')
        return v

    @field_validator('username')
    @classmethod
    def validate_username(cls, v):
        v = v.strip()
        if not USERNAME_PATTERN.match(v):
            raise ValueError('Username must be 3-30 letters, digits, "_", "-" or "."')
        return v

    @field_validator('password')
    @classmethod
    def validate_password(cls, v):
        v = v.strip()
        if not v:
            raise ValueError('Password is required')
        if len(v.encode('utf-8')) > 72:
            raise ValueError('Password must be at most 72 bytes')
        return v

class LoginRequest(BaseModel):
    email: str
    password: str

class UserResponse(BaseModel):
    user_id: int
    email: str
    username: str
    display_name: str
    bio: str = ""
    avatar_url: Optional[str] = None

class SessionResponse(BaseModel):
    user: UserResponse
    expires_at: int
