"""
Pydantic schemas for registration, login and the session view.
"""

from typing import Literal, Optional
from pydantic import BaseModel, Field

Role = Literal["rider", "admin", "driver"]


class UserCreate(BaseModel):
    employee_code: str = Field(..., min_length=1, max_length=32)
    name: str = Field(..., min_length=1, max_length=255)
    department: str = Field(..., min_length=1, max_length=255)
    phone: str = Field(..., min_length=1, max_length=32)

    model_config = {"str_strip_whitespace": True}


class UserLogin(BaseModel):
    employee_code: str = Field(..., min_length=1, max_length=32)

    model_config = {"str_strip_whitespace": True}


class ProfileUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    department: Optional[str] = Field(None, min_length=1, max_length=255)
    phone: Optional[str] = Field(None, min_length=1, max_length=32)

    model_config = {"str_strip_whitespace": True}


class UserResponse(BaseModel):
    id: str
    employee_code: str
    name: str
    department: str
    phone: str
    role: Role

    model_config = {"from_attributes": True}


class SessionResponse(BaseModel):
    user: UserResponse
    language: str
    screens: list[str]
    actions: list[str]


class Token(SessionResponse):
    access_token: str
    token_type: str = "bearer"
