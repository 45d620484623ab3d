"""
Pydantic schemas for the account endpoints.
"""
from typing import Optional
from pydantic import BaseModel


class Credentials(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class TokenResponse(BaseModel):
    token: str


class IdRequest(BaseModel):
    id: Optional[int] = None


class ResetRequest(BaseModel):
    email: Optional[str] = None


class NewPassword(BaseModel):
    password: Optional[str] = None


class SuccessResponse(BaseModel):
    success: str
