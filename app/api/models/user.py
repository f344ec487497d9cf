"""
Pydantic schemas for the login API.
"""

from pydantic import BaseModel


class LoginRequest(BaseModel):
    """Request body for login; missing fields are rejected by the service."""

    username: str | None = None
    password: str | None = None


class UserPayload(BaseModel):
    username: str
    userId: str


class LoginResponse(BaseModel):
    """Response model for a successful login."""

    success: bool
    message: str
    user: UserPayload
