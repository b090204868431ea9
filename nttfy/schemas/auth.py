"""
Authentication-related request and response schemas for API endpoints.
"""
from pydantic import BaseModel, Field


# ==================== REQUEST SCHEMAS ====================

class LoginRequest(BaseModel):
    """Request schema for the demo login"""
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


# ==================== RESPONSE SCHEMAS ====================

class LoginResponse(BaseModel):
    """Response schema for a successful login"""
    access_token: str
    token_type: str = "bearer"


class UserProfileResponse(BaseModel):
    """Response schema for user profile"""
    email: str
    plan: str


class LogoutResponse(BaseModel):
    """Response schema for logout"""
    message: str
