# =============================================================================
# app/auth/models.py - Authentication Models
# =============================================================================
# Pydantic models for authentication data.
# =============================================================================

from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from core.models.user import AppUser


class AuthUser(BaseModel):
    """
    Authenticated user extracted from Supabase JWT.

    This is the minimal user info available from the token itself,
    without querying the database.
    """
    id: UUID
    email: Optional[str] = None
    user_metadata: dict[str, Any] = Field(default_factory=dict)

    model_config = {"frozen": True}


class MeResponse(BaseModel):
    """The member-area user for the current token."""
    user: AppUser
    is_admin: bool


class TokenPayload(BaseModel):
    """
    Decoded JWT token payload from Supabase.

    Supabase tokens include standard JWT claims plus custom claims.
    """
    sub: str  # User ID
    email: Optional[str] = None
    aud: str  # Audience (should be "authenticated")
    exp: int  # Expiration timestamp
    iat: int  # Issued at timestamp
    role: Optional[str] = None  # User role
    user_metadata: dict[str, Any] = Field(default_factory=dict)
