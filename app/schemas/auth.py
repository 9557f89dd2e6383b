"""Pydantic schemas for login and logout."""

from __future__ import annotations

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    """Credentials for a super admin sign-in.

    Both fields are optional at the schema level so a missing value is
    reported as a 400 with the login error envelope instead of a 422.
    """

    email: str | None = Field(None, description="Account e-mail address.")
    password: str | None = Field(None, description="Account password.")


class LoginUser(BaseModel):
    id: str
    email: str | None = None


class LoginResponse(BaseModel):
    """Session issued to an authenticated super admin."""

    success: bool = True
    user: LoginUser
    access_token: str = Field(..., description="Bearer token for the Authorization header.")
    token_type: str = Field("bearer", description="Always 'bearer'.")
    expires_at: int | None = Field(None, description="UNIX epoch seconds when the token expires.")
