"""Pydantic schemas for user profiles and account management."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class Profile(BaseModel):
    """A row of the ``profiles`` table (one per auth account)."""

    id: str
    email: str | None = None
    full_name: str | None = None
    role: str = "user"
    business_id: str | None = None
    is_super_admin: bool = False
    created_at: datetime | None = None


class UserCreate(BaseModel):
    email: str | None = Field(None, description="E-mail of the new account.")
    password: str | None = Field(None, description="Initial password; must pass the password policy.")
    full_name: str | None = Field(None, description="Display name.")
    role: str | None = Field(None, description="'admin' or 'user' (default 'user').")


class UserRoleUpdate(BaseModel):
    role: str | None = Field(None, description="'admin' or 'user'.")


class UserCreatedResponse(BaseModel):
    success: bool = True
    user_id: str | None = Field(None, description="Id of the created auth account.")


class ProfileUpdate(BaseModel):
    full_name: str | None = Field(None, description="New display name; blank clears it.")


class TeamUserCreate(BaseModel):
    """A business admin adding an account to their own business; all fields required."""

    email: str | None = None
    password: str | None = None
    full_name: str | None = None
    role: str | None = None


class TeamUser(BaseModel):
    id: str
    email: str | None = None


class TeamUserCreatedResponse(BaseModel):
    success: bool = True
    message: str = "User created successfully"
    user: TeamUser
