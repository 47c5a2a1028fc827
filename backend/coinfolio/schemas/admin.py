"""Schemas for admin endpoints."""

from typing import Literal

from pydantic import BaseModel


class RoleUpdate(BaseModel):
    """Request schema for changing a user's role."""

    role: Literal["user", "admin"]
