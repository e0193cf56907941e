"""Authenticated user, as returned by ``GET /api/v1/vector/user``."""

from __future__ import annotations

from pydantic import BaseModel


class UserData(BaseModel):
    id: int
    name: str
    email: str


class UserResponse(BaseModel):
    data: UserData
