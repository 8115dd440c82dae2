"""
User-related Pydantic models
"""

from typing import Any, Mapping
from pydantic import BaseModel, Field


class AuthenticateRequest(BaseModel):
    username: str = Field(..., min_length=1, description="Login handle (usuarios.nombre)")
    password: str = Field(..., min_length=1, description="Plain-text password to verify")


class UserResponse(BaseModel):
    """Public view of a user; the credential column is never part of it"""
    id: int
    name: str

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "UserResponse":
        return cls(id=row["id"], name=row["nombre"])


class AuthenticateResponse(BaseModel):
    message: str
    user: UserResponse
