from __future__ import annotations

from pydantic import BaseModel, Field

from folio.constants import PASSWORD_MAX, USERNAME_MAX


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=USERNAME_MAX)
    password: str = Field(..., min_length=1, max_length=PASSWORD_MAX)


class LoginResponse(BaseModel):
    token: str
    expires_at: int = Field(serialization_alias="expiresAt")
