from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class TokenPair(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int = Field(ge=0)
    scope: str = "api_access"


class User(BaseModel):
    username: str = Field(min_length=1, max_length=64)


class TokenInfo(BaseModel):
    token_type: str | None = None
    subject: str | None = None
    expires_at: int | None = None
    claims: dict[str, Any] = Field(default_factory=dict)
