from __future__ import annotations

from pydantic import BaseModel


class MessageOut(BaseModel):
    message: str


class ClaimsOut(BaseModel):
    subject: str | None
    audience: list[str]
    exp: int
    issuer: str | None = None
    display_name: str | None = None
    preferred_username: str | None = None
    expires_in: int
