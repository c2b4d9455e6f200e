"""Claims produced by a successful access-token verification."""

from __future__ import annotations

import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class VerifiedClaims:
    """
    Signature-checked payload of an access token.

    Only ``AccessTokenVerifier`` builds these; never construct one from a
    token that has not been verified.
    """

    subject: str | None
    """``sub`` of the authenticated user."""

    audience: tuple[str, ...]
    """``aud``, always normalized to a tuple."""

    exp: int
    """Absolute expiry, seconds since the epoch."""

    issuer: str | None = None

    display_name: str | None = None
    """Custom ``display_name`` claim mapped by the realm; for UI only."""

    preferred_username: str | None = None

    claims: Mapping[str, Any] = field(default_factory=dict, repr=False)
    """Full decoded payload including custom claims."""

    def remaining_seconds(self, now: float | None = None) -> int:
        return remaining_lifetime(self, now)

    def to_dict(self) -> dict[str, object]:
        return {
            "subject": self.subject,
            "audience": list(self.audience),
            "exp": self.exp,
            "issuer": self.issuer,
            "display_name": self.display_name,
            "preferred_username": self.preferred_username,
        }


def remaining_lifetime(claims: VerifiedClaims, now: float | None = None) -> int:
    """
    Seconds until ``claims.exp``. Zero or negative means the token is already dead.

    Drives how long session cookies built from the token stay alive.
    """
    current = int(time.time() if now is None else now)
    return claims.exp - current
