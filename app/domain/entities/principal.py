"""Domain entity describing the caller behind a bearer token."""

from __future__ import annotations

from dataclasses import dataclass

from .notification import RecipientType


@dataclass(frozen=True)
class AuthenticatedUser:
    """Identity and role extracted from a verified access token."""

    user_id: str
    role: RecipientType


__all__ = ["AuthenticatedUser"]
