"""Snapshot of the identities linked to a court case."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol

from .notification import RecipientType


@dataclass(frozen=True)
class CaseParties:
    """Party graph of a case at the moment an event is resolved."""

    case_id: str
    case_number: str
    complainant_id: str | None = None
    investigating_officer_ids: tuple[str, ...] = field(default_factory=tuple)
    assigned_judge_id: str | None = None
    accused_lawyer_id: str | None = None
    prosecutor_lawyer_id: str | None = None
    fir_id: str | None = None
    complaint_id: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "investigating_officer_ids", tuple(self.investigating_officer_ids)
        )


@dataclass(frozen=True)
class Participant:
    """Audience member supplied by the caller for participant-based events."""

    user_id: str
    recipient_type: RecipientType
    role: str | None = None


class CasePartyDirectory(Protocol):
    """Read access to case party graphs owned by the case-management service."""

    def get_case_parties(self, case_id: str) -> CaseParties | None:
        """Return the current party graph for ``case_id`` if the case exists."""


__all__ = ["CaseParties", "CasePartyDirectory", "Participant"]
