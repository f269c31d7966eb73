"""Typed views of a promotion request's interview.

The columns live flat on ``PromotionRequest``; which of them are meaningful
depends on how far the interview got. ``interview_of`` picks the variant so
callers never read a field that does not apply yet.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Union


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass(frozen=True)
class NoInterview:
    required: bool
    stage: str = field(default="none", init=False)

    def to_dict(self) -> dict:
        return {"stage": self.stage, "required": self.required}


@dataclass(frozen=True)
class ScheduledInterview:
    required: bool
    scheduled_at: Optional[datetime]
    mode: Optional[str]
    meeting_link: Optional[str]
    location: Optional[str]
    notes: Optional[str]
    stage: str = field(default="scheduled", init=False)

    def to_dict(self) -> dict:
        return {
            "stage": self.stage,
            "required": self.required,
            "scheduled_at": _iso(self.scheduled_at),
            "mode": self.mode,
            "meeting_link": self.meeting_link or "",
            "location": self.location or "",
            "notes": self.notes or "",
        }


@dataclass(frozen=True)
class CompletedInterview(ScheduledInterview):
    completed_at: Optional[datetime] = None
    completed_by: Optional[int] = None
    confirmed_by_user: str = "pending"
    proof_url: Optional[str] = None
    stage: str = field(default="completed", init=False)

    def to_dict(self) -> dict:
        d = super().to_dict()
        d.update({
            "completed_at": _iso(self.completed_at),
            "completed_by": self.completed_by,
            "confirmed_by_user": self.confirmed_by_user,
            "proof_url": self.proof_url or "",
        })
        return d


Interview = Union[NoInterview, ScheduledInterview, CompletedInterview]


def interview_of(req) -> Interview:
    required = bool(req.interview_required)
    scheduled = dict(
        required=required,
        scheduled_at=req.interview_scheduled_at,
        mode=req.interview_mode,
        meeting_link=req.interview_meeting_link,
        location=req.interview_location,
        notes=req.interview_notes,
    )
    if req.interview_completed_at is not None:
        return CompletedInterview(
            **scheduled,
            completed_at=req.interview_completed_at,
            completed_by=req.interview_completed_by,
            confirmed_by_user=req.interview_confirmed_by_user or "pending",
            proof_url=req.interview_proof_url,
        )
    if req.status == "interview_scheduled" or req.interview_scheduled_at is not None or req.interview_mode:
        return ScheduledInterview(**scheduled)
    return NoInterview(required=required)
