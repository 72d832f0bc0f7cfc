"""Records flowing through the cadence pipeline.

Planner output enters as ``CadenceStepDraft`` (untrusted), leaves the
normalizer as ``PlannedStep`` and the materializer as ``CadenceStep``.
"""

import math
from dataclasses import asdict, dataclass, field, fields
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, field_validator


class Channel(str, Enum):
    PHONE = "phone"
    EMAIL = "email"
    INSTAGRAM = "instagram"
    FACEBOOK = "facebook"
    TIKTOK = "tiktok"
    LINKEDIN = "linkedin"
    IN_PERSON = "in_person"
    OTHER = "other"

    @classmethod
    def parse(cls, value: Any) -> Optional["Channel"]:
        """Return the matching channel, or None for anything unrecognised."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


@dataclass
class Lead:
    """Lead record from the store. Only the fields the engine reads."""
    id: str
    name: str = ""
    category: Optional[str] = None
    city: Optional[str] = None
    address: Optional[str] = None
    website: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    owner_email: Optional[str] = None
    instagram: Optional[str] = None
    facebook: Optional[str] = None
    tiktok: Optional[str] = None
    linkedin: Optional[str] = None
    owner_name: Optional[str] = None
    google_rating: Optional[float] = None
    review_count: Optional[int] = None
    composite_score: Optional[float] = None
    ai_channel_rec: Optional[str] = None
    ai_briefing: Optional[Any] = None

    @classmethod
    def from_row(cls, row: dict) -> "Lead":
        """Build from a store row, ignoring columns we don't model."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in row.items() if k in known})

    @property
    def recommended_channel(self) -> Optional[str]:
        """Enrichment recommendation, e.g. "cold_call" or "social_dm"."""
        if isinstance(self.ai_briefing, dict) and self.ai_briefing.get("recommended_channel"):
            return self.ai_briefing["recommended_channel"]
        return self.ai_channel_rec


class CadenceStepDraft(BaseModel):
    """One step as proposed by a planner. Nothing here is trusted."""
    step_number: int
    channel: str = ""
    day_offset: int = 0
    template_name: Optional[str] = None
    reasoning: Optional[str] = None

    @field_validator("channel", mode="before")
    @classmethod
    def _channel_as_text(cls, v):
        return "" if v is None else str(v)

    @field_validator("day_offset", mode="before")
    @classmethod
    def _offset_in_whole_days(cls, v):
        if v is None:
            return 0
        if isinstance(v, float) and math.isfinite(v):
            # Fractional days truncate toward zero
            return int(v)
        return v

    @field_validator("template_name", "reasoning", mode="before")
    @classmethod
    def _text_or_none(cls, v):
        return None if v is None else str(v)


@dataclass
class PlannedStep:
    """A draft that passed through the normalizer."""
    step_number: int
    channel: Channel
    day_offset: int
    template_name: str
    reasoning: Optional[str] = None


@dataclass
class CadenceStep:
    """A scheduled touch, ready for (or read back from) the store."""
    lead_id: str
    user_id: str
    step_number: int
    channel: Channel
    scheduled_at: datetime
    template_name: str
    completed_at: Optional[datetime] = None
    skipped: bool = False
    id: Optional[str] = None
    created_at: Optional[datetime] = None

    def to_row(self) -> dict:
        """Insert payload. Storage-assigned columns are left out."""
        return {
            "lead_id": self.lead_id,
            "user_id": self.user_id,
            "step_number": self.step_number,
            "channel": self.channel.value,
            "scheduled_at": self.scheduled_at.isoformat(),
            "template_name": self.template_name,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "skipped": self.skipped,
        }

    @classmethod
    def from_row(cls, row: dict) -> "CadenceStep":
        return cls(
            lead_id=row["lead_id"],
            user_id=row["user_id"],
            step_number=row["step_number"],
            channel=Channel.parse(row["channel"]) or Channel.OTHER,
            scheduled_at=_parse_timestamp(row["scheduled_at"]),
            template_name=row.get("template_name") or "",
            completed_at=_parse_timestamp(row.get("completed_at")),
            skipped=bool(row.get("skipped", False)),
            id=row.get("id"),
            created_at=_parse_timestamp(row.get("created_at")),
        )


@dataclass
class StepReasoning:
    """Planner rationale echoed back for humans. Never used for logic."""
    step: int
    channel: str
    reasoning: Optional[str] = None


@dataclass
class CadenceResult:
    steps: list[CadenceStep]
    reasoning: list[StepReasoning] = field(default_factory=list)
    business_type: Optional[str] = None

    def to_dict(self) -> dict:
        steps = []
        for step in self.steps:
            row = asdict(step)
            row["channel"] = step.channel.value
            for key in ("scheduled_at", "completed_at", "created_at"):
                if row[key] is not None:
                    row[key] = row[key].isoformat()
            steps.append(row)
        return {
            "success": True,
            "business_type": self.business_type,
            "steps": steps,
            "reasoning": [asdict(r) for r in self.reasoning],
        }


def _parse_timestamp(value) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)
