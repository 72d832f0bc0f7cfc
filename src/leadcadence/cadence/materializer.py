"""Turn planned steps into concrete scheduled touches."""

from datetime import datetime, timedelta
from typing import Optional

import structlog

from leadcadence.cadence.models import CadenceStep, PlannedStep
from leadcadence.cadence.timing import BusinessType, next_contact_time
from leadcadence.core.config import CadenceConfig, TimingConfig

log = structlog.get_logger()


def clamp_day_offset(offset: int, limit: int) -> int:
    return max(-limit, min(limit, offset))


def materialize_schedule(
    steps: list[PlannedStep],
    lead_id: str,
    user_id: str,
    business_type: BusinessType,
    now: datetime,
    cadence: Optional[CadenceConfig] = None,
    timing: Optional[TimingConfig] = None,
) -> list[CadenceStep]:
    """Schedule each step at ``now + day_offset`` adjusted for its channel.

    Negative offsets resolve to past instants. Steps landing on the same
    instant, or sharing a step number, are kept as they are.
    """
    cadence = cadence or CadenceConfig()
    timing = timing or TimingConfig()

    scheduled = []
    for step in steps:
        offset = clamp_day_offset(step.day_offset, cadence.max_day_offset)
        if offset != step.day_offset:
            log.warning("day_offset_clamped", step=step.step_number, day_offset=step.day_offset, clamped=offset)

        base = now + timedelta(days=offset)
        scheduled.append(CadenceStep(
            lead_id=lead_id,
            user_id=user_id,
            step_number=step.step_number,
            channel=step.channel,
            scheduled_at=next_contact_time(business_type, step.channel, base, timing),
            template_name=step.template_name,
        ))

    return scheduled
