"""Repair planner drafts into steps the rest of the pipeline can trust."""

from typing import Optional

import structlog

from leadcadence.cadence.models import CadenceStepDraft, Channel, PlannedStep
from leadcadence.core.config import CadenceConfig

log = structlog.get_logger()


def normalize_drafts(
    drafts: list[CadenceStepDraft],
    available: Optional[dict[Channel, bool]] = None,
    config: Optional[CadenceConfig] = None,
) -> list[PlannedStep]:
    """Turn drafts into planned steps, one for one, in the same order.

    Unknown channels, and channels the lead cannot be reached on when
    ``available`` is given, become the fallback channel. Blank templates get
    the default label. Step numbers and day offsets pass through untouched.
    """
    config = config or CadenceConfig()
    fallback = Channel.parse(config.fallback_channel) or Channel.OTHER

    steps = []
    for draft in drafts:
        channel = Channel.parse(draft.channel)
        usable = channel is not None and (
            available is None or channel == fallback or available.get(channel, False)
        )
        if not usable:
            log.warning(
                "channel_substituted",
                step=draft.step_number,
                channel=draft.channel,
                fallback=fallback.value,
            )
            channel = fallback

        template = (draft.template_name or "").strip() or config.default_template

        steps.append(PlannedStep(
            step_number=draft.step_number,
            channel=channel,
            day_offset=draft.day_offset,
            template_name=template,
            reasoning=draft.reasoning,
        ))

    _warn_on_anomalies(steps)
    return steps


def _warn_on_anomalies(steps: list[PlannedStep]) -> None:
    # Kept verbatim; surfaced so the plan can be audited.
    numbers = [s.step_number for s in steps]
    if len(set(numbers)) != len(numbers):
        log.warning("duplicate_step_numbers", step_numbers=numbers)

    offsets = [s.day_offset for s in steps]
    if any(later < earlier for earlier, later in zip(offsets, offsets[1:])):
        log.warning("non_monotonic_day_offsets", day_offsets=offsets)
