"""Cadence planners: generative (Claude) and rule-based."""

import json
import re
from typing import Optional

import structlog
from pydantic import ValidationError

from leadcadence.cadence.models import CadenceStepDraft, Channel, Lead
from leadcadence.cadence.timing import BusinessType
from leadcadence.core.config import CadenceConfig
from leadcadence.core.errors import EmptyCadenceError, NoChannelsError, PlannerError

log = structlog.get_logger()


def _format_briefing(briefing) -> Optional[str]:
    if not briefing:
        return None
    if isinstance(briefing, dict):
        return briefing.get("summary") or json.dumps(briefing)
    return str(briefing)


def build_cadence_prompt(
    lead: Lead,
    business_type: BusinessType,
    available: list[Channel],
    config: Optional[CadenceConfig] = None,
) -> str:
    """Build the planner request for one lead."""
    config = config or CadenceConfig()
    channel_list = ", ".join(c.value for c in available)

    rating = lead.google_rating if lead.google_rating is not None else "N/A"
    score = lead.composite_score if lead.composite_score is not None else "N/A"
    profile = f"""- Business Name: {lead.name}
- Industry/Category: {lead.category or "Unknown"}
- Business Type Classification: {business_type.value}
- City: {lead.city or "Unknown"}
- Website: {"Yes" if lead.website else "No"}
- Google Rating: {rating} ({lead.review_count or 0} reviews)
- Composite Score: {score}
- Owner Name: {lead.owner_name or "Unknown"}"""

    briefing = _format_briefing(lead.ai_briefing)
    if briefing:
        profile += f"\n- AI Briefing: {briefing}"

    return f"""You are a sales cadence strategist. Design an optimal outreach cadence for a sales rep contacting a specific local business lead.

LEAD PROFILE:
{profile}

AVAILABLE CHANNELS: {channel_list}

RULES:
1. Design a {config.min_steps}-{config.max_steps} step cadence spread over {config.min_span_days}-{config.max_span_days} days
2. Only use channels from the AVAILABLE CHANNELS list above
3. Each channel value MUST be exactly one of: {channel_list}. Any other value is forbidden.
4. day_offset starts at 0 (today) and increases. Space steps appropriately.
5. template_name should be descriptive (e.g., "cold_call", "follow_up_email", "social_dm_intro", "social_dm_follow_up", "breakup_email", "final_call", "walk_in")
6. Consider the business type when choosing channel order and timing:
   - Restaurants/retail: in-person and phone work best, social DMs for engagement
   - Professional services: email first, then phone follow-ups
   - Home services: phone is primary, email for proposals
   - Creators: social DMs first, then email
7. Front-load the strongest channel for this business type
8. End with a personal touch (phone or in-person if available)
9. Mix channels to avoid being repetitive on one method

Return ONLY a JSON array of steps. No markdown, no explanation, just the array:
[{{"step_number": 1, "channel": "{available[0].value if available else "phone"}", "day_offset": 0, "template_name": "cold_call", "reasoning": "brief reason"}}]"""


_FENCE_OPEN = re.compile(r"^```(?:json)?\s*")
_FENCE_CLOSE = re.compile(r"\s*```$")


def strip_code_fence(text: str) -> str:
    raw = text.strip()
    if raw.startswith("```"):
        raw = _FENCE_CLOSE.sub("", _FENCE_OPEN.sub("", raw))
    return raw


def _decode(raw: str):
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        # Tolerate prose around the array
        start, end = raw.find("["), raw.rfind("]")
        if start == -1 or end <= start:
            raise
        return json.loads(raw[start:end + 1])


def parse_cadence_response(text: str) -> list[CadenceStepDraft]:
    """Parse planner text into drafts. Raises PlannerError on anything unusable."""
    try:
        data = _decode(strip_code_fence(text))
    except json.JSONDecodeError as e:
        log.error("planner_json_parse_error", error=str(e), response=text[:200])
        raise PlannerError("Failed to parse AI cadence response", raw=text) from e

    if not isinstance(data, list):
        raise PlannerError("AI cadence response is not a JSON array", raw=text)
    if not data:
        raise EmptyCadenceError("AI returned an empty cadence", raw=text)

    try:
        return [CadenceStepDraft.model_validate(item) for item in data]
    except ValidationError as e:
        log.error("planner_step_invalid", errors=e.error_count())
        raise PlannerError("AI cadence contains malformed steps", raw=text) from e


class CadencePlanner:
    """Asks a generative model for a draft cadence.

    ``client`` is anything with ``async complete(prompt) -> str``.
    """

    def __init__(self, client, config: Optional[CadenceConfig] = None):
        self.client = client
        self.config = config or CadenceConfig()

    async def draft(
        self,
        lead: Lead,
        business_type: BusinessType,
        available: list[Channel],
    ) -> list[CadenceStepDraft]:
        prompt = build_cadence_prompt(lead, business_type, available, self.config)

        log.info("planner_request", lead_id=lead.id, business_type=business_type.value)
        try:
            text = await self.client.complete(prompt)
        except Exception as e:
            log.error("planner_call_failed", lead_id=lead.id, error=str(e))
            raise PlannerError(f"Planner call failed: {e}") from e

        if not text or not text.strip():
            raise PlannerError("No text response from AI", raw=text)

        drafts = parse_cadence_response(text)
        log.info("planner_drafted", lead_id=lead.id, steps=len(drafts))
        return drafts


# ============================================================
# Rule-based planner
# ============================================================

CHANNEL_PRIORITY = [
    Channel.PHONE, Channel.EMAIL, Channel.INSTAGRAM, Channel.FACEBOOK,
    Channel.TIKTOK, Channel.LINKEDIN, Channel.IN_PERSON,
]

# Strongest opening channels per business type, used without a recommendation
OPENING_CHANNELS: dict[BusinessType, list[Channel]] = {
    BusinessType.RESTAURANT: [Channel.IN_PERSON, Channel.PHONE],
    BusinessType.RETAIL: [Channel.IN_PERSON, Channel.PHONE],
    BusinessType.PROFESSIONAL_SERVICES: [Channel.EMAIL, Channel.PHONE],
    BusinessType.HOME_SERVICES: [Channel.PHONE],
    BusinessType.CREATOR: [Channel.INSTAGRAM, Channel.TIKTOK, Channel.FACEBOOK, Channel.EMAIL],
}

TEMPLATES: dict[Channel, list[str]] = {
    Channel.PHONE: ["cold_call", "follow_up_call", "final_call"],
    Channel.EMAIL: ["cold_email", "follow_up_email", "breakup_email"],
    Channel.INSTAGRAM: ["social_dm_intro", "social_dm_follow_up"],
    Channel.FACEBOOK: ["social_dm_intro", "social_dm_follow_up"],
    Channel.TIKTOK: ["social_dm_intro", "social_dm_follow_up"],
    Channel.LINKEDIN: ["social_dm_intro", "social_dm_follow_up"],
    Channel.IN_PERSON: ["walk_in"],
    Channel.OTHER: ["general_outreach"],
}

DAY_OFFSETS = [0, 2, 5, 8, 12, 16, 21]

# Enrichment writes touch types, not channel names
RECOMMENDATION_CHANNELS: dict[str, list[Channel]] = {
    "cold_call": [Channel.PHONE],
    "cold_email": [Channel.EMAIL],
    "walk_in": [Channel.IN_PERSON],
    "social_dm": [Channel.INSTAGRAM, Channel.FACEBOOK, Channel.TIKTOK, Channel.LINKEDIN],
}


def recommended_channel(recommendation: Optional[str], available: list[Channel]) -> Optional[Channel]:
    """Resolve a lead's recommendation to an available channel, if any."""
    if not isinstance(recommendation, str):
        return None
    key = recommendation.strip().lower()

    candidates = RECOMMENDATION_CHANNELS.get(key)
    if candidates is None:
        channel = Channel.parse(key)
        candidates = [channel] if channel else []

    for channel in candidates:
        if channel in available:
            return channel
    return None


class RuleBasedPlanner:
    """Deterministic channel rotation, no model call."""

    def __init__(self, config: Optional[CadenceConfig] = None):
        self.config = config or CadenceConfig()

    def _channel_order(
        self, lead: Lead, business_type: BusinessType, available: list[Channel]
    ) -> list[Channel]:
        order: list[Channel] = []

        recommended = recommended_channel(lead.recommended_channel, available)
        if recommended is not None:
            order.append(recommended)
        else:
            for channel in OPENING_CHANNELS.get(business_type, []):
                if channel in available:
                    order.append(channel)
                    break

        for channel in CHANNEL_PRIORITY:
            if channel in available and channel not in order:
                order.append(channel)
        return order

    async def draft(
        self,
        lead: Lead,
        business_type: BusinessType,
        available: list[Channel],
    ) -> list[CadenceStepDraft]:
        channels = self._channel_order(lead, business_type, available)
        if not channels:
            raise NoChannelsError("No contact channels available for this lead")

        step_count = min(self.config.max_steps, max(self.config.min_steps, len(channels) + 3))
        used: dict[Channel, int] = {}
        drafts = []

        for i in range(step_count):
            if i == 0:
                channel, reasoning = channels[0], f"Open on {channels[0].value}"
            elif i == step_count - 1 and Channel.PHONE in channels:
                channel, reasoning = Channel.PHONE, "Final personal touch"
            else:
                channel, reasoning = channels[i % len(channels)], "Channel rotation"

            if i < len(DAY_OFFSETS):
                offset = DAY_OFFSETS[i]
            else:
                offset = DAY_OFFSETS[-1] + (i - len(DAY_OFFSETS) + 1) * 3

            templates = TEMPLATES[channel]
            count = used.get(channel, 0)
            used[channel] = count + 1

            drafts.append(CadenceStepDraft(
                step_number=i + 1,
                channel=channel.value,
                day_offset=offset,
                template_name=templates[min(count, len(templates) - 1)],
                reasoning=reasoning,
            ))

        return drafts
