"""Cadence generation pipeline.

fetch lead -> detect channels -> classify -> plan -> normalize ->
materialize -> persist. Each request is independent; the only awaits are the
planner call and the store calls, done one after the other. Nothing is
retried here: any failure aborts the request before anything is written.
"""

from datetime import datetime
from pathlib import Path
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import structlog

from leadcadence.cadence.channels import available_channel_list, detect_available_channels
from leadcadence.cadence.materializer import materialize_schedule
from leadcadence.cadence.models import CadenceResult, StepReasoning
from leadcadence.cadence.normalizer import normalize_drafts
from leadcadence.cadence.planner import CadencePlanner, RuleBasedPlanner
from leadcadence.cadence.timing import classify_business_type
from leadcadence.clients.claude import AnthropicPlannerClient
from leadcadence.clients.supabase import SupabaseClient
from leadcadence.core.config import (
    DEFAULT_CONFIG_PATH,
    REQUIRED_ENV_VARS,
    Settings,
    load_settings,
    require_credentials,
)
from leadcadence.core.errors import (
    ClientRequestError,
    ConfigurationError,
    LeadNotFoundError,
    NoChannelsError,
)

log = structlog.get_logger()


class CadenceEngine:
    """Generates and stores a cadence for one lead per call.

    ``store`` provides ``get_lead`` and ``save_cadence``; ``planner`` provides
    ``async draft(lead, business_type, available)``. Generating twice for the
    same lead concurrently writes two cadences; serialize per lead upstream.
    """

    def __init__(self, store, planner, settings: Optional[Settings] = None):
        self.store = store
        self.planner = planner
        self.settings = settings or Settings()

        try:
            self.tz = ZoneInfo(self.settings.timing.timezone)
        except ZoneInfoNotFoundError as e:
            raise ConfigurationError(f"Unknown timezone: {self.settings.timing.timezone}") from e

    @classmethod
    def from_env(cls, settings: Optional[Settings] = None, use_rules: bool = False) -> "CadenceEngine":
        """Build against Supabase and Claude using environment credentials.

        Credentials are checked before any client is created.
        """
        settings = settings or Settings()
        needed = tuple(n for n in REQUIRED_ENV_VARS if not (use_rules and n == "ANTHROPIC_API_KEY"))
        creds = require_credentials(needed)

        store = SupabaseClient(creds["SUPABASE_URL"], creds["SUPABASE_KEY"])
        if use_rules:
            planner = RuleBasedPlanner(settings.cadence)
        else:
            client = AnthropicPlannerClient(settings.planner, api_key=creds["ANTHROPIC_API_KEY"])
            planner = CadencePlanner(client, settings.cadence)

        return cls(store, planner, settings)

    def now(self) -> datetime:
        return datetime.now(self.tz)

    async def generate(
        self, lead_id: str, user_id: str, now: Optional[datetime] = None
    ) -> CadenceResult:
        """Generate, schedule and persist a cadence for ``lead_id``."""
        if not (lead_id and str(lead_id).strip()) or not (user_id and str(user_id).strip()):
            raise ClientRequestError("lead_id and user_id are required")

        lead = self.store.get_lead(lead_id)
        if lead is None:
            raise LeadNotFoundError("Lead not found")

        available = detect_available_channels(lead)
        channels = available_channel_list(available)
        log.info("channels_detected", lead_id=lead_id, channels=[c.value for c in channels])
        if not channels:
            raise NoChannelsError("No contact channels available for this lead. Enrich the lead first.")

        business_type = classify_business_type(lead.category)

        drafts = await self.planner.draft(lead, business_type, channels)
        steps = normalize_drafts(drafts, available, self.settings.cadence)

        scheduled = materialize_schedule(
            steps,
            lead_id=lead_id,
            user_id=user_id,
            business_type=business_type,
            now=now or self.now(),
            cadence=self.settings.cadence,
            timing=self.settings.timing,
        )

        saved = self.store.save_cadence(scheduled)
        log.info("cadence_generated", lead_id=lead_id, business_type=business_type.value, steps=len(saved))

        return CadenceResult(
            steps=saved,
            reasoning=[
                StepReasoning(step=d.step_number, channel=d.channel, reasoning=d.reasoning)
                for d in drafts
            ],
            business_type=business_type.value,
        )


async def generate_cadence(
    lead_id: str,
    user_id: str,
    config_path: Path = DEFAULT_CONFIG_PATH,
    use_rules: bool = False,
    now: Optional[datetime] = None,
) -> CadenceResult:
    """Load settings, build the engine from the environment and run it once."""
    settings = load_settings(config_path)
    engine = CadenceEngine.from_env(settings, use_rules=use_rules)
    return await engine.generate(lead_id, user_id, now=now)
