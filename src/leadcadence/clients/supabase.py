# src/leadcadence/clients/supabase.py
"""Supabase client for leads and cadences."""

import os
from typing import Optional

from supabase import create_client, Client
import structlog

from leadcadence.cadence.models import CadenceStep, Lead
from leadcadence.core.errors import ConfigurationError, InvalidInputError, PersistenceError

log = structlog.get_logger()

# Everything: Lead.from_row keeps what it models, and columns like linkedin
# are not present in every deployment.
LEAD_COLUMNS = "*"


class SupabaseClient:
    """Client for Supabase database operations.

    This is the only component that talks to the datastore. There is no
    per-lead locking: two concurrent ``save_cadence`` calls for the same lead
    both write. Callers that want one cadence per lead must serialize
    generation by lead id.
    """

    def __init__(self, url: Optional[str] = None, key: Optional[str] = None):
        """Initialize Supabase client, defaulting to environment variables."""
        url = url or os.getenv("SUPABASE_URL")
        key = key or os.getenv("SUPABASE_KEY")

        if not url:
            raise ConfigurationError("SUPABASE_URL environment variable is required")
        if not key:
            raise ConfigurationError("SUPABASE_KEY environment variable is required")

        self.client: Client = create_client(url, key)

    def get_lead(self, lead_id: str) -> Optional[Lead]:
        """Fetch one lead, or None if it doesn't exist."""
        try:
            result = (
                self.client.table("leads")
                .select(LEAD_COLUMNS)
                .eq("id", lead_id)
                .limit(1)
                .execute()
            )
        except Exception as e:
            log.error("lead_fetch_failed", lead_id=lead_id, error=str(e))
            raise PersistenceError(f"Failed to read lead: {e}") from e

        if not result.data:
            return None
        return Lead.from_row(result.data[0])

    def save_cadence(self, steps: list[CadenceStep]) -> list[CadenceStep]:
        """Insert all steps in one statement and return the stored rows.

        A single multi-row insert either commits every row or none.
        """
        if not steps:
            raise InvalidInputError("Refusing to save an empty cadence")

        rows = [step.to_row() for step in steps]
        try:
            result = self.client.table("cadences").insert(rows).execute()
        except Exception as e:
            log.error("cadence_save_failed", lead_id=steps[0].lead_id, error=str(e))
            raise PersistenceError(f"Failed to save cadence: {e}") from e

        if len(result.data or []) != len(rows):
            log.error("cadence_save_mismatch", expected=len(rows), returned=len(result.data or []))
            raise PersistenceError(
                f"Failed to save cadence: expected {len(rows)} rows, store returned {len(result.data or [])}"
            )

        log.info("cadence_saved", lead_id=steps[0].lead_id, steps=len(rows))
        return [CadenceStep.from_row(row) for row in result.data]

    def get_cadence(self, lead_id: str, user_id: Optional[str] = None) -> list[CadenceStep]:
        """Read back a lead's steps, earliest first."""
        query = self.client.table("cadences").select("*").eq("lead_id", lead_id)
        if user_id:
            query = query.eq("user_id", user_id)
        try:
            result = query.order("scheduled_at").execute()
        except Exception as e:
            log.error("cadence_fetch_failed", lead_id=lead_id, error=str(e))
            raise PersistenceError(f"Failed to read cadence: {e}") from e
        return [CadenceStep.from_row(row) for row in result.data]
