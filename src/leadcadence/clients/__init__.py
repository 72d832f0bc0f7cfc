"""External API clients: Supabase, Anthropic."""

from leadcadence.clients.supabase import SupabaseClient
from leadcadence.clients.claude import AnthropicPlannerClient
