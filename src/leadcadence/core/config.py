"""Configuration loading and models."""

import os
from pathlib import Path

import yaml
from pydantic import BaseModel

from leadcadence.core.errors import ConfigurationError


class CadenceConfig(BaseModel):
    min_steps: int = 5
    max_steps: int = 7
    min_span_days: int = 14
    max_span_days: int = 21
    fallback_channel: str = "other"
    default_template: str = "general_outreach"
    max_day_offset: int = 365


class TimingConfig(BaseModel):
    timezone: str = "UTC"
    email_hour: int = 8  # inbox visibility
    in_person_hour: int = 10
    engagement_hour: int = 12  # social DMs


class PlannerConfig(BaseModel):
    model: str = "claude-sonnet-4-20250514"
    max_tokens: int = 1024
    timeout_seconds: float = 60.0


class Settings(BaseModel):
    cadence: CadenceConfig = CadenceConfig()
    timing: TimingConfig = TimingConfig()
    planner: PlannerConfig = PlannerConfig()


DEFAULT_CONFIG_PATH = Path("config")

REQUIRED_ENV_VARS = ("ANTHROPIC_API_KEY", "SUPABASE_URL", "SUPABASE_KEY")


def load_settings(config_path: Path = DEFAULT_CONFIG_PATH) -> Settings:
    """Load settings from YAML file."""
    settings_file = config_path / "settings.yaml"

    if not settings_file.exists():
        return Settings()

    with open(settings_file) as f:
        data = yaml.safe_load(f) or {}

    return Settings(**data)


def require_credentials(names: tuple[str, ...] = REQUIRED_ENV_VARS) -> dict[str, str]:
    """Return the named environment variables, or raise listing the missing ones."""
    values = {name: os.environ.get(name, "") for name in names}
    missing = [name for name, value in values.items() if not value]
    if missing:
        raise ConfigurationError(f"Missing required configuration: {', '.join(missing)}")
    return values
