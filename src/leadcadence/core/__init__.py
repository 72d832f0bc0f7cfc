"""Core infrastructure: CLI, config, errors."""

from leadcadence.core.config import (
    Settings,
    CadenceConfig,
    TimingConfig,
    PlannerConfig,
    load_settings,
    require_credentials,
)
from leadcadence.core.errors import (
    CadenceError,
    ConfigurationError,
    ClientRequestError,
    InvalidInputError,
    LeadNotFoundError,
    NoChannelsError,
    PlannerError,
    EmptyCadenceError,
    PersistenceError,
)
