"""Error taxonomy for cadence generation."""

from typing import Optional


class CadenceError(Exception):
    """Base error. Every failure of a generation request is one of these."""

    status_code = 500

    def __init__(self, message: str, raw: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.raw = raw

    def to_dict(self) -> dict:
        """Structured error payload for callers."""
        payload = {"error": self.message, "status": self.status_code}
        if self.raw is not None:
            payload["raw"] = self.raw
        return payload


class ConfigurationError(CadenceError):
    """Required credentials or settings are missing."""

    status_code = 500


class ClientRequestError(CadenceError):
    """The request itself cannot be served (bad input, unknown lead, ...)."""

    status_code = 400


class InvalidInputError(ClientRequestError):
    status_code = 400


class LeadNotFoundError(ClientRequestError):
    status_code = 404


class NoChannelsError(ClientRequestError):
    status_code = 400


class PlannerError(CadenceError):
    """The generative planner failed or answered with something unusable."""

    status_code = 500


class EmptyCadenceError(PlannerError, ClientRequestError):
    """The planner answered with an empty sequence."""

    status_code = 422


class PersistenceError(CadenceError):
    """Writing to the datastore failed. Nothing was committed."""

    status_code = 500
