"""Detect which outreach channels a lead can be reached through."""

from leadcadence.cadence.models import Channel, Lead
from leadcadence.core.errors import InvalidInputError

# Lead fields backing each channel. OTHER has no backing field and is never
# reported as available.
CHANNEL_FIELDS: dict[Channel, tuple[str, ...]] = {
    Channel.PHONE: ("phone",),
    Channel.EMAIL: ("email", "owner_email"),
    Channel.INSTAGRAM: ("instagram",),
    Channel.FACEBOOK: ("facebook",),
    Channel.TIKTOK: ("tiktok",),
    Channel.LINKEDIN: ("linkedin",),
    Channel.IN_PERSON: ("address",),
    Channel.OTHER: (),
}


def _has_value(value) -> bool:
    return isinstance(value, str) and bool(value.strip())


def detect_available_channels(lead: Lead) -> dict[Channel, bool]:
    """Map every channel to whether the lead has contact data for it."""
    if lead is None or not _has_value(getattr(lead, "id", None)):
        raise InvalidInputError("Lead is missing its identifier")

    return {
        channel: any(_has_value(getattr(lead, name, None)) for name in names)
        for channel, names in CHANNEL_FIELDS.items()
    }


def available_channel_list(available: dict[Channel, bool]) -> list[Channel]:
    """Available channels in enumeration order."""
    return [channel for channel in Channel if available.get(channel)]
