"""Business-type classification and contact timing rules.

Everything here is a pure function of its arguments. Callers pass the
reference instant explicitly; nothing reads the clock. The enrichment side
uses the same vocabulary, so keep these importable on their own.
"""

from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional

from leadcadence.cadence.models import Channel
from leadcadence.core.config import TimingConfig


class BusinessType(str, Enum):
    RESTAURANT = "restaurant"
    RETAIL = "retail"
    PROFESSIONAL_SERVICES = "professional_services"
    HEALTH_WELLNESS = "health_wellness"
    HOME_SERVICES = "home_services"
    AUTOMOTIVE = "automotive"
    CREATOR = "creator"
    GENERAL = "general"


# Declaration order is match order: the first group with a hit wins.
CATEGORY_KEYWORDS: dict[BusinessType, list[str]] = {
    BusinessType.RESTAURANT: [
        "restaurant", "cafe", "coffee", "bakery", "bar", "grill", "pizza",
        "sushi", "thai", "chinese", "mexican", "italian", "indian", "food",
        "diner", "bistro", "eatery", "kitchen", "brewing", "brewery", "pub",
        "taco", "burger", "nepalese", "japanese", "korean", "vietnamese",
        "catering", "deli", "juice", "smoothie", "ice cream", "bbq",
    ],
    BusinessType.RETAIL: [
        "shop", "store", "boutique", "retail", "clothing", "apparel",
        "jewelry", "gift", "florist", "flower", "pet", "furniture",
        "hardware", "bookstore", "gallery", "antique", "thrift",
    ],
    BusinessType.PROFESSIONAL_SERVICES: [
        "law", "legal", "attorney", "accounting", "cpa", "consulting",
        "financial", "insurance", "real estate", "realty", "architect",
        "engineering", "marketing", "agency", "design", "photography",
        "photographer", "videograph", "studio", "media", "creative",
        "tech", "software", "it services", "staffing", "recruiting",
    ],
    BusinessType.HEALTH_WELLNESS: [
        "dental", "dentist", "doctor", "medical", "clinic", "therapy",
        "therapist", "chiropract", "massage", "spa", "salon", "barber",
        "beauty", "nail", "yoga", "fitness", "gym", "wellness", "health",
        "veterinar", "vet", "optom", "eye", "pharmacy", "urgent care",
    ],
    BusinessType.HOME_SERVICES: [
        "plumb", "electric", "hvac", "roofing", "roofer", "landscap",
        "painting", "painter", "cleaning", "janitorial", "pest",
        "contractor", "construction", "remodel", "handyman", "moving",
        "locksmith", "garage door", "fencing", "pool", "solar",
    ],
    BusinessType.AUTOMOTIVE: [
        "auto", "car", "mechanic", "tire", "body shop", "collision",
        "detailing", "wash", "dealer", "towing", "transmission",
    ],
    BusinessType.CREATOR: [
        "creator", "influencer", "blogger", "youtuber", "podcast",
        "streamer", "content creator", "social media",
    ],
}


def classify_business_type(category: Optional[str]) -> BusinessType:
    """Classify a free-form category into a business type bucket.

    Keyword substring match, case-insensitive, falling back to GENERAL.
    """
    if not category:
        return BusinessType.GENERAL
    lower = category.lower()

    for business_type, keywords in CATEGORY_KEYWORDS.items():
        for keyword in keywords:
            if keyword in lower:
                return business_type

    return BusinessType.GENERAL


# ============================================================
# Call windows
# ============================================================

MON, TUE, WED, THU, FRI, SAT, SUN = range(7)
DAY_NAMES = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]


@dataclass(frozen=True)
class CallWindow:
    weekday: int  # datetime.weekday(): Monday=0
    start_hour: float
    end_hour: float
    weight: float  # 0-1, higher is better
    label: str


def _windows(days, start_hour, end_hour, weights, label) -> list[CallWindow]:
    return [
        CallWindow(day, start_hour, end_hour, weight, label)
        for day, weight in zip(days, weights)
    ]


CALL_WINDOWS: dict[BusinessType, list[CallWindow]] = {
    BusinessType.RESTAURANT: (
        _windows((TUE, WED, THU), 9, 10.5, (0.9, 0.95, 0.9), "Before lunch prep")
        + _windows((MON, TUE, WED, THU), 14, 16, (0.8, 0.85, 0.9, 0.85), "Between services")
    ),
    BusinessType.RETAIL: (
        _windows((TUE, WED, THU), 9, 10.5, (0.9, 0.95, 0.9), "Before store opens")
        + _windows((MON, TUE, WED, THU), 13, 15, (0.75, 0.8, 0.85, 0.8), "Afternoon lull")
    ),
    BusinessType.PROFESSIONAL_SERVICES: (
        _windows((TUE, WED, THU), 10, 12, (0.9, 0.95, 0.9), "Mid-morning")
        + _windows((MON, TUE, WED, THU), 14, 16, (0.8, 0.85, 0.9, 0.85), "Post-lunch")
        + _windows((FRI,), 10, 12, (0.7,), "Friday morning")
    ),
    BusinessType.HEALTH_WELLNESS: (
        _windows((TUE, WED, THU), 8, 9.5, (0.9, 0.95, 0.9), "Before appointments")
        + _windows((MON, TUE, WED, THU), 12, 13.5, (0.75, 0.8, 0.85, 0.8), "Lunch break")
    ),
    BusinessType.HOME_SERVICES: (
        _windows((MON, TUE, WED, THU, FRI), 7, 8.5, (0.85, 0.9, 0.9, 0.9, 0.85), "Before jobs")
        + _windows((MON, TUE, WED, THU), 16.5, 18, (0.8, 0.85, 0.85, 0.8), "End of day")
    ),
    BusinessType.AUTOMOTIVE: (
        _windows((MON, TUE, WED, THU, FRI), 8, 9.5, (0.85, 0.9, 0.9, 0.9, 0.85), "Shop just opened")
        + _windows((TUE, WED, THU), 14, 15.5, (0.8, 0.85, 0.8), "Mid-afternoon")
    ),
    BusinessType.CREATOR: (
        _windows((TUE, WED, THU), 11, 13, (0.9, 0.95, 0.9), "Late morning")
        + _windows((MON, TUE, WED, THU), 15, 17, (0.75, 0.8, 0.85, 0.8), "Afternoon")
    ),
    BusinessType.GENERAL: (
        _windows((TUE, WED, THU), 10, 11.5, (0.85, 0.9, 0.85), "Mid-morning")
        + _windows((TUE, WED, THU), 14, 15.5, (0.75, 0.8, 0.75), "Early afternoon")
    ),
}

FALLBACK_HOUR = 10
LOOKAHEAD_DAYS = 7


def _hour_of(moment: datetime) -> float:
    return moment.hour + moment.minute / 60 + moment.second / 3600


def _at_hour(moment: datetime, hour: float) -> datetime:
    whole = int(hour)
    return moment.replace(hour=whole, minute=round((hour - whole) * 60), second=0, microsecond=0)


def adjust_to_business_hour(moment: datetime, hour: int) -> datetime:
    """Skip forward past Saturday/Sunday, then pin to ``hour`` on the hour."""
    while moment.weekday() >= SAT:
        moment += timedelta(days=1)
    return moment.replace(hour=hour, minute=0, second=0, microsecond=0)


def next_best_window(
    business_type: BusinessType, reference: datetime
) -> tuple[datetime, CallWindow]:
    """Earliest good call instant at or after ``reference``.

    Inside a window the reference itself is good enough. Otherwise each of the
    next seven days is tried, best-weighted window first, skipping windows that
    have already started. Windows never fall on weekends.
    """
    windows = CALL_WINDOWS[business_type]
    hour = _hour_of(reference)

    for w in windows:
        if w.weekday == reference.weekday() and w.start_hour <= hour < w.end_hour:
            return reference.replace(second=0, microsecond=0), w

    for day_offset in range(LOOKAHEAD_DAYS):
        day = reference + timedelta(days=day_offset)
        day_windows = sorted(
            (w for w in windows if w.weekday == day.weekday()),
            key=lambda w: w.weight,
            reverse=True,
        )
        for w in day_windows:
            candidate = _at_hour(day, w.start_hour)
            if candidate <= reference:
                continue
            return candidate, w

    fallback = adjust_to_business_hour(reference + timedelta(days=1), FALLBACK_HOUR)
    return fallback, CallWindow(
        fallback.weekday(), FALLBACK_HOUR, 12, 0.5, "General business hours"
    )


def next_contact_time(
    business_type: BusinessType,
    channel: Channel,
    reference: datetime,
    timing: Optional[TimingConfig] = None,
) -> datetime:
    """Final scheduled instant for a touch on ``channel`` around ``reference``."""
    timing = timing or TimingConfig()

    if channel == Channel.PHONE:
        return next_best_window(business_type, reference)[0]
    if channel == Channel.EMAIL:
        return adjust_to_business_hour(reference, timing.email_hour)
    if channel == Channel.IN_PERSON:
        return adjust_to_business_hour(reference, timing.in_person_hour)
    return adjust_to_business_hour(reference, timing.engagement_hour)


# ============================================================
# Scoring and summaries
# ============================================================

@dataclass
class TimingScore:
    score: float  # 0-1
    label: str
    window: Optional[CallWindow]
    business_type: BusinessType


def _score_label(score: float) -> str:
    if score >= 0.7:
        return "Great time"
    if score >= 0.4:
        return "Good time"
    if score >= 0.2:
        return "OK"
    return "Off-peak"


def score_moment(category: Optional[str], moment: datetime) -> TimingScore:
    """Score how good ``moment`` is to call a lead in ``category``."""
    business_type = classify_business_type(category)
    hour = _hour_of(moment)

    best_score = 0.0
    best_window = None

    for w in CALL_WINDOWS[business_type]:
        if w.weekday != moment.weekday():
            continue
        if w.start_hour <= hour <= w.end_hour:
            score = w.weight
        else:
            # Half weight, fading out over the hour around the window
            dist = min(abs(hour - w.start_hour), abs(hour - w.end_hour))
            if dist > 1:
                continue
            score = w.weight * (1 - dist) * 0.5
        if score > best_score:
            best_score = score
            best_window = w

    if best_score == 0 and moment.weekday() <= FRI and 8 <= hour <= 17:
        best_score = 0.2

    return TimingScore(
        score=round(best_score, 2),
        label=_score_label(best_score),
        window=best_window,
        business_type=business_type,
    )


def _format_hour(hour: float) -> str:
    whole = int(hour)
    minutes = round((hour - whole) * 60)
    suffix = "pm" if whole >= 12 else "am"
    h12 = whole - 12 if whole > 12 else whole
    return f"{h12}:{minutes:02d}{suffix}" if minutes else f"{h12}{suffix}"


def window_summary(business_type: BusinessType) -> list[dict]:
    """Readable call windows for a business type, best first."""
    groups: dict[tuple[float, float], dict] = {}

    for w in CALL_WINDOWS[business_type]:
        group = groups.setdefault(
            (w.start_hour, w.end_hour), {"days": [], "weight": 0.0, "label": w.label}
        )
        group["days"].append(w.weekday)
        group["weight"] = max(group["weight"], w.weight)

    summary = []
    for (start, end), group in sorted(groups.items(), key=lambda kv: kv[1]["weight"], reverse=True):
        days = sorted(group["days"])
        if len(days) >= 3 and days[-1] - days[0] == len(days) - 1:
            day_label = f"{DAY_NAMES[days[0]]}-{DAY_NAMES[days[-1]]}"
        else:
            day_label = ", ".join(DAY_NAMES[d] for d in days)

        summary.append({
            "day_label": day_label,
            "time_range": f"{_format_hour(start)} - {_format_hour(end)}",
            "label": group["label"],
            "quality": "best" if group["weight"] >= 0.85 else "good",
        })

    return summary


# ============================================================
# Outcome-based learning
# ============================================================

CALL_ACTIVITY_TYPES = {"cold_call", "follow_up_call"}
CONNECTED_OUTCOMES = {"connected", "interested", "meeting_set"}
MIN_CALLS = 5
MIN_CALLS_PER_SLOT = 3


@dataclass
class OutcomeSlot:
    weekday: int
    hour: int
    total_calls: int
    connects: int
    connect_rate: float


def analyze_outcome_patterns(activities: list[dict]) -> list[OutcomeSlot]:
    """Connect rates per (weekday, hour) from logged call activities.

    Slots with too little data are left out. Best slot first.
    """
    calls = [a for a in activities if a.get("activity_type") in CALL_ACTIVITY_TYPES]
    if len(calls) < MIN_CALLS:
        return []

    totals: dict[tuple[int, int], list[int]] = defaultdict(lambda: [0, 0])
    for call in calls:
        occurred = call["occurred_at"]
        if isinstance(occurred, str):
            occurred = datetime.fromisoformat(occurred)
        slot = totals[(occurred.weekday(), occurred.hour)]
        slot[0] += 1
        if call.get("outcome") in CONNECTED_OUTCOMES:
            slot[1] += 1

    slots = [
        OutcomeSlot(weekday, hour, total, connects, connects / total)
        for (weekday, hour), (total, connects) in totals.items()
        if total >= MIN_CALLS_PER_SLOT
    ]
    return sorted(slots, key=lambda s: s.connect_rate, reverse=True)
