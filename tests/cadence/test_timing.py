"""Tests for business-type classification and contact timing."""

from datetime import datetime, timedelta, timezone

import pytest

from leadcadence.cadence.models import Channel
from leadcadence.cadence.timing import (
    CALL_WINDOWS,
    BusinessType,
    adjust_to_business_hour,
    analyze_outcome_patterns,
    classify_business_type,
    next_best_window,
    next_contact_time,
    score_moment,
    window_summary,
)
from leadcadence.core.config import TimingConfig


def at(day: int, hour: int, minute: int = 0) -> datetime:
    """January 2024 in UTC. The 1st is a Monday."""
    return datetime(2024, 1, day, hour, minute, tzinfo=timezone.utc)


@pytest.mark.parametrize("category,expected", [
    ("Italian Restaurant", BusinessType.RESTAURANT),
    ("BOUTIQUE", BusinessType.RETAIL),
    ("Law Firm", BusinessType.PROFESSIONAL_SERVICES),
    ("Management Consulting", BusinessType.PROFESSIONAL_SERVICES),
    ("Wedding Photographer", BusinessType.PROFESSIONAL_SERVICES),
    ("Dental Clinic", BusinessType.HEALTH_WELLNESS),
    ("Roofing", BusinessType.HOME_SERVICES),
    ("Plumbing & Heating", BusinessType.HOME_SERVICES),
    ("Collision Repair", BusinessType.AUTOMOTIVE),
    ("Podcast", BusinessType.CREATOR),
])
def test_classify_business_type(category, expected):
    assert classify_business_type(category) == expected


def test_classify_first_group_wins():
    # "coffee" (restaurant) is declared before "shop" (retail)
    assert classify_business_type("Coffee Shop") == BusinessType.RESTAURANT


@pytest.mark.parametrize("category", [None, "", "Quarry"])
def test_classify_falls_back_to_general(category):
    assert classify_business_type(category) == BusinessType.GENERAL


def test_call_windows_never_fall_on_weekends():
    for windows in CALL_WINDOWS.values():
        assert windows
        for w in windows:
            assert 0 <= w.weekday <= 4
            assert w.start_hour < w.end_hour


def test_next_best_window_rolls_forward_to_same_day_window():
    when, window = next_best_window(BusinessType.PROFESSIONAL_SERVICES, at(1, 9))

    assert when == at(1, 14)
    assert window.label == "Post-lunch"
    assert window.start_hour <= when.hour < window.end_hour


def test_next_best_window_inside_window_keeps_reference():
    when, window = next_best_window(BusinessType.PROFESSIONAL_SERVICES, at(1, 15, 20))

    assert when == at(1, 15, 20)
    assert window.label == "Post-lunch"


def test_next_best_window_prefers_heavier_window_next_day():
    # Monday's only window has passed; Tuesday's mid-morning outweighs post-lunch
    when, window = next_best_window(BusinessType.PROFESSIONAL_SERVICES, at(1, 16, 30))

    assert when == at(2, 10)
    assert window.label == "Mid-morning"


def test_next_best_window_skips_weekend():
    when, _ = next_best_window(BusinessType.PROFESSIONAL_SERVICES, at(5, 13))

    assert when == at(8, 14)
    assert when.weekday() == 0


def test_next_best_window_from_saturday():
    when, _ = next_best_window(BusinessType.RESTAURANT, at(6, 12))

    assert when == at(8, 14)


def test_next_best_window_half_hour_start():
    when, window = next_best_window(BusinessType.HOME_SERVICES, at(1, 12))

    assert when == at(1, 16, 30)
    assert window.label == "End of day"


def test_adjust_to_business_hour_skips_weekend():
    adjusted = adjust_to_business_hour(at(6, 15, 45), 8)

    assert adjusted == at(8, 8)


def test_adjust_to_business_hour_weekday_sets_hour():
    adjusted = adjust_to_business_hour(datetime(2024, 1, 3, 17, 12, 9, 500, tzinfo=timezone.utc), 12)

    assert adjusted == at(3, 12)


def test_adjust_to_business_hour_is_idempotent():
    start = at(1, 0)
    for hours in range(0, 24 * 14, 5):
        for hour in (8, 10, 12):
            once = adjust_to_business_hour(start + timedelta(hours=hours), hour)
            assert adjust_to_business_hour(once, hour) == once
            assert once.weekday() < 5


def test_next_contact_time_per_channel():
    saturday = at(6, 9)
    timing = TimingConfig()

    assert next_contact_time(BusinessType.GENERAL, Channel.EMAIL, saturday, timing) == at(8, 8)
    assert next_contact_time(BusinessType.GENERAL, Channel.IN_PERSON, saturday, timing) == at(8, 10)
    assert next_contact_time(BusinessType.GENERAL, Channel.INSTAGRAM, saturday, timing) == at(8, 12)
    assert next_contact_time(BusinessType.GENERAL, Channel.OTHER, saturday, timing) == at(8, 12)
    # General has no Monday windows
    assert next_contact_time(BusinessType.GENERAL, Channel.PHONE, saturday, timing) == at(9, 10)


def test_next_contact_time_uses_configured_hours():
    timing = TimingConfig(email_hour=7, engagement_hour=18)

    assert next_contact_time(BusinessType.GENERAL, Channel.EMAIL, at(2, 9), timing) == at(2, 7)
    assert next_contact_time(BusinessType.GENERAL, Channel.TIKTOK, at(2, 9), timing) == at(2, 18)


def test_score_moment_inside_window():
    score = score_moment("Law Firm", at(3, 10, 30))

    assert score.score == 0.95
    assert score.label == "Great time"
    assert score.business_type == BusinessType.PROFESSIONAL_SERVICES


def test_score_moment_near_window():
    score = score_moment("Law Firm", at(3, 9, 30))

    assert score.score == 0.24
    assert score.label == "OK"
    assert score.window.label == "Mid-morning"


def test_score_moment_business_hours_floor_and_weekend():
    assert score_moment(None, at(1, 9)).score == 0.2
    weekend = score_moment(None, at(6, 10))
    assert weekend.score == 0
    assert weekend.label == "Off-peak"


def test_window_summary_groups_days():
    summary = window_summary(BusinessType.PROFESSIONAL_SERVICES)

    assert summary[0]["day_label"] == "Tue-Fri"
    assert summary[0]["time_range"] == "10am - 12pm"
    assert summary[0]["quality"] == "best"
    assert summary[1]["day_label"] == "Mon-Thu"
    assert summary[1]["time_range"] == "2pm - 4pm"


def test_window_summary_half_hours():
    summary = window_summary(BusinessType.RESTAURANT)

    assert summary[0]["time_range"] == "9am - 10:30am"


def test_analyze_outcome_patterns():
    activities = (
        [{"activity_type": "cold_call", "outcome": "connected", "occurred_at": "2024-01-02T10:15:00"}] * 2
        + [{"activity_type": "follow_up_call", "outcome": "no_answer", "occurred_at": "2024-01-02T10:40:00"}]
        + [{"activity_type": "cold_call", "outcome": "no_answer", "occurred_at": "2024-01-03T15:05:00"}] * 3
        + [{"activity_type": "cold_email", "outcome": "connected", "occurred_at": "2024-01-03T15:05:00"}] * 4
    )

    slots = analyze_outcome_patterns(activities)

    assert [(s.weekday, s.hour) for s in slots] == [(1, 10), (2, 15)]
    assert slots[0].total_calls == 3
    assert slots[0].connects == 2
    assert slots[1].connect_rate == 0


def test_analyze_outcome_patterns_needs_enough_calls():
    activities = [{"activity_type": "cold_call", "outcome": "connected", "occurred_at": at(2, 10)}] * 4

    assert analyze_outcome_patterns(activities) == []
