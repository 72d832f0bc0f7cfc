from datetime import datetime, timedelta, timezone

from leadcadence.cadence.materializer import materialize_schedule
from leadcadence.cadence.models import Channel, PlannedStep
from leadcadence.cadence.timing import BusinessType
from leadcadence.core.config import CadenceConfig

MONDAY_9AM = datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)


def planned(step_number, channel, day_offset, template_name="touch"):
    return PlannedStep(
        step_number=step_number,
        channel=channel,
        day_offset=day_offset,
        template_name=template_name,
    )


def test_materialize_schedule_per_channel_timing():
    steps = [
        planned(1, Channel.PHONE, 0, "cold_call"),
        planned(2, Channel.EMAIL, 2, "cold_email"),
        planned(3, Channel.IN_PERSON, 3, "walk_in"),
        planned(4, Channel.INSTAGRAM, 5, "social_dm_intro"),
    ]

    scheduled = materialize_schedule(
        steps, "lead-1", "user-1", BusinessType.PROFESSIONAL_SERVICES, MONDAY_9AM
    )

    assert [s.scheduled_at for s in scheduled] == [
        datetime(2024, 1, 1, 14, 0, tzinfo=timezone.utc),  # Monday post-lunch window
        datetime(2024, 1, 3, 8, 0, tzinfo=timezone.utc),
        datetime(2024, 1, 4, 10, 0, tzinfo=timezone.utc),
        datetime(2024, 1, 8, 12, 0, tzinfo=timezone.utc),  # Saturday rolled to Monday
    ]
    for step in scheduled:
        assert step.lead_id == "lead-1"
        assert step.user_id == "user-1"
        assert step.completed_at is None
        assert step.skipped is False
        assert step.id is None
    assert [s.template_name for s in scheduled] == ["cold_call", "cold_email", "walk_in", "social_dm_intro"]


def test_materialize_schedule_keeps_count_and_collisions():
    steps = [planned(1, Channel.EMAIL, 1), planned(1, Channel.EMAIL, 1), planned(1, Channel.OTHER, 1)]

    scheduled = materialize_schedule(steps, "lead-1", "user-1", BusinessType.GENERAL, MONDAY_9AM)

    assert len(scheduled) == 3
    assert scheduled[0].scheduled_at == scheduled[1].scheduled_at
    assert [s.step_number for s in scheduled] == [1, 1, 1]


def test_materialize_schedule_negative_offset_is_in_the_past():
    scheduled = materialize_schedule(
        [planned(1, Channel.EMAIL, -3)], "lead-1", "user-1", BusinessType.GENERAL, MONDAY_9AM
    )

    assert scheduled[0].scheduled_at == datetime(2023, 12, 29, 8, 0, tzinfo=timezone.utc)


def test_materialize_schedule_clamps_absurd_offsets():
    steps = [planned(1, Channel.EMAIL, 10**9), planned(2, Channel.PHONE, -10**9)]

    scheduled = materialize_schedule(
        steps, "lead-1", "user-1", BusinessType.GENERAL, MONDAY_9AM, CadenceConfig(max_day_offset=30)
    )

    assert MONDAY_9AM + timedelta(days=29) <= scheduled[0].scheduled_at < MONDAY_9AM + timedelta(days=33)
    assert MONDAY_9AM - timedelta(days=30) <= scheduled[1].scheduled_at < MONDAY_9AM - timedelta(days=20)


def test_materialized_steps_land_on_weekdays():
    steps = [
        planned(i, channel, offset)
        for i, (channel, offset) in enumerate(
            [(c, o) for c in Channel for o in range(0, 14)], start=1
        )
    ]

    for business_type in BusinessType:
        scheduled = materialize_schedule(steps, "lead-1", "user-1", business_type, MONDAY_9AM)

        assert len(scheduled) == len(steps)
        for step in scheduled:
            assert step.scheduled_at.weekday() < 5
            assert step.channel in Channel
