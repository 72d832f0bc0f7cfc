"""Cadence pipeline: detect, classify, plan, normalize, schedule, persist."""

from leadcadence.cadence.channels import detect_available_channels, available_channel_list
from leadcadence.cadence.timing import (
    BusinessType,
    classify_business_type,
    next_best_window,
    next_contact_time,
    adjust_to_business_hour,
    score_moment,
    window_summary,
)
from leadcadence.cadence.planner import CadencePlanner, RuleBasedPlanner, parse_cadence_response
from leadcadence.cadence.normalizer import normalize_drafts
from leadcadence.cadence.materializer import materialize_schedule
