"""apply_coloring_event: how one coloring event changes the lifetime rollup row."""

from __future__ import annotations

from datetime import date, timedelta

import pytest
from pydantic import ValidationError

from zuna.gamification.badge_service import apply_coloring_event
from zuna.gamification.schemas import ColoringEvent

TODAY = date(2026, 3, 11)


def apply(row: dict, **event) -> dict:
    return apply_coloring_event(row, ColoringEvent(**event), TODAY, quick_minutes=5, marathon_minutes=30)


class TestCompleted:
    def test_first_completion_on_empty_row(self):
        changes = apply({}, type="coloring_completed", colors_in_session=6, session_duration=12)
        assert changes == {
            "completed_colorings": 1,
            "colors_used_total": 6,
            "colors_used_single_max": 6,
            "coloring_time_total": 12,
            "coloring_streak": 1,
            "last_coloring_date": TODAY,
        }

    def test_accumulates_onto_existing_row(self):
        row = {
            "completed_colorings": 4,
            "colors_used_total": 20,
            "colors_used_single_max": 9,
            "coloring_time_total": 50,
            "coloring_streak": 2,
            "last_coloring_date": TODAY - timedelta(days=1),
        }
        changes = apply(row, type="coloring_completed", colors_in_session=3, session_duration=10)
        assert changes["completed_colorings"] == 5
        assert changes["colors_used_total"] == 23
        assert changes["colors_used_single_max"] == 9
        assert changes["coloring_time_total"] == 60
        assert changes["coloring_streak"] == 3

    def test_short_session_is_quick(self):
        changes = apply({}, type="coloring_completed", session_duration=3)
        assert changes["quick_colorings"] == 1
        assert "marathon_colorings" not in changes

    def test_long_session_is_marathon(self):
        changes = apply({"marathon_colorings": 1}, type="coloring_completed", session_duration=45)
        assert changes["marathon_colorings"] == 2
        assert "quick_colorings" not in changes

    @pytest.mark.parametrize("minutes", [5, 30])
    def test_boundaries_are_neither(self, minutes):
        changes = apply({}, type="coloring_completed", session_duration=minutes)
        assert "quick_colorings" not in changes
        assert "marathon_colorings" not in changes

    def test_no_duration_leaves_time_alone(self):
        changes = apply({"coloring_time_total": 40}, type="coloring_completed")
        assert "coloring_time_total" not in changes
        assert "quick_colorings" not in changes


class TestBrushes:
    def test_new_brush_added(self):
        changes = apply({"brush_types_array": ["standard"]}, type="brush_used", value="pencil")
        assert changes == {"brush_types_array": ["pencil", "standard"], "brush_types_used": 2}

    def test_repeat_brush_not_counted_twice(self):
        assert apply({"brush_types_array": ["pencil"]}, type="brush_used", value="pencil") == {}

    def test_premium_brush_tracked_in_both_sets(self):
        changes = apply({}, type="brush_used", value="watercolor")
        assert changes == {
            "brush_types_array": ["watercolor"],
            "brush_types_used": 1,
            "premium_brushes_array": ["watercolor"],
            "premium_brushes_used": 1,
        }

    def test_missing_brush_name_ignored(self):
        assert apply({}, type="brush_used") == {}


class TestCounters:
    @pytest.mark.parametrize(
        ("event_type", "column"),
        [
            ("ai_suggestion", "ai_suggestions_used"),
            ("harmony_used", "harmony_colors_used"),
            ("reference_used", "reference_images_used"),
            ("undo_continue", "undo_and_continue"),
        ],
    )
    def test_counter_increments(self, event_type, column):
        assert apply({column: 2}, type=event_type) == {column: 3}


def test_unknown_event_type_rejected():
    with pytest.raises(ValidationError):
        ColoringEvent(type="sticker_used")


def test_negative_duration_rejected():
    with pytest.raises(ValidationError):
        ColoringEvent(type="coloring_completed", session_duration=-1)
