"""Tests for calendar edits."""

import pytest

from learnplan.core.calendar import CalendarMove, move_activity, record_move
from learnplan.core.fallback_plan import generate_fallback_plan
from learnplan.errors import ValidationError


@pytest.fixture
def plan(alex):
    return generate_fallback_plan(alex, created_at="2025-01-06T09:00:00+00:00").to_dict()


class TestMoveActivity:
    """Tests for move_activity."""

    def test_block_moved_to_target_day(self, plan):
        subject = plan["dailyPlans"][0]["timeBlocks"][1]["subject"]
        move = CalendarMove(source_day_index=0, source_block_index=1, target_day_index=2, target_hour=14)

        updated = move_activity(plan, move)

        assert len(updated["dailyPlans"][0]["timeBlocks"]) == 4
        assert len(updated["dailyPlans"][2]["timeBlocks"]) == 6
        moved = updated["dailyPlans"][2]["timeBlocks"][-1]
        assert moved["subject"] == subject
        assert moved["time"] == "14:00"

    def test_input_plan_unchanged(self, plan):
        move_activity(plan, CalendarMove(0, 0, 1, 9))
        assert len(plan["dailyPlans"][0]["timeBlocks"]) == 5
        assert plan["dailyPlans"][0]["timeBlocks"][0]["time"] == "9:00-9:20"

    def test_move_within_same_day(self, plan):
        updated = move_activity(plan, CalendarMove(1, 0, 1, 16))
        blocks = updated["dailyPlans"][1]["timeBlocks"]
        assert len(blocks) == 5
        assert blocks[-1]["time"] == "16:00"

    @pytest.mark.parametrize(
        "move",
        [
            CalendarMove(7, 0, 1, 9),
            CalendarMove(0, 5, 1, 9),
            CalendarMove(0, 0, -1, 9),
            CalendarMove(0, 0, 1, 7),
            CalendarMove(0, 0, 1, 19),
        ],
    )
    def test_invalid_moves_rejected(self, plan, move):
        with pytest.raises(ValidationError):
            move_activity(plan, move)


class TestCalendarMove:
    """Tests for CalendarMove parsing."""

    def test_from_dict(self):
        move = CalendarMove.from_dict(
            {"sourceDayIndex": 0, "sourceBlockIndex": 2, "targetDayIndex": 3, "targetHour": 10}
        )
        assert move == CalendarMove(0, 2, 3, 10)
        assert move.to_dict()["targetHour"] == 10

    def test_from_dict_rejects_non_integers(self):
        with pytest.raises(ValidationError, match="targetHour"):
            CalendarMove.from_dict(
                {"sourceDayIndex": 0, "sourceBlockIndex": 2, "targetDayIndex": 3, "targetHour": "10"}
            )


class TestRecordMove:
    """Tests for record_move."""

    def test_appends_move(self):
        data = record_move({"view": "week"}, CalendarMove(0, 1, 2, 14), "Math", now="2025-01-06")
        assert data["view"] == "week"
        assert data["moves"] == [
            {
                "sourceDayIndex": 0,
                "sourceBlockIndex": 1,
                "targetDayIndex": 2,
                "targetHour": 14,
                "movedAt": "2025-01-06",
                "subject": "Math",
            }
        ]

    def test_keeps_earlier_moves(self):
        first = record_move(None, CalendarMove(0, 1, 2, 14), now="t1")
        second = record_move(first, CalendarMove(1, 0, 3, 9), now="t2")
        assert [m["movedAt"] for m in second["moves"]] == ["t1", "t2"]
        assert len(first["moves"]) == 1
