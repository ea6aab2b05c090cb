"""Tests for progress tracking data."""

import pytest

from learnplan.core.fallback_plan import generate_fallback_plan
from learnplan.core.progress import (
    init_progress,
    normalize_progress,
    summarize_progress,
)
from learnplan.errors import ValidationError


class TestInitProgress:
    """Tests for init_progress."""

    def test_matches_plan_shape(self, alex):
        plan = generate_fallback_plan(alex).to_dict()

        progress = init_progress(plan)

        assert sorted(progress["weeklyProgress"]) == [f"day{n}" for n in range(1, 8)]
        assert sorted(progress["weeklyProgress"]["day1"]) == [f"block{n}" for n in range(1, 6)]
        assert progress["weeklyProgress"]["day7"]["block5"] == {
            "completed": False,
            "rating": 0,
            "notes": "",
        }
        assert progress["overallRating"] == 3
        assert progress["whatWorked"] == ""

    def test_no_plan(self):
        assert init_progress(None)["weeklyProgress"] == {}


class TestNormalizeProgress:
    """Tests for normalize_progress."""

    def test_canonical_shape_kept(self):
        data = {
            "weeklyProgress": {"day1": {"block1": {"completed": True, "rating": 4, "notes": "ok"}}},
            "whatWorked": "Timers",
            "overallRating": 5,
        }

        result = normalize_progress(data)

        assert result["weeklyProgress"]["day1"]["block1"] == {
            "completed": True,
            "rating": 4,
            "notes": "ok",
        }
        assert result["whatWorked"] == "Timers"
        assert result["challenges"] == ""
        assert result["overallRating"] == 5

    def test_legacy_list_shape_converted(self):
        """Older clients stored each day as a list of entries."""
        data = {"weeklyProgress": {"day1": [{"completed": True, "rating": 3}, {"notes": "tired"}]}}

        result = normalize_progress(data)

        assert result["weeklyProgress"]["day1"] == {
            "block1": {"completed": True, "rating": 3, "notes": ""},
            "block2": {"completed": False, "rating": 0, "notes": "tired"},
        }

    def test_ratings_clamped_and_coerced(self):
        data = {"weeklyProgress": {"day1": {"block1": {"rating": 9}, "block2": {"rating": "x"}}}}
        blocks = normalize_progress(data)["weeklyProgress"]["day1"]
        assert blocks["block1"]["rating"] == 5
        assert blocks["block2"]["rating"] == 0

    def test_extra_keys_preserved(self):
        assert normalize_progress({"teacher": "Ms. Lee"})["teacher"] == "Ms. Lee"

    @pytest.mark.parametrize(
        "data",
        [
            [],
            "progress",
            {"weeklyProgress": ["day1"]},
            {"weeklyProgress": {"day1": "done"}},
        ],
    )
    def test_invalid_shapes_rejected(self, data):
        with pytest.raises(ValidationError):
            normalize_progress(data)


class TestSummarizeProgress:
    """Tests for summarize_progress."""

    def test_days_sorted_numerically(self):
        progress = {
            "weeklyProgress": {
                "day10": {"block1": {"completed": True}},
                "day2": {"block1": {"completed": False}},
            }
        }
        lines = summarize_progress(progress).split("\n")
        assert lines[0].startswith("Day2:")
        assert lines[1].startswith("Day10:")

    def test_empty(self):
        assert summarize_progress({}) == "No weekly progress recorded."
        assert summarize_progress(None) == "No weekly progress recorded."
