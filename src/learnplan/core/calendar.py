"""Calendar edits: moving a plan's time block to another day and hour."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import structlog

from learnplan.core.models import utc_now_iso
from learnplan.errors import ValidationError

logger = structlog.get_logger(__name__)

# Hour slots shown by the calendar view (8 AM to 6 PM)
FIRST_HOUR = 8
LAST_HOUR = 18


@dataclass
class CalendarMove:
    """Drag-and-drop move of one time block."""

    source_day_index: int
    source_block_index: int
    target_day_index: int
    target_hour: int

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CalendarMove:
        keys = ("sourceDayIndex", "sourceBlockIndex", "targetDayIndex", "targetHour")
        values = []
        for key in keys:
            value = data.get(key)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValidationError(f"{key} must be an integer")
            values.append(value)
        return cls(*values)

    def to_dict(self) -> dict[str, int]:
        return {
            "sourceDayIndex": self.source_day_index,
            "sourceBlockIndex": self.source_block_index,
            "targetDayIndex": self.target_day_index,
            "targetHour": self.target_hour,
        }


def move_activity(plan: dict[str, Any], move: CalendarMove) -> dict[str, Any]:
    """Move a time block within a serialized plan.

    The block is removed from its source day, relabeled ``H:00`` and
    appended to the target day. The input plan is not modified.

    Args:
        plan: Plan in its camelCase dictionary form
        move: Indexes of the block and its destination

    Returns:
        Updated copy of the plan

    Raises:
        ValidationError: If an index is out of range or the hour is outside
            the calendar's slots
    """
    days = [dict(day) for day in plan.get("dailyPlans") or []]
    for day in days:
        day["timeBlocks"] = list(day.get("timeBlocks") or [])

    if not 0 <= move.source_day_index < len(days):
        raise ValidationError(f"Invalid source day index: {move.source_day_index}")
    if not 0 <= move.target_day_index < len(days):
        raise ValidationError(f"Invalid target day index: {move.target_day_index}")
    source_blocks = days[move.source_day_index]["timeBlocks"]
    if not 0 <= move.source_block_index < len(source_blocks):
        raise ValidationError(f"Invalid source block index: {move.source_block_index}")
    if not FIRST_HOUR <= move.target_hour <= LAST_HOUR:
        raise ValidationError(
            f"Target hour must be between {FIRST_HOUR} and {LAST_HOUR}, got {move.target_hour}"
        )

    block = dict(source_blocks.pop(move.source_block_index))
    block["time"] = f"{move.target_hour}:00"
    days[move.target_day_index]["timeBlocks"].append(block)

    logger.info(
        "calendar_activity_moved",
        subject=block.get("subject"),
        from_day=move.source_day_index + 1,
        to_day=move.target_day_index + 1,
        hour=move.target_hour,
    )
    return {**plan, "dailyPlans": days}


def record_move(
    calendar_data: dict[str, Any] | None,
    move: CalendarMove,
    subject: str | None = None,
    now: str | None = None,
) -> dict[str, Any]:
    """Append a move to ``calendarData.moves`` and return the new sub-object."""
    data = dict(calendar_data or {})
    entry = {**move.to_dict(), "movedAt": now or utc_now_iso()}
    if subject:
        entry["subject"] = subject
    data["moves"] = [*(data.get("moves") or []), entry]
    return data
