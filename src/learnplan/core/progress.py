"""Progress tracking data.

Canonical ``progressData`` shape::

    {
        "weeklyProgress": {
            "day1": {"block1": {"completed": False, "rating": 0, "notes": ""}, ...},
            ...
        },
        "whatWorked": "",
        "challenges": "",
        "nextSteps": "",
        "overallRating": 3,
    }

Older clients stored each day as a list of block entries instead of a
``blockN`` map; ``normalize_progress`` converts that shape.
"""

from __future__ import annotations

from typing import Any

from learnplan.errors import ValidationError

DEFAULT_OVERALL_RATING = 3


def day_key(day_index: int) -> str:
    """Key for a zero-based day index (``day1`` for index 0)."""
    return f"day{day_index + 1}"


def block_key(block_index: int) -> str:
    """Key for a zero-based block index (``block1`` for index 0)."""
    return f"block{block_index + 1}"


def empty_entry() -> dict[str, Any]:
    return {"completed": False, "rating": 0, "notes": ""}


def init_progress(plan: dict[str, Any] | None) -> dict[str, Any]:
    """Build an empty progress record matching a plan's days and blocks."""
    weekly: dict[str, dict[str, Any]] = {}
    for d, day in enumerate((plan or {}).get("dailyPlans", []) or []):
        weekly[day_key(d)] = {
            block_key(b): empty_entry() for b, _ in enumerate(day.get("timeBlocks", []) or [])
        }
    return {
        "weeklyProgress": weekly,
        "whatWorked": "",
        "challenges": "",
        "nextSteps": "",
        "overallRating": DEFAULT_OVERALL_RATING,
    }


def _normalize_entry(entry: Any) -> dict[str, Any]:
    if not isinstance(entry, dict):
        return empty_entry()
    try:
        rating = int(entry.get("rating", 0) or 0)
    except (TypeError, ValueError):
        rating = 0
    return {
        "completed": bool(entry.get("completed", False)),
        "rating": max(0, min(5, rating)),
        "notes": str(entry.get("notes", "") or ""),
    }


def normalize_progress(data: dict[str, Any]) -> dict[str, Any]:
    """Validate progress data and convert it to the canonical shape.

    Raises:
        ValidationError: If ``data`` is not an object or ``weeklyProgress``
            is neither a map nor absent.
    """
    if not isinstance(data, dict):
        raise ValidationError("Progress data must be an object")

    weekly_raw = data.get("weeklyProgress") or {}
    if not isinstance(weekly_raw, dict):
        raise ValidationError("weeklyProgress must be an object keyed by day")

    weekly: dict[str, dict[str, Any]] = {}
    for day, blocks in weekly_raw.items():
        if isinstance(blocks, list):
            weekly[str(day)] = {
                block_key(i): _normalize_entry(entry) for i, entry in enumerate(blocks)
            }
        elif isinstance(blocks, dict):
            weekly[str(day)] = {
                str(key): _normalize_entry(entry) for key, entry in blocks.items()
            }
        else:
            raise ValidationError(f"weeklyProgress['{day}'] must be an object or list")

    result = dict(data)
    result["weeklyProgress"] = weekly
    for text_field in ("whatWorked", "challenges", "nextSteps"):
        result[text_field] = str(data.get(text_field, "") or "")
    try:
        result["overallRating"] = int(data.get("overallRating", DEFAULT_OVERALL_RATING))
    except (TypeError, ValueError):
        result["overallRating"] = DEFAULT_OVERALL_RATING
    return result


def _day_sort_key(key: str) -> tuple[int, str]:
    digits = "".join(c for c in key if c.isdigit())
    return (int(digits) if digits else 0, key)


def summarize_progress(progress: dict[str, Any] | None) -> str:
    """Render weekly progress as short human-readable lines for a prompt."""
    weekly = (progress or {}).get("weeklyProgress") or {}
    if not isinstance(weekly, dict) or not weekly:
        return "No weekly progress recorded."

    lines = []
    for day in sorted(weekly, key=_day_sort_key):
        blocks = weekly[day]
        if isinstance(blocks, list):
            blocks = {block_key(i): b for i, b in enumerate(blocks)}
        if not isinstance(blocks, dict) or not blocks:
            continue
        entries = [_normalize_entry(b) for b in blocks.values()]
        completed = sum(1 for e in entries if e["completed"])
        rated = [e["rating"] for e in entries if e["rating"] > 0]
        line = f"{day.capitalize()}: {completed}/{len(entries)} activities completed"
        if rated:
            line += f", average rating {sum(rated) / len(rated):.1f}/5"
        notes = [e["notes"] for e in entries if e["notes"]]
        if notes:
            line += f" (notes: {'; '.join(notes)})"
        lines.append(line)

    return "\n".join(lines) if lines else "No weekly progress recorded."
