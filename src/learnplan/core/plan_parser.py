"""Best-effort extraction of a structured plan from free-text LLM output.

The model is asked for five headed sections ("Student Profile", "Learning
Approach", "Daily Plans", "Accommodations", "Progress Monitoring") and for
time-blocked days. Nothing guarantees it complies, so every helper here is
lenient: a helper that hits an unexpected error logs it and returns an empty
default instead of raising.

Recognized layout (markdown decoration optional):

    ## Student Profile
    ...
    ### Day 1: Monday
    9:00-9:20: Morning Meeting
    Review the visual schedule.
    Approach: Visual schedule cards
    Materials: Schedule board
    Notes: Keep a timer visible.
"""

from __future__ import annotations

import functools
import re
from typing import Any, Callable, TypeVar

import structlog

from learnplan.core.models import (
    NOT_SPECIFIED,
    Day,
    LearningPlan,
    StudentProfile,
    TimeBlock,
)
from learnplan.utils.text_utils import normalize_newlines, strip_think, truncate

logger = structlog.get_logger(__name__)

T = TypeVar("T")

DAYS_IN_PLAN = 7
FULL_DAY_EXCERPT_CHARS = 500

# =============================================================================
# PATTERNS
# =============================================================================

# Optional decoration before a heading name: indentation, "#"/">" markers,
# bold markers and a "3." style number.
_HEADING_PREFIX = (
    r"^[ \t]*(?:[#>]+[ \t]*)?(?:\*\*|__)?[ \t]*(?:\d+[.)][ \t]*)?(?:\*\*|__)?[ \t]*"
)

# A line that starts a new section after a blank line
_HEADING_LINE = (
    r"[ \t]*(?:"
    r"#{1,6}[ \t]+\S[^\n]*"
    r"|(?:\*\*|__)[^\n]+?(?:\*\*|__)[ \t]*:?"
    r"|\d+[.)][ \t]*[A-Z][^\n.!?]{0,60}:"
    r"|[A-Z][^\n.!?:]{0,60}:?"
    r"|[A-Z][A-Za-z /&-]{0,40}:[ \t]+\S[^\n]*"
    r")[ \t]*(?=\n|\Z)"
)

_SECTION_BODY = re.compile(
    r"(.*?)(?=\n[ \t]*\n\s*" + _HEADING_LINE + r"|\Z)",
    re.DOTALL,
)

_BULLET = re.compile(r"^[ \t]*(?:[-•*+]|\d+[.)])[ \t]+(?P<item>\S.*)$")

_TIME_RANGE = (
    r"\d{1,2}:\d{2}[ \t]*(?:[AaPp]\.?[Mm]\.?)?[ \t]*(?:-|–|—|to)[ \t]*"
    r"\d{1,2}:\d{2}(?:[ \t]*[AaPp]\.?[Mm]\.?)?"
)

_BLOCK_INTRO = re.compile(
    rf"(?P<intro>{_TIME_RANGE}"
    r"|(?:Morning|Afternoon|Evening)[ \t]+Block(?:[ \t]+\d+)?"
    r"|Block[ \t]+\d+)"
)

_DAY_NOTES = re.compile(
    r"^[ \t#*>_-]*(?:\*\*|__)?[ \t]*(?:(?:Additional|Teacher|Daily)[ \t]+)?"
    r"(?:Notes?|Accommodations)(?:\*\*|__)?[ \t]*(?::|$)(?:\*\*|__)?(?P<notes>.*)\Z",
    re.MULTILINE | re.DOTALL | re.IGNORECASE,
)

# Any "Label:" line inside a block body
_ANY_FIELD_LINE = re.compile(
    r"^[ \t]*(?:[-•*+][ \t]+)?(?:\*\*|__)?[ \t]*[A-Z][A-Za-z /&()-]{0,40}?"
    r"(?:\*\*|__)?[ \t]*:"
)

APPROACH_LABELS = (r"Approach(?:es)?", r"Methods?", r"Strateg(?:y|ies)")
MATERIALS_LABELS = (r"Materials?(?:[ \t]+Needed)?",)
SUBJECT_LABELS = {"subject", "focus", "subject focus", "topic"}

_ACTIVITY_LABEL = re.compile(r"^(?:\*\*|__)?Activit(?:y|ies)(?:\*\*|__)?[ \t]*:[ \t]*", re.IGNORECASE)


def _lenient(default_factory: Callable[[], Any]) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Make an extraction helper return a default instead of raising."""

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            try:
                return func(*args, **kwargs)
            except Exception as e:
                logger.warning("plan_parser.helper_failed", helper=func.__name__, error=str(e))
                return default_factory()

        return wrapper

    return decorator


def _name_pattern(name: str) -> str:
    return r"[ \t]+".join(re.escape(word) for word in name.split())


def _strip_markup(text: str) -> str:
    return re.sub(r"\*\*|__", "", text).strip()


def _inline_text(rest: str) -> str:
    """Content that follows a heading name on the same line, if any."""
    rest = re.sub(r"^\s*(?:\*\*|__)?\s*\([^)\n]*\)", "", rest)
    return _strip_markup(rest.strip().strip("*_#:-–— \t"))


def _find_heading(text: str, name: str) -> re.Match[str] | None:
    """Locate a heading line, preferring one that stands on its own line."""
    pattern = re.compile(
        _HEADING_PREFIX + _name_pattern(name) + r"\b(?P<rest>[^\n]*)",
        re.IGNORECASE | re.MULTILINE,
    )
    first = None
    for match in pattern.finditer(text):
        if first is None:
            first = match
        if not _inline_text(match.group("rest")):
            return match
    return first


# =============================================================================
# SECTIONS AND LISTS
# =============================================================================


@_lenient(str)
def extract_section(text: str, section_name: str) -> str:
    """Extract the text of a named section.

    The section runs from its heading to the next blank line followed by a
    heading-like line, or to the end of the text.

    Args:
        text: Full response text
        section_name: Heading to look for (e.g., "Student Profile")

    Returns:
        Section text without the heading, or "" if the heading is absent
    """
    if not text:
        return ""
    match = _find_heading(text, section_name)
    if match is None:
        return ""

    inline = _inline_text(match.group("rest"))
    start = match.end()
    if not inline:
        while start < len(text) and text[start] in " \t\n":
            start += 1

    body_match = _SECTION_BODY.match(text, start)
    body = body_match.group(1).strip() if body_match else ""
    if inline:
        return f"{inline}\n{body}" if body else inline
    return body


@_lenient(list)
def extract_list(section_text: str) -> list[str]:
    """Split section text into list items.

    Bulleted (-, •, *, +) and numbered (1. / 1)) lines start items; following
    unbulleted lines continue the current item. Without any bullets, each
    non-empty line is an item. Never returns an empty list for non-empty input.
    """
    text = (section_text or "").strip()
    if not text:
        return []

    items: list[str] = []
    current: str | None = None
    for line in text.split("\n"):
        bullet = _BULLET.match(line)
        if bullet:
            if current:
                items.append(current)
            current = _strip_markup(bullet.group("item"))
        elif line.strip() and current is not None:
            current = f"{current} {_strip_markup(line)}"
    if current:
        items.append(current)
    if items:
        return items

    items = [_strip_markup(line) for line in text.split("\n") if line.strip()]
    items = [item for item in items if item]
    return items or [text]


def extract_list_items(text: str, section_name: str) -> list[str]:
    """Extract a named section and split it into list items."""
    return extract_list(extract_section(text, section_name))


# =============================================================================
# TIME BLOCKS
# =============================================================================


def _clean_block_body(chunk: str) -> str:
    chunk = re.sub(r"^[\s*_:)\]\-–—|,.]+", "", chunk)
    chunk = re.sub(r"\n[ \t]*\d+[.)][ \t]*$", "", chunk)
    chunk = re.sub(r"[\s*_(\[\-–—|#>•+]+$", "", chunk)
    return chunk.strip()


def _field_regex(label: str) -> re.Pattern[str]:
    return re.compile(
        r"^[ \t]*(?:[-•*+][ \t]+)?(?:\*\*|__)?[ \t]*(?:[A-Za-z]+[ \t]+)?"
        + label
        + r"[ \t]*(?:\*\*|__)?[ \t]*:[ \t]*(?:\*\*|__)?[ \t]*(?P<value>[^\n]*)",
        re.IGNORECASE | re.MULTILINE,
    )


def _strip_bullet(line: str) -> tuple[str, bool]:
    bullet = _BULLET.match(line)
    if bullet:
        return _strip_markup(bullet.group("item")), True
    return _strip_markup(line), False


def _find_field(body: str, labels: tuple[str, ...]) -> tuple[str, tuple[int, int] | None]:
    """Find the first labeled field ("Approach: ...") in priority order.

    The value continues over following lines until a blank line or another
    "Label:" line.

    Returns:
        (value, (start, end) span in body) or ("", None)
    """
    for label in labels:
        match = _field_regex(label).search(body)
        if match is None:
            continue
        parts = [_strip_markup(match.group("value"))]
        separators = [""]
        end = match.end()
        while end < len(body) and body[end] == "\n":
            line_end = body.find("\n", end + 1)
            if line_end == -1:
                line_end = len(body)
            line = body[end + 1 : line_end]
            if not line.strip() or _ANY_FIELD_LINE.match(line):
                break
            text, is_bullet = _strip_bullet(line)
            parts.append(text)
            separators.append(", " if is_bullet else " ")
            end = line_end

        value = ""
        for sep, part in zip(separators, parts):
            if not part:
                continue
            value = f"{value}{sep}{part}" if value else part
        return value.strip(), (match.start(), end)
    return "", None


def _split_subject(line: str) -> tuple[str, str, bool]:
    """Split the first block line into (subject, activity head, consumed)."""
    text, _ = _strip_bullet(line)
    text = text.strip("()[] \t")
    split = re.match(r"(?P<head>[^:]{1,60}?)\s*(?::|\s[-–—]\s)\s*(?P<tail>.*)$", text)
    if split is None:
        return text, "", True

    head = split.group("head").strip()
    tail = split.group("tail").strip()
    if head.lower() in SUBJECT_LABELS:
        return tail, "", True
    for label in APPROACH_LABELS + MATERIALS_LABELS:
        if re.fullmatch(r"(?:[A-Za-z]+[ \t]+)?" + label, head, re.IGNORECASE):
            # First line is already a field: no explicit subject
            return "General", "", False
    return head, tail, True


def _build_time_block(label: str, body: str) -> TimeBlock:
    first, _, remainder = body.partition("\n")
    subject, activity_head, consumed = _split_subject(first)
    if not consumed:
        remainder = body

    approach, approach_span = _find_field(remainder, APPROACH_LABELS)
    materials, materials_span = _find_field(remainder, MATERIALS_LABELS)

    spans = sorted(span for span in (approach_span, materials_span) if span)
    kept: list[str] = []
    cursor = 0
    for start, end in spans:
        if start < cursor:
            continue
        kept.append(remainder[cursor:start])
        cursor = end
    kept.append(remainder[cursor:])

    activity_lines = [activity_head] if activity_head else []
    for line in "\n".join(kept).split("\n"):
        text, _ = _strip_bullet(line)
        text = _ACTIVITY_LABEL.sub("", text).strip()
        if text:
            activity_lines.append(text)

    return TimeBlock(
        time=label,
        subject=subject or "General",
        activity=" ".join(activity_lines),
        approach=approach or NOT_SPECIFIED,
        materials=materials,
    )


def _full_day_block(day_text: str) -> TimeBlock:
    return TimeBlock(
        time="Full Day",
        subject="General",
        activity=truncate(day_text, FULL_DAY_EXCERPT_CHARS),
        approach=NOT_SPECIFIED,
        materials="",
    )


def parse_time_blocks(day_text: str) -> list[TimeBlock]:
    """Split a day's text into time blocks.

    Blocks are introduced by a time range ("9:00-9:30"), by "Morning Block"
    style phrases or by "Block N". Without any introducer a single "Full Day"
    block holds an excerpt of the day text. Always returns at least one block.
    """
    try:
        matches = list(_BLOCK_INTRO.finditer(day_text or ""))
        blocks: list[TimeBlock] = []
        pending_label: str | None = None

        for index, match in enumerate(matches):
            end = matches[index + 1].start() if index + 1 < len(matches) else len(day_text)
            label = re.sub(r"\s+", " ", match.group("intro")).strip()
            if pending_label:
                label = f"{pending_label} ({label})"
                pending_label = None

            body = _clean_block_body(day_text[match.end() : end])
            if not body:
                # "Block 1 (9:00-9:30): Math" - label continues into the next introducer
                pending_label = label
                continue
            blocks.append(_build_time_block(label, body))

        if pending_label:
            blocks.append(TimeBlock(time=pending_label, subject="General"))
    except Exception as e:
        logger.warning("plan_parser.time_blocks_failed", error=str(e))
        blocks = []

    if not blocks:
        blocks = [_full_day_block(day_text or "")]
    return blocks


# =============================================================================
# DAYS
# =============================================================================


def _day_pattern(day_number: int) -> re.Pattern[str]:
    return re.compile(
        rf"^[ \t#*>_-]*Day[ \t]+{day_number}\b(?P<rest>[^\n]*)\n?(?P<body>.*?)"
        rf"(?=^[ \t#*>_-]*Day[ \t]+{day_number + 1}\b"
        r"|^[ \t#*>_]*(?:\d+[.)][ \t]*)?(?:\*\*|__)?[ \t]*Progress[ \t]+Monitoring\b"
        r"|^[ \t#*>_]*(?:\d+[.)][ \t]*)?(?:\*\*|__)?[ \t]*Accommodations"
        r"(?:\*\*|__)?[ \t]*:?[ \t]*(?:\*\*|__)?[ \t]*$"
        r"|\Z)",
        re.MULTILINE | re.DOTALL | re.IGNORECASE,
    )


def _build_day(day_number: int, heading_rest: str, content: str) -> Day:
    title = f"Day {day_number}"
    rest = heading_rest.strip()
    if _BLOCK_INTRO.search(rest):
        content = f"{rest.strip('*_#:-–— ')}\n{content}"
    else:
        suffix = _strip_markup(rest.strip("*_#:-–— \t"))
        if suffix:
            title = f"Day {day_number} - {suffix}"

    # Day notes only follow the last block; earlier "Note:" lines belong to a block
    notes = ""
    intros = list(_BLOCK_INTRO.finditer(content))
    notes_match = _DAY_NOTES.search(content, intros[-1].end() if intros else 0)
    if notes_match:
        notes = notes_match.group("notes").strip()
        content = content[: notes_match.start()]

    return Day(title=title, time_blocks=parse_time_blocks(content.strip()), notes=notes)


@_lenient(list)
def extract_daily_plans(text: str) -> list[Day]:
    """Extract up to seven days.

    First pass looks for "Day 1" .. "Day 7" headings in order, each running
    to the next day, the "Progress Monitoring"/"Accommodations" heading or
    the end. If nothing matches, the "Daily Plans" section is split on
    "Day N" occurrences instead.
    """
    days: list[Day] = []
    for day_number in range(1, DAYS_IN_PLAN + 1):
        match = _day_pattern(day_number).search(text)
        if match is None:
            continue
        days.append(_build_day(day_number, match.group("rest"), match.group("body")))

    if days:
        return days

    section = extract_section(text, "Daily Plans")
    if not section:
        return []

    parts = re.split(r"\b(Day\s+\d+)\b", section, flags=re.IGNORECASE)
    for heading, chunk in zip(parts[1::2], parts[2::2]):
        if len(days) >= DAYS_IN_PLAN:
            break
        number = int(re.sub(r"\D", "", heading))
        first, _, rest = chunk.partition("\n")
        days.append(_build_day(number, first, rest))
    return days


# =============================================================================
# WHOLE PLAN
# =============================================================================


def unparsed_plan(raw_response: str, profile: StudentProfile) -> LearningPlan:
    """Placeholder plan carrying the raw text when parsing aborted."""
    return LearningPlan(
        student_name=profile.name,
        student_age=profile.age,
        student_grade=profile.grade,
        diagnosis=profile.diagnosis,
        student_profile="Could not parse student profile.",
        learning_approach="Could not parse learning approach.",
        daily_plans=[
            Day(
                title="Day 1",
                time_blocks=[
                    TimeBlock(
                        time="Morning",
                        subject="General",
                        activity="Please see the raw content below.",
                        approach="N/A",
                    )
                ],
                notes="Error parsing the plan.",
            )
        ],
        accommodations=["Could not parse accommodations."],
        progress_monitoring="Could not parse progress monitoring.",
        source="unparsed",
        raw_content=raw_response,
    )


def parse_plan_response(
    raw_response: str,
    profile: StudentProfile,
    created_at: str | None = None,
) -> LearningPlan:
    """Turn a raw completion into a LearningPlan.

    Never raises: an unexpected failure yields ``unparsed_plan`` (source
    "unparsed"), which callers replace with the fallback plan.

    Args:
        raw_response: Completion text from the LLM
        profile: Student profile the plan was requested for
        created_at: Creation timestamp (defaults to now)

    Returns:
        Parsed LearningPlan
    """
    try:
        text = normalize_newlines(strip_think(raw_response or ""))

        plan = LearningPlan(
            student_name=profile.name,
            student_age=profile.age,
            student_grade=profile.grade,
            diagnosis=profile.diagnosis,
            student_profile=extract_section(text, "Student Profile"),
            learning_approach=extract_section(text, "Learning Approach"),
            daily_plans=extract_daily_plans(text),
            accommodations=extract_list_items(text, "Accommodations"),
            progress_monitoring=extract_section(text, "Progress Monitoring"),
            created_at=created_at or "",
            source="llm",
        )
    except Exception as e:
        logger.error("plan_parse_failed", error=str(e))
        return unparsed_plan(raw_response, profile)

    logger.debug(
        "plan_parsed",
        days=len(plan.daily_plans),
        blocks=sum(len(d.time_blocks) for d in plan.daily_plans),
        accommodations=len(plan.accommodations),
    )
    return plan
