"""Domain records: student profiles, learning plans and their parts.

All records serialize to the camelCase JSON shape consumed by the web UI.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

NOT_SPECIFIED = "Not specified"

# Nested sub-objects of a profile that feature views replace independently
PROFILE_SECTIONS = (
    "learningStyleResults",
    "culturalData",
    "progressData",
    "calendarData",
    "resourceData",
    "consultationData",
    "latestPlan",
)


def utc_now_iso() -> str:
    """Current UTC time in ISO 8601 format."""
    return datetime.now(timezone.utc).isoformat()


class ResourceType(str, Enum):
    """Kind of an educational resource."""

    ARTICLE = "article"
    VIDEO = "video"
    INTERACTIVE = "interactive"
    WORKSHEET = "worksheet"


# =============================================================================
# STUDENT PROFILE
# =============================================================================


@dataclass
class StudentProfile:
    """Attributes collected by the student form plus per-feature sub-objects.

    Every attribute is optional at this level; required-field checks happen at
    the API boundary. Unknown keys are preserved in ``extra`` so whole-object
    upserts never drop data the UI sent.
    """

    id: str | None = None
    name: str = ""
    age: Any = None
    grade: Any = None
    diagnosis: str = ""
    diagnosis_other: str = ""
    strengths: str = ""
    struggles: str = ""
    learning_style: str = ""
    attention_span: str = ""
    triggers: str = ""
    interests: str = ""
    current_accommodations: str = ""
    learning_style_results: dict[str, Any] | None = None
    cultural_data: dict[str, Any] | None = None
    progress_data: dict[str, Any] | None = None
    calendar_data: dict[str, Any] | None = None
    resource_data: dict[str, Any] | None = None
    consultation_data: dict[str, Any] | None = None
    latest_plan: dict[str, Any] | None = None
    created_at: str | None = None
    updated_at: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    _FIELDS = {
        "id": "id",
        "name": "name",
        "age": "age",
        "grade": "grade",
        "diagnosis": "diagnosis",
        "diagnosisOther": "diagnosis_other",
        "strengths": "strengths",
        "struggles": "struggles",
        "learningStyle": "learning_style",
        "attentionSpan": "attention_span",
        "triggers": "triggers",
        "interests": "interests",
        "currentAccommodations": "current_accommodations",
        "learningStyleResults": "learning_style_results",
        "culturalData": "cultural_data",
        "progressData": "progress_data",
        "calendarData": "calendar_data",
        "resourceData": "resource_data",
        "consultationData": "consultation_data",
        "latestPlan": "latest_plan",
        "createdAt": "created_at",
        "updatedAt": "updated_at",
    }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> StudentProfile:
        """Build a profile from a camelCase (or snake_case) dictionary."""
        kwargs: dict[str, Any] = {}
        extra: dict[str, Any] = {}
        snake_names = set(cls._FIELDS.values())
        for key, value in (data or {}).items():
            if key in cls._FIELDS:
                kwargs[cls._FIELDS[key]] = value
            elif key in snake_names and key != "extra":
                kwargs[key] = value
            else:
                extra[key] = value
        # Free-text fields may arrive as None from the form
        for text_field in (
            "name",
            "diagnosis",
            "diagnosis_other",
            "strengths",
            "struggles",
            "learning_style",
            "attention_span",
            "triggers",
            "interests",
            "current_accommodations",
        ):
            if kwargs.get(text_field) is None:
                kwargs.pop(text_field, None)
            else:
                kwargs[text_field] = str(kwargs[text_field])
        return cls(extra=extra, **kwargs)

    def to_dict(self) -> dict[str, Any]:
        """Convert to camelCase dictionary, omitting unset optional values."""
        result: dict[str, Any] = dict(self.extra)
        for json_key, attr in self._FIELDS.items():
            value = getattr(self, attr)
            if value is None:
                continue
            result[json_key] = value
        return result

    def interest_list(self) -> list[str]:
        """Interests as a list (the form collects them comma separated)."""
        return [i.strip() for i in self.interests.split(",") if i.strip()]


# =============================================================================
# LEARNING PLAN
# =============================================================================


@dataclass
class TimeBlock:
    """A single scheduled activity within a day."""

    time: str
    subject: str
    activity: str = ""
    approach: str = NOT_SPECIFIED
    materials: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "time": self.time,
            "subject": self.subject,
            "activity": self.activity,
            "approach": self.approach,
            "materials": self.materials,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TimeBlock:
        return cls(
            time=str(data.get("time", "")),
            subject=str(data.get("subject", "")),
            activity=str(data.get("activity", "")),
            approach=str(data.get("approach") or NOT_SPECIFIED),
            materials=str(data.get("materials") or ""),
        )


@dataclass
class Day:
    """One day of the plan. Always holds at least one time block."""

    title: str
    time_blocks: list[TimeBlock] = field(default_factory=list)
    notes: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "timeBlocks": [b.to_dict() for b in self.time_blocks],
            "notes": self.notes,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Day:
        return cls(
            title=str(data.get("title", "")),
            time_blocks=[TimeBlock.from_dict(b) for b in data.get("timeBlocks", [])],
            notes=str(data.get("notes") or ""),
        )


@dataclass
class Resource:
    """Supplementary educational link attached to a plan."""

    title: str
    description: str
    url: str
    source: str
    type: ResourceType = ResourceType.ARTICLE
    difficulty: str = "intermediate"
    age_group: str = "all"

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "url": self.url,
            "source": self.source,
            "type": self.type.value,
            "difficulty": self.difficulty,
            "ageGroup": self.age_group,
        }


@dataclass
class LearningPlan:
    """The structured 7-day plan.

    ``daily_plans`` normally has 7 entries but a partially parsed response
    can yield fewer; consumers must handle any length.
    """

    student_name: str
    student_age: Any
    student_grade: Any
    diagnosis: str
    student_profile: str = ""
    learning_approach: str = ""
    daily_plans: list[Day] = field(default_factory=list)
    accommodations: list[str] = field(default_factory=list)
    progress_monitoring: str = ""
    resources: list[Resource] = field(default_factory=list)
    created_at: str = ""
    source: str = "llm"  # llm | fallback | unparsed
    student_id: str | None = None
    raw_content: str | None = None

    def __post_init__(self):
        if not self.created_at:
            self.created_at = utc_now_iso()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, Any] = {
            "studentName": self.student_name,
            "studentAge": self.student_age,
            "studentGrade": self.student_grade,
            "diagnosis": self.diagnosis,
            "studentProfile": self.student_profile,
            "learningApproach": self.learning_approach,
            "dailyPlans": [d.to_dict() for d in self.daily_plans],
            "accommodations": list(self.accommodations),
            "progressMonitoring": self.progress_monitoring,
            "resources": [r.to_dict() for r in self.resources],
            "createdAt": self.created_at,
            "source": self.source,
        }
        if self.student_id is not None:
            result["studentId"] = self.student_id
        if self.raw_content is not None:
            result["rawContent"] = self.raw_content
        return result
