"""Expert consultation requests stored on a student profile.

Consultations live in ``consultationData.consultations`` (newest first) and
are identified as ``cons-<n>`` with ``n`` incrementing per student.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import structlog

from learnplan.core.models import StudentProfile, utc_now_iso
from learnplan.errors import NotFoundError, ValidationError

logger = structlog.get_logger(__name__)

ID_PREFIX = "cons-"


class ConsultationType(str, Enum):
    PLAN_REVIEW = "plan-review"
    SPECIFIC_QUESTION = "specific-question"
    STRATEGY_DEVELOPMENT = "strategy-development"
    PROGRESS_REVIEW = "progress-review"


class ConsultationStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"


class Urgency(str, Enum):
    NORMAL = "normal"
    URGENT = "urgent"
    IMMEDIATE = "immediate"


def _enum_value(enum_cls: type[Enum], value: Any, field_name: str) -> Any:
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValidationError(f"Invalid {field_name} '{value}' (expected one of: {allowed})")


@dataclass
class Consultation:
    """A request for expert input on a student's plan."""

    id: str
    expert_id: str
    expert_name: str
    type: ConsultationType
    status: ConsultationStatus = ConsultationStatus.PENDING
    urgency: Urgency = Urgency.NORMAL
    student_id: str | None = None
    expert_photo: str = ""
    specific_questions: str = ""
    summary: str = ""
    feedback: str = ""
    attachments: list[str] = field(default_factory=list)
    request_date: str = ""
    completed_date: str | None = None

    def to_dict(self) -> dict[str, Any]:
        result = {
            "id": self.id,
            "studentId": self.student_id,
            "expertId": self.expert_id,
            "expertName": self.expert_name,
            "expertPhoto": self.expert_photo,
            "type": self.type.value,
            "status": self.status.value,
            "urgency": self.urgency.value,
            "specificQuestions": self.specific_questions,
            "summary": self.summary,
            "feedback": self.feedback,
            "attachments": list(self.attachments),
            "requestDate": self.request_date,
        }
        if self.completed_date:
            result["completedDate"] = self.completed_date
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Consultation:
        """Build from camelCase data, validating required fields and enums.

        Raises:
            ValidationError: If expertId/expertName/type are missing or an
                enum value is unknown.
        """
        missing = [key for key in ("expertId", "expertName", "type") if not data.get(key)]
        if missing:
            raise ValidationError(f"Missing required consultation fields: {', '.join(missing)}")

        return cls(
            id=str(data.get("id", "")),
            student_id=data.get("studentId"),
            expert_id=str(data["expertId"]),
            expert_name=str(data["expertName"]),
            expert_photo=str(data.get("expertPhoto") or ""),
            type=_enum_value(ConsultationType, data["type"], "type"),
            status=_enum_value(ConsultationStatus, data.get("status") or "pending", "status"),
            urgency=_enum_value(Urgency, data.get("urgency") or "normal", "urgency"),
            specific_questions=str(data.get("specificQuestions") or ""),
            summary=str(data.get("summary") or ""),
            feedback=str(data.get("feedback") or ""),
            attachments=[str(a) for a in data.get("attachments") or []],
            request_date=str(data.get("requestDate") or ""),
            completed_date=data.get("completedDate"),
        )


def list_consultations(profile: StudentProfile) -> list[dict[str, Any]]:
    """Consultations of a student, newest first."""
    return list((profile.consultation_data or {}).get("consultations", []) or [])


def _next_id(existing: list[dict[str, Any]]) -> str:
    highest = 0
    for item in existing:
        suffix = str(item.get("id", ""))[len(ID_PREFIX) :]
        if suffix.isdigit():
            highest = max(highest, int(suffix))
    return f"{ID_PREFIX}{highest + 1}"


def add_consultation(
    profile: StudentProfile,
    data: dict[str, Any],
    now: str | None = None,
) -> Consultation:
    """Create a consultation and prepend it to the profile's list.

    Args:
        profile: Student profile (mutated)
        data: camelCase consultation fields
        now: Request timestamp (defaults to current UTC time)

    Returns:
        The created Consultation
    """
    existing = list_consultations(profile)
    consultation = Consultation.from_dict({**data, "id": _next_id(existing)})
    consultation.student_id = profile.id
    consultation.request_date = consultation.request_date or now or utc_now_iso()
    if consultation.status == ConsultationStatus.COMPLETED and not consultation.completed_date:
        consultation.completed_date = now or utc_now_iso()

    consultation_data = dict(profile.consultation_data or {})
    consultation_data["consultations"] = [consultation.to_dict(), *existing]
    profile.consultation_data = consultation_data

    logger.info("consultation_created", student_id=profile.id, consultation_id=consultation.id)
    return consultation


def update_consultation(
    profile: StudentProfile,
    consultation_id: str,
    changes: dict[str, Any],
    now: str | None = None,
) -> Consultation:
    """Apply changes to an existing consultation.

    Raises:
        NotFoundError: If the consultation id is unknown for this student
        ValidationError: If the changes contain invalid enum values
    """
    existing = list_consultations(profile)
    for index, item in enumerate(existing):
        if item.get("id") == consultation_id:
            break
    else:
        raise NotFoundError(f"Consultation not found: {consultation_id}")

    merged = {**item, **changes, "id": consultation_id}
    consultation = Consultation.from_dict(merged)
    if consultation.status == ConsultationStatus.COMPLETED and not consultation.completed_date:
        consultation.completed_date = now or utc_now_iso()

    existing[index] = consultation.to_dict()
    profile.consultation_data = {**(profile.consultation_data or {}), "consultations": existing}

    logger.info(
        "consultation_updated",
        student_id=profile.id,
        consultation_id=consultation_id,
        status=consultation.status.value,
    )
    return consultation
