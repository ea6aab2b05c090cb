"""Pydantic schemas for the Web API.

Request bodies use the camelCase keys the UI sends. Profile payloads allow
extra keys so whole-object upserts keep fields this service does not model.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

# =============================================================================
# PROFILE SCHEMAS
# =============================================================================


class ProfilePayload(BaseModel):
    """Student profile as submitted by the form (all fields optional here)."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str | None = None
    name: str | None = Field(default=None, max_length=200)
    age: int | str | None = None
    grade: int | str | None = None
    diagnosis: str | None = None
    diagnosis_other: str | None = Field(default=None, alias="diagnosisOther")
    strengths: str | None = None
    struggles: str | None = None
    learning_style: str | None = Field(default=None, alias="learningStyle")
    attention_span: str | None = Field(default=None, alias="attentionSpan")
    triggers: str | None = None
    interests: str | None = None
    current_accommodations: str | None = Field(default=None, alias="currentAccommodations")

    def to_record(self) -> dict[str, Any]:
        """camelCase dictionary of the fields that were actually sent."""
        return self.model_dump(by_alias=True, exclude_unset=True)


class ProgressPayload(BaseModel):
    """Progress data for one student (canonical or legacy weekly shape)."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    weekly_progress: dict[str, Any] | None = Field(default=None, alias="weeklyProgress")
    what_worked: str | None = Field(default=None, alias="whatWorked")
    challenges: str | None = None
    next_steps: str | None = Field(default=None, alias="nextSteps")
    overall_rating: int | None = Field(default=None, alias="overallRating", ge=1, le=5)

    def to_record(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_unset=True)


class CalendarMoveRequest(BaseModel):
    """Drag-and-drop move of a time block."""

    model_config = ConfigDict(populate_by_name=True)

    source_day_index: int = Field(..., alias="sourceDayIndex")
    source_block_index: int = Field(..., alias="sourceBlockIndex")
    target_day_index: int = Field(..., alias="targetDayIndex")
    target_hour: int = Field(..., alias="targetHour")


# =============================================================================
# CONSULTATION SCHEMAS
# =============================================================================

ConsultationTypeName = Literal[
    "plan-review", "specific-question", "strategy-development", "progress-review"
]
ConsultationStatusName = Literal["pending", "in-progress", "completed"]
UrgencyName = Literal["normal", "urgent", "immediate"]


class ConsultationCreate(BaseModel):
    """Request body for a new consultation."""

    model_config = ConfigDict(populate_by_name=True)

    expert_id: str = Field(..., min_length=1, alias="expertId")
    expert_name: str = Field(..., min_length=1, alias="expertName")
    expert_photo: str | None = Field(default=None, alias="expertPhoto")
    type: ConsultationTypeName
    status: ConsultationStatusName = "pending"
    urgency: UrgencyName = "normal"
    specific_questions: str | None = Field(default=None, alias="specificQuestions")
    summary: str | None = None
    feedback: str | None = None
    attachments: list[str] = Field(default_factory=list)

    def to_record(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class ConsultationUpdate(BaseModel):
    """Partial update of a consultation."""

    model_config = ConfigDict(populate_by_name=True)

    status: ConsultationStatusName | None = None
    urgency: UrgencyName | None = None
    specific_questions: str | None = Field(default=None, alias="specificQuestions")
    summary: str | None = None
    feedback: str | None = None
    attachments: list[str] | None = None
    completed_date: str | None = Field(default=None, alias="completedDate")

    def to_record(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_unset=True)


# =============================================================================
# RESPONSE SCHEMAS
# =============================================================================


class ApiResponse(BaseModel):
    """Envelope used by every endpoint except /health."""

    success: bool = True
    data: Any = None
    message: str | None = None


class HealthResponse(BaseModel):
    """Liveness and configuration flags."""

    model_config = ConfigDict(populate_by_name=True)

    status: str
    version: str
    timestamp: str
    llm_configured: bool = Field(..., serialization_alias="llmConfigured")
    search_configured: bool = Field(..., serialization_alias="searchConfigured")
    store_backend: str = Field(..., serialization_alias="storeBackend")
    mock_mode: bool = Field(..., serialization_alias="mockMode")
