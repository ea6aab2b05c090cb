"""Plan generation endpoints."""

from typing import Any

import structlog
from fastapi import APIRouter, Body, Depends, HTTPException, status

from learnplan.core.models import StudentProfile
from learnplan.core.plan_generator import PlanGenerator, validate_profile
from learnplan.core.progress import init_progress, normalize_progress
from learnplan.store.base import ProfileStore
from learnplan.web.dependencies import get_plan_generator, get_store, load_profile_record
from learnplan.web.schemas import ApiResponse, ProfilePayload

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/plan", tags=["plans"])

PROGRESS_KEYS = ("weeklyProgress", "whatWorked", "challenges", "nextSteps", "overallRating")


@router.post("/generate", response_model=ApiResponse)
def generate_plan(
    payload: ProfilePayload,
    store: ProfileStore = Depends(get_store),
    generator: PlanGenerator = Depends(get_plan_generator),
) -> ApiResponse:
    """Generate a 7-day plan and persist it with the student profile.

    A body carrying an ``id`` updates that profile (creating it if unknown);
    otherwise a new profile is created.
    """
    record = payload.to_record()
    validate_profile(record)

    profile = StudentProfile.from_dict(record)
    plan = generator.generate(profile)
    plan_data = plan.to_dict()

    record["latestPlan"] = plan_data
    if not record.get("progressData"):
        record["progressData"] = init_progress(plan_data)

    if profile.id:
        saved = store.update(profile.id, record)
    else:
        saved = store.create(record)

    plan.student_id = saved["id"]
    logger.info("plan_persisted", student_id=saved["id"], source=plan.source)
    return ApiResponse(data=plan.to_dict())


@router.post("/adapt/{student_id}", response_model=ApiResponse)
def adapt_plan(
    student_id: str,
    body: dict[str, Any] = Body(default_factory=dict),
    store: ProfileStore = Depends(get_store),
    generator: PlanGenerator = Depends(get_plan_generator),
) -> ApiResponse:
    """Generate a plan adapted to the student's recorded progress.

    The body may carry progress data; otherwise the stored ``progressData``
    is used. If the profile is unknown but the body includes a student name,
    the body itself is used as the profile.
    """
    record = store.get(student_id)
    persisted = record is not None
    if record is None:
        if not body.get("name"):
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Student profile not found",
            )
        logger.info("adapt_using_request_profile", student_id=student_id)
        record = dict(body)

    if any(key in body for key in PROGRESS_KEYS):
        progress = normalize_progress({k: body[k] for k in PROGRESS_KEYS if k in body})
    else:
        progress = normalize_progress(record.get("progressData") or body.get("progressData") or {})

    profile = StudentProfile.from_dict(record)
    plan = generator.generate_adapted(profile, progress)
    plan.student_id = student_id

    if persisted:
        record["latestPlan"] = plan.to_dict()
        record["progressData"] = progress
        store.update(student_id, record)

    return ApiResponse(data=plan.to_dict())


@router.get("/{student_id}", response_model=ApiResponse)
def get_latest_plan(
    student_id: str,
    store: ProfileStore = Depends(get_store),
) -> ApiResponse:
    """Return the most recent plan stored for a student."""
    record = load_profile_record(store, student_id)
    plan = record.get("latestPlan")
    if not plan:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No plan has been generated for this student",
        )
    return ApiResponse(data={**plan, "studentId": student_id})
