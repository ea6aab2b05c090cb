"""Student profile endpoints.

Profiles are whole-object upserts; feature views (progress, calendar,
resources, cultural data...) replace a single sub-object at a time.
"""

from typing import Any

import structlog
from fastapi import APIRouter, Body, Depends, HTTPException, Query, status

from learnplan.core.calendar import CalendarMove, move_activity, record_move
from learnplan.core.progress import normalize_progress
from learnplan.store.base import ProfileStore
from learnplan.web.dependencies import get_store, load_profile_record
from learnplan.web.schemas import (
    ApiResponse,
    CalendarMoveRequest,
    ProfilePayload,
    ProgressPayload,
)

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/profile", tags=["profiles"])

# Sub-objects replaceable through PUT /profile/{id}/{section}
REPLACEABLE_SECTIONS = (
    "learningStyleResults",
    "culturalData",
    "progressData",
    "calendarData",
    "resourceData",
    "consultationData",
)


@router.get("", response_model=ApiResponse)
def list_profiles(store: ProfileStore = Depends(get_store)) -> ApiResponse:
    """List summaries of all student profiles."""
    return ApiResponse(data=store.list())


@router.get("/search", response_model=ApiResponse)
def search_profiles(
    name: str = Query(..., min_length=1),
    store: ProfileStore = Depends(get_store),
) -> ApiResponse:
    """Find profiles whose name contains the query (case-insensitive)."""
    return ApiResponse(data=store.search(name))


@router.get("/{student_id}", response_model=ApiResponse)
def get_profile(student_id: str, store: ProfileStore = Depends(get_store)) -> ApiResponse:
    """Get a full student profile."""
    return ApiResponse(data=load_profile_record(store, student_id))


@router.post("", response_model=ApiResponse, status_code=status.HTTP_201_CREATED)
def create_profile(
    payload: ProfilePayload,
    store: ProfileStore = Depends(get_store),
) -> ApiResponse:
    """Create a student profile (an ``id`` in the body upserts under it)."""
    record = payload.to_record()
    if not record.get("name"):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Student name is required",
        )
    profile_id = record.get("id")
    saved = store.update(profile_id, record) if profile_id else store.create(record)
    logger.info("profile_saved", student_id=saved["id"])
    return ApiResponse(data=saved)


@router.put("/{student_id}", response_model=ApiResponse)
def update_profile(
    student_id: str,
    payload: ProfilePayload,
    store: ProfileStore = Depends(get_store),
) -> ApiResponse:
    """Upsert a profile. Fields absent from the body keep their stored value."""
    existing = store.get(student_id) or {}
    saved = store.update(student_id, {**existing, **payload.to_record(), "id": student_id})
    return ApiResponse(data=saved)


@router.delete("/{student_id}", response_model=ApiResponse)
def delete_profile(student_id: str, store: ProfileStore = Depends(get_store)) -> ApiResponse:
    """Delete a profile. Unknown ids succeed without effect."""
    deleted = store.delete(student_id)
    logger.info("profile_deleted", student_id=student_id, existed=deleted)
    return ApiResponse(message="Student profile deleted")


@router.post("/{student_id}/progress", response_model=ApiResponse)
def update_progress(
    student_id: str,
    payload: ProgressPayload,
    store: ProfileStore = Depends(get_store),
) -> ApiResponse:
    """Store progress data (legacy list-per-day shape is normalized)."""
    record = load_profile_record(store, student_id)
    record["progressData"] = normalize_progress(payload.to_record())
    saved = store.update(student_id, record)
    return ApiResponse(data=saved["progressData"])


@router.post("/{student_id}/calendar/moves", response_model=ApiResponse)
def move_calendar_activity(
    student_id: str,
    payload: CalendarMoveRequest,
    store: ProfileStore = Depends(get_store),
) -> ApiResponse:
    """Move a time block of the latest plan to another day and hour."""
    record = load_profile_record(store, student_id)
    plan = record.get("latestPlan")
    if not plan:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No plan has been generated for this student",
        )

    move = CalendarMove(
        source_day_index=payload.source_day_index,
        source_block_index=payload.source_block_index,
        target_day_index=payload.target_day_index,
        target_hour=payload.target_hour,
    )
    updated_plan = move_activity(plan, move)
    moved = updated_plan["dailyPlans"][move.target_day_index]["timeBlocks"][-1]

    record["latestPlan"] = updated_plan
    record["calendarData"] = record_move(record.get("calendarData"), move, moved.get("subject"))
    store.update(student_id, record)
    return ApiResponse(data=updated_plan)


@router.put("/{student_id}/{section}", response_model=ApiResponse)
def replace_section(
    student_id: str,
    section: str,
    body: dict[str, Any] = Body(...),
    store: ProfileStore = Depends(get_store),
) -> ApiResponse:
    """Replace one sub-object of a profile, leaving its siblings untouched."""
    if section not in REPLACEABLE_SECTIONS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown profile section '{section}'",
        )
    record = load_profile_record(store, student_id)
    record[section] = normalize_progress(body) if section == "progressData" else body
    saved = store.update(student_id, record)
    return ApiResponse(data=saved)
